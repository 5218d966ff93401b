from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import MemberStatus, Role
from .model import Member


class UserRepository(Protocol):
    """Repository interface for members.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[Member]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Member]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Member]:
        raise NotImplementedError

    def create_member(
        self,
        *,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
        status: MemberStatus,
        area_id: Optional[int],
        phone: Optional[str] = None,
        address: Optional[str] = None,
        mobility: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        """Hard delete; dependent rows go through the schema's ON DELETE rules."""

        raise NotImplementedError

    def set_status(self, user_id: int, *, status: MemberStatus) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def list_members(
        self,
        *,
        area_id: Optional[int] = None,
        status: Optional[MemberStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Member]:
        raise NotImplementedError

    def count_members(self, *, area_id: Optional[int] = None, status: Optional[MemberStatus] = None) -> int:
        raise NotImplementedError

    def list_drivers(self, *, area_id: Optional[int] = None, mobilities: Sequence[str] = ()) -> Sequence[Member]:
        """Active members whose mobility is one of ``mobilities``."""

        raise NotImplementedError
