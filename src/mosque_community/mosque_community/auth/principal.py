from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, resolved from the bearer token.

    Handlers pass it explicitly into every service call.
    """

    user_id: int
    role: Role
    area_id: Optional[int] = None
    username: str = ""

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def is_founder(self) -> bool:
        return self.role == Role.FOUNDER

    @property
    def is_founder_or_above(self) -> bool:
        return self.role.is_founder_or_above
