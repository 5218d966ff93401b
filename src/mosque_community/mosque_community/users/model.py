from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MemberStatus, Role


@dataclass(frozen=True)
class Member:
    """Domain entity: a registered community member (any role).

    Note: plain data object, no DB access code here.
    """

    user_id: int
    first_name: str
    last_name: str
    username: str
    email: str
    password_hash: str
    role: Role = Role.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE
    area_id: Optional[int] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    mobility: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "mobility": self.mobility,
            "role": self.role.value,
            "status": self.status.value,
            "area_id": self.area_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class NewMember:
    first_name: str
    last_name: str
    email: str
    username: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    mobility: Optional[str] = None
    status: MemberStatus = MemberStatus.ACTIVE
    area_id: Optional[int] = None
