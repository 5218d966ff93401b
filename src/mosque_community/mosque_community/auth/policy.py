"""Role checks shared by the services.

Three requirement levels exist: any authenticated principal, Founder-or-above
and SuperAdmin-only. Founders are additionally confined to their own area.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from ..core.exceptions import AuthorizationError
from .principal import Principal


class Requirement(str, Enum):
    ANY = "any"
    FOUNDER_OR_ABOVE = "founder_or_above"
    SUPER_ADMIN_ONLY = "super_admin_only"


def check(principal: Principal, requirement: Requirement) -> None:
    if requirement == Requirement.FOUNDER_OR_ABOVE and not principal.is_founder_or_above:
        raise AuthorizationError("Founder or SuperAdmin role required")
    if requirement == Requirement.SUPER_ADMIN_ONLY and not principal.is_super_admin:
        raise AuthorizationError("SuperAdmin role required")


def manages_area(principal: Principal, area_id: Optional[int]) -> bool:
    if principal.is_super_admin:
        return True
    return principal.is_founder and area_id is not None and principal.area_id == area_id


def require_area_manager(principal: Principal, area_id: Optional[int]) -> None:
    check(principal, Requirement.FOUNDER_OR_ABOVE)
    if not manages_area(principal, area_id):
        raise AuthorizationError("You can only manage your own area")
