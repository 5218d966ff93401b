from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..areas.repository import AreaRepository
from ..auth.policy import Requirement, check, require_area_manager
from ..auth.principal import Principal
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import MemberStatus, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import Member, NewMember
from .repository import UserRepository

logger = logging.getLogger(__name__)

# Compared against when the username does not exist so both failure paths do the same work.
_DUMMY_HASH = generate_password_hash("not-a-real-password")


class AuthService:
    """Use case: authenticate users and manage their own credentials."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> Tuple[Principal, Member]:
        user = self._users.get_by_username((username or "").strip())

        try:
            ok = check_password_hash(user.password_hash if user else _DUMMY_HASH, password or "")
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not user or not ok or not user.is_active:
            logger.warning("rejected login for username=%r", username)
            raise AuthenticationError("Invalid credentials")

        principal = Principal(
            user_id=user.user_id,
            role=user.role,
            area_id=user.area_id,
            username=user.username,
        )
        return principal, user

    def change_password(self, principal: Principal, *, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(principal.user_id)
        if not user:
            raise NotFoundError("Member not found")

        try:
            ok = check_password_hash(user.password_hash, current_password or "")
        except (ValueError, TypeError):
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.set_password_hash(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("password changed for user_id=%s", user.user_id)


class MemberService:
    """Use case: member lifecycle (create, list, status, delete)."""

    def __init__(self, users: UserRepository, areas: AreaRepository, *, default_password: str):
        self._users = users
        self._areas = areas
        self._default_password = default_password

    def _normalize(self, data: NewMember) -> NewMember:
        first_name = require_non_empty(data.first_name, "First name")
        last_name = require_non_empty(data.last_name, "Last name")
        email = require_non_empty(data.email, "Email").lower()
        if "@" not in email or email.startswith("@"):
            raise ValidationError("Email is invalid")

        username = optional_text(data.username) or email.split("@", 1)[0]
        return replace(
            data,
            first_name=first_name,
            last_name=last_name,
            email=email,
            username=username,
            phone=optional_text(data.phone),
            address=optional_text(data.address),
            mobility=optional_text(data.mobility),
        )

    def _ensure_unique(self, *, username: str, email: str) -> None:
        if self._users.get_by_username(username):
            raise ConflictError("Username already exists")
        if self._users.get_by_email(email):
            raise ConflictError("Email already exists")

    def _ensure_area_exists(self, area_id: Optional[int]) -> None:
        if area_id is not None and not self._areas.get_by_id(int(area_id)):
            raise NotFoundError("Area not found")

    def _insert(self, data: NewMember, *, password: str, role: Role = Role.MEMBER) -> Member:
        self._ensure_unique(username=data.username, email=data.email)
        user_id = self._users.create_member(
            first_name=data.first_name,
            last_name=data.last_name,
            username=data.username,
            email=data.email,
            password_hash=generate_password_hash(password),
            role=role,
            status=data.status,
            area_id=data.area_id,
            phone=data.phone,
            address=data.address,
            mobility=data.mobility,
        )
        member = self._users.get_by_id(user_id)
        if not member:
            raise NotFoundError("Member not found after insert")
        return member

    def create_member(self, principal: Principal, data: NewMember) -> Member:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        data = self._normalize(data)

        if principal.is_founder:
            if data.area_id is not None and data.area_id != principal.area_id:
                raise AuthorizationError("Founders can only add members to their own area")
            data = replace(data, area_id=principal.area_id)
        self._ensure_area_exists(data.area_id)

        member = self._insert(data, password=self._default_password)
        logger.info("member created id=%s username=%s by user_id=%s", member.user_id, member.username, principal.user_id)
        return member

    def register(self, data: NewMember, *, password: str) -> Member:
        """Self-registration: always a Member, always active."""

        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        data = replace(self._normalize(data), status=MemberStatus.ACTIVE)
        self._ensure_area_exists(data.area_id)

        member = self._insert(data, password=password)
        logger.info("member self-registered id=%s username=%s", member.user_id, member.username)
        return member

    def list_members(
        self,
        principal: Principal,
        *,
        area_id: Optional[int] = None,
        status: Optional[MemberStatus] = None,
        page: PageRequest = PageRequest(),
    ) -> Page[Member]:
        if principal.role == Role.MEMBER:
            me = self._users.get_by_id(principal.user_id)
            items = [me] if me else []
            return Page(items=items, total=len(items), request=page)

        if principal.is_founder:
            area_id = principal.area_id
            if area_id is None:
                return Page(items=[], total=0, request=page)

        items = list(self._users.list_members(area_id=area_id, status=status, limit=page.limit, offset=page.offset))
        total = self._users.count_members(area_id=area_id, status=status)
        return Page(items=items, total=total, request=page)

    def get_member(self, principal: Principal, user_id: int) -> Member:
        member = self._users.get_by_id(int(user_id))
        if not member:
            raise NotFoundError("Member not found")
        if member.user_id != principal.user_id:
            require_area_manager(principal, member.area_id)
        return member

    def _get_manageable(self, principal: Principal, user_id: int) -> Member:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        member = self._users.get_by_id(int(user_id))
        if not member:
            raise NotFoundError("Member not found")
        if member.user_id == principal.user_id:
            raise ValidationError("You cannot change your own account here")
        if member.role == Role.SUPER_ADMIN:
            raise AuthorizationError("SuperAdmin accounts cannot be managed here")
        if not principal.is_super_admin:
            if member.role != Role.MEMBER:
                raise AuthorizationError("Founders can only manage members")
            require_area_manager(principal, member.area_id)
        return member

    def delete_member(self, principal: Principal, user_id: int) -> None:
        member = self._get_manageable(principal, user_id)
        if not self._users.delete_by_id(member.user_id):
            raise NotFoundError("Member not found")
        logger.info("member deleted id=%s by user_id=%s", member.user_id, principal.user_id)

    def set_status(self, principal: Principal, user_id: int, status: MemberStatus) -> Member:
        member = self._get_manageable(principal, user_id)
        self._users.set_status(member.user_id, status=status)
        logger.info("member id=%s status -> %s by user_id=%s", member.user_id, status.value, principal.user_id)
        return replace(member, status=status)
