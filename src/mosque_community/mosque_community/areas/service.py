from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Dict, List, Mapping, Optional

from ..auth.policy import Requirement, check, require_area_manager
from ..auth.principal import Principal
from ..common.datetime_utils import today_local, week_start
from ..common.validators import optional_text, require_non_empty
from ..core.enums import MemberStatus, PrayerType, Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..pickups.repository import PickupRequestRepository
from ..prayers.model import CompletionCounts
from ..prayers.repository import PrayerRepository
from ..users.repository import UserRepository
from .model import Area
from .repository import AreaRepository

logger = logging.getLogger(__name__)


class AreaService:
    def __init__(
        self,
        areas: AreaRepository,
        users: UserRepository,
        prayers: PrayerRepository,
        pickups: PickupRequestRepository,
    ):
        self._areas = areas
        self._users = users
        self._prayers = prayers
        self._pickups = pickups

    def list_areas(self, principal: Principal) -> List[Area]:
        return list(self._areas.list_all())

    def get_area(self, area_id: int) -> Area:
        area = self._areas.get_by_id(int(area_id))
        if not area:
            raise NotFoundError("Area not found")
        return area

    def create_area(
        self,
        principal: Principal,
        *,
        area_name: str,
        mosque_name: Optional[str] = None,
        address: Optional[str] = None,
        prayer_times: Optional[Mapping[PrayerType, time]] = None,
    ) -> Area:
        check(principal, Requirement.SUPER_ADMIN_ONLY)
        name = require_non_empty(area_name, "Area name")
        times: Dict[PrayerType, Optional[time]] = {p: (prayer_times or {}).get(p) for p in PrayerType}

        area_id = self._areas.create_area(
            area_name=name,
            mosque_name=optional_text(mosque_name),
            address=optional_text(address),
            prayer_times=times,
        )
        logger.info("area id=%s created by user_id=%s", area_id, principal.user_id)
        return self.get_area(area_id)

    def update_area(
        self,
        principal: Principal,
        area_id: int,
        *,
        area_name: Optional[str] = None,
        mosque_name: Optional[str] = None,
        address: Optional[str] = None,
        prayer_times: Optional[Mapping[PrayerType, Optional[time]]] = None,
    ) -> Area:
        """Edit name, mosque, address or prayer times. Omitted values stay as they are."""

        require_area_manager(principal, area_id)
        area = self.get_area(area_id)

        fields: Dict[Any, Any] = {}
        if area_name is not None:
            fields["area_name"] = require_non_empty(area_name, "Area name")
        if mosque_name is not None:
            fields["mosque_name"] = optional_text(mosque_name)
        if address is not None:
            fields["address"] = optional_text(address)
        for prayer_type, value in (prayer_times or {}).items():
            fields[PrayerType(prayer_type)] = value

        if fields:
            self._areas.update_area(area.area_id, fields=fields)
            changed = sorted(getattr(k, "value", k) for k in fields)
            logger.info("area id=%s updated by user_id=%s fields=%s", area.area_id, principal.user_id, changed)
        return self.get_area(area.area_id)

    def assign_founder(self, principal: Principal, area_id: int, *, user_id: int) -> Area:
        """Make ``user_id`` the founder of the area.

        The member is promoted and moved into the area; a previous founder of
        the area goes back to the Member role.
        """

        check(principal, Requirement.SUPER_ADMIN_ONLY)
        area = self.get_area(area_id)
        member = self._users.get_by_id(int(user_id))
        if not member:
            raise NotFoundError("Member not found")
        if member.role == Role.SUPER_ADMIN:
            raise ValidationError("A SuperAdmin cannot be assigned as founder")
        if not member.is_active:
            raise ValidationError("Inactive members cannot be assigned as founder")

        current = self._areas.get_by_founder(member.user_id)
        if current and current.area_id != area.area_id:
            raise ConflictError("Member is already the founder of another area")

        self._areas.assign_founder(area.area_id, founder_id=member.user_id, previous_founder_id=area.founder_id)
        if area.founder_id is not None and area.founder_id != member.user_id:
            logger.info("area id=%s previous founder user_id=%s demoted", area.area_id, area.founder_id)
        logger.info("area id=%s founder -> user_id=%s by user_id=%s", area.area_id, member.user_id, principal.user_id)
        return self.get_area(area.area_id)

    def area_stats(self, principal: Principal, area_id: int, *, today: Optional[date] = None) -> dict:
        require_area_manager(principal, area_id)
        area = self.get_area(area_id)
        today = today or today_local()

        def _attendance(start: date) -> CompletionCounts:
            counts = self._prayers.counts_by_area(start_date=start, end_date=today, area_id=area.area_id)
            return counts.get(area.area_id, CompletionCounts())

        return {
            "area": area.to_dict(),
            "active_members": self._users.count_members(area_id=area.area_id, status=MemberStatus.ACTIVE),
            "open_pickup_requests": self._pickups.count_open(area_id=area.area_id),
            "attendance_today": _attendance(today).to_dict(),
            "attendance_this_week": _attendance(week_start(today)).to_dict(),
        }
