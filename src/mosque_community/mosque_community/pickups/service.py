from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..auth.policy import Requirement, check, manages_area, require_area_manager
from ..auth.principal import Principal
from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DRIVER_MOBILITIES
from ..core.enums import PickupAction, PickupStatus, PrayerType, Role, Weekday
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Member
from ..users.repository import UserRepository
from . import state_machine
from .model import HistoryRecord, NewPickupRequest, PickupHistoryEntry, PickupRequest
from .repository import PickupRequestRepository

logger = logging.getLogger(__name__)


class PickupService:
    """Use case: Fajr pickup requests and their lifecycle.

    Every status change goes through ``_apply``: the transition table decides
    whether the move is legal, and the repository performs it as a conditional
    update so that of two concurrent decisions only the first one lands.
    """

    def __init__(
        self,
        pickups: PickupRequestRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._pickups = pickups
        self._users = users
        self._clock = clock

    # -------- Create / read --------
    @staticmethod
    def _normalize_days(days: Iterable[Any]) -> tuple:
        wanted = set()
        for d in days or ():
            try:
                wanted.add(Weekday(str(d.value if isinstance(d, Weekday) else d).strip().lower()))
            except ValueError:
                raise ValidationError(f"Invalid weekday: {d!r}")
        if not wanted:
            raise ValidationError("At least one day is required")
        return tuple(w for w in Weekday if w in wanted)

    @staticmethod
    def _check_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
        if latitude is not None and not -90 <= float(latitude) <= 90:
            raise ValidationError("Latitude must be between -90 and 90")
        if longitude is not None and not -180 <= float(longitude) <= 180:
            raise ValidationError("Longitude must be between -180 and 180")

    def create_request(
        self,
        principal: Principal,
        *,
        pickup_location: str,
        days: Iterable[Any],
        prayer_type: PrayerType = PrayerType.FAJR,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        contact_number: Optional[str] = None,
        special_instructions: Optional[str] = None,
        scheduled_time: Optional[time] = None,
    ) -> PickupRequest:
        if prayer_type != PrayerType.FAJR:
            raise ValidationError("Pickup requests are only available for Fajr")
        location = require_non_empty(pickup_location, "Pickup location")
        weekdays = self._normalize_days(days)
        self._check_coordinates(latitude, longitude)

        requester = self._users.get_by_id(principal.user_id)
        if not requester or not requester.is_active:
            raise AuthorizationError("Only active members can request a pickup")
        if self._pickups.has_open_request(requester.user_id):
            raise ConflictError("You already have an open pickup request")

        data = NewPickupRequest(
            user_id=requester.user_id,
            area_id=requester.area_id,
            prayer_type=prayer_type,
            pickup_location=location,
            days=weekdays,
            latitude=latitude,
            longitude=longitude,
            contact_number=optional_text(contact_number) or requester.phone,
            special_instructions=optional_text(special_instructions),
            scheduled_time=scheduled_time,
        )
        history = state_machine.creation_record(changed_by=principal.user_id)
        request_id = self._pickups.create(data, history=history)
        logger.info("pickup request id=%s created by user_id=%s area_id=%s", request_id, principal.user_id, data.area_id)
        return self._load(request_id)

    def _load(self, request_id: int) -> PickupRequest:
        req = self._pickups.get(int(request_id))
        if not req:
            raise NotFoundError("Pickup request not found")
        return req

    @staticmethod
    def _can_view(principal: Principal, req: PickupRequest) -> bool:
        return (
            req.user_id == principal.user_id
            or req.assigned_driver_id == principal.user_id
            or manages_area(principal, req.area_id)
        )

    def get_request(self, principal: Principal, request_id: int) -> PickupRequest:
        req = self._load(request_id)
        if not self._can_view(principal, req):
            raise AuthorizationError("You cannot view this pickup request")
        return req

    def list_requests(
        self,
        principal: Principal,
        *,
        status: Optional[PickupStatus] = None,
        area_id: Optional[int] = None,
        mine: bool = False,
        page: PageRequest = PageRequest(),
    ) -> Page[PickupRequest]:
        user_id: Optional[int] = None
        if mine or principal.role == Role.MEMBER:
            user_id, area_id = principal.user_id, None
        elif principal.is_founder:
            if principal.area_id is None:
                return Page(items=[], total=0, request=page)
            area_id = principal.area_id

        items = list(
            self._pickups.list_requests(
                user_id=user_id, area_id=area_id, status=status, limit=page.limit, offset=page.offset
            )
        )
        total = self._pickups.count_requests(user_id=user_id, area_id=area_id, status=status)
        return Page(items=items, total=total, request=page)

    def history(self, principal: Principal, request_id: int) -> List[PickupHistoryEntry]:
        req = self.get_request(principal, request_id)
        return list(self._pickups.list_history(req.request_id))

    def available_drivers(self, principal: Principal, *, area_id: Optional[int] = None) -> List[Member]:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        if principal.is_founder:
            area_id = principal.area_id
        return list(self._users.list_drivers(area_id=area_id, mobilities=DRIVER_MOBILITIES))

    # -------- Transitions --------
    def _apply(
        self,
        principal: Principal,
        req: PickupRequest,
        action: PickupAction,
        *,
        fields: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> PickupRequest:
        transition = state_machine.resolve(action, req.status)
        history = HistoryRecord(
            changed_by=principal.user_id,
            change_type=transition.change_type,
            old_status=req.status,
            new_status=transition.target,
            notes=optional_text(notes),
        )
        applied = self._pickups.transition(
            req.request_id,
            expected_status=req.status,
            new_status=transition.target,
            fields=fields or {},
            history=history,
        )
        if not applied:
            raise ConflictError("Pickup request was changed by someone else, reload and try again")

        logger.info(
            "pickup request id=%s %s -> %s by user_id=%s",
            req.request_id,
            req.status.value,
            transition.target.value,
            principal.user_id,
        )
        return self._load(req.request_id)

    def _resolve_driver(
        self,
        principal: Principal,
        *,
        driver_id: Optional[int],
        driver_name: Optional[str],
        driver_phone: Optional[str],
    ) -> Dict[str, Any]:
        if driver_id is not None:
            driver = self._users.get_by_id(int(driver_id))
            if not driver or not driver.is_active:
                raise ValidationError("Driver not found or inactive")
            if principal.is_founder and driver.area_id != principal.area_id:
                raise AuthorizationError("Founders can only assign drivers from their own area")
            return {
                "assigned_driver_id": driver.user_id,
                "assigned_driver_name": optional_text(driver_name) or driver.full_name,
                "assigned_driver_phone": optional_text(driver_phone) or driver.phone,
            }

        name = optional_text(driver_name)
        if not name:
            raise ValidationError("A driver is required to approve a pickup request")
        return {
            "assigned_driver_id": None,
            "assigned_driver_name": name,
            "assigned_driver_phone": optional_text(driver_phone),
        }

    def approve(
        self,
        principal: Principal,
        request_id: int,
        *,
        driver_id: Optional[int] = None,
        driver_name: Optional[str] = None,
        driver_phone: Optional[str] = None,
        scheduled_time: Optional[time] = None,
        notes: Optional[str] = None,
    ) -> PickupRequest:
        req = self._load(request_id)
        require_area_manager(principal, req.area_id)
        state_machine.resolve(PickupAction.APPROVE, req.status)

        fields = self._resolve_driver(principal, driver_id=driver_id, driver_name=driver_name, driver_phone=driver_phone)
        fields["approved_by"] = principal.user_id
        fields["approved_at"] = self._clock()
        if scheduled_time is not None:
            fields["scheduled_time"] = scheduled_time
        return self._apply(principal, req, PickupAction.APPROVE, fields=fields, notes=notes)

    def reject(self, principal: Principal, request_id: int, *, reason: Optional[str]) -> PickupRequest:
        req = self._load(request_id)
        require_area_manager(principal, req.area_id)
        state_machine.resolve(PickupAction.REJECT, req.status)

        reason = require_non_empty(reason, "Rejection reason")
        fields = {"rejected_by": principal.user_id, "rejection_reason": reason}
        return self._apply(principal, req, PickupAction.REJECT, fields=fields, notes=reason)

    def cancel(self, principal: Principal, request_id: int, *, notes: Optional[str] = None) -> PickupRequest:
        req = self._load(request_id)
        if req.user_id != principal.user_id:
            require_area_manager(principal, req.area_id)
        return self._apply(principal, req, PickupAction.CANCEL, notes=notes)

    def _require_driver_or_manager(self, principal: Principal, req: PickupRequest) -> None:
        if req.assigned_driver_id is not None and req.assigned_driver_id == principal.user_id:
            return
        require_area_manager(principal, req.area_id)

    def start(self, principal: Principal, request_id: int, *, notes: Optional[str] = None) -> PickupRequest:
        req = self._load(request_id)
        self._require_driver_or_manager(principal, req)
        return self._apply(principal, req, PickupAction.START, notes=notes)

    def complete(self, principal: Principal, request_id: int, *, notes: Optional[str] = None) -> PickupRequest:
        req = self._load(request_id)
        self._require_driver_or_manager(principal, req)
        return self._apply(
            principal,
            req,
            PickupAction.COMPLETE,
            fields={"actual_pickup_time": self._clock()},
            notes=notes,
        )

    def apply_action(self, principal: Principal, request_id: int, action: PickupAction, **payload: Any) -> PickupRequest:
        """Dispatch a PATCH body to the matching transition."""

        if action == PickupAction.APPROVE:
            return self.approve(
                principal,
                request_id,
                driver_id=payload.get("driver_id"),
                driver_name=payload.get("driver_name"),
                driver_phone=payload.get("driver_phone"),
                scheduled_time=payload.get("scheduled_time"),
                notes=payload.get("notes"),
            )
        if action == PickupAction.REJECT:
            return self.reject(principal, request_id, reason=payload.get("reason"))
        if action == PickupAction.CANCEL:
            return self.cancel(principal, request_id, notes=payload.get("notes"))
        if action == PickupAction.START:
            return self.start(principal, request_id, notes=payload.get("notes"))
        if action == PickupAction.COMPLETE:
            return self.complete(principal, request_id, notes=payload.get("notes"))
        raise ValidationError(f"Unsupported action: {action!r}")
