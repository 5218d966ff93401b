from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from ..auth.policy import Requirement, check
from ..auth.principal import Principal
from ..common.datetime_utils import now_local, to_naive_local
from ..common.pagination import Page, PageRequest
from ..core.constants import DEFAULT_WAKE_UP_STATS_DAYS
from ..core.enums import WakeUpResponse
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import WakeUpCall, WakeUpStats
from .repository import WakeUpCallRepository

logger = logging.getLogger(__name__)

DEFAULT_CALL_TIME = time(4, 30)


class WakeUpCallService:
    """Use case: members answer the daily Fajr wake-up call.

    Founders review the answers of their own area; a SuperAdmin sees every area.
    """

    def __init__(
        self,
        calls: WakeUpCallRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._calls = calls
        self._users = users
        self._clock = clock

    def record(
        self,
        principal: Principal,
        *,
        call_response: WakeUpResponse,
        response_time: Optional[datetime] = None,
        call_date: Optional[date] = None,
        call_time: Optional[time] = None,
    ) -> WakeUpCall:
        member = self._users.get_by_id(principal.user_id)
        if not member or not member.is_active:
            raise AuthorizationError("Only active members can answer wake-up calls")

        now = self._clock()
        call_date = call_date or now.date()
        if call_date > now.date():
            raise ValidationError("Wake-up calls cannot be recorded for a future date")

        self._calls.upsert(
            user_id=member.user_id,
            area_id=member.area_id,
            call_date=call_date,
            call_response=WakeUpResponse(call_response),
            response_time=to_naive_local(response_time) or now,
            call_time=call_time or DEFAULT_CALL_TIME,
        )
        stored = self._calls.get_for_day(user_id=member.user_id, call_date=call_date)
        if stored is None:
            raise NotFoundError("Wake-up call was not stored")
        logger.info("wake-up call user=%s date=%s response=%s", member.user_id, call_date, stored.call_response.value)
        return stored

    def _scope(self, principal: Principal, area_id: Optional[int]) -> Optional[int]:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        if principal.is_super_admin:
            return int(area_id) if area_id is not None else None
        if principal.area_id is None:
            raise ValidationError("You are not assigned to an area")
        if area_id is not None and int(area_id) != principal.area_id:
            raise AuthorizationError("You can only view your own area")
        return principal.area_id

    def list_calls(
        self,
        principal: Principal,
        *,
        call_date: Optional[date] = None,
        call_response: Optional[WakeUpResponse] = None,
        area_id: Optional[int] = None,
        page: PageRequest = PageRequest(),
    ) -> Page[WakeUpCall]:
        scope = self._scope(principal, area_id)
        filters = {"area_id": scope, "call_date": call_date, "call_response": call_response}
        items = list(self._calls.list_calls(limit=page.limit, offset=page.offset, **filters))
        return Page(items=items, total=self._calls.count_calls(**filters), request=page)

    def stats(
        self,
        principal: Principal,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        area_id: Optional[int] = None,
    ) -> dict:
        scope = self._scope(principal, area_id)
        end_date = end_date or self._clock().date()
        start_date = start_date or end_date - timedelta(days=DEFAULT_WAKE_UP_STATS_DAYS - 1)
        if end_date < start_date:
            raise ValidationError("date_to must be on or after date_from")

        counts = self._calls.counts_by_response(start_date=start_date, end_date=end_date, area_id=scope)
        return {
            "area_id": scope,
            "start_date": start_date.strftime("%Y-%m-%d"),
            "end_date": end_date.strftime("%Y-%m-%d"),
            **WakeUpStats.from_counts(counts).to_dict(),
        }
