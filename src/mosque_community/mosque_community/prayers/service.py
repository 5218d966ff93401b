from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional

from ..auth.policy import Requirement, check
from ..auth.principal import Principal
from ..common.datetime_utils import month_start, today_local, week_start
from ..core.constants import DEFAULT_STATS_DAYS, STREAK_LOOKBACK_DAYS
from ..core.enums import PrayerLocation, PrayerStatus, PrayerType
from ..core.exceptions import ValidationError
from . import stats
from .model import CompletionCounts, PrayerRecord
from .repository import PrayerRepository

logger = logging.getLogger(__name__)


class PrayerService:
    """Use case: members mark their own prayers and read derived statistics."""

    def __init__(self, prayers: PrayerRepository):
        self._prayers = prayers

    @staticmethod
    def _check_date(prayer_date: date, today: date) -> None:
        if prayer_date > today:
            raise ValidationError("Prayers cannot be recorded for a future date")

    def record_day(
        self,
        principal: Principal,
        *,
        prayer_date: date,
        statuses: Mapping[PrayerType, PrayerStatus],
        location: Optional[PrayerLocation] = None,
        today: Optional[date] = None,
    ) -> List[PrayerRecord]:
        today = today or today_local()
        self._check_date(prayer_date, today)
        if not statuses:
            raise ValidationError("At least one prayer status is required")

        ordered = [(p, statuses[p], location) for p in PrayerType if p in statuses]
        self._prayers.upsert_many(user_id=principal.user_id, prayer_date=prayer_date, entries=ordered)
        return list(self._prayers.list_for_user(user_id=principal.user_id, start_date=prayer_date, end_date=prayer_date))

    def update_individual(
        self,
        principal: Principal,
        *,
        prayer_date: date,
        prayer_type: PrayerType,
        status: PrayerStatus,
        location: Optional[PrayerLocation] = None,
        today: Optional[date] = None,
    ) -> PrayerRecord:
        records = self.record_day(
            principal,
            prayer_date=prayer_date,
            statuses={prayer_type: status},
            location=location,
            today=today,
        )
        for r in records:
            if r.prayer_type == prayer_type:
                return r
        raise ValidationError("Prayer record was not stored")

    def list_records(
        self,
        principal: Principal,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> List[PrayerRecord]:
        today = today or today_local()
        if start_date is None and end_date is None:
            start_date, end_date = month_start(today), today
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date must be on or after start_date")
        return list(self._prayers.list_for_user(user_id=principal.user_id, start_date=start_date, end_date=end_date))

    def member_stats(self, principal: Principal, *, days: int = DEFAULT_STATS_DAYS, as_of: Optional[date] = None) -> dict:
        as_of = as_of or today_local()
        days = max(1, min(int(days), STREAK_LOOKBACK_DAYS))
        records = list(
            self._prayers.list_for_user(
                user_id=principal.user_id,
                start_date=as_of - timedelta(days=STREAK_LOOKBACK_DAYS - 1),
                end_date=as_of,
            )
        )

        period_start = as_of - timedelta(days=days - 1)
        breakdown = stats.per_type_counts(records, start=period_start, end=as_of)
        daily = stats.daily_completion(r for r in records if r.prayer_date >= period_start)

        return {
            "as_of": as_of.isoformat(),
            "today": {
                **stats.window_counts(records, start=as_of, end=as_of).to_dict(),
                "daily_completion": round(daily.get(as_of, 0.0), 2),
            },
            "this_week": stats.window_counts(records, start=week_start(as_of), end=as_of).to_dict(),
            "this_month": stats.window_counts(records, start=month_start(as_of), end=as_of).to_dict(),
            "period_days": days,
            "period": stats.window_counts(records, start=period_start, end=as_of).to_dict(),
            "prayer_breakdown": [{"prayer_type": p.value, **breakdown[p].to_dict()} for p in PrayerType],
            "daily_completion": [{"date": d.isoformat(), "percentage": round(v, 2)} for d, v in daily.items()],
            "current_streak": stats.current_streak(records, as_of=as_of),
        }

    def _scope_counts(self, *, start: date, end: date, area_id: Optional[int]) -> Dict[Optional[int], CompletionCounts]:
        if end < start:
            raise ValidationError("end_date must be on or after start_date")
        return self._prayers.counts_by_area(start_date=start, end_date=end, area_id=area_id)

    def global_stats(
        self,
        principal: Principal,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        area_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> dict:
        """Attendance across areas; the total is the percentage of summed counts."""

        check(principal, Requirement.SUPER_ADMIN_ONLY)
        today = today or today_local()
        start = start or month_start(today)
        end = end or today

        by_area = self._scope_counts(start=start, end=end, area_id=area_id)
        scopes = [
            {"area_id": key, **value.to_dict()}
            for key, value in sorted(by_area.items(), key=lambda kv: (kv[0] is None, kv[0] or 0))
        ]
        total = stats.merge_counts(by_area.values())
        logger.debug("global stats %s..%s over %d scopes", start, end, len(scopes))
        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "scopes": scopes,
            "total": total.to_dict(),
        }
