from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

from ..auth.principal import Principal
from ..common.datetime_utils import today_local
from ..common.validators import require_non_negative
from ..core.constants import DEFAULT_ACTIVITY_STATS_DAYS, STREAK_LOOKBACK_DAYS
from ..core.enums import ActivityType
from ..core.exceptions import NotFoundError, ValidationError
from .model import ActivitySummary, DailyActivity
from .repository import ActivityRepository


class ActivityService:
    """Use case: members log zikr counts and Quran minutes per day."""

    def __init__(self, activities: ActivityRepository):
        self._activities = activities

    def record(
        self,
        principal: Principal,
        *,
        activity_date: date,
        activity_type: ActivityType,
        count_value: Optional[int] = None,
        minutes_value: Optional[int] = None,
        today: Optional[date] = None,
    ) -> DailyActivity:
        today = today or today_local()
        if activity_date > today:
            raise ValidationError("Activities cannot be recorded for a future date")
        count = require_non_negative(count_value, "Count")
        minutes = require_non_negative(minutes_value, "Minutes")

        self._activities.upsert(
            user_id=principal.user_id,
            activity_date=activity_date,
            activity_type=activity_type,
            count_value=count,
            minutes_value=minutes,
        )
        rows = self._activities.list_for_user(
            user_id=principal.user_id,
            start_date=activity_date,
            end_date=activity_date,
            activity_type=activity_type,
        )
        if not rows:
            raise NotFoundError("Activity was not stored")
        return rows[0]

    def list_activities(
        self,
        principal: Principal,
        *,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> List[DailyActivity]:
        if on_date is not None:
            start_date = end_date = on_date
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date must be on or after start_date")
        return list(
            self._activities.list_for_user(
                user_id=principal.user_id,
                start_date=start_date,
                end_date=end_date,
                activity_type=activity_type,
            )
        )

    def stats(self, principal: Principal, *, days: int = DEFAULT_ACTIVITY_STATS_DAYS, as_of: Optional[date] = None) -> dict:
        as_of = as_of or today_local()
        days = max(1, min(int(days), STREAK_LOOKBACK_DAYS))
        rows = self._activities.list_for_user(
            user_id=principal.user_id,
            start_date=as_of - timedelta(days=days - 1),
            end_date=as_of,
        )
        return {
            "period_days": days,
            **{t.value: ActivitySummary.of(t, rows).to_dict() for t in ActivityType},
        }
