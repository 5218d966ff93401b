from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ActivityType
from .model import DailyActivity


class ActivityRepository(Protocol):
    def upsert(
        self,
        *,
        user_id: int,
        activity_date: date,
        activity_type: ActivityType,
        count_value: int,
        minutes_value: int,
    ) -> None:
        raise NotImplementedError

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> Sequence[DailyActivity]:
        raise NotImplementedError
