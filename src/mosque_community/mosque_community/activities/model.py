from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..core.enums import ActivityType


@dataclass(frozen=True)
class DailyActivity:
    """One zikr or Quran entry of one member on one day."""

    activity_id: int
    user_id: int
    activity_date: date
    activity_type: ActivityType
    count_value: int = 0
    minutes_value: int = 0

    @property
    def value(self) -> int:
        """The measure that matters for this type: zikr counts, Quran minutes."""
        return self.count_value if self.activity_type == ActivityType.ZIKR else self.minutes_value

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "activity_date": self.activity_date.strftime("%Y-%m-%d"),
            "activity_type": self.activity_type.value,
            "count_value": self.count_value,
            "minutes_value": self.minutes_value,
        }


@dataclass(frozen=True)
class ActivitySummary:
    activity_type: ActivityType
    total_days: int = 0
    total: int = 0
    max_daily: int = 0

    @property
    def average_daily(self) -> int:
        if self.total_days <= 0:
            return 0
        avg = Decimal(self.total) / Decimal(self.total_days)
        return int(avg.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @classmethod
    def of(cls, activity_type: ActivityType, rows: Iterable[DailyActivity]) -> "ActivitySummary":
        values = [r.value for r in rows if r.activity_type == activity_type]
        return cls(
            activity_type=activity_type,
            total_days=len(values),
            total=sum(values),
            max_daily=max(values, default=0),
        )

    def to_dict(self) -> dict:
        total_key = "total_count" if self.activity_type == ActivityType.ZIKR else "total_minutes"
        return {
            "total_days": self.total_days,
            total_key: self.total,
            "average_daily": self.average_daily,
            "max_daily": self.max_daily,
        }
