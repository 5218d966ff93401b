from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..core.enums import PrayerLocation, PrayerStatus, PrayerType


@dataclass(frozen=True)
class PrayerRecord:
    """Domain entity: one prayer of one member on one day."""

    prayer_id: int
    user_id: int
    prayer_date: date
    prayer_type: PrayerType
    status: PrayerStatus
    location: Optional[PrayerLocation] = None

    def to_dict(self) -> dict:
        return {
            "id": self.prayer_id,
            "prayer_date": self.prayer_date.strftime("%Y-%m-%d"),
            "prayer_type": self.prayer_type.value,
            "status": self.status.value,
            "location": self.location.value if self.location else None,
        }


def display_percentage(value: Union[float, Decimal]) -> int:
    """Round half-up to an integer for display."""
    exact = value if isinstance(value, Decimal) else Decimal(str(value))
    return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CompletionCounts:
    """Numerator/denominator pair.

    Scopes are combined by adding counts, and only then turned into a
    percentage, so a large area weighs more than a small one.
    """

    prayed: int = 0
    eligible: int = 0

    def __add__(self, other: "CompletionCounts") -> "CompletionCounts":
        return CompletionCounts(prayed=self.prayed + other.prayed, eligible=self.eligible + other.eligible)

    @property
    def exact_percentage(self) -> Decimal:
        if self.eligible <= 0:
            return Decimal(0)
        return Decimal(self.prayed * 100) / Decimal(self.eligible)

    @property
    def percentage(self) -> float:
        return float(self.exact_percentage)

    def to_dict(self) -> dict:
        return {
            "prayed": self.prayed,
            "eligible": self.eligible,
            "percentage": round(self.percentage, 2),
            "display_percentage": display_percentage(self.exact_percentage),
        }
