from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from ..core.enums import WakeUpResponse


@dataclass(frozen=True)
class WakeUpCall:
    """A member's answer to the Fajr wake-up call of one day."""

    call_id: int
    user_id: int
    call_date: date
    call_response: WakeUpResponse
    response_time: datetime
    call_time: Optional[time] = None
    area_id: Optional[int] = None
    username: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.call_id,
            "user_id": self.user_id,
            "username": self.username,
            "phone": self.phone,
            "area_id": self.area_id,
            "call_date": self.call_date.strftime("%Y-%m-%d"),
            "call_time": self.call_time.strftime("%H:%M") if self.call_time else None,
            "call_response": self.call_response.value,
            "response_time": self.response_time.isoformat(),
            "prayer_type": "Fajr",
        }


@dataclass(frozen=True)
class WakeUpStats:
    total: int = 0
    accepted: int = 0
    declined: int = 0
    no_answer: int = 0

    @classmethod
    def from_counts(cls, counts: Mapping[WakeUpResponse, int]) -> "WakeUpStats":
        accepted = int(counts.get(WakeUpResponse.ACCEPTED, 0))
        declined = int(counts.get(WakeUpResponse.DECLINED, 0))
        no_answer = int(counts.get(WakeUpResponse.NO_ANSWER, 0))
        return cls(total=accepted + declined + no_answer, accepted=accepted, declined=declined, no_answer=no_answer)

    @property
    def acceptance_rate(self) -> Decimal:
        """Accepted share in percent, two decimals, half-up."""
        if self.total <= 0:
            return Decimal("0.00")
        rate = Decimal(self.accepted * 100) / Decimal(self.total)
        return rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict:
        return {
            "total_calls": self.total,
            "accepted_calls": self.accepted,
            "declined_calls": self.declined,
            "no_answer_calls": self.no_answer,
            "acceptance_rate": float(self.acceptance_rate),
        }
