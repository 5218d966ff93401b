from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..core.enums import PrayerLocation, PrayerStatus, PrayerType
from .model import CompletionCounts, PrayerRecord

PrayerEntry = Tuple[PrayerType, PrayerStatus, Optional[PrayerLocation]]


class PrayerRepository(Protocol):
    def upsert_many(self, *, user_id: int, prayer_date: date, entries: Sequence[PrayerEntry]) -> None:
        """Insert or update several prayers of one day in one transaction.

        At most one row exists per (user, date, prayer type).
        """

        raise NotImplementedError

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[PrayerRecord]:
        raise NotImplementedError

    def counts_by_area(
        self,
        *,
        start_date: date,
        end_date: date,
        area_id: Optional[int] = None,
    ) -> Dict[Optional[int], CompletionCounts]:
        """Prayed/eligible counts of active members grouped by area.

        The ``None`` key collects members without an area.
        """

        raise NotImplementedError
