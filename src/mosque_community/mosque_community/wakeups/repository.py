from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import WakeUpResponse
from .model import WakeUpCall


class WakeUpCallRepository(Protocol):
    def upsert(
        self,
        *,
        user_id: int,
        area_id: Optional[int],
        call_date: date,
        call_response: WakeUpResponse,
        response_time: datetime,
        call_time: Optional[time],
    ) -> None:
        """One row per member and day; a second answer overwrites the first."""
        raise NotImplementedError

    def get_for_day(self, *, user_id: int, call_date: date) -> Optional[WakeUpCall]:
        raise NotImplementedError

    def list_calls(
        self,
        *,
        area_id: Optional[int] = None,
        call_date: Optional[date] = None,
        call_response: Optional[WakeUpResponse] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[WakeUpCall]:
        raise NotImplementedError

    def count_calls(
        self,
        *,
        area_id: Optional[int] = None,
        call_date: Optional[date] = None,
        call_response: Optional[WakeUpResponse] = None,
    ) -> int:
        raise NotImplementedError

    def counts_by_response(
        self, *, start_date: date, end_date: date, area_id: Optional[int] = None
    ) -> Dict[WakeUpResponse, int]:
        raise NotImplementedError
