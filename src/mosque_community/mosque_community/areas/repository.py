from __future__ import annotations

from datetime import time
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

from ..core.enums import PrayerType
from .model import Area


class AreaRepository(Protocol):
    def get_by_id(self, area_id: int) -> Optional[Area]:
        raise NotImplementedError

    def get_by_founder(self, founder_id: int) -> Optional[Area]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Area]:
        raise NotImplementedError

    def create_area(
        self,
        *,
        area_name: str,
        mosque_name: Optional[str],
        address: Optional[str],
        prayer_times: Dict[PrayerType, Optional[time]],
    ) -> int:
        raise NotImplementedError

    def update_area(self, area_id: int, *, fields: Mapping[Any, Any]) -> bool:
        raise NotImplementedError

    def assign_founder(self, area_id: int, *, founder_id: int, previous_founder_id: Optional[int] = None) -> None:
        """Demote the previous founder, promote the new one and link the area, all in one transaction."""
        raise NotImplementedError
