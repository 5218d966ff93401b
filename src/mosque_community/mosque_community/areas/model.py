from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Dict, Optional

from ..core.enums import PrayerType


@dataclass(frozen=True)
class Area:
    """Domain entity: the scoping unit for members, requests and feeds.

    The mosque serving the area is carried as a display attribute.
    """

    area_id: int
    area_name: str
    mosque_name: Optional[str] = None
    address: Optional[str] = None
    founder_id: Optional[int] = None
    prayer_times: Dict[PrayerType, Optional[time]] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.area_id,
            "area_name": self.area_name,
            "mosque_name": self.mosque_name,
            "address": self.address,
            "founder_id": self.founder_id,
            "prayer_times": {
                p.value: (self.prayer_times.get(p).strftime("%H:%M") if self.prayer_times.get(p) else None)
                for p in PrayerType
            },
        }
