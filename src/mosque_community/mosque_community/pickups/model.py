from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Tuple

from ..core.enums import HistoryChangeType, PickupStatus, PrayerType, Weekday


@dataclass(frozen=True)
class PickupRequest:
    """Domain entity: a member's request for a ride to Fajr."""

    request_id: int
    user_id: int
    area_id: Optional[int]
    prayer_type: PrayerType
    pickup_location: str
    days: Tuple[Weekday, ...]
    status: PickupStatus
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: Optional[str] = None
    special_instructions: Optional[str] = None
    assigned_driver_id: Optional[int] = None
    assigned_driver_name: Optional[str] = None
    assigned_driver_phone: Optional[str] = None
    approved_by: Optional[int] = None
    rejected_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    scheduled_time: Optional[time] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    actual_pickup_time: Optional[datetime] = None
    requester_name: Optional[str] = None

    def to_dict(self) -> dict:
        def _iso(v: Optional[datetime]) -> Optional[str]:
            return v.isoformat() if v else None

        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "requester_name": self.requester_name,
            "area_id": self.area_id,
            "prayer_type": self.prayer_type.value,
            "pickup_location": self.pickup_location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "days": [d.value for d in self.days],
            "contact_number": self.contact_number,
            "special_instructions": self.special_instructions,
            "status": self.status.value,
            "assigned_driver_id": self.assigned_driver_id,
            "assigned_driver_name": self.assigned_driver_name,
            "assigned_driver_phone": self.assigned_driver_phone,
            "approved_by": self.approved_by,
            "rejected_by": self.rejected_by,
            "rejection_reason": self.rejection_reason,
            "scheduled_time": self.scheduled_time.strftime("%H:%M") if self.scheduled_time else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "approved_at": _iso(self.approved_at),
            "actual_pickup_time": _iso(self.actual_pickup_time),
        }


@dataclass(frozen=True)
class NewPickupRequest:
    user_id: int
    area_id: Optional[int]
    pickup_location: str
    days: Tuple[Weekday, ...]
    prayer_type: PrayerType = PrayerType.FAJR
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: Optional[str] = None
    special_instructions: Optional[str] = None
    scheduled_time: Optional[time] = None


@dataclass(frozen=True)
class HistoryRecord:
    """One row to append to the request history."""

    changed_by: Optional[int]
    change_type: HistoryChangeType
    old_status: Optional[PickupStatus]
    new_status: PickupStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class PickupHistoryEntry:
    history_id: int
    pickup_request_id: int
    changed_by: Optional[int]
    change_type: HistoryChangeType
    old_status: Optional[PickupStatus]
    new_status: PickupStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.history_id,
            "pickup_request_id": self.pickup_request_id,
            "changed_by": self.changed_by,
            "change_type": self.change_type.value,
            "old_status": self.old_status.value if self.old_status else None,
            "new_status": self.new_status.value,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
