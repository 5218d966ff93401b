from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    MEMBER = "Member"
    FOUNDER = "Founder"
    SUPER_ADMIN = "SuperAdmin"

    @property
    def is_founder_or_above(self) -> bool:
        return self in {Role.FOUNDER, Role.SUPER_ADMIN}


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PrayerType(str, Enum):
    """The five daily prayers, in the order they fall during the day."""

    FAJR = "Fajr"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"

    @classmethod
    def parse(cls, value: str) -> "PrayerType":
        for member in cls:
            if member.value.lower() == (value or "").strip().lower():
                return member
        raise ValueError(f"Unknown prayer type: {value!r}")


class PrayerStatus(str, Enum):
    PRAYED = "prayed"
    MISSED = "missed"
    UPCOMING = "upcoming"


class PrayerLocation(str, Enum):
    MOSQUE = "mosque"
    HOME = "home"


class ActivityType(str, Enum):
    ZIKR = "zikr"
    QURAN = "quran"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class PickupStatus(str, Enum):
    """Pickup request lifecycle.

    Driver assignment happens as part of approval, so there is no separate
    "assigned" state: an approved request always carries a driver.
    """

    PENDING = "pending"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in {PickupStatus.COMPLETED, PickupStatus.REJECTED, PickupStatus.CANCELLED}


class PickupAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    START = "start"
    COMPLETE = "complete"


class HistoryChangeType(str, Enum):
    CREATED = "created"
    ASSIGNED = "assigned"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    STARTED = "started"
    COMPLETED = "completed"


class FeedPriority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class WakeUpResponse(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"
    NO_ANSWER = "no_answer"
