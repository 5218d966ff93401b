"""Request bodies accepted by the HTTP layer.

Fields accept both snake_case and the camelCase names the web client sends.
Enum values are matched case-insensitively.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from flask import request
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from ..common.datetime_utils import parse_iso_date
from ..common.pagination import PageRequest
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import (
    ActivityType,
    FeedPriority,
    MemberStatus,
    PickupAction,
    PrayerLocation,
    PrayerStatus,
    PrayerType,
    WakeUpResponse,
    Weekday,
)
from ..core.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


def _parse_prayer_type(value: Any) -> Any:
    if isinstance(value, str):
        return PrayerType.parse(value)
    return value


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


PrayerTypeValue = Annotated[PrayerType, BeforeValidator(_parse_prayer_type)]
PrayerStatusValue = Annotated[PrayerStatus, BeforeValidator(_lower)]
PrayerLocationValue = Annotated[PrayerLocation, BeforeValidator(_lower)]
MemberStatusValue = Annotated[MemberStatus, BeforeValidator(_lower)]
WeekdayValue = Annotated[Weekday, BeforeValidator(_lower)]
ActivityTypeValue = Annotated[ActivityType, BeforeValidator(_lower)]
PickupActionValue = Annotated[PickupAction, BeforeValidator(_lower)]
FeedPriorityValue = Annotated[FeedPriority, BeforeValidator(_lower)]
WakeUpResponseValue = Annotated[WakeUpResponse, BeforeValidator(_lower)]


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def parse_body(model: Type[M]) -> M:
    return model.model_validate(request.get_json(silent=True) or {})


def query_date(name: str) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")


def query_int(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def query_flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}


def query_enum(name: str, enum_cls):
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return enum_cls(raw.lower())
    except ValueError:
        raise ValidationError(f"Invalid {name}: {raw!r}")


# -------- Auth / members --------
class LoginIn(_Body):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterIn(_Body):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    username: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    mobility: Optional[str] = None
    area_id: Optional[int] = None


class ChangePasswordIn(_Body):
    current_password: str
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class MemberCreateIn(_Body):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    username: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    mobility: Optional[str] = None
    status: MemberStatusValue = MemberStatus.ACTIVE
    area_id: Optional[int] = None


class MemberStatusIn(_Body):
    status: MemberStatusValue


# -------- Prayers / activities --------
class PrayerDayIn(_Body):
    prayer_date: date
    prayers: Dict[PrayerTypeValue, PrayerStatusValue] = Field(min_length=1)
    location: Optional[PrayerLocationValue] = None


class PrayerIndividualIn(_Body):
    prayer_date: date
    prayer_type: PrayerTypeValue
    status: PrayerStatusValue
    location: Optional[PrayerLocationValue] = None


class ActivityIn(_Body):
    activity_date: date
    activity_type: ActivityTypeValue
    count_value: Optional[int] = None
    minutes_value: Optional[int] = None


# -------- Pickups --------
class PickupCreateIn(_Body):
    pickup_location: str = ""
    days: List[WeekdayValue] = Field(default_factory=list)
    prayer_type: PrayerTypeValue = PrayerType.FAJR
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: Optional[str] = None
    special_instructions: Optional[str] = None
    scheduled_time: Optional[time] = None


class PickupActionIn(_Body):
    action: PickupActionValue
    driver_id: Optional[int] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    scheduled_time: Optional[time] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


# -------- Feeds / areas --------
class FeedIn(_Body):
    title: str = ""
    content: str = ""
    priority: FeedPriorityValue = FeedPriority.NORMAL
    area_id: Optional[int] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    expires_at: Optional[datetime] = None


class FeedUpdateIn(_Body):
    title: Optional[str] = None
    content: Optional[str] = None
    priority: Optional[FeedPriorityValue] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    expires_at: Optional[datetime] = None


class AreaCreateIn(_Body):
    area_name: str = Field(min_length=1)
    mosque_name: Optional[str] = None
    address: Optional[str] = None
    prayer_times: Dict[PrayerTypeValue, time] = Field(default_factory=dict)


class AreaUpdateIn(_Body):
    area_name: Optional[str] = None
    mosque_name: Optional[str] = None
    address: Optional[str] = None
    prayer_times: Dict[PrayerTypeValue, Optional[time]] = Field(default_factory=dict)


class AssignFounderIn(_Body):
    user_id: int


# -------- Wake-up calls --------
class WakeUpCallIn(_Body):
    call_response: WakeUpResponseValue
    response_time: Optional[datetime] = None
    call_date: Optional[date] = None
    call_time: Optional[time] = None


def query_page() -> PageRequest:
    return PageRequest.coerce(request.args.get("page"), request.args.get("limit"))
