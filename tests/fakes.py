"""In-memory repositories used by the service and API tests.

They follow the same contracts as the MySQL implementations: unique keys
raise ConflictError, and pickup transitions are conditional updates guarded
by a lock, so only one of two racing callers sees its update applied.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from src.mosque_community.mosque_community.activities.model import DailyActivity
from src.mosque_community.mosque_community.areas.model import Area
from src.mosque_community.mosque_community.core.enums import (
    FeedPriority,
    MemberStatus,
    PrayerStatus,
    PrayerType,
    Role,
    WakeUpResponse,
)
from src.mosque_community.mosque_community.core.exceptions import ConflictError
from src.mosque_community.mosque_community.feeds.model import Feed
from src.mosque_community.mosque_community.pickups.model import (
    HistoryRecord,
    NewPickupRequest,
    PickupHistoryEntry,
    PickupRequest,
)
from src.mosque_community.mosque_community.prayers.model import CompletionCounts, PrayerRecord
from src.mosque_community.mosque_community.users.model import Member
from src.mosque_community.mosque_community.wakeups.model import WakeUpCall

FIXED_NOW = datetime(2026, 3, 11, 5, 30, 0)  # a Wednesday


class FakeUserRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: Dict[int, Any] = {}

    def add(self, member) -> Any:
        """Store a prebuilt Member (fixtures)."""
        self.rows[member.user_id] = member
        self._next_id = max(self._next_id, member.user_id + 1)
        return member

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_username(self, username):
        return next((m for m in self.rows.values() if m.username == username), None)

    def get_by_email(self, email):
        return next((m for m in self.rows.values() if m.email == email), None)

    def create_member(self, *, first_name, last_name, username, email, password_hash, role, status, area_id, phone=None, address=None, mobility=None):
        if self.get_by_username(username) or self.get_by_email(email):
            raise ConflictError("A record with the same unique value already exists")
        uid = self._next_id
        self._next_id += 1
        self.rows[uid] = Member(
            user_id=uid,
            first_name=first_name,
            last_name=last_name,
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            area_id=area_id,
            phone=phone,
            address=address,
            mobility=mobility,
            created_at=FIXED_NOW,
        )
        return uid

    def delete_by_id(self, user_id):
        return self.rows.pop(int(user_id), None) is not None

    def set_status(self, user_id, *, status):
        m = self.rows.get(int(user_id))
        if not m:
            return False
        self.rows[m.user_id] = replace(m, status=status)
        return True

    def set_password_hash(self, user_id, *, password_hash):
        m = self.rows.get(int(user_id))
        if not m:
            return False
        self.rows[m.user_id] = replace(m, password_hash=password_hash)
        return True

    def _filtered(self, area_id, status):
        out = [m for m in self.rows.values() if (area_id is None or m.area_id == area_id) and (status is None or m.status == status)]
        return sorted(out, key=lambda m: m.user_id)

    def list_members(self, *, area_id=None, status=None, limit=20, offset=0):
        return self._filtered(area_id, status)[offset : offset + limit]

    def count_members(self, *, area_id=None, status=None):
        return len(self._filtered(area_id, status))

    def list_drivers(self, *, area_id=None, mobilities=()):
        wanted = {m.lower() for m in mobilities}
        return [
            m
            for m in self._filtered(area_id, MemberStatus.ACTIVE)
            if m.role == Role.MEMBER and (m.mobility or "").lower() in wanted
        ]


class FakeAreaRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._next_id = 1
        self.rows: Dict[int, Area] = {}

    def get_by_id(self, area_id):
        return self.rows.get(int(area_id))

    def get_by_founder(self, founder_id):
        return next((a for a in self.rows.values() if a.founder_id == int(founder_id)), None)

    def list_all(self):
        return sorted(self.rows.values(), key=lambda a: a.area_name)

    def create_area(self, *, area_name, mosque_name, address, prayer_times):
        if any(a.area_name == area_name for a in self.rows.values()):
            raise ConflictError("A record with the same unique value already exists")
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = Area(
            area_id=aid,
            area_name=area_name,
            mosque_name=mosque_name,
            address=address,
            prayer_times=dict(prayer_times),
            created_at=FIXED_NOW,
        )
        return aid

    def update_area(self, area_id, *, fields):
        a = self.rows.get(int(area_id))
        if not a:
            return False
        if "area_name" in fields and any(o.area_name == fields["area_name"] and o.area_id != a.area_id for o in self.rows.values()):
            raise ConflictError("A record with the same unique value already exists")
        times = dict(a.prayer_times)
        times.update({k: v for k, v in fields.items() if isinstance(k, PrayerType)})
        columns = {k: v for k, v in fields.items() if not isinstance(k, PrayerType)}
        self.rows[a.area_id] = replace(a, prayer_times=times, **columns)
        return True

    def assign_founder(self, area_id, *, founder_id, previous_founder_id=None):
        # Build every new row first so a failure leaves nothing half-applied.
        users = self._users.rows
        updated = {}
        previous = users.get(previous_founder_id) if previous_founder_id is not None else None
        if previous and previous.user_id != founder_id and previous.role == Role.FOUNDER:
            updated[previous.user_id] = replace(previous, role=Role.MEMBER)
        updated[int(founder_id)] = replace(users[int(founder_id)], role=Role.FOUNDER, area_id=int(area_id))
        area = replace(self.rows[int(area_id)], founder_id=int(founder_id))

        users.update(updated)
        self.rows[area.area_id] = area


class FakePrayerRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._next_id = 1
        self.rows: Dict[tuple, PrayerRecord] = {}

    def upsert_many(self, *, user_id, prayer_date, entries):
        for prayer_type, status, location in entries:
            key = (int(user_id), prayer_date, prayer_type)
            existing = self.rows.get(key)
            if existing:
                self.rows[key] = replace(existing, status=status, location=location or existing.location)
            else:
                self.rows[key] = PrayerRecord(
                    prayer_id=self._next_id,
                    user_id=int(user_id),
                    prayer_date=prayer_date,
                    prayer_type=prayer_type,
                    status=status,
                    location=location,
                )
                self._next_id += 1

    def list_for_user(self, *, user_id, start_date=None, end_date=None):
        order = list(PrayerType)
        out = [
            r
            for (uid, d, _), r in self.rows.items()
            if uid == int(user_id) and (start_date is None or d >= start_date) and (end_date is None or d <= end_date)
        ]
        return sorted(out, key=lambda r: (-r.prayer_date.toordinal(), order.index(r.prayer_type)))

    def counts_by_area(self, *, start_date, end_date, area_id=None):
        out: Dict[Optional[int], CompletionCounts] = {}
        for (uid, d, _), r in self.rows.items():
            user = self._users.get_by_id(uid)
            if not user or user.status != MemberStatus.ACTIVE or not start_date <= d <= end_date:
                continue
            if area_id is not None and user.area_id != area_id:
                continue
            prayed = 1 if r.status == PrayerStatus.PRAYED else 0
            eligible = 1 if r.status in (PrayerStatus.PRAYED, PrayerStatus.MISSED) else 0
            out[user.area_id] = out.get(user.area_id, CompletionCounts()) + CompletionCounts(prayed, eligible)
        return out


class FakeActivityRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: Dict[tuple, DailyActivity] = {}

    def upsert(self, *, user_id, activity_date, activity_type, count_value, minutes_value):
        key = (int(user_id), activity_date, activity_type)
        existing = self.rows.get(key)
        activity_id = existing.activity_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.rows[key] = DailyActivity(
            activity_id=activity_id,
            user_id=int(user_id),
            activity_date=activity_date,
            activity_type=activity_type,
            count_value=int(count_value),
            minutes_value=int(minutes_value),
        )

    def list_for_user(self, *, user_id, start_date=None, end_date=None, activity_type=None):
        out = [
            r
            for (uid, d, t), r in self.rows.items()
            if uid == int(user_id)
            and (start_date is None or d >= start_date)
            and (end_date is None or d <= end_date)
            and (activity_type is None or t == activity_type)
        ]
        return sorted(out, key=lambda r: (-r.activity_date.toordinal(), r.activity_type.value))


class FakePickupRepo:
    def __init__(self, *, clock: Callable[[], datetime] = lambda: FIXED_NOW):
        self._clock = clock
        self._lock = threading.Lock()
        self._next_id = 1
        self._next_history_id = 1
        self.rows: Dict[int, PickupRequest] = {}
        self.history: List[PickupHistoryEntry] = []

    def _append_history(self, request_id: int, record: HistoryRecord) -> None:
        self.history.append(
            PickupHistoryEntry(
                history_id=self._next_history_id,
                pickup_request_id=request_id,
                changed_by=record.changed_by,
                change_type=record.change_type,
                old_status=record.old_status,
                new_status=record.new_status,
                notes=record.notes,
                created_at=self._clock(),
            )
        )
        self._next_history_id += 1

    def create(self, data: NewPickupRequest, *, history: HistoryRecord) -> int:
        with self._lock:
            if any(r.user_id == data.user_id and not r.status.is_terminal for r in self.rows.values()):
                raise ConflictError("You already have an open pickup request")
            rid = self._next_id
            self._next_id += 1
            self.rows[rid] = PickupRequest(
                request_id=rid,
                user_id=data.user_id,
                area_id=data.area_id,
                prayer_type=data.prayer_type,
                pickup_location=data.pickup_location,
                days=tuple(data.days),
                status=history.new_status,
                latitude=data.latitude,
                longitude=data.longitude,
                contact_number=data.contact_number,
                special_instructions=data.special_instructions,
                scheduled_time=data.scheduled_time,
                created_at=self._clock(),
                updated_at=self._clock(),
            )
            self._append_history(rid, history)
            return rid

    def get(self, request_id):
        return self.rows.get(int(request_id))

    def _filtered(self, user_id, area_id, status):
        out = [
            r
            for r in self.rows.values()
            if (user_id is None or r.user_id == user_id)
            and (area_id is None or r.area_id == area_id)
            and (status is None or r.status == status)
        ]
        return sorted(out, key=lambda r: -r.request_id)

    def list_requests(self, *, user_id=None, area_id=None, status=None, limit=20, offset=0):
        return self._filtered(user_id, area_id, status)[offset : offset + limit]

    def count_requests(self, *, user_id=None, area_id=None, status=None):
        return len(self._filtered(user_id, area_id, status))

    def count_open(self, *, area_id=None):
        return sum(1 for r in self._filtered(None, area_id, None) if not r.status.is_terminal)

    def has_open_request(self, user_id):
        return any(r.user_id == int(user_id) and not r.status.is_terminal for r in self.rows.values())

    def transition(self, request_id, *, expected_status, new_status, fields: Mapping[str, Any], history):
        with self._lock:
            current = self.rows.get(int(request_id))
            if not current or current.status != expected_status:
                return False
            self.rows[current.request_id] = replace(current, status=new_status, updated_at=self._clock(), **dict(fields))
            self._append_history(current.request_id, history)
            return True

    def list_history(self, request_id):
        return [h for h in self.history if h.pickup_request_id == int(request_id)]


class FakeFeedRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: Dict[int, Feed] = {}

    def create(self, *, title, content, priority, author_id, area_id, image_url=None, video_url=None, expires_at=None):
        fid = self._next_id
        self._next_id += 1
        self.rows[fid] = Feed(
            feed_id=fid,
            title=title,
            content=content,
            priority=priority,
            author_id=author_id,
            area_id=area_id,
            image_url=image_url,
            video_url=video_url,
            expires_at=expires_at,
            created_at=FIXED_NOW,
        )
        return fid

    def get(self, feed_id):
        return self.rows.get(int(feed_id))

    def _visible(self, now, area_id, include_global, global_only):
        rank = {FeedPriority.URGENT: 0, FeedPriority.HIGH: 1, FeedPriority.NORMAL: 2}
        out = []
        for f in self.rows.values():
            if not f.is_visible_at(now):
                continue
            if global_only and f.area_id is not None:
                continue
            if area_id is not None and not (f.area_id == area_id or (include_global and f.area_id is None)):
                continue
            out.append(f)
        return sorted(out, key=lambda f: (rank[f.priority], -f.feed_id))

    def list_visible(self, *, now, area_id=None, include_global=True, global_only=False, limit=20, offset=0):
        return self._visible(now, area_id, include_global, global_only)[offset : offset + limit]

    def count_visible(self, *, now, area_id=None, include_global=True, global_only=False):
        return len(self._visible(now, area_id, include_global, global_only))

    def increment_views(self, feed_id):
        f = self.rows[int(feed_id)]
        self.rows[f.feed_id] = replace(f, views=f.views + 1)

    def update(self, feed_id, *, fields):
        f = self.rows.get(int(feed_id))
        if not f:
            return False
        self.rows[f.feed_id] = replace(f, **dict(fields))
        return True

    def deactivate(self, feed_id):
        f = self.rows.get(int(feed_id))
        if not f or not f.is_active:
            return False
        self.rows[f.feed_id] = replace(f, is_active=False)
        return True


class FakeWakeUpRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._next_id = 1
        self.rows: Dict[tuple, WakeUpCall] = {}

    def upsert(self, *, user_id, area_id, call_date, call_response, response_time, call_time):
        key = (int(user_id), call_date)
        existing = self.rows.get(key)
        call_id = existing.call_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.rows[key] = WakeUpCall(
            call_id=call_id,
            user_id=int(user_id),
            area_id=existing.area_id if existing else area_id,
            call_date=call_date,
            call_response=call_response,
            response_time=response_time,
            call_time=call_time,
        )

    def _joined(self, call: WakeUpCall) -> WakeUpCall:
        member = self._users.get_by_id(call.user_id)
        return replace(call, username=member.username, phone=member.phone) if member else call

    def get_for_day(self, *, user_id, call_date):
        call = self.rows.get((int(user_id), call_date))
        return self._joined(call) if call else None

    def _filtered(self, area_id, call_date, call_response):
        out = [
            self._joined(c)
            for c in self.rows.values()
            if (area_id is None or c.area_id == area_id)
            and (call_date is None or c.call_date == call_date)
            and (call_response is None or c.call_response == call_response)
        ]
        return sorted(out, key=lambda c: (c.call_date, c.response_time), reverse=True)

    def list_calls(self, *, area_id=None, call_date=None, call_response=None, limit=20, offset=0):
        return self._filtered(area_id, call_date, call_response)[offset : offset + limit]

    def count_calls(self, *, area_id=None, call_date=None, call_response=None):
        return len(self._filtered(area_id, call_date, call_response))

    def counts_by_response(self, *, start_date, end_date, area_id=None):
        counts: Dict[WakeUpResponse, int] = {}
        for c in self._filtered(area_id, None, None):
            if start_date <= c.call_date <= end_date:
                counts[c.call_response] = counts.get(c.call_response, 0) + 1
        return counts


@dataclass
class FakeRepos:
    users: FakeUserRepo = field(default_factory=FakeUserRepo)
    areas: Optional[FakeAreaRepo] = None
    activities: FakeActivityRepo = field(default_factory=FakeActivityRepo)
    pickups: FakePickupRepo = field(default_factory=FakePickupRepo)
    feeds: FakeFeedRepo = field(default_factory=FakeFeedRepo)
    prayers: Optional[FakePrayerRepo] = None
    wakeups: Optional[FakeWakeUpRepo] = None

    def __post_init__(self):
        if self.areas is None:
            self.areas = FakeAreaRepo(self.users)
        if self.prayers is None:
            self.prayers = FakePrayerRepo(self.users)
        if self.wakeups is None:
            self.wakeups = FakeWakeUpRepo(self.users)


def prayer_day(repo: FakePrayerRepo, user_id: int, day: date, statuses: Mapping[PrayerType, PrayerStatus]) -> None:
    repo.upsert_many(user_id=user_id, prayer_date=day, entries=[(p, s, None) for p, s in statuses.items()])


def full_day(status: PrayerStatus = PrayerStatus.PRAYED) -> Dict[PrayerType, PrayerStatus]:
    return {p: status for p in PrayerType}
