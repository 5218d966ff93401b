from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..core.enums import HistoryChangeType, PickupStatus, PrayerType, Weekday
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import HistoryRecord, NewPickupRequest, PickupHistoryEntry, PickupRequest
from .repository import PickupRequestRepository

_OPEN_STATUSES = tuple(s.value for s in PickupStatus if not s.is_terminal)
_OPEN_FOR_USER = (
    "SELECT request_id FROM pickup_requests WHERE user_id=%s AND status IN ("
    + ",".join(["%s"] * len(_OPEN_STATUSES))
    + ") LIMIT 1"
)

# Columns a transition may set besides status.
_TRANSITION_COLUMNS = frozenset(
    {
        "assigned_driver_id",
        "assigned_driver_name",
        "assigned_driver_phone",
        "approved_by",
        "approved_at",
        "rejected_by",
        "rejection_reason",
        "scheduled_time",
        "actual_pickup_time",
    }
)

_SELECT = """
    SELECT pr.request_id, pr.user_id, pr.area_id, pr.prayer_type, pr.pickup_location,
           pr.latitude, pr.longitude, pr.days, pr.contact_number, pr.special_instructions,
           pr.status, pr.assigned_driver_id, pr.assigned_driver_name, pr.assigned_driver_phone,
           pr.approved_by, pr.rejected_by, pr.rejection_reason, pr.scheduled_time,
           pr.created_at, pr.updated_at, pr.approved_at, pr.actual_pickup_time,
           CONCAT(u.first_name, ' ', u.last_name) AS requester_name
    FROM pickup_requests pr
    JOIN users u ON u.user_id = pr.user_id
"""


def _parse_days(value: Any) -> Tuple[Weekday, ...]:
    if value is None:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value or "[]")
    return tuple(Weekday(str(v).lower()) for v in value)


def _to_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_request(row: dict) -> PickupRequest:
    return PickupRequest(
        request_id=int(row["request_id"]),
        user_id=int(row["user_id"]),
        area_id=row.get("area_id"),
        prayer_type=PrayerType(row["prayer_type"]),
        pickup_location=row["pickup_location"],
        days=_parse_days(row.get("days")),
        status=PickupStatus(row["status"]),
        latitude=_to_float(row.get("latitude")),
        longitude=_to_float(row.get("longitude")),
        contact_number=row.get("contact_number"),
        special_instructions=row.get("special_instructions"),
        assigned_driver_id=row.get("assigned_driver_id"),
        assigned_driver_name=row.get("assigned_driver_name"),
        assigned_driver_phone=row.get("assigned_driver_phone"),
        approved_by=row.get("approved_by"),
        rejected_by=row.get("rejected_by"),
        rejection_reason=row.get("rejection_reason"),
        scheduled_time=normalize_mysql_time(row.get("scheduled_time")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        approved_at=row.get("approved_at"),
        actual_pickup_time=row.get("actual_pickup_time"),
        requester_name=row.get("requester_name"),
    )


def _filters(
    *, user_id: Optional[int], area_id: Optional[int], status: Optional[PickupStatus]
) -> Tuple[str, List[object]]:
    clauses: List[str] = []
    params: List[object] = []
    if user_id is not None:
        clauses.append("pr.user_id=%s")
        params.append(int(user_id))
    if area_id is not None:
        clauses.append("pr.area_id=%s")
        params.append(int(area_id))
    if status is not None:
        clauses.append("pr.status=%s")
        params.append(status.value)
    where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
    return where, params


def _insert_history(cur, request_id: int, history: HistoryRecord) -> None:
    cur.execute(
        """
        INSERT INTO pickup_request_history(pickup_request_id, changed_by, change_type, old_status, new_status, notes)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (
            int(request_id),
            history.changed_by,
            history.change_type.value,
            history.old_status.value if history.old_status else None,
            history.new_status.value,
            history.notes,
        ),
    )


class MySQLPickupRequestRepository(PickupRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, data: NewPickupRequest, *, history: HistoryRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the requester serialises concurrent creates for the same member.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (int(data.user_id),))
            fetchall(cur)
            cur.execute(_OPEN_FOR_USER, (int(data.user_id), *_OPEN_STATUSES))
            if fetchall(cur):
                raise ConflictError("You already have an open pickup request")

            cur.execute(
                """
                INSERT INTO pickup_requests(
                    user_id, area_id, prayer_type, pickup_location, latitude, longitude,
                    days, contact_number, special_instructions, scheduled_time, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(data.user_id),
                    data.area_id,
                    data.prayer_type.value,
                    data.pickup_location,
                    data.latitude,
                    data.longitude,
                    json.dumps([d.value for d in data.days]),
                    data.contact_number,
                    data.special_instructions,
                    data.scheduled_time,
                    history.new_status.value,
                ),
            )
            request_id = int(cur.lastrowid)
            _insert_history(cur, request_id, history)
            return request_id

    def get(self, request_id: int) -> Optional[PickupRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE pr.request_id=%s", (int(request_id),))
            row = fetchone(cur)
            return _to_request(row) if row else None

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        area_id: Optional[int] = None,
        status: Optional[PickupStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[PickupRequest]:
        where, params = _filters(user_id=user_id, area_id=area_id, status=status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} {where} ORDER BY pr.created_at DESC, pr.request_id DESC LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def count_requests(
        self,
        *,
        user_id: Optional[int] = None,
        area_id: Optional[int] = None,
        status: Optional[PickupStatus] = None,
    ) -> int:
        where, params = _filters(user_id=user_id, area_id=area_id, status=status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS c FROM pickup_requests pr {where}", tuple(params))
            row = fetchone(cur)
            return int(row["c"]) if row else 0

    def count_open(self, *, area_id: Optional[int] = None) -> int:
        placeholders = ",".join(["%s"] * len(_OPEN_STATUSES))
        sql = f"SELECT COUNT(*) AS c FROM pickup_requests WHERE status IN ({placeholders})"
        params: List[object] = list(_OPEN_STATUSES)
        if area_id is not None:
            sql += " AND area_id=%s"
            params.append(int(area_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return int(row["c"]) if row else 0

    def has_open_request(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_OPEN_FOR_USER, (int(user_id), *_OPEN_STATUSES))
            return bool(fetchall(cur))

    def transition(
        self,
        request_id: int,
        *,
        expected_status: PickupStatus,
        new_status: PickupStatus,
        fields: Mapping[str, Any],
        history: HistoryRecord,
    ) -> bool:
        unknown = set(fields) - _TRANSITION_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported transition columns: {sorted(unknown)}")

        assignments = ["status=%s"] + [f"{col}=%s" for col in fields]
        params: List[object] = [new_status.value, *fields.values(), int(request_id), expected_status.value]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE pickup_requests SET {', '.join(assignments)} WHERE request_id=%s AND status=%s",
                tuple(params),
            )
            if cur.rowcount == 0:
                return False
            _insert_history(cur, request_id, history)
            return True

    def list_history(self, request_id: int) -> Sequence[PickupHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT history_id, pickup_request_id, changed_by, change_type, old_status, new_status, notes, created_at
                FROM pickup_request_history
                WHERE pickup_request_id=%s
                ORDER BY created_at ASC, history_id ASC
                """,
                (int(request_id),),
            )
            return [
                PickupHistoryEntry(
                    history_id=int(r["history_id"]),
                    pickup_request_id=int(r["pickup_request_id"]),
                    changed_by=r.get("changed_by"),
                    change_type=HistoryChangeType(r["change_type"]),
                    old_status=PickupStatus(r["old_status"]) if r.get("old_status") else None,
                    new_status=PickupStatus(r["new_status"]),
                    notes=r.get("notes"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
