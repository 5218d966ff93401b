from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.enums import PrayerType, WakeUpResponse
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import WakeUpCall
from .repository import WakeUpCallRepository

_SELECT = """
    SELECT wc.call_id, wc.user_id, wc.area_id, wc.call_date, wc.call_response, wc.response_time,
           wc.call_time, wc.created_at, wc.updated_at, u.username, u.phone
    FROM wake_up_calls wc
    JOIN users u ON u.user_id = wc.user_id
"""


def _to_call(row: dict) -> WakeUpCall:
    return WakeUpCall(
        call_id=int(row["call_id"]),
        user_id=int(row["user_id"]),
        area_id=row.get("area_id"),
        call_date=row["call_date"],
        call_response=WakeUpResponse(row["call_response"]),
        response_time=row["response_time"],
        call_time=normalize_mysql_time(row.get("call_time")),
        username=row.get("username"),
        phone=row.get("phone"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _filters(
    area_id: Optional[int], call_date: Optional[date], call_response: Optional[WakeUpResponse]
) -> Tuple[str, List[object]]:
    clauses = ["wc.prayer_type=%s"]
    params: List[object] = [PrayerType.FAJR.value]
    if area_id is not None:
        clauses.append("wc.area_id=%s")
        params.append(int(area_id))
    if call_date is not None:
        clauses.append("wc.call_date=%s")
        params.append(call_date)
    if call_response is not None:
        clauses.append("wc.call_response=%s")
        params.append(call_response.value)
    return " AND ".join(clauses), params


class MySQLWakeUpCallRepository(WakeUpCallRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO wake_up_calls(user_id, area_id, call_date, prayer_type, call_response, response_time, call_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE call_response=VALUES(call_response),
                                        response_time=VALUES(response_time),
                                        call_time=VALUES(call_time)
                """,
                (
                    int(user_id),
                    area_id,
                    call_date,
                    PrayerType.FAJR.value,
                    call_response.value,
                    response_time,
                    call_time,
                ),
            )

    def get_for_day(self, *, user_id: int, call_date: date) -> Optional[WakeUpCall]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE wc.user_id=%s AND wc.call_date=%s AND wc.prayer_type=%s",
                (int(user_id), call_date, PrayerType.FAJR.value),
            )
            rows = fetchall(cur)
            return _to_call(rows[0]) if rows else None

    def list_calls(
        self,
        *,
        area_id: Optional[int] = None,
        call_date: Optional[date] = None,
        call_response: Optional[WakeUpResponse] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[WakeUpCall]:
        where, params = _filters(area_id, call_date, call_response)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY wc.call_date DESC, wc.response_time DESC LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_call(r) for r in fetchall(cur)]

    def count_calls(
        self,
        *,
        area_id: Optional[int] = None,
        call_date: Optional[date] = None,
        call_response: Optional[WakeUpResponse] = None,
    ) -> int:
        where, params = _filters(area_id, call_date, call_response)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM wake_up_calls wc WHERE {where}", tuple(params))
            rows = fetchall(cur)
            return int(rows[0]["total"]) if rows else 0

    def counts_by_response(
        self, *, start_date: date, end_date: date, area_id: Optional[int] = None
    ) -> Dict[WakeUpResponse, int]:
        where, params = _filters(area_id, None, None)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT wc.call_response, COUNT(*) AS total
                FROM wake_up_calls wc
                WHERE {where} AND wc.call_date BETWEEN %s AND %s
                GROUP BY wc.call_response
                """,
                tuple(params + [start_date, end_date]),
            )
            return {WakeUpResponse(r["call_response"]): int(r["total"]) for r in fetchall(cur)}
