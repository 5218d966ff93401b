from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence

from ..core.enums import MemberStatus, PrayerLocation, PrayerStatus, PrayerType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import CompletionCounts, PrayerRecord
from .repository import PrayerEntry, PrayerRepository


class MySQLPrayerRepository(PrayerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_many(self, *, user_id: int, prayer_date: date, entries: Sequence[PrayerEntry]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            for prayer_type, status, location in entries:
                cur.execute(
                    """
                    INSERT INTO prayers(user_id, prayer_date, prayer_type, status, location)
                    VALUES(%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        status=VALUES(status),
                        location=COALESCE(VALUES(location), location)
                    """,
                    (
                        int(user_id),
                        prayer_date,
                        prayer_type.value,
                        status.value,
                        location.value if location else None,
                    ),
                )

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[PrayerRecord]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if start_date is not None:
            clauses.append("prayer_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("prayer_date <= %s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT prayer_id, user_id, prayer_date, prayer_type, status, location
                FROM prayers
                WHERE {" AND ".join(clauses)}
                ORDER BY prayer_date DESC, FIELD(prayer_type, 'Fajr', 'Dhuhr', 'Asr', 'Maghrib', 'Isha')
                """,
                tuple(params),
            )
            return [
                PrayerRecord(
                    prayer_id=int(r["prayer_id"]),
                    user_id=int(r["user_id"]),
                    prayer_date=r["prayer_date"],
                    prayer_type=PrayerType(r["prayer_type"]),
                    status=PrayerStatus(r["status"]),
                    location=PrayerLocation(r["location"]) if r.get("location") else None,
                )
                for r in fetchall(cur)
            ]

    def counts_by_area(
        self,
        *,
        start_date: date,
        end_date: date,
        area_id: Optional[int] = None,
    ) -> Dict[Optional[int], CompletionCounts]:
        clauses = ["u.status=%s", "p.prayer_date BETWEEN %s AND %s"]
        params: list[object] = [MemberStatus.ACTIVE.value, start_date, end_date]
        if area_id is not None:
            clauses.append("u.area_id=%s")
            params.append(int(area_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT u.area_id AS area_id,
                       SUM(p.status = 'prayed') AS prayed,
                       SUM(p.status IN ('prayed', 'missed')) AS eligible
                FROM prayers p
                JOIN users u ON u.user_id = p.user_id
                WHERE {" AND ".join(clauses)}
                GROUP BY u.area_id
                """,
                tuple(params),
            )
            out: Dict[Optional[int], CompletionCounts] = {}
            for r in fetchall(cur):
                key = int(r["area_id"]) if r.get("area_id") is not None else None
                out[key] = CompletionCounts(prayed=int(r["prayed"] or 0), eligible=int(r["eligible"] or 0))
            return out
