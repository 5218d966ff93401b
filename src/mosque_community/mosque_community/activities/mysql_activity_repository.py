from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ActivityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import DailyActivity
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(
        self,
        *,
        user_id: int,
        activity_date: date,
        activity_type: ActivityType,
        count_value: int,
        minutes_value: int,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_activities(user_id, activity_date, activity_type, count_value, minutes_value)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE count_value=VALUES(count_value), minutes_value=VALUES(minutes_value)
                """,
                (int(user_id), activity_date, activity_type.value, int(count_value), int(minutes_value)),
            )

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> Sequence[DailyActivity]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if start_date is not None:
            clauses.append("activity_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("activity_date <= %s")
            params.append(end_date)
        if activity_type is not None:
            clauses.append("activity_type=%s")
            params.append(activity_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT activity_id, user_id, activity_date, activity_type, count_value, minutes_value
                FROM daily_activities
                WHERE {" AND ".join(clauses)}
                ORDER BY activity_date DESC, activity_type
                """,
                tuple(params),
            )
            return [
                DailyActivity(
                    activity_id=int(r["activity_id"]),
                    user_id=int(r["user_id"]),
                    activity_date=r["activity_date"],
                    activity_type=ActivityType(r["activity_type"]),
                    count_value=int(r["count_value"] or 0),
                    minutes_value=int(r["minutes_value"] or 0),
                )
                for r in fetchall(cur)
            ]
