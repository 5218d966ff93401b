from __future__ import annotations

from datetime import time
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import PrayerType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Area
from .repository import AreaRepository

_TIME_COLUMNS = {
    PrayerType.FAJR: "fajr_time",
    PrayerType.DHUHR: "dhuhr_time",
    PrayerType.ASR: "asr_time",
    PrayerType.MAGHRIB: "maghrib_time",
    PrayerType.ISHA: "isha_time",
}

# Prayer time columns are addressed by their PrayerType key.
_UPDATABLE = {"area_name", "mosque_name", "address", *_TIME_COLUMNS}

_COLUMNS = "area_id, area_name, mosque_name, address, founder_id, created_at, " + ", ".join(_TIME_COLUMNS.values())


def _to_area(row: dict) -> Area:
    return Area(
        area_id=int(row["area_id"]),
        area_name=row["area_name"],
        mosque_name=row.get("mosque_name"),
        address=row.get("address"),
        founder_id=row.get("founder_id"),
        prayer_times={p: normalize_mysql_time(row.get(col)) for p, col in _TIME_COLUMNS.items()},
        created_at=row.get("created_at"),
    )


class MySQLAreaRepository(AreaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, area_id: int) -> Optional[Area]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM areas WHERE area_id=%s", (int(area_id),))
            row = fetchone(cur)
            return _to_area(row) if row else None

    def get_by_founder(self, founder_id: int) -> Optional[Area]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM areas WHERE founder_id=%s", (int(founder_id),))
            row = fetchone(cur)
            return _to_area(row) if row else None

    def list_all(self) -> Sequence[Area]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM areas ORDER BY area_name")
            return [_to_area(r) for r in fetchall(cur)]

    def create_area(
        self,
        *,
        area_name: str,
        mosque_name: Optional[str],
        address: Optional[str],
        prayer_times: Dict[PrayerType, Optional[time]],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO areas(area_name, mosque_name, address, fajr_time, dhuhr_time, asr_time, maghrib_time, isha_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (area_name, mosque_name, address, *[prayer_times.get(p) for p in _TIME_COLUMNS]),
            )
            return int(cur.lastrowid)

    def update_area(self, area_id: int, *, fields: Mapping[Any, Any]) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported area columns: {sorted(unknown)}")
        if not fields:
            return True

        columns = [_TIME_COLUMNS.get(k, k) for k in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE areas SET {', '.join(f'{col}=%s' for col in columns)} WHERE area_id=%s",
                tuple(list(fields.values()) + [int(area_id)]),
            )
            return cur.rowcount > 0

    def assign_founder(self, area_id: int, *, founder_id: int, previous_founder_id: Optional[int] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if previous_founder_id is not None and previous_founder_id != founder_id:
                cur.execute(
                    "UPDATE users SET role=%s WHERE user_id=%s AND role=%s",
                    (Role.MEMBER.value, int(previous_founder_id), Role.FOUNDER.value),
                )
            cur.execute(
                "UPDATE users SET role=%s, area_id=%s WHERE user_id=%s",
                (Role.FOUNDER.value, int(area_id), int(founder_id)),
            )
            cur.execute("UPDATE areas SET founder_id=%s WHERE area_id=%s", (int(founder_id), int(area_id)))
