from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MemberStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Member
from .repository import UserRepository

_COLUMNS = """
    user_id, first_name, last_name, username, email, password_hash,
    role, status, area_id, phone, address, mobility, created_at
"""


def _to_member(row: dict) -> Member:
    return Member(
        user_id=int(row["user_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        status=MemberStatus(row["status"]),
        area_id=row.get("area_id"),
        phone=row.get("phone"),
        address=row.get("address"),
        mobility=row.get("mobility"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {column}=%s", (value,))
            row = fetchone(cur)
            return _to_member(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[Member]:
        return self._get_one("user_id", int(user_id))

    def get_by_username(self, username: str) -> Optional[Member]:
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> Optional[Member]:
        return self._get_one("email", email)

    def create_member(
        self,
        *,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
        status: MemberStatus,
        area_id: Optional[int],
        phone: Optional[str] = None,
        address: Optional[str] = None,
        mobility: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    first_name, last_name, username, email, password_hash,
                    role, status, area_id, phone, address, mobility
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    first_name,
                    last_name,
                    username,
                    email,
                    password_hash,
                    role.value,
                    status.value,
                    area_id,
                    phone,
                    address,
                    mobility,
                ),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def set_status(self, user_id: int, *, status: MemberStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE user_id=%s", (status.value, int(user_id)))
            return cur.rowcount > 0

    def set_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    @staticmethod
    def _filters(area_id: Optional[int], status: Optional[MemberStatus]) -> tuple[str, list[object]]:
        clauses = ["1=1"]
        params: list[object] = []
        if area_id is not None:
            clauses.append("area_id=%s")
            params.append(int(area_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        return " AND ".join(clauses), params

    def list_members(
        self,
        *,
        area_id: Optional[int] = None,
        status: Optional[MemberStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Member]:
        where, params = self._filters(area_id, status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE {where}
                ORDER BY user_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def count_members(self, *, area_id: Optional[int] = None, status: Optional[MemberStatus] = None) -> int:
        where, params = self._filters(area_id, status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users WHERE {where}", tuple(params))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def list_drivers(self, *, area_id: Optional[int] = None, mobilities: Sequence[str] = ()) -> Sequence[Member]:
        if not mobilities:
            return []
        clauses = ["role=%s", "status=%s", "LOWER(mobility) IN (" + ",".join(["%s"] * len(mobilities)) + ")"]
        params: list[object] = [Role.MEMBER.value, MemberStatus.ACTIVE.value, *[m.lower() for m in mobilities]]
        if area_id is not None:
            clauses.append("area_id=%s")
            params.append(int(area_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE {" AND ".join(clauses)}
                ORDER BY first_name, last_name
                """,
                tuple(params),
            )
            return [_to_member(r) for r in fetchall(cur)]
