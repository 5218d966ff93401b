from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..core.enums import FeedPriority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Feed
from .repository import FeedRepository

_UPDATABLE = frozenset({"title", "content", "image_url", "video_url", "priority", "expires_at"})

_SELECT = """
    SELECT f.feed_id, f.title, f.content, f.image_url, f.video_url, f.priority, f.author_id,
           f.area_id, f.views, f.is_active, f.expires_at, f.created_at, f.updated_at,
           CONCAT(u.first_name, ' ', u.last_name) AS author_name
    FROM feeds f
    LEFT JOIN users u ON u.user_id = f.author_id
"""


def _to_feed(row: dict) -> Feed:
    return Feed(
        feed_id=int(row["feed_id"]),
        title=row["title"],
        content=row["content"],
        priority=FeedPriority(row["priority"]),
        author_id=row.get("author_id"),
        area_id=row.get("area_id"),
        image_url=row.get("image_url"),
        video_url=row.get("video_url"),
        views=int(row.get("views") or 0),
        is_active=bool(row.get("is_active")),
        expires_at=row.get("expires_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        author_name=row.get("author_name"),
    )


def _visible_filter(
    *, now: datetime, area_id: Optional[int], include_global: bool, global_only: bool
) -> Tuple[str, List[object]]:
    clauses = ["f.is_active=1", "(f.expires_at IS NULL OR f.expires_at > %s)"]
    params: List[object] = [now]
    if global_only:
        clauses.append("f.area_id IS NULL")
    elif area_id is not None:
        if include_global:
            clauses.append("(f.area_id=%s OR f.area_id IS NULL)")
        else:
            clauses.append("f.area_id=%s")
        params.append(int(area_id))
    return "WHERE " + " AND ".join(clauses), params


class MySQLFeedRepository(FeedRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        title: str,
        content: str,
        priority: FeedPriority,
        author_id: int,
        area_id: Optional[int],
        image_url: Optional[str] = None,
        video_url: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO feeds(title, content, image_url, video_url, priority, author_id, area_id, expires_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, content, image_url, video_url, priority.value, int(author_id), area_id, expires_at),
            )
            return int(cur.lastrowid)

    def get(self, feed_id: int) -> Optional[Feed]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE f.feed_id=%s", (int(feed_id),))
            row = fetchone(cur)
            return _to_feed(row) if row else None

    def list_visible(
        self,
        *,
        now: datetime,
        area_id: Optional[int] = None,
        include_global: bool = True,
        global_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Feed]:
        where, params = _visible_filter(now=now, area_id=area_id, include_global=include_global, global_only=global_only)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                {where}
                ORDER BY FIELD(f.priority, 'urgent', 'high', 'normal'), f.created_at DESC, f.feed_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_feed(r) for r in fetchall(cur)]

    def count_visible(
        self,
        *,
        now: datetime,
        area_id: Optional[int] = None,
        include_global: bool = True,
        global_only: bool = False,
    ) -> int:
        where, params = _visible_filter(now=now, area_id=area_id, include_global=include_global, global_only=global_only)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS c FROM feeds f {where}", tuple(params))
            row = fetchone(cur)
            return int(row["c"]) if row else 0

    def increment_views(self, feed_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE feeds SET views = views + 1 WHERE feed_id=%s", (int(feed_id),))

    def update(self, feed_id: int, *, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported feed columns: {sorted(unknown)}")
        if not fields:
            return True

        values = [v.value if isinstance(v, FeedPriority) else v for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE feeds SET {', '.join(f'{col}=%s' for col in fields)} WHERE feed_id=%s",
                tuple(values + [int(feed_id)]),
            )
            return cur.rowcount > 0

    def deactivate(self, feed_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE feeds SET is_active=0 WHERE feed_id=%s AND is_active=1", (int(feed_id),))
            return cur.rowcount > 0
