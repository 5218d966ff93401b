from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import FeedPriority
from .model import Feed


class FeedRepository(Protocol):
    """Repository interface for feeds.

    Listing only returns active, unexpired rows. When ``area_id`` is given,
    ``include_global`` also returns rows addressed to every area;
    ``global_only`` returns just those. With neither, every area is listed.
    """

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
        raise NotImplementedError

    def get(self, feed_id: int) -> Optional[Feed]:
        raise NotImplementedError

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
        raise NotImplementedError

    def count_visible(
        self,
        *,
        now: datetime,
        area_id: Optional[int] = None,
        include_global: bool = True,
        global_only: bool = False,
    ) -> int:
        raise NotImplementedError

    def increment_views(self, feed_id: int) -> None:
        raise NotImplementedError

    def update(self, feed_id: int, *, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def deactivate(self, feed_id: int) -> bool:
        raise NotImplementedError
