from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import FeedPriority


@dataclass(frozen=True)
class Feed:
    """Announcement for one area, or for every area when ``area_id`` is None."""

    feed_id: int
    title: str
    content: str
    priority: FeedPriority = FeedPriority.NORMAL
    author_id: Optional[int] = None
    area_id: Optional[int] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    views: int = 0
    is_active: bool = True
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None

    def is_visible_at(self, now: datetime) -> bool:
        return self.is_active and (self.expires_at is None or self.expires_at > now)

    def to_dict(self) -> dict:
        return {
            "id": self.feed_id,
            "title": self.title,
            "content": self.content,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "priority": self.priority.value,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "area_id": self.area_id,
            "views": self.views,
            "is_active": self.is_active,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
