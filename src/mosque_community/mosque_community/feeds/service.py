from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..areas.repository import AreaRepository
from ..auth.policy import Requirement, check
from ..auth.principal import Principal
from ..common.datetime_utils import now_local, to_naive_local
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_text, require_non_empty
from ..core.enums import FeedPriority
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Feed
from .repository import FeedRepository

logger = logging.getLogger(__name__)


class FeedService:
    """Use case: area announcements.

    Founders post to their own area. A SuperAdmin may target any area or,
    with no area, every area at once.
    """

    def __init__(self, feeds: FeedRepository, areas: AreaRepository, *, clock: Callable[[], datetime] = now_local):
        self._feeds = feeds
        self._areas = areas
        self._clock = clock

    def _future_expiry(self, value: Optional[datetime]) -> Optional[datetime]:
        value = to_naive_local(value)
        if value is not None and value <= self._clock():
            raise ValidationError("Expiry must be in the future")
        return value

    def _target_area(self, principal: Principal, area_id: Optional[int]) -> Optional[int]:
        if principal.is_founder:
            if area_id is not None and int(area_id) != principal.area_id:
                raise AuthorizationError("Founders can only post to their own area")
            if principal.area_id is None:
                raise ValidationError("You are not assigned to an area")
            return principal.area_id
        if area_id is not None and not self._areas.get_by_id(int(area_id)):
            raise NotFoundError("Area not found")
        return int(area_id) if area_id is not None else None

    def create_feed(
        self,
        principal: Principal,
        *,
        title: str,
        content: str,
        priority: FeedPriority = FeedPriority.NORMAL,
        area_id: Optional[int] = None,
        image_url: Optional[str] = None,
        video_url: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Feed:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")
        expires_at = self._future_expiry(expires_at)
        target = self._target_area(principal, area_id)

        feed_id = self._feeds.create(
            title=title,
            content=content,
            priority=priority,
            author_id=principal.user_id,
            area_id=target,
            image_url=optional_text(image_url),
            video_url=optional_text(video_url),
            expires_at=expires_at,
        )
        logger.info("feed id=%s posted by user_id=%s area_id=%s", feed_id, principal.user_id, target)
        return self._load(feed_id)

    def _load(self, feed_id: int) -> Feed:
        feed = self._feeds.get(int(feed_id))
        if not feed:
            raise NotFoundError("Feed not found")
        return feed

    @staticmethod
    def _can_read(principal: Principal, feed: Feed) -> bool:
        return principal.is_super_admin or feed.area_id is None or feed.area_id == principal.area_id

    def list_feeds(self, principal: Principal, *, area_id: Optional[int] = None, page: PageRequest = PageRequest()) -> Page[Feed]:
        now = self._clock()
        if principal.is_super_admin:
            scope: Dict[str, Any] = {"area_id": area_id, "include_global": area_id is None}
        elif principal.area_id is None:
            scope = {"global_only": True}
        else:
            scope = {"area_id": principal.area_id, "include_global": True}

        items = list(self._feeds.list_visible(now=now, limit=page.limit, offset=page.offset, **scope))
        total = self._feeds.count_visible(now=now, **scope)
        return Page(items=items, total=total, request=page)

    def get_feed(self, principal: Principal, feed_id: int) -> Feed:
        feed = self._load(feed_id)
        if not feed.is_visible_at(self._clock()) or not self._can_read(principal, feed):
            raise NotFoundError("Feed not found")
        self._feeds.increment_views(feed.feed_id)
        return replace(feed, views=feed.views + 1)

    def _get_editable(self, principal: Principal, feed_id: int) -> Feed:
        check(principal, Requirement.FOUNDER_OR_ABOVE)
        feed = self._load(feed_id)
        if not feed.is_active:
            raise NotFoundError("Feed not found")
        if not principal.is_super_admin and feed.author_id != principal.user_id:
            raise AuthorizationError("Only the author or a SuperAdmin can change this feed")
        return feed

    def update_feed(self, principal: Principal, feed_id: int, **changes: Any) -> Feed:
        feed = self._get_editable(principal, feed_id)

        fields: Dict[str, Any] = {}
        for key in ("title", "content"):
            if changes.get(key) is not None:
                fields[key] = require_non_empty(changes[key], key.capitalize())
        for key in ("image_url", "video_url"):
            if key in changes and changes[key] is not None:
                fields[key] = optional_text(changes[key])
        if changes.get("priority") is not None:
            fields["priority"] = FeedPriority(changes["priority"])
        if changes.get("expires_at") is not None:
            fields["expires_at"] = self._future_expiry(changes["expires_at"])

        if fields:
            self._feeds.update(feed.feed_id, fields=fields)
            logger.info("feed id=%s updated by user_id=%s fields=%s", feed.feed_id, principal.user_id, sorted(fields))
        return self._load(feed.feed_id)

    def delete_feed(self, principal: Principal, feed_id: int) -> None:
        feed = self._get_editable(principal, feed_id)
        self._feeds.deactivate(feed.feed_id)
        logger.info("feed id=%s deactivated by user_id=%s", feed.feed_id, principal.user_id)
