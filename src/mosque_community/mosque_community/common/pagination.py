from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """Page/limit pair, already coerced to safe integers.

    ``limit`` and ``offset`` are only ever handed to the driver as bound
    parameters, never formatted into SQL text.
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def coerce(cls, page: Any = None, limit: Any = None) -> "PageRequest":
        return cls(page=_to_int(page, 1, lo=1), limit=_to_int(limit, DEFAULT_PAGE_LIMIT, lo=1, hi=MAX_PAGE_LIMIT))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return (self.total + self.request.limit - 1) // self.request.limit

    def meta(self) -> dict:
        return {
            "page": self.request.page,
            "limit": self.request.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def _to_int(value: Any, default: int, *, lo: int, hi: Optional[int] = None) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default
    if v < lo:
        return lo
    if hi is not None and v > hi:
        return hi
    return v
