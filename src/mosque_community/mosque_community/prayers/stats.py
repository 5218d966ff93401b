"""Pure attendance aggregation: percentages, daily completion and streaks.

Rules:
- Only rows that exist are counted. A day without rows is neither prayed nor
  missed, it simply is not part of the denominator.
- ``upcoming`` rows are not yet eligible and stay out of the denominator.
- Daily completion divides by the five daily prayers for any day that has at
  least one row.
- The streak walks backward from the latest recorded day and stops at the first
  day that is not fully prayed or at the first calendar gap.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.constants import DAILY_PRAYER_COUNT
from ..core.enums import PrayerStatus, PrayerType
from .model import CompletionCounts, PrayerRecord

_ELIGIBLE = {PrayerStatus.PRAYED, PrayerStatus.MISSED}


def _counts_for(records: Iterable[PrayerRecord]) -> CompletionCounts:
    prayed = 0
    eligible = 0
    for r in records:
        if r.status in _ELIGIBLE:
            eligible += 1
            if r.status == PrayerStatus.PRAYED:
                prayed += 1
    return CompletionCounts(prayed=prayed, eligible=eligible)


def window_counts(records: Iterable[PrayerRecord], *, start: Optional[date] = None, end: Optional[date] = None) -> CompletionCounts:
    return _counts_for(r for r in records if _in_window(r.prayer_date, start, end))


def per_type_counts(
    records: Iterable[PrayerRecord], *, start: Optional[date] = None, end: Optional[date] = None
) -> Dict[PrayerType, CompletionCounts]:
    by_type: Dict[PrayerType, List[PrayerRecord]] = {p: [] for p in PrayerType}
    for r in records:
        if _in_window(r.prayer_date, start, end):
            by_type[r.prayer_type].append(r)
    return {p: _counts_for(rows) for p, rows in by_type.items()}


def daily_completion(records: Iterable[PrayerRecord]) -> Dict[date, float]:
    """Percentage of the five prayers marked prayed, per recorded day."""

    prayed_by_day: Dict[date, set] = defaultdict(set)
    seen_days: set = set()
    for r in records:
        seen_days.add(r.prayer_date)
        if r.status == PrayerStatus.PRAYED:
            prayed_by_day[r.prayer_date].add(r.prayer_type)
    return {d: len(prayed_by_day[d]) * 100 / DAILY_PRAYER_COUNT for d in sorted(seen_days)}


def current_streak(records: Sequence[PrayerRecord], *, as_of: Optional[date] = None) -> int:
    by_day: Dict[date, Dict[PrayerType, PrayerStatus]] = defaultdict(dict)
    for r in records:
        if as_of is None or r.prayer_date <= as_of:
            by_day[r.prayer_date][r.prayer_type] = r.status

    if not by_day:
        return 0

    streak = 0
    day = max(by_day)
    while day in by_day:
        statuses = by_day[day]
        if not all(statuses.get(p) == PrayerStatus.PRAYED for p in PrayerType):
            break
        streak += 1
        day = day - timedelta(days=1)
    return streak


def merge_counts(scopes: Iterable[CompletionCounts]) -> CompletionCounts:
    total = CompletionCounts()
    for c in scopes:
        total = total + c
    return total


def _in_window(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True
