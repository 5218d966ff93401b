from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.mosque_community.mosque_community.core.enums import PrayerStatus, PrayerType
from src.mosque_community.mosque_community.prayers import stats
from src.mosque_community.mosque_community.prayers.model import CompletionCounts, PrayerRecord, display_percentage

D = date(2026, 3, 11)


def _rec(day, prayer_type, status=PrayerStatus.PRAYED):
    return PrayerRecord(prayer_id=0, user_id=1, prayer_date=day, prayer_type=prayer_type, status=status)


def _full(day, status=PrayerStatus.PRAYED):
    return [_rec(day, p, status) for p in PrayerType]


def test_empty_window_is_zero_percent():
    counts = stats.window_counts([], start=D, end=D)
    assert counts == CompletionCounts(0, 0)
    assert counts.percentage == 0.0
    assert counts.to_dict()["display_percentage"] == 0
    assert all(c.percentage == 0.0 for c in stats.per_type_counts([]).values())


def test_upcoming_rows_are_not_eligible():
    records = [
        _rec(D, PrayerType.FAJR),
        _rec(D, PrayerType.DHUHR, PrayerStatus.MISSED),
        _rec(D, PrayerType.ASR, PrayerStatus.UPCOMING),
    ]
    counts = stats.window_counts(records)
    assert counts == CompletionCounts(prayed=1, eligible=2)
    assert counts.percentage == 50.0


def test_per_type_breakdown_ignores_days_without_rows():
    records = [_rec(D, PrayerType.FAJR), _rec(D - timedelta(days=3), PrayerType.FAJR, PrayerStatus.MISSED)]
    by_type = stats.per_type_counts(records, start=D - timedelta(days=29), end=D)
    assert by_type[PrayerType.FAJR] == CompletionCounts(prayed=1, eligible=2)
    assert by_type[PrayerType.ISHA] == CompletionCounts()


def test_window_bounds_are_inclusive():
    records = [_rec(D - timedelta(days=2), PrayerType.FAJR), _rec(D + timedelta(days=1), PrayerType.FAJR)]
    assert stats.window_counts(records, start=D - timedelta(days=2), end=D).prayed == 1


def test_streak_stops_at_calendar_gap():
    records = _full(D) + _full(D - timedelta(days=1)) + _full(D - timedelta(days=2)) + _full(D - timedelta(days=4))
    assert stats.current_streak(records) == 3


def test_streak_stops_at_incomplete_day():
    records = _full(D) + _full(D - timedelta(days=1))
    records[-1] = _rec(D - timedelta(days=1), PrayerType.ISHA, PrayerStatus.MISSED)
    assert stats.current_streak(records) == 1


def test_streak_ignores_records_after_as_of():
    records = _full(D) + _full(D - timedelta(days=1))
    assert stats.current_streak(records, as_of=D - timedelta(days=1)) == 1


def test_partial_day_counts_forty_percent_and_no_streak():
    records = [_rec(D, PrayerType.FAJR), _rec(D, PrayerType.DHUHR)]
    assert stats.daily_completion(records) == {D: 40.0}
    assert stats.current_streak(records) == 0


def test_streak_is_zero_without_records():
    assert stats.current_streak([]) == 0


def test_scopes_are_summed_before_dividing():
    total = stats.merge_counts([CompletionCounts(10, 20), CompletionCounts(18, 30)])
    assert total == CompletionCounts(28, 50)
    assert total.percentage == 56.0
    assert total.to_dict()["display_percentage"] == 56


@pytest.mark.parametrize("value, expected", [(0.0, 0), (12.5, 13), (66.666, 67), (58.3, 58), (99.5, 100)])
def test_display_percentage_rounds_half_up(value, expected):
    assert display_percentage(value) == expected


@pytest.mark.parametrize(
    "prayed, eligible, expected",
    [(29, 200, 15), (1, 8, 13), (28, 50, 56), (2, 3, 67), (0, 4, 0)],
)
def test_display_rounds_the_exact_ratio(prayed, eligible, expected):
    assert CompletionCounts(prayed, eligible).to_dict()["display_percentage"] == expected


def test_percentage_is_exact_for_terminating_ratios():
    assert CompletionCounts(28, 50).percentage == 56.0
    assert CompletionCounts(29, 200).percentage == 14.5
    assert CompletionCounts(7, 20).to_dict()["percentage"] == 35.0
