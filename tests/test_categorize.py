"""Tests for event time categorisation and listing order."""

import random
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from event_countdown.core.categorize import (
    CategorizedEvents,
    categorize_events_by_time,
    category_description,
    category_label,
    day_bounds,
    order_categorized,
    sort_events,
    sort_option_to_api_params,
)
from event_countdown.domain.enums import EventTimeCategory, SortOption
from event_countdown.domain.event import EventRecord


# ── Helpers ──────────────────────────────────────────────────────────────────

_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_TOKYO = timezone(timedelta(hours=9))


def _event(
    event_id: int,
    start: datetime,
    end: datetime | None = None,
    **kw,
) -> EventRecord:
    return EventRecord(id=event_id, start_datetime=start, end_datetime=end, **kw)


def _ids(events: list[EventRecord]) -> list:
    return [e.id for e in events]


# ── Bucketing ────────────────────────────────────────────────────────────────


class TestCategorize:
    def test_one_event_per_bucket(self) -> None:
        events = [
            _event(1, _NOW - timedelta(days=1)),
            _event(2, _NOW + timedelta(minutes=30)),
            _event(3, _NOW + timedelta(days=2)),
            _event(4, _NOW - timedelta(hours=2), _NOW + timedelta(hours=2)),
        ]
        result = categorize_events_by_time(events, now=_NOW, tz=timezone.utc)
        assert _ids(result.ended) == [1]
        assert _ids(result.today) == [2]
        assert _ids(result.upcoming) == [3]
        assert _ids(result.ongoing) == [4]
        assert result.counts() == {"today": 1, "upcoming": 1, "ongoing": 1, "ended": 1}

    def test_start_equal_to_now_without_end_is_today(self) -> None:
        result = categorize_events_by_time([_event(1, _NOW)], now=_NOW, tz=timezone.utc)
        assert _ids(result.today) == [1]

    def test_end_equal_to_now_is_not_ended(self) -> None:
        event = _event(1, _NOW - timedelta(hours=1), _NOW)
        result = categorize_events_by_time([event], now=_NOW, tz=timezone.utc)
        assert result.ended == []
        assert _ids(result.today) == [1]

    def test_later_today_with_end_tomorrow_is_today(self) -> None:
        event = _event(1, _NOW + timedelta(hours=6), _NOW + timedelta(days=1))
        result = categorize_events_by_time([event], now=_NOW, tz=timezone.utc)
        assert _ids(result.today) == [1]

    def test_start_at_next_midnight_is_upcoming(self) -> None:
        midnight = datetime(2026, 1, 2, tzinfo=timezone.utc)
        result = categorize_events_by_time([_event(1, midnight)], now=_NOW, tz=timezone.utc)
        assert _ids(result.upcoming) == [1]

    def test_input_order_preserved_within_bucket(self) -> None:
        events = [_event(i, _NOW + timedelta(days=10 - i)) for i in range(5)]
        result = categorize_events_by_time(events, now=_NOW, tz=timezone.utc)
        assert _ids(result.upcoming) == [0, 1, 2, 3, 4]

    def test_empty_input(self) -> None:
        result = categorize_events_by_time([], now=_NOW)
        assert result.total == 0

    def test_partition_property(self) -> None:
        rng = random.Random(42)
        events = []
        for i in range(300):
            start = _NOW + timedelta(minutes=rng.randint(-5000, 5000))
            end = start + timedelta(minutes=rng.randint(0, 600)) if rng.random() < 0.6 else None
            events.append(_event(i, start, end))

        result = categorize_events_by_time(events, now=_NOW, tz=timezone.utc)
        seen = [e.id for c in EventTimeCategory for e in result.bucket(c)]
        assert sorted(seen) == list(range(300))
        assert result.total == 300

    def test_default_now_uses_clock(self) -> None:
        with patch("event_countdown.core.categorize.utc_now", return_value=_NOW):
            result = categorize_events_by_time(
                [_event(1, _NOW - timedelta(minutes=1))], tz=timezone.utc,
            )
        assert _ids(result.ended) == [1]

    def test_naive_now_treated_as_utc(self) -> None:
        naive_now = datetime(2026, 1, 1, 12, 0, 0)
        events = [
            _event(1, _NOW - timedelta(hours=1)),
            _event(2, _NOW - timedelta(hours=1), _NOW + timedelta(hours=1)),
        ]
        result = categorize_events_by_time(events, now=naive_now, tz=timezone.utc)
        assert _ids(result.ended) == [1]
        assert _ids(result.ongoing) == [2]


# ── Day boundaries ───────────────────────────────────────────────────────────


class TestDayBounds:
    def test_utc_bounds(self) -> None:
        start, end = day_bounds(_NOW, timezone.utc)
        assert start == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 1, 2, tzinfo=timezone.utc)

    def test_local_zone_changes_today(self) -> None:
        now = datetime(2026, 1, 1, 16, 0, 0, tzinfo=timezone.utc)
        event = _event(1, datetime(2026, 1, 2, 10, 0, 0, tzinfo=timezone.utc))

        in_utc = categorize_events_by_time([event], now=now, tz=timezone.utc)
        in_tokyo = categorize_events_by_time([event], now=now, tz=_TOKYO)

        # 16:00Z is already 01:00 on Jan 2 in Tokyo.
        assert _ids(in_utc.upcoming) == [1]
        assert _ids(in_tokyo.today) == [1]

    def test_bounds_are_in_requested_zone(self) -> None:
        start, _ = day_bounds(datetime(2026, 1, 1, 16, 0, tzinfo=timezone.utc), _TOKYO)
        assert start.utcoffset() == timedelta(hours=9)
        assert start.day == 2


# ── Ordering ─────────────────────────────────────────────────────────────────


class TestOrderCategorized:
    def test_per_tab_ordering(self) -> None:
        buckets = CategorizedEvents(
            today=[_event(1, _NOW + timedelta(hours=3)), _event(2, _NOW + timedelta(hours=1))],
            upcoming=[_event(3, _NOW + timedelta(days=5)), _event(4, _NOW + timedelta(days=2))],
            ongoing=[
                _event(5, _NOW - timedelta(hours=1)),
                _event(6, _NOW - timedelta(hours=1), _NOW + timedelta(hours=5)),
                _event(7, _NOW - timedelta(hours=1), _NOW + timedelta(hours=1)),
            ],
            ended=[_event(8, _NOW - timedelta(days=3)), _event(9, _NOW - timedelta(days=1))],
        )
        ordered = order_categorized(buckets)
        assert _ids(ordered.today) == [2, 1]
        assert _ids(ordered.upcoming) == [4, 3]
        assert _ids(ordered.ongoing) == [7, 6, 5]
        assert _ids(ordered.ended) == [9, 8]

    def test_does_not_mutate_input(self) -> None:
        buckets = CategorizedEvents(
            today=[_event(1, _NOW + timedelta(hours=3)), _event(2, _NOW + timedelta(hours=1))],
        )
        order_categorized(buckets)
        assert _ids(buckets.today) == [1, 2]


class TestSortEvents:
    @pytest.fixture
    def events(self) -> list[EventRecord]:
        return [
            _event(1, _NOW + timedelta(days=1), created_at=_NOW - timedelta(days=3),
                   comment_count=5, favorite_count=1),
            _event(2, _NOW + timedelta(days=3), created_at=_NOW - timedelta(days=1),
                   comment_count=0, favorite_count=9),
            _event(3, _NOW + timedelta(days=2), created_at=_NOW - timedelta(days=2),
                   comment_count=12, favorite_count=4),
        ]

    @pytest.mark.parametrize(
        "option, expected",
        [
            (SortOption.START_DATETIME_ASC, [1, 3, 2]),
            (SortOption.START_DATETIME_DESC, [2, 3, 1]),
            (SortOption.CREATED_AT_ASC, [1, 3, 2]),
            (SortOption.CREATED_AT_DESC, [2, 3, 1]),
            (SortOption.COMMENTS_DESC, [3, 1, 2]),
            (SortOption.FAVORITES_DESC, [2, 3, 1]),
        ],
    )
    def test_orders(self, events: list[EventRecord], option: SortOption, expected: list) -> None:
        assert _ids(sort_events(events, option)) == expected

    def test_missing_created_at_falls_back_to_start(self) -> None:
        events = [
            _event(1, _NOW + timedelta(days=1), created_at=_NOW),
            _event(2, _NOW - timedelta(days=1)),
        ]
        assert _ids(sort_events(events, SortOption.CREATED_AT_ASC)) == [2, 1]

    @pytest.mark.parametrize(
        "option, params",
        [
            (SortOption.START_DATETIME_ASC, {"sort_by": "start_datetime", "order": "asc"}),
            (SortOption.CREATED_AT_DESC, {"sort_by": "created_at", "order": "desc"}),
            (SortOption.COMMENTS_DESC, {"sort_by": "comments", "order": "desc"}),
            (SortOption.FAVORITES_DESC, {"sort_by": "favorites", "order": "desc"}),
        ],
    )
    def test_api_params(self, option: SortOption, params: dict) -> None:
        assert sort_option_to_api_params(option) == params

    def test_comment_sort_with_nested_counts(self) -> None:
        events = [
            EventRecord.model_validate(
                {"id": 1, "start_datetime": _NOW, "_count": {"comments": 1, "favorites": 8}}
            ),
            EventRecord.model_validate(
                {"id": 2, "start_datetime": _NOW, "_count": {"comments": 9, "favorites": 2}}
            ),
        ]
        assert _ids(sort_events(events, SortOption.COMMENTS_DESC)) == [2, 1]
        assert _ids(sort_events(events, SortOption.FAVORITES_DESC)) == [1, 2]


# ── Labels ───────────────────────────────────────────────────────────────────


class TestLabels:
    def test_every_category_has_label_and_description(self) -> None:
        for category in EventTimeCategory:
            assert category_label(category)
            assert category_description(category)

    def test_ongoing_label(self) -> None:
        assert category_label(EventTimeCategory.ONGOING) == "Live now"
