"""Event time categorisation: bucket a listing into today/upcoming/ongoing/ended.

Rules, evaluated in order for each event with
``effective_end = end_datetime or start_datetime``:
    effective_end < now                           → ENDED
    start <= now < effective_end                  → ONGOING
    start_of_today <= start < start_of_tomorrow   → TODAY
    otherwise                                     → UPCOMING

Day boundaries are local calendar midnights.  categorize_events_by_time()
is a partition: every input event lands in exactly one bucket, and input
order is preserved inside each bucket.  Ordering is a separate concern,
see order_categorized() and sort_events().
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable

from pydantic import BaseModel, Field

from event_countdown.domain.enums import EventTimeCategory, SortOption
from event_countdown.domain.event import EventRecord
from event_countdown.domain.timestamps import ensure_aware
from event_countdown.foundation.clock import local_tz, utc_now


class CategorizedEvents(BaseModel):
    """Four disjoint buckets of events."""

    today: list[EventRecord] = Field(default_factory=list, description="Starting later today")
    upcoming: list[EventRecord] = Field(default_factory=list, description="Starting tomorrow or later")
    ongoing: list[EventRecord] = Field(default_factory=list, description="Currently running")
    ended: list[EventRecord] = Field(default_factory=list, description="Already over")

    def bucket(self, category: EventTimeCategory) -> list[EventRecord]:
        return getattr(self, category.value)

    def counts(self) -> dict[str, int]:
        return {c.value: len(self.bucket(c)) for c in EventTimeCategory}

    @property
    def total(self) -> int:
        return sum(self.counts().values())


# ── Day boundaries ───────────────────────────────────────────────────────────


def _midnight(d: date, tz: tzinfo) -> datetime:
    return datetime.combine(d, time(0, 0, 0), tzinfo=tz)


def day_bounds(now: datetime, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Local midnight of *now*'s calendar day and of the following day."""
    tz = tz or local_tz()
    today = ensure_aware(now).astimezone(tz).date()
    return _midnight(today, tz), _midnight(today + timedelta(days=1), tz)


# ── Categorisation ───────────────────────────────────────────────────────────


def categorize_event(
    event: EventRecord,
    now: datetime,
    start_of_today: datetime,
    start_of_tomorrow: datetime,
) -> EventTimeCategory:
    """Bucket for a single event given precomputed day boundaries."""
    start = event.start_datetime
    end = event.effective_end

    if end < now:
        return EventTimeCategory.ENDED
    if start <= now < end:
        return EventTimeCategory.ONGOING
    if start_of_today <= start < start_of_tomorrow:
        return EventTimeCategory.TODAY
    return EventTimeCategory.UPCOMING


def categorize_events_by_time(
    events: Iterable[EventRecord],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> CategorizedEvents:
    """Partition *events* into today/upcoming/ongoing/ended buckets."""
    now = ensure_aware(now or utc_now())
    start_of_today, start_of_tomorrow = day_bounds(now, tz)

    result = CategorizedEvents()
    for event in events:
        category = categorize_event(event, now, start_of_today, start_of_tomorrow)
        result.bucket(category).append(event)
    return result


# ── Ordering ─────────────────────────────────────────────────────────────────


def _end_sort_key(event: EventRecord) -> tuple[bool, datetime]:
    return event.end_datetime is None, event.effective_end


def order_categorized(categorized: CategorizedEvents) -> CategorizedEvents:
    """Apply the listing's per-tab ordering.

    today / upcoming: soonest start first.
    ongoing: soonest end first, events without an end last.
    ended: most recently ended first.
    """
    return CategorizedEvents(
        today=sorted(categorized.today, key=lambda e: e.start_datetime),
        upcoming=sorted(categorized.upcoming, key=lambda e: e.start_datetime),
        ongoing=sorted(categorized.ongoing, key=_end_sort_key),
        ended=sorted(categorized.ended, key=lambda e: e.effective_end, reverse=True),
    )


def sort_events(events: Iterable[EventRecord], option: SortOption) -> list[EventRecord]:
    """Return a new list of *events* ordered by *option*.

    Events without ``created_at`` sort as if created at their start time.
    """
    items = list(events)

    if option == SortOption.START_DATETIME_ASC:
        return sorted(items, key=lambda e: e.start_datetime)
    if option == SortOption.START_DATETIME_DESC:
        return sorted(items, key=lambda e: e.start_datetime, reverse=True)
    if option == SortOption.CREATED_AT_ASC:
        return sorted(items, key=lambda e: e.created_at or e.start_datetime)
    if option == SortOption.CREATED_AT_DESC:
        return sorted(items, key=lambda e: e.created_at or e.start_datetime, reverse=True)
    if option == SortOption.COMMENTS_DESC:
        return sorted(items, key=lambda e: e.comment_count, reverse=True)
    if option == SortOption.FAVORITES_DESC:
        return sorted(items, key=lambda e: e.favorite_count, reverse=True)
    return items


def sort_option_to_api_params(option: SortOption) -> dict[str, str]:
    """Translate a sort option into the event API's ``sort_by``/``order`` query."""
    field, _, order = option.value.rpartition("_")
    return {"sort_by": field, "order": order}


# ── Labels ───────────────────────────────────────────────────────────────────

_LABELS = {
    EventTimeCategory.TODAY: "Today",
    EventTimeCategory.UPCOMING: "Upcoming",
    EventTimeCategory.ONGOING: "Live now",
    EventTimeCategory.ENDED: "Ended",
}

_DESCRIPTIONS = {
    EventTimeCategory.TODAY: "Events starting later today",
    EventTimeCategory.UPCOMING: "Events starting tomorrow or later",
    EventTimeCategory.ONGOING: "Events currently in progress",
    EventTimeCategory.ENDED: "Events that have finished",
}


def category_label(category: EventTimeCategory) -> str:
    return _LABELS[category]


def category_description(category: EventTimeCategory) -> str:
    return _DESCRIPTIONS[category]
