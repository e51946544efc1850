"""Controlled enumerations for the event-countdown domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class CountdownPhase(str, Enum):
    """Urgency stage of a countdown approaching its start time."""

    NORMAL = "normal"
    FINAL_MINUTE = "final_minute"
    FINAL_TEN = "final_ten"
    JUST_FINISHED = "just_finished"


class CountdownStatus(str, Enum):
    """Which derivation produced a CountdownState.  Exactly one holds."""

    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    ENDED = "ended"
    INVALID = "invalid"


class UrgencyLevel(str, Enum):
    """Visual-emphasis classification by seconds remaining."""

    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    CRITICAL = "critical"


class EventTimeCategory(str, Enum):
    """Tab bucket an event belongs to in a listing."""

    TODAY = "today"
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"


class SortOption(str, Enum):
    """Orderings offered by the event list."""

    START_DATETIME_ASC = "start_datetime_asc"
    START_DATETIME_DESC = "start_datetime_desc"
    CREATED_AT_ASC = "created_at_asc"
    CREATED_AT_DESC = "created_at_desc"
    COMMENTS_DESC = "comments_desc"
    FAVORITES_DESC = "favorites_desc"
