"""Timezone-aware clock utilities.

Every countdown derives its state from absolute timestamps, never from a
counter.  This module is the single source of "now" so tests can
monkey-patch it trivially.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def local_tz() -> tzinfo:
    """Return the host's local timezone (used for calendar-day boundaries)."""
    tz = datetime.now().astimezone().tzinfo
    assert tz is not None
    return tz
