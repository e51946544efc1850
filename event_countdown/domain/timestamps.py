"""Timestamp parsing shared by the engine and the API boundary.

Event records arrive from the HTTP layer as ISO-8601 strings (usually with
a trailing ``Z``).  Everything past this module works with UTC-aware
datetimes only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

TimestampInput = Union[str, datetime, int, float]


class InvalidTimestampError(ValueError):
    """Raised when a value cannot be interpreted as a point in time."""

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid timestamp {value!r}: {reason}")


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; leave aware ones untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: TimestampInput) -> datetime:
    """Interpret *value* as a timezone-aware datetime.

    Accepts ``datetime`` objects, ISO-8601 strings and POSIX epoch seconds.
    Naive inputs are treated as UTC.

    Raises:
        InvalidTimestampError: if the value is empty, malformed, or of an
            unsupported type.
    """
    if isinstance(value, bool):
        raise InvalidTimestampError(value, "booleans are not timestamps")

    if isinstance(value, datetime):
        return ensure_aware(value)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidTimestampError(value, "epoch seconds out of range") from exc

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestampError(value, "empty string")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return ensure_aware(datetime.fromisoformat(text))
        except ValueError as exc:
            raise InvalidTimestampError(value, "not ISO-8601") from exc

    raise InvalidTimestampError(value, f"unsupported type {type(value).__name__}")
