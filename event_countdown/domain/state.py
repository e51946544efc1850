"""CountdownState: the derived, per-tick view of a countdown.

This is a pure data structure.  It is recomputed from absolute timestamps
on every tick and never accumulated, so two records built from the same
``(target, now)`` are identical apart from the transient just-finished
overlay.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, Field

from event_countdown.domain.enums import CountdownPhase, CountdownStatus

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


class TimeBreakdown(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int


def decompose(total_seconds: float) -> TimeBreakdown:
    """Split a duration into days/hours/minutes/seconds, clamping at zero."""
    total = max(0, int(total_seconds))
    return TimeBreakdown(
        days=total // SECONDS_PER_DAY,
        hours=(total % SECONDS_PER_DAY) // SECONDS_PER_HOUR,
        minutes=(total % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE,
        seconds=total % SECONDS_PER_MINUTE,
    )


class CountdownState(BaseModel):
    """Immutable snapshot of a countdown at one instant.

    While scheduled, the time fields count down to the start.  Once the
    start has passed they count up: from the start while ongoing or when
    there is no end, from the end once an end time has passed.
    """

    days: int = Field(0, ge=0)
    hours: int = Field(0, ge=0)
    minutes: int = Field(0, ge=0)
    seconds: int = Field(0, ge=0)
    is_expired: bool = Field(False, description="True once the start time has passed")
    total_seconds_remaining: int = Field(0, ge=0, description="Whole seconds until start")
    phase: CountdownPhase = CountdownPhase.NORMAL
    just_finished: bool = Field(False, description="Inside the window right after crossing")
    is_running: bool = Field(False, description="True while start <= now < end")
    elapsed_seconds: int = Field(0, ge=0, description="Whole seconds of the count-up duration")
    status: CountdownStatus = CountdownStatus.SCHEDULED

    model_config = {"frozen": True}

    @classmethod
    def invalid(cls) -> CountdownState:
        """Zeroed record for targets whose timestamps could not be parsed."""
        return cls(status=CountdownStatus.INVALID)

    @property
    def breakdown(self) -> TimeBreakdown:
        return TimeBreakdown(self.days, self.hours, self.minutes, self.seconds)
