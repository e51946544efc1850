"""Human-readable renderings of countdown states and durations."""

from __future__ import annotations

from datetime import datetime

from event_countdown.domain.enums import CountdownPhase, CountdownStatus, UrgencyLevel
from event_countdown.domain.state import CountdownState, decompose
from event_countdown.domain.timestamps import ensure_aware
from event_countdown.foundation.clock import utc_now


def format_duration(days: int, hours: int, minutes: int, seconds: int) -> str:
    """Format as ``"2d 3h 4m 5s"``, dropping leading zero days/hours.

    Minutes and seconds are always shown.
    """
    if days > 0:
        return f"{days}d {hours}h {minutes}m {seconds}s"
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    return f"{minutes}m {seconds}s"


def format_countdown(state: CountdownState) -> str:
    """Render a state the way a countdown card displays it."""
    parts = format_duration(*state.breakdown)

    if state.status == CountdownStatus.INVALID:
        return "--"
    if state.just_finished:
        return "Started!"
    if state.status == CountdownStatus.ONGOING:
        return f"Live · {parts}"
    if state.status == CountdownStatus.ENDED:
        return f"Ended {parts} ago"

    if state.phase == CountdownPhase.FINAL_TEN:
        return str(state.seconds)
    if state.phase == CountdownPhase.FINAL_MINUTE and state.days == 0 and state.hours == 0:
        return f"{state.minutes}:{state.seconds:02d}"
    return parts


def format_relative_time(target: datetime, now: datetime | None = None) -> str:
    """Coarse "in N days/hours/minutes" string, or ``"ended"`` if past."""
    now = ensure_aware(now or utc_now())
    diff = (ensure_aware(target) - now).total_seconds()
    if diff < 0:
        return "ended"

    days, hours, minutes, _ = decompose(diff)
    if days > 0:
        return f"in {days} day{'s' if days != 1 else ''}"
    if hours > 0:
        return f"in {hours} hour{'s' if hours != 1 else ''}"
    return f"in {minutes} minute{'s' if minutes != 1 else ''}"


_URGENCY_HEADLINES = {
    UrgencyLevel.CRITICAL: "Starting soon",
    UrgencyLevel.URGENT: "Starting shortly",
    UrgencyLevel.WARNING: "This week",
    UrgencyLevel.NORMAL: "Scheduled",
}


def urgency_headline(level: UrgencyLevel) -> str:
    """Caption shown under a normal-phase countdown."""
    return _URGENCY_HEADLINES[level]


def phase_headline(state: CountdownState) -> str | None:
    """Banner text for the final stages, None when no banner applies."""
    if state.phase == CountdownPhase.FINAL_MINUTE:
        return "Less than a minute to go!"
    if state.phase == CountdownPhase.FINAL_TEN:
        return "Final countdown"
    if state.phase == CountdownPhase.JUST_FINISHED:
        return "It's started!"
    return None
