"""Phase and urgency classification: pure functions of seconds remaining.

Phase thresholds (while counting down to the start):
    remaining >  final_minute            → NORMAL
    final_ten < remaining <= final_minute → FINAL_MINUTE
    0 < remaining <= final_ten           → FINAL_TEN

JUST_FINISHED is never produced here: it is an edge-triggered overlay that
only the state machine can apply (see core.countdown).

Urgency thresholds (independent of phase, used for visual emphasis):
    remaining <= 1 hour (or already past) → CRITICAL
    remaining <= 1 day                    → URGENT
    remaining <= 1 week                   → WARNING
    otherwise                             → NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass

from event_countdown.domain.enums import CountdownPhase, UrgencyLevel
from event_countdown.domain.state import SECONDS_PER_DAY, SECONDS_PER_HOUR

SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY


@dataclass(frozen=True)
class PhaseThresholds:
    """Seconds-remaining boundaries for the countdown phases."""

    final_minute: float = 60.0
    final_ten: float = 10.0

    def __post_init__(self) -> None:
        if not 0 < self.final_ten < self.final_minute:
            raise ValueError("thresholds must satisfy 0 < final_ten < final_minute")


DEFAULT_THRESHOLDS = PhaseThresholds()


def classify_phase(
    seconds_remaining: float,
    thresholds: PhaseThresholds = DEFAULT_THRESHOLDS,
) -> CountdownPhase:
    """Phase of a countdown that has *not* crossed its start yet.

    Non-positive input means the start has been reached; phase semantics no
    longer apply and NORMAL is returned.
    """
    if seconds_remaining <= 0:
        return CountdownPhase.NORMAL
    if seconds_remaining <= thresholds.final_ten:
        return CountdownPhase.FINAL_TEN
    if seconds_remaining <= thresholds.final_minute:
        return CountdownPhase.FINAL_MINUTE
    return CountdownPhase.NORMAL


def classify_urgency(seconds_remaining: float) -> UrgencyLevel:
    """Urgency level for *seconds_remaining* (past targets are critical)."""
    if seconds_remaining <= SECONDS_PER_HOUR:
        return UrgencyLevel.CRITICAL
    if seconds_remaining <= SECONDS_PER_DAY:
        return UrgencyLevel.URGENT
    if seconds_remaining <= SECONDS_PER_WEEK:
        return UrgencyLevel.WARNING
    return UrgencyLevel.NORMAL
