"""CountdownMachine: the per-instance countdown state machine.

States (derived from wall-clock ``now`` on every tick):
    SCHEDULED  now < start             count down to start, phase by thresholds
    ONGOING    start <= now < end      count up from start, is_running
    ENDED      now >= end              count up from end
    ENDED      no end, now >= start    count up from start
    INVALID    unparseable target      zeroed, never expires, never fires

Crossing detection is edge-triggered: a tick that observes ``now >= start``
right after a tick that observed ``now < start`` fires ``on_finish`` once
and opens the just-finished window.  The only memory kept between ticks is
the previous "before start" flag and the crossing instant; everything else
is recomputed from absolute timestamps, so missed or late ticks
self-correct.

Construction and reset() compute the state directly, without an edge, so a
countdown mounted at or after its start never reports just_finished and
never fires ``on_finish`` retroactively.

The machine owns no timers.  core.ticker drives it once per second and
schedules the clear of the just-finished window.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from event_countdown.core.phases import DEFAULT_THRESHOLDS, PhaseThresholds, classify_phase
from event_countdown.domain.enums import CountdownPhase, CountdownStatus
from event_countdown.domain.state import CountdownState, decompose
from event_countdown.domain.target import CountdownTarget
from event_countdown.domain.timestamps import (
    InvalidTimestampError,
    ensure_aware,
    TimestampInput,
    parse_timestamp,
)
from event_countdown.foundation.clock import utc_now

logger = logging.getLogger(__name__)

FinishCallback = Callable[[], None]

DEFAULT_JUST_FINISHED_WINDOW = 3.0


class CountdownMachine:
    """Countdown state for one target.  Not shared between instances.

    Args:
        start_time: Target start (ISO string, datetime, or epoch seconds).
        end_time: Optional target end.
        on_finish: Called with no arguments exactly once per crossing.
        thresholds: Phase boundaries.
        just_finished_window: Seconds the just-finished flag stays up.
        now: Instant to compute the initial state at (defaults to utc_now()).
    """

    __slots__ = (
        "_on_finish",
        "_thresholds",
        "_window",
        "_start",
        "_end",
        "_was_before_start",
        "_finished_at",
        "_state",
    )

    def __init__(
        self,
        start_time: TimestampInput,
        end_time: TimestampInput | None = None,
        on_finish: Optional[FinishCallback] = None,
        *,
        thresholds: PhaseThresholds = DEFAULT_THRESHOLDS,
        just_finished_window: float = DEFAULT_JUST_FINISHED_WINDOW,
        now: datetime | None = None,
    ) -> None:
        if just_finished_window <= 0:
            raise ValueError("just_finished_window must be positive")

        self._on_finish = on_finish
        self._thresholds = thresholds
        self._window = timedelta(seconds=just_finished_window)
        self._start: datetime | None = None
        self._end: datetime | None = None
        self._was_before_start = False
        self._finished_at: datetime | None = None
        self._state = CountdownState.invalid()
        self._load(start_time, end_time, ensure_aware(now or utc_now()))

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def state(self) -> CountdownState:
        """State computed by the most recent tick (or construction/reset)."""
        return self._state

    @property
    def is_valid(self) -> bool:
        return self._start is not None

    @property
    def target(self) -> CountdownTarget | None:
        """The parsed target, or None when the input was invalid."""
        if self._start is None:
            return None
        return CountdownTarget(start_time=self._start, end_time=self._end)

    @property
    def just_finished_deadline(self) -> datetime | None:
        """Instant the open just-finished window closes, if one is open."""
        if self._finished_at is None:
            return None
        return self._finished_at + self._window

    # ── Transitions ──────────────────────────────────────────────────────

    def tick(self, now: datetime | None = None) -> CountdownState:
        """Re-derive the state at *now*, detecting a start-time crossing."""
        now = ensure_aware(now or utc_now())
        if self._start is None:
            return self._state

        before_start = now < self._start
        crossed = self._was_before_start and not before_start
        # Updated before notifying so a re-entrant tick cannot fire again.
        self._was_before_start = before_start

        if crossed:
            self._finished_at = now
            self._notify_finish()
        elif self._finished_at is not None and now >= self._finished_at + self._window:
            self._finished_at = None

        self._state = self._derive(now)
        return self._state

    def clear_just_finished(self, now: datetime | None = None) -> bool:
        """Close the just-finished window early.  Returns True if it was open."""
        if self._finished_at is None:
            return False
        self._finished_at = None
        if self._start is not None:
            self._state = self._derive(ensure_aware(now or utc_now()))
        return True

    def reset(
        self,
        start_time: TimestampInput,
        end_time: TimestampInput | None = None,
        now: datetime | None = None,
    ) -> CountdownState:
        """Swap in a new target and recompute from scratch (no edge memory)."""
        self._load(start_time, end_time, ensure_aware(now or utc_now()))
        return self._state

    # ── Internals ────────────────────────────────────────────────────────

    def _load(
        self,
        start_time: TimestampInput,
        end_time: TimestampInput | None,
        now: datetime,
    ) -> None:
        self._finished_at = None
        try:
            self._start = parse_timestamp(start_time)
            self._end = parse_timestamp(end_time) if end_time is not None else None
        except InvalidTimestampError as exc:
            logger.warning("Countdown target rejected, reporting invalid state: %s", exc)
            self._start = None
            self._end = None
            self._was_before_start = False
            self._state = CountdownState.invalid()
            return

        self._was_before_start = now < self._start
        self._state = self._derive(now)

    def _derive(self, now: datetime) -> CountdownState:
        """Pure computation of the state at *now*.  Must have a valid target."""
        assert self._start is not None
        start, end = self._start, self._end

        if now < start:
            remaining = (start - now).total_seconds()
            parts = decompose(remaining)
            return CountdownState(
                days=parts.days,
                hours=parts.hours,
                minutes=parts.minutes,
                seconds=parts.seconds,
                is_expired=False,
                total_seconds_remaining=max(0, int(remaining)),
                phase=classify_phase(remaining, self._thresholds),
                just_finished=False,
                is_running=False,
                elapsed_seconds=0,
                status=CountdownStatus.SCHEDULED,
            )

        if end is not None and now < end:
            status = CountdownStatus.ONGOING
            since = (now - start).total_seconds()
        elif end is not None:
            status = CountdownStatus.ENDED
            since = (now - end).total_seconds()
        else:
            status = CountdownStatus.ENDED
            since = (now - start).total_seconds()

        just_finished = self._finished_at is not None
        parts = decompose(since)
        return CountdownState(
            days=parts.days,
            hours=parts.hours,
            minutes=parts.minutes,
            seconds=parts.seconds,
            is_expired=True,
            total_seconds_remaining=0,
            phase=CountdownPhase.JUST_FINISHED if just_finished else CountdownPhase.NORMAL,
            just_finished=just_finished,
            is_running=status == CountdownStatus.ONGOING,
            elapsed_seconds=max(0, int(since)),
            status=status,
        )

    def _notify_finish(self) -> None:
        if self._on_finish is None:
            return
        try:
            self._on_finish()
        except Exception:
            logger.exception("on_finish callback failed for countdown starting %s", self._start)

    # ── Dunder ───────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return (
            f"CountdownMachine(start={self._start}, end={self._end}, "
            f"status={self._state.status.value}, phase={self._state.phase.value})"
        )
