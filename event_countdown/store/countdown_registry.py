"""In-memory registry of mounted countdowns with async-safe access.

Design notes:
    - Each session owns its own CountdownMachine and CountdownTicker.  No
      timer, flag, or state record is shared between sessions.
    - An asyncio.Lock guards only the id → session map.  Ticks never take
      the lock; they run inside each session's own task.
    - Unmounting stops the session's ticker, which cancels both its tick
      task and any pending just-finished clear timer.
    - Finish events are handed to an injected FinishNotifier.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from event_countdown.core.countdown import DEFAULT_JUST_FINISHED_WINDOW, CountdownMachine
from event_countdown.core.phases import DEFAULT_THRESHOLDS, PhaseThresholds
from event_countdown.core.ticker import CountdownTicker
from event_countdown.domain.state import CountdownState
from event_countdown.domain.target import CountdownTarget
from event_countdown.foundation.clock import utc_now
from event_countdown.foundation.identifiers import new_id
from event_countdown.services.notifier import FinishNotifier

logger = logging.getLogger(__name__)


class CountdownNotFoundError(Exception):
    """Raised when a countdown id is not mounted."""

    def __init__(self, countdown_id: UUID) -> None:
        self.countdown_id = countdown_id
        super().__init__(f"Countdown {countdown_id} is not mounted")


class RegistryFullError(Exception):
    """Raised when mounting would exceed the configured session cap."""


class CountdownSession:
    """One mounted countdown: target, machine, ticker and stream subscribers."""

    __slots__ = (
        "session_id",
        "label",
        "created_at",
        "machine",
        "ticker",
        "_finish_hook",
        "_subscribers",
    )

    def __init__(
        self,
        target: CountdownTarget,
        label: str = "",
        finish_hook: Optional[Callable[[CountdownSession], None]] = None,
        interval: float = 1.0,
        thresholds: PhaseThresholds = DEFAULT_THRESHOLDS,
        just_finished_window: float = DEFAULT_JUST_FINISHED_WINDOW,
    ) -> None:
        self.session_id: UUID = new_id()
        self.label = label
        self.created_at: datetime = utc_now()
        self._finish_hook = finish_hook
        self._subscribers: set[asyncio.Queue] = set()
        self.machine = CountdownMachine(
            target.start_time,
            target.end_time,
            on_finish=self._handle_finish,
            thresholds=thresholds,
            just_finished_window=just_finished_window,
        )
        self.ticker = CountdownTicker(self.machine, interval=interval, on_update=self._fan_out)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def state(self) -> CountdownState:
        return self.machine.state

    @property
    def target(self) -> CountdownTarget:
        target = self.machine.target
        assert target is not None
        return target

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ── Streaming ────────────────────────────────────────────────────────

    def subscribe(self) -> asyncio.Queue:
        """Queue receiving every published state; only the latest is kept."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    async def _fan_out(self, state: CountdownState) -> None:
        for queue in list(self._subscribers):
            if queue.full():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(state)

    def _handle_finish(self) -> None:
        if self._finish_hook is not None:
            self._finish_hook(self)

    # ── Summary ──────────────────────────────────────────────────────────

    def summary(self) -> dict[str, Any]:
        target = self.target
        return {
            "countdown_id": str(self.session_id),
            "label": self.label,
            "start_time": target.start_time.isoformat(),
            "end_time": target.end_time.isoformat() if target.end_time else None,
            "created_at": self.created_at.isoformat(),
            "state": self.state.model_dump(mode="json"),
        }

    def __repr__(self) -> str:
        return f"CountdownSession(id={self.session_id!s}, label={self.label!r}, {self.machine!r})"


class CountdownRegistry:
    """Async-safe, in-memory arena of independent countdown sessions.

    Args:
        notifier: Receives a notification for every start-time crossing.
        interval: Tick interval for every session.
        thresholds: Phase boundaries for every session.
        just_finished_window: Seconds the just-finished flag stays up.
        max_sessions: Upper bound on simultaneously mounted sessions.
    """

    def __init__(
        self,
        notifier: FinishNotifier | None = None,
        interval: float = 1.0,
        thresholds: PhaseThresholds = DEFAULT_THRESHOLDS,
        just_finished_window: float = DEFAULT_JUST_FINISHED_WINDOW,
        max_sessions: int = 1000,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")

        self._notifier = notifier
        self._interval = interval
        self._thresholds = thresholds
        self._window = just_finished_window
        self._max_sessions = max_sessions
        self._lock = asyncio.Lock()
        self._sessions: dict[UUID, CountdownSession] = {}

    # ── Public API ───────────────────────────────────────────────────────

    async def mount(self, target: CountdownTarget, label: str = "") -> CountdownSession:
        """Create a session for *target* and start ticking it."""
        async with self._lock:
            if len(self._sessions) >= self._max_sessions:
                raise RegistryFullError(
                    f"Cannot mount more than {self._max_sessions} countdowns"
                )
            session = CountdownSession(
                target,
                label=label,
                finish_hook=self._dispatch_finish,
                interval=self._interval,
                thresholds=self._thresholds,
                just_finished_window=self._window,
            )
            self._sessions[session.session_id] = session

        await session.ticker.start()
        logger.info(
            "Mounted countdown %s (%s) → %s",
            session.session_id,
            label or "unlabelled",
            target.start_time.isoformat(),
        )
        return session

    async def get(self, countdown_id: UUID) -> CountdownSession:
        async with self._lock:
            session = self._sessions.get(countdown_id)
        if session is None:
            raise CountdownNotFoundError(countdown_id)
        return session

    async def reset(self, countdown_id: UUID, target: CountdownTarget) -> CountdownSession:
        """Point an existing session at a new target, resetting its state."""
        session = await self.get(countdown_id)
        session.ticker.reset(target.start_time, target.end_time)
        logger.info("Reset countdown %s → %s", countdown_id, target.start_time.isoformat())
        return session

    async def unmount(self, countdown_id: UUID) -> None:
        """Stop and forget a session."""
        async with self._lock:
            session = self._sessions.pop(countdown_id, None)
        if session is None:
            raise CountdownNotFoundError(countdown_id)
        await session.ticker.stop()
        logger.info("Unmounted countdown %s", countdown_id)

    async def active_count(self) -> int:
        async with self._lock:
            return len(self._sessions)

    async def snapshot(self) -> list[dict[str, Any]]:
        """Summaries of every mounted session, soonest start first."""
        async with self._lock:
            sessions = list(self._sessions.values())
        sessions.sort(key=lambda s: s.target.start_time)
        return [s.summary() for s in sessions]

    async def close(self) -> None:
        """Unmount everything (application shutdown)."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.ticker.stop()
        if sessions:
            logger.info("Closed %d countdown(s)", len(sessions))

    # ── Internals ────────────────────────────────────────────────────────

    def _dispatch_finish(self, session: CountdownSession) -> None:
        if self._notifier is None:
            return
        self._notifier.notify(
            str(session.session_id),
            session.label,
            session.target.start_time.isoformat(),
        )
