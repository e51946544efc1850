"""Asyncio driver for a single CountdownMachine.

Each ticker owns exactly two timers:
    - one recurring task that ticks the machine every ``interval`` seconds
    - at most one ``loop.call_later`` handle that closes the just-finished
      window when it is due

Both are cancelled by stop() and by reset().  Nothing is shared between
tickers; a grid of countdowns is simply many independent tickers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from event_countdown.core.countdown import CountdownMachine
from event_countdown.domain.state import CountdownState
from event_countdown.domain.timestamps import TimestampInput
from event_countdown.foundation.clock import utc_now

logger = logging.getLogger(__name__)

StateListener = Callable[[CountdownState], Awaitable[None]]


class CountdownTicker:
    """Ticks a machine once per interval and publishes each new state.

    Args:
        machine: The state machine to drive.
        interval: Seconds between ticks.
        on_update: Async callback receiving every published state.
    """

    def __init__(
        self,
        machine: CountdownMachine,
        interval: float = 1.0,
        on_update: Optional[StateListener] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.machine = machine
        self.interval = interval
        self.on_update = on_update
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._clear_handle: Optional[asyncio.TimerHandle] = None
        self._emits: set[asyncio.Task] = set()

    @property
    def state(self) -> CountdownState:
        return self.machine.state

    @property
    def clear_pending(self) -> bool:
        """True while a just-finished clear timer is scheduled."""
        return self._clear_handle is not None

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start ticking.  A second call while running is a no-op."""
        if self.running:
            logger.warning("Ticker already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.debug("Ticker started (interval: %.2fs)", self.interval)

    async def stop(self) -> None:
        """Cancel the tick task, the clear timer, and any queued publishes."""
        self._cancel_clear()
        for task in list(self._emits):
            task.cancel()
        self._emits.clear()

        if not self.running:
            return

        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.debug("Ticker stopped")

    def reset(
        self,
        start_time: TimestampInput,
        end_time: TimestampInput | None = None,
    ) -> CountdownState:
        """Replace the target.  Drops any open just-finished window."""
        self._cancel_clear()
        state = self.machine.reset(start_time, end_time)
        self._publish(state)
        return state

    # ── Tick ─────────────────────────────────────────────────────────────

    def tick(self) -> CountdownState:
        """Run one synchronous tick.  Must be called from the event loop."""
        state = self.machine.tick()
        if state.just_finished and self._clear_handle is None:
            self._schedule_clear()
        return state

    async def _tick_loop(self) -> None:
        while self.running:
            try:
                state = self.tick()
                if self.on_update is not None:
                    await self.on_update(state)
            except Exception:
                logger.exception("Error in countdown tick")
            await asyncio.sleep(self.interval)

    # ── Just-finished window ─────────────────────────────────────────────

    def _schedule_clear(self) -> None:
        deadline = self.machine.just_finished_deadline
        if deadline is None:
            return
        delay = max(0.0, (deadline - utc_now()).total_seconds())
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(delay, self._on_clear_due)

    def _on_clear_due(self) -> None:
        self._clear_handle = None
        if self.machine.clear_just_finished():
            self._publish(self.machine.state)

    def _cancel_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _publish(self, state: CountdownState) -> None:
        """Push an out-of-band state (reset, window close) to the listener."""
        if self.on_update is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._emit(state))
        self._emits.add(task)
        task.add_done_callback(self._emits.discard)

    async def _emit(self, state: CountdownState) -> None:
        assert self.on_update is not None
        try:
            await self.on_update(state)
        except Exception:
            logger.exception("Error in countdown update listener")
