"""Broadcasts "countdown started" notifications to connected UI clients.

This is the toast dispatcher that countdown sessions call from their
``on_finish`` hook.  Dispatch is fire-and-forget: notify() schedules the
broadcast on the running loop and returns immediately, so a slow or
broken client can never hold up a tick.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from event_countdown.foundation.clock import utc_now

logger = logging.getLogger(__name__)


class FinishNotifier:
    """Tracks notification WebSocket clients and broadcasts finish events."""

    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        self.sent_count: int = 0

    # ── Client management ────────────────────────────────────────────

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        async with self._lock:
            self._clients.add(ws)
        logger.info("Notification client connected (%d total)", len(self._clients))

    async def disconnect(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(ws)
        logger.info("Notification client disconnected (%d remaining)", len(self._clients))

    @property
    def client_count(self) -> int:
        return len(self._clients)

    # ── Dispatch ─────────────────────────────────────────────────────

    def notify(self, countdown_id: str, label: str, start_time: str) -> None:
        """Schedule a ``countdown_started`` broadcast.  Never blocks or raises."""
        payload = {
            "type": "countdown_started",
            "countdown_id": countdown_id,
            "label": label,
            "start_time": start_time,
            "fired_at": utc_now().isoformat(),
        }
        logger.info("Countdown %s (%s) started", countdown_id, label or "unlabelled")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, dropping notification for %s", countdown_id)
            return
        task = loop.create_task(self.broadcast(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def broadcast(self, payload: dict[str, Any]) -> None:
        """Send payload to all connected clients, pruning dead ones."""
        dead: set[WebSocket] = set()

        async with self._lock:
            clients = set(self._clients)

        for ws in clients:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.add(ws)

        self.sent_count += 1

        if dead:
            async with self._lock:
                self._clients -= dead
            logger.info("Removed %d dead notification client(s)", len(dead))

    async def drain(self) -> None:
        """Wait for every scheduled broadcast to complete."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
