"""REST + WebSocket endpoints for mounted countdowns.

Paths:
    POST   /api/countdowns              mount a countdown
    GET    /api/countdowns              list mounted countdowns
    GET    /api/countdowns/{id}         current state
    PUT    /api/countdowns/{id}         reset to a new target
    DELETE /api/countdowns/{id}         unmount
    POST   /api/countdowns/preview      one-shot state, nothing mounted
    WS     /ws/countdowns/{id}          state pushed on every tick

Targets are validated at the boundary; malformed timestamps never reach
the registry.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, WebSocket, WebSocketDisconnect
from pydantic import Field

from event_countdown.core.countdown import CountdownMachine
from event_countdown.core.formatting import format_countdown, phase_headline, urgency_headline
from event_countdown.core.phases import PhaseThresholds, classify_urgency
from event_countdown.domain.state import CountdownState
from event_countdown.domain.target import CountdownTarget
from event_countdown.domain.timestamps import parse_timestamp
from event_countdown.store.countdown_registry import (
    CountdownNotFoundError,
    CountdownSession,
    CountdownRegistry,
    RegistryFullError,
)

logger = logging.getLogger(__name__)


class MountRequest(CountdownTarget):
    """A target plus a display label."""

    label: str = Field("", max_length=256, description="Shown in finish notifications")


class PreviewRequest(CountdownTarget):
    """A target and the instant to evaluate it at."""

    now: Optional[datetime] = Field(default=None, description="Evaluation instant (defaults to now)")


def create_countdown_router(
    registry: CountdownRegistry,
    thresholds: PhaseThresholds,
    just_finished_window: float,
) -> APIRouter:
    """Factory that wires countdown endpoints to a concrete registry."""

    router = APIRouter(tags=["countdowns"])

    @router.post("/api/countdowns", status_code=201)
    async def mount_countdown(body: MountRequest) -> dict[str, Any]:
        target = CountdownTarget(start_time=body.start_time, end_time=body.end_time)
        try:
            session = await registry.mount(target, label=body.label)
        except RegistryFullError as exc:
            raise HTTPException(status_code=429, detail=str(exc)) from exc
        return session.summary()

    @router.get("/api/countdowns")
    async def list_countdowns() -> dict[str, Any]:
        countdowns = await registry.snapshot()
        return {"countdowns": countdowns, "count": len(countdowns)}

    @router.post("/api/countdowns/preview")
    async def preview_countdown(body: PreviewRequest) -> dict[str, Any]:
        """Evaluate a target once without mounting it."""
        now = parse_timestamp(body.now) if body.now is not None else None
        machine = CountdownMachine(
            body.start_time,
            body.end_time,
            thresholds=thresholds,
            just_finished_window=just_finished_window,
            now=now,
        )
        return _render(machine.state)

    @router.get("/api/countdowns/{countdown_id}")
    async def get_countdown(countdown_id: UUID) -> dict[str, Any]:
        session = await _session_or_404(countdown_id)
        result = session.summary()
        result["display"] = _render(session.state)
        return result

    @router.put("/api/countdowns/{countdown_id}")
    async def reset_countdown(countdown_id: UUID, body: CountdownTarget) -> dict[str, Any]:
        try:
            session = await registry.reset(countdown_id, body)
        except CountdownNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return session.summary()

    @router.delete("/api/countdowns/{countdown_id}", status_code=204)
    async def unmount_countdown(countdown_id: UUID) -> Response:
        try:
            await registry.unmount(countdown_id)
        except CountdownNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return Response(status_code=204)

    @router.websocket("/ws/countdowns/{countdown_id}")
    async def stream_countdown(websocket: WebSocket, countdown_id: UUID) -> None:
        try:
            session = await registry.get(countdown_id)
        except CountdownNotFoundError:
            await websocket.close(code=4404)
            return

        await websocket.accept()
        queue = session.subscribe()
        logger.info("Stream client attached to countdown %s", countdown_id)

        async def pump() -> None:
            await websocket.send_json(session.state.model_dump(mode="json"))
            while True:
                state = await queue.get()
                await websocket.send_json(state.model_dump(mode="json"))

        sender = asyncio.create_task(pump())
        try:
            # The client never sends anything useful; reading only detects the close.
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Stream client detached from countdown %s", countdown_id)
        finally:
            session.unsubscribe(queue)
            await _stop_sender(sender, countdown_id)

    async def _session_or_404(countdown_id: UUID) -> CountdownSession:
        try:
            return await registry.get(countdown_id)
        except CountdownNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return router


def _render(state: CountdownState) -> dict[str, Any]:
    """State plus the strings a countdown card shows."""
    urgency = classify_urgency(state.total_seconds_remaining if not state.is_expired else 0)
    return {
        "state": state.model_dump(mode="json"),
        "text": format_countdown(state),
        "headline": phase_headline(state) or urgency_headline(urgency),
        "urgency": urgency.value,
    }


async def _stop_sender(sender: asyncio.Task, countdown_id: UUID) -> None:
    """Cancel a stream's sender task and collect its outcome."""
    sender.cancel()
    try:
        await sender
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.warning("Stream sender for countdown %s failed", countdown_id, exc_info=True)
