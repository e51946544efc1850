"""event-countdown — live countdowns and time bucketing for event listings.

This is the application entry point.  It wires the FinishNotifier,
CountdownRegistry, and HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from event_countdown import __version__
from event_countdown.api.countdowns import create_countdown_router
from event_countdown.api.events import create_events_router
from event_countdown.api.notifications import create_notifications_router
from event_countdown.config import settings
from event_countdown.core.phases import PhaseThresholds
from event_countdown.services.notifier import FinishNotifier
from event_countdown.store.countdown_registry import CountdownRegistry

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)

# ── State ────────────────────────────────────────────────────────────────────

thresholds = PhaseThresholds(
    final_minute=settings.final_minute_threshold_seconds,
    final_ten=settings.final_ten_threshold_seconds,
)

notifier = FinishNotifier()

registry = CountdownRegistry(
    notifier=notifier,
    interval=settings.tick_interval_seconds,
    thresholds=thresholds,
    just_finished_window=settings.just_finished_window_seconds,
    max_sessions=settings.max_sessions,
)

# ── App ──────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Stop every ticker so no timer outlives the process loop.
    await registry.close()


app = FastAPI(
    title=settings.app_name,
    description="Live event countdowns, urgency classification and time bucketing",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_countdown_router(
    registry,
    thresholds=thresholds,
    just_finished_window=settings.just_finished_window_seconds,
))
app.include_router(create_events_router())
app.include_router(create_notifications_router(notifier))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "mounted_countdowns": await registry.active_count(),
        "notification_clients": notifier.client_count,
        "notifications_sent": notifier.sent_count,
    }
