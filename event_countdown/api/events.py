"""REST endpoints for event-list time helpers.

Paths:
    POST /api/events/categorize   bucket events into today/upcoming/ongoing/ended
    POST /api/events/sort         order events by a listing sort option
    GET  /api/urgency             urgency level for a seconds-remaining value

Stateless: nothing here touches the countdown registry.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator

from event_countdown.core.categorize import (
    categorize_events_by_time,
    category_description,
    category_label,
    order_categorized,
    sort_events,
    sort_option_to_api_params,
)
from event_countdown.core.formatting import urgency_headline
from event_countdown.core.phases import classify_urgency
from event_countdown.domain.enums import EventTimeCategory, SortOption
from event_countdown.domain.event import EventRecord
from event_countdown.domain.timestamps import parse_timestamp


class CategorizeRequest(BaseModel):
    events: list[EventRecord] = Field(default_factory=list, max_length=5000)
    now: Optional[datetime] = Field(default=None, description="Evaluation instant (defaults to now)")
    tz: Optional[str] = Field(default=None, description="IANA zone for day boundaries (defaults to host zone)")
    ordered: bool = Field(False, description="Apply the per-tab ordering")

    @field_validator("tz")
    @classmethod
    def tz_must_exist(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {v}") from exc
        return v


class SortRequest(BaseModel):
    events: list[EventRecord] = Field(default_factory=list, max_length=5000)
    option: SortOption = SortOption.START_DATETIME_ASC


def create_events_router() -> APIRouter:
    """Factory for the stateless event helpers."""

    router = APIRouter(prefix="/api", tags=["events"])

    @router.post("/events/categorize")
    async def categorize(body: CategorizeRequest) -> dict[str, Any]:
        now = parse_timestamp(body.now) if body.now is not None else None
        tz = ZoneInfo(body.tz) if body.tz else None

        buckets = categorize_events_by_time(body.events, now=now, tz=tz)
        if body.ordered:
            buckets = order_categorized(buckets)

        return {
            **buckets.model_dump(mode="json"),
            "counts": buckets.counts(),
            "tabs": [
                {
                    "category": c.value,
                    "label": category_label(c),
                    "description": category_description(c),
                }
                for c in EventTimeCategory
            ],
        }

    @router.post("/events/sort")
    async def sort(body: SortRequest) -> dict[str, Any]:
        ordered = sort_events(body.events, body.option)
        return {
            "events": [e.model_dump(mode="json") for e in ordered],
            "api_params": sort_option_to_api_params(body.option),
        }

    @router.get("/urgency")
    async def urgency(seconds: int) -> dict[str, Any]:
        level = classify_urgency(seconds)
        return {"seconds": seconds, "level": level.value, "headline": urgency_headline(level)}

    return router
