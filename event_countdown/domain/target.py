"""CountdownTarget: the immutable input of one countdown instance.

Validated at the boundary so downstream code never has to re-check
timestamp formats.  The engine itself also accepts raw values and degrades
to an ``invalid`` state instead of raising (see core.countdown).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from event_countdown.domain.timestamps import parse_timestamp


class CountdownTarget(BaseModel):
    """Start (and optional end) instant a countdown runs against."""

    start_time: datetime = Field(..., description="When the event starts (UTC-aware)")
    end_time: Optional[datetime] = Field(
        default=None,
        description="When the event ends; None for point-in-time events",
    )

    model_config = {"frozen": True}

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_any_timestamp(cls, v: Any) -> Any:
        if v is None:
            return v
        return parse_timestamp(v)

    @property
    def effective_end(self) -> datetime:
        """End instant, falling back to the start for point-in-time events."""
        return self.end_time if self.end_time is not None else self.start_time
