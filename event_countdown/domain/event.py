"""EventRecord: the slice of a listed event that time bucketing needs.

Records are supplied by the event API with ISO timestamps.  Only the
fields the categorizer and the list sorter read are modelled; anything
else in the payload is ignored.  Engagement counts arrive either flat
(``comment_count``) or nested under ``_count`` as the event API sends them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from event_countdown.domain.timestamps import parse_timestamp


class EventRecord(BaseModel):
    """A listed event, as consumed by categorisation and sorting."""

    id: int | str = Field(..., description="Event identifier assigned by the event API")
    title: str = Field("", max_length=512)
    start_datetime: datetime = Field(..., description="Event start (UTC-aware)")
    end_datetime: Optional[datetime] = Field(default=None, description="Event end, if any")
    created_at: Optional[datetime] = Field(default=None)
    comment_count: int = Field(0, ge=0)
    favorite_count: int = Field(0, ge=0)

    model_config = {"frozen": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def lift_nested_counts(cls, data: Any) -> Any:
        """Accept the event API's ``_count: {comments, favorites}`` shape."""
        if not isinstance(data, dict):
            return data
        counts = data.get("_count")
        if not isinstance(counts, dict):
            return data
        data = dict(data)
        if data.get("comment_count") is None and counts.get("comments") is not None:
            data["comment_count"] = counts["comments"]
        if data.get("favorite_count") is None and counts.get("favorites") is not None:
            data["favorite_count"] = counts["favorites"]
        return data

    @field_validator("start_datetime", "end_datetime", "created_at", mode="before")
    @classmethod
    def parse_any_timestamp(cls, v: Any) -> Any:
        if v is None:
            return v
        return parse_timestamp(v)

    @property
    def effective_end(self) -> datetime:
        """End instant, falling back to the start for events without an end."""
        return self.end_datetime if self.end_datetime is not None else self.start_datetime
