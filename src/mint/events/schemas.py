"""Request and response models for event endpoints.

Request bodies accept the camelCase names the admin console sends, and the
snake_case column names as well.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateEventRequest(_Request):
    code: str | None = None
    name: str | None = None
    sim_url: str | None = Field(None, alias="simUrl")
    sim_type: str | None = Field(None, alias="simType")
    scenario_id: str | None = Field(None, alias="scenarioId")
    duration_minutes: int | None = Field(None, alias="durationMinutes", gt=0)
    state: str | None = None
    starts_at: datetime | None = Field(None, alias="startsAt")
    ends_at: datetime | None = Field(None, alias="endsAt")


class UpdateEventStateRequest(_Request):
    state: str | None = None


class SimAdminLinkRequest(_Request):
    event_code: str | None = Field(None, alias="eventCode")


class EventRow(BaseModel):
    """An ``events`` row as stored. Timestamps are passed through as the store renders them."""

    model_config = ConfigDict(extra="ignore")

    id: str
    code: str
    name: str
    sim_url: str | None = None
    sim_type: str | None = None
    scenario_id: str | None = None
    duration_minutes: int | None = None
    state: str | None = None
    created_at: str | None = None
    starts_at: str | None = None
    ends_at: str | None = None
    started_at: str | None = None
    ended_at: str | None = None


class PublicEventRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    code: str
    name: str
    sim_type: str | None = None
    scenario_id: str | None = None
    duration_minutes: int | None = None
    state: str | None = None
    starts_at: str | None = None
    ends_at: str | None = None


class EventResponse(BaseModel):
    event: EventRow


class EventListResponse(BaseModel):
    events: list[EventRow]


class PublicEventListResponse(BaseModel):
    events: list[PublicEventRow]


class SimAdminLinkResponse(BaseModel):
    adminUrl: str  # noqa: N815


def to_event_row(row: dict[str, Any]) -> EventRow:
    """Coerce a store row (ids may arrive as ints) into an EventRow."""
    data = dict(row)
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return EventRow.model_validate(data)
