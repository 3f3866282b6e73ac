"""
Event business logic.

Events are created and moved through their lifecycle by admins, and looked up
by their human-entered code everywhere else. Codes are stored upper-case.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from mint.config import Settings
from mint.events.links import build_sim_admin_url
from mint.events.schemas import CreateEventRequest
from mint.events.state_machine import (
    EVENT_STATES,
    INITIAL_STATES,
    PUBLIC_STATES,
    current_state,
    transition_values,
    validate_transition,
)
from mint.exceptions import Conflict, NotFound, ServiceUnavailable, ValidationFailed
from mint.store import StoreError, SupabaseStore, eq, in_
from mint.store.schema import EVENT_COLUMNS, PUBLIC_EVENT_COLUMNS, columns

logger = structlog.get_logger()


def normalize_code(code: str | None) -> str:
    """Trim and upper-case an event code; None becomes an empty string."""
    return (code or "").strip().upper()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_event_by_code(
    store: SupabaseStore,
    code: str,
    select: tuple[str, ...] = EVENT_COLUMNS,
) -> dict[str, Any] | None:
    """Fetch an event by code (case-insensitive on input), or None."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return await store.select_one("events", columns(select), filters=[eq("code", normalized)])


async def require_event(store: SupabaseStore, code: str) -> dict[str, Any]:
    """Fetch an event by code or raise NotFound."""
    event = await get_event_by_code(store, code)
    if event is None:
        raise NotFound("Event not found")
    return event


async def list_events(store: SupabaseStore) -> list[dict[str, Any]]:
    """All events, newest first."""
    return await store.select("events", columns(EVENT_COLUMNS), order="created_at", desc=True)


async def list_public_events(store: SupabaseStore) -> list[dict[str, Any]]:
    """Events players can see: active, live or paused."""
    return await store.select(
        "events",
        columns(PUBLIC_EVENT_COLUMNS),
        filters=[in_("state", PUBLIC_STATES)],
        order="created_at",
        desc=True,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def create_event(
    store: SupabaseStore,
    settings: Settings,
    body: CreateEventRequest,
    *,
    created_by: str | None = None,
) -> dict[str, Any]:
    """Create an event, filling optional columns with configured defaults."""
    code = normalize_code(body.code)
    name = (body.name or "").strip()
    if not code or not name:
        raise ValidationFailed("code and name are required")

    state = (body.state or "draft").strip().lower()
    if state not in INITIAL_STATES:
        raise ValidationFailed(f"state must be one of: {', '.join(INITIAL_STATES)}")

    sim_url = (body.sim_url or settings.portfolio_sim_url).strip()
    if not sim_url:
        raise ValidationFailed("simUrl is required when PORTFOLIO_SIM_URL is not configured")

    if body.starts_at and body.ends_at and body.ends_at <= body.starts_at:
        raise ValidationFailed("endsAt must be after startsAt")

    if await get_event_by_code(store, code, select=("id",)) is not None:
        raise Conflict(f"Event code {code} already exists")

    row = {
        "code": code,
        "name": name,
        "sim_url": sim_url,
        "sim_type": (body.sim_type or settings.default_sim_type).strip(),
        "scenario_id": (body.scenario_id or settings.default_scenario_id).strip(),
        "duration_minutes": body.duration_minutes or settings.default_duration_minutes,
        "state": state,
        "starts_at": _iso(body.starts_at),
        "ends_at": _iso(body.ends_at),
    }
    try:
        event = await store.insert("events", row)
    except StoreError as exc:
        if exc.is_unique_violation:
            raise Conflict(f"Event code {code} already exists") from exc
        raise

    logger.info("event_created", event_id=event.get("id"), code=code, state=state, created_by=created_by)
    return event


async def change_event_state(
    store: SupabaseStore,
    code: str,
    target: str | None,
    *,
    changed_by: str | None = None,
) -> dict[str, Any]:
    """Move an event to ``target`` if the lifecycle allows it."""
    target_state = (target or "").strip().lower()
    if target_state not in EVENT_STATES:
        raise ValidationFailed(f"state must be one of: {', '.join(EVENT_STATES)}")

    event = await require_event(store, code)
    current = current_state(event)
    try:
        validate_transition(current, target_state)
    except ValueError as exc:
        raise Conflict(str(exc)) from exc

    values = transition_values(event, target_state, datetime.now(timezone.utc))
    rows = await store.update("events", values, filters=[eq("id", event["id"])])
    updated = rows[0] if rows else {**event, **values}

    logger.info(
        "event_state_changed",
        event_id=event["id"],
        code=event.get("code"),
        from_state=current,
        to_state=target_state,
        changed_by=changed_by,
    )
    return updated


async def sim_admin_link(store: SupabaseStore, settings: Settings, code: str | None) -> str:
    """Build the simulation admin console URL for an event."""
    if not normalize_code(code):
        raise ValidationFailed("eventCode is required")
    if not settings.sim_admin_token:
        raise ServiceUnavailable("SIM_ADMIN_TOKEN is not configured")

    event = await require_event(store, code or "")
    if not event.get("sim_url"):
        raise Conflict("Event has no simulation URL")
    return build_sim_admin_url(
        event["sim_url"],
        event_code=event["code"],
        scenario_id=event.get("scenario_id"),
        token=settings.sim_admin_token,
    )
