"""Event endpoints: admin lifecycle management and the public event list."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mint.auth.dependencies import require_admin
from mint.auth.service import AuthUser
from mint.config import Settings, get_settings
from mint.dependencies import get_store
from mint.events import service
from mint.events.schemas import (
    CreateEventRequest,
    EventListResponse,
    EventResponse,
    PublicEventListResponse,
    PublicEventRow,
    SimAdminLinkRequest,
    SimAdminLinkResponse,
    UpdateEventStateRequest,
    to_event_row,
)
from mint.store import SupabaseStore

admin_router = APIRouter(prefix="/api/admin", tags=["Admin"])
router = APIRouter(prefix="/api/events", tags=["Events"])


# ── Admin ──


@admin_router.get("/events", response_model=EventListResponse)
async def admin_list_events(
    _admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
) -> EventListResponse:
    """Every event, newest first."""
    rows = await service.list_events(store)
    return EventListResponse(events=[to_event_row(r) for r in rows])


async def _create_event(
    body: CreateEventRequest,
    admin: AuthUser,
    store: SupabaseStore,
    settings: Settings,
) -> EventResponse:
    event = await service.create_event(store, settings, body, created_by=admin.email)
    return EventResponse(event=to_event_row(event))


@admin_router.post("/events", response_model=EventResponse, status_code=201)
async def admin_create_event(
    body: CreateEventRequest,
    admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> EventResponse:
    """Create an event in the draft or active state."""
    return await _create_event(body, admin, store, settings)


@router.post("/create", response_model=EventResponse, status_code=201)
async def create_event_legacy(
    body: CreateEventRequest,
    admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> EventResponse:
    """Older admin console route for event creation."""
    return await _create_event(body, admin, store, settings)


@admin_router.post("/events/{code}/state", response_model=EventResponse)
async def admin_change_event_state(
    code: str,
    body: UpdateEventStateRequest,
    admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
) -> EventResponse:
    """Move an event along its lifecycle."""
    event = await service.change_event_state(store, code, body.state, changed_by=admin.email)
    return EventResponse(event=to_event_row(event))


@admin_router.get("/events/{code}/sim-admin-link", response_model=SimAdminLinkResponse)
async def admin_sim_link_for_event(
    code: str,
    _admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SimAdminLinkResponse:
    """Simulation admin console URL for an event."""
    url = await service.sim_admin_link(store, settings, code)
    return SimAdminLinkResponse(adminUrl=url)


@admin_router.post("/sim-admin-link", response_model=SimAdminLinkResponse)
async def admin_sim_link(
    body: SimAdminLinkRequest,
    _admin: AuthUser = Depends(require_admin),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SimAdminLinkResponse:
    url = await service.sim_admin_link(store, settings, body.event_code)
    return SimAdminLinkResponse(adminUrl=url)


# ── Public ──


@router.get("/public", response_model=PublicEventListResponse)
async def public_events(store: SupabaseStore = Depends(get_store)) -> PublicEventListResponse:
    """Events open to players."""
    rows = await service.list_public_events(store)
    return PublicEventListResponse(events=[PublicEventRow.model_validate({**r, "id": str(r["id"])}) for r in rows])
