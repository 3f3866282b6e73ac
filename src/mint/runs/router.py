"""Run endpoints: join an event, submit results, read runs back."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from mint.auth.dependencies import get_bearer_token
from mint.auth.service import resolve_user_id
from mint.dependencies import get_store
from mint.exceptions import Unauthorized
from mint.runs import service
from mint.runs.schemas import (
    CreateRunRequest,
    CreateRunResponse,
    OkResponse,
    RunDetail,
    RunDetailResponse,
    RunListResponse,
    SubmitResultsRequest,
)
from mint.store import SupabaseStore

router = APIRouter(prefix="/api/runs", tags=["Runs"])


@router.post("/create", response_model=CreateRunResponse)
async def create_run(
    body: CreateRunRequest,
    x_user_id: str | None = Header(None, alias="x-user-id"),
    token: str | None = Depends(get_bearer_token),
    store: SupabaseStore = Depends(get_store),
) -> CreateRunResponse:
    """Join an event by code; returns the run id and the simulation launch URL."""
    explicit = str(body.user_id) if body.user_id is not None else None
    user_id = await resolve_user_id(store, explicit=explicit, header=x_user_id, access_token=token)
    return CreateRunResponse(**await service.create_run(store, body.event_code, user_id))


@router.post("/submit", response_model=OkResponse)
async def submit_results(
    body: SubmitResultsRequest,
    store: SupabaseStore = Depends(get_store),
) -> OkResponse:
    """Record the terminal metrics of a run. A run accepts results once."""
    await service.submit_results(store, body)
    return OkResponse(ok=True)


@router.get("", response_model=RunListResponse)
async def my_runs(
    x_user_id: str | None = Header(None, alias="x-user-id"),
    token: str | None = Depends(get_bearer_token),
    store: SupabaseStore = Depends(get_store),
) -> RunListResponse:
    """Run history of the calling user."""
    user_id = await resolve_user_id(store, explicit=None, header=x_user_id, access_token=token)
    if user_id is None:
        raise Unauthorized("unauthorized")
    runs = await service.list_user_runs(store, user_id)
    return RunListResponse(runs=[RunDetail.model_validate(r) for r in runs])


@router.get("/{run_id}", response_model=RunDetailResponse)
async def run_detail(run_id: str, store: SupabaseStore = Depends(get_store)) -> RunDetailResponse:
    run = await service.get_run_detail(store, run_id)
    return RunDetailResponse(run=RunDetail.model_validate(run))
