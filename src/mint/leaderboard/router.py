"""Event leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from mint.dependencies import get_store
from mint.leaderboard.ranking import clamp_limit
from mint.leaderboard.schemas import LeaderboardResponse
from mint.leaderboard.service import get_event_leaderboard
from mint.store import SupabaseStore

router = APIRouter(prefix="/api/events", tags=["Leaderboard"])


@router.get("/{code}/leaderboard", response_model=LeaderboardResponse)
async def event_leaderboard(
    code: str,
    limit: str | None = Query(None, description="Rows to return, clamped to 1..100 (default 20)"),
    store: SupabaseStore = Depends(get_store),
) -> LeaderboardResponse:
    """Ranked finished runs of an event: score DESC, then pnl DESC."""
    data = await get_event_leaderboard(store, code, clamp_limit(limit))
    return LeaderboardResponse.model_validate(data)
