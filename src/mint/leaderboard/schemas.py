"""Pydantic response models for the event leaderboard.

Field names match what the multiplayer event page reads.
"""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEvent(BaseModel):
    code: str
    name: str


class LeaderboardRow(BaseModel):
    rank: int
    runId: str  # noqa: N815
    createdAt: str | None = None  # noqa: N815
    trader: str
    score: float | None = None
    pnl: float | None = None
    sharpe: float | None = None
    max_drawdown: float | None = None
    win_rate: float | None = None


class LeaderboardResponse(BaseModel):
    event: LeaderboardEvent
    rows: list[LeaderboardRow]
