"""Request and response models for run endpoints.

Request fields are typed loosely on purpose: the service validates them so
that a non-numeric score is reported as a 400 with a readable message rather
than coerced.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mint.events.schemas import EventRow


class CreateRunRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_code: Any = Field(None, alias="eventCode")
    user_id: Any = Field(None, alias="userId")


class SubmitResultsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    run_id: Any = Field(None, alias="runId")
    score: Any = None
    pnl: Any = None
    sharpe: Any = None
    max_drawdown: Any = None
    win_rate: Any = None
    extra: Any = None


class CreateRunResponse(BaseModel):
    runId: str  # noqa: N815
    simUrl: str  # noqa: N815


class OkResponse(BaseModel):
    ok: bool = True


class RunResultRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: float | None = None
    pnl: float | None = None
    sharpe: float | None = None
    max_drawdown: float | None = None
    win_rate: float | None = None
    extra: Any = None


class RunDetail(BaseModel):
    id: str
    event_id: str | None = None
    user_id: str | None = None
    created_at: str | None = None
    finished_at: str | None = None
    event: EventRow | None = None
    result: RunResultRow | None = None


class RunDetailResponse(BaseModel):
    run: RunDetail


class RunListResponse(BaseModel):
    runs: list[RunDetail]
