"""
Async client for the Mint events API.

Mirrors what the web app's fetch helpers do: attach the caller's bearer token
and ``x-user-id``, send JSON, refuse authenticated calls without credentials
before touching the network, and turn error bodies into a readable
``BackendError``.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from mint.auth.schemas import AdminMeResponse
from mint.client.errors import AuthRequiredError, BackendError, ClientConfigError
from mint.events.schemas import (
    CreateEventRequest,
    EventListResponse,
    EventResponse,
    EventRow,
    PublicEventListResponse,
    PublicEventRow,
    SimAdminLinkResponse,
)
from mint.leaderboard.schemas import LeaderboardResponse
from mint.runs.schemas import CreateRunResponse, RunDetail, RunDetailResponse, RunListResponse


class ClientSettings(BaseSettings):
    """Client configuration, read from the same variables the web build uses."""

    model_config = SettingsConfigDict(env_prefix="VITE_", env_file=".env", extra="ignore")

    backend_url: str = ""
    request_timeout_seconds: float = 10.0


@dataclass
class DashboardData:
    events: list[PublicEventRow]
    runs: list[RunDetail]


def parse_response(response: httpx.Response) -> Any:  # noqa: ANN401
    """Decode a backend response or raise BackendError with the best available message."""
    raw = response.text
    has_body = bool(raw.strip())

    if response.is_error:
        if not has_body:
            raise BackendError("Backend request failed", response.status_code)
        try:
            payload = json.loads(raw)
        except ValueError:
            raise BackendError(raw, response.status_code) from None
        message = None
        if isinstance(payload, dict):
            message = payload.get("error") or payload.get("message")
        raise BackendError(str(message) if message else raw, response.status_code)

    if not has_body:
        raise BackendError("Backend response was empty.", response.status_code)
    try:
        return json.loads(raw)
    except ValueError:
        raise BackendError("Backend response was not valid JSON.", response.status_code) from None


class BackendClient:
    """One client per signed-in (or anonymous) caller."""

    def __init__(
        self,
        base_url: str | None,
        *,
        access_token: str | None = None,
        user_id: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base = (base_url or "").strip().rstrip("/")
        if not base:
            raise ClientConfigError("Missing VITE_BACKEND_URL environment variable.")
        self.access_token = access_token
        self.user_id = user_id
        self._http = httpx.AsyncClient(base_url=base, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> BackendClient:
        settings = settings or ClientSettings()
        kwargs.setdefault("timeout", settings.request_timeout_seconds)
        return cls(settings.backend_url, **kwargs)

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token or self.user_id)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self.user_id:
            headers["x-user-id"] = self.user_id
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,  # noqa: ANN401
        params: dict[str, Any] | None = None,
        require_auth: bool = False,
    ) -> Any:  # noqa: ANN401
        """Send one request and return the decoded JSON body."""
        if require_auth and not self.has_credentials:
            raise AuthRequiredError()
        try:
            response = await self._http.request(
                method,
                path,
                headers=self._headers(),
                params=params,
                content=json.dumps(body) if body is not None else None,
            )
        except httpx.HTTPError as exc:
            raise BackendError(f"Could not reach the backend: {exc}") from exc
        return parse_response(response)

    # ── Runs ──

    async def create_run(self, event_code: str, user_id: str | None = None) -> CreateRunResponse:
        data = await self.request(
            "POST",
            "/api/runs/create",
            body={"eventCode": event_code, "userId": user_id or self.user_id},
            require_auth=True,
        )
        return CreateRunResponse.model_validate(data)

    async def submit_results(
        self,
        run_id: str,
        score: float,
        *,
        pnl: float | None = None,
        sharpe: float | None = None,
        max_drawdown: float | None = None,
        win_rate: float | None = None,
        extra: dict[str, Any] | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"runId": run_id, "score": score}
        optional = {"pnl": pnl, "sharpe": sharpe, "max_drawdown": max_drawdown, "win_rate": win_rate, "extra": extra}
        payload.update({k: v for k, v in optional.items() if v is not None})
        data = await self.request("POST", "/api/runs/submit", body=payload)
        return bool(data.get("ok"))

    async def get_run(self, run_id: str) -> RunDetail:
        data = await self.request("GET", f"/api/runs/{quote(run_id, safe='')}")
        return RunDetailResponse.model_validate(data).run

    async def list_my_runs(self) -> list[RunDetail]:
        data = await self.request("GET", "/api/runs", require_auth=True)
        return RunListResponse.model_validate(data).runs

    # ── Events ──

    async def event_leaderboard(self, code: str, limit: int = 20) -> LeaderboardResponse:
        data = await self.request(
            "GET",
            f"/api/events/{quote(code, safe='')}/leaderboard",
            params={"limit": limit},
        )
        return LeaderboardResponse.model_validate(data)

    async def public_events(self) -> list[PublicEventRow]:
        data = await self.request("GET", "/api/events/public")
        return PublicEventListResponse.model_validate(data).events

    async def load_dashboard(self) -> DashboardData:
        """Public events and the caller's run history, fetched concurrently."""
        events, runs = await asyncio.gather(self.public_events(), self.list_my_runs())
        return DashboardData(events=events, runs=runs)

    # ── Admin ──

    async def admin_me(self) -> AdminMeResponse:
        data = await self.request("GET", "/api/admin/me", require_auth=True)
        return AdminMeResponse.model_validate(data)

    async def admin_events(self) -> list[EventRow]:
        data = await self.request("GET", "/api/admin/events", require_auth=True)
        return EventListResponse.model_validate(data).events

    async def create_event(self, event: CreateEventRequest) -> EventRow:
        body = event.model_dump(by_alias=True, exclude_none=True, mode="json")
        data = await self.request("POST", "/api/admin/events", body=body, require_auth=True)
        return EventResponse.model_validate(data).event

    async def set_event_state(self, code: str, state: str) -> EventRow:
        data = await self.request(
            "POST",
            f"/api/admin/events/{quote(code, safe='')}/state",
            body={"state": state},
            require_auth=True,
        )
        return EventResponse.model_validate(data).event

    async def sim_admin_link(self, event_code: str) -> str:
        data = await self.request(
            "POST",
            "/api/admin/sim-admin-link",
            body={"eventCode": event_code},
            require_auth=True,
        )
        return SimAdminLinkResponse.model_validate(data).adminUrl
