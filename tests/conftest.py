"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from fake_store import FakeStore
from mint.config import Settings, get_settings
from mint.dependencies import get_store
from mint.main import create_app

ADMIN_TOKEN = "admin-token"
PLAYER_TOKEN = "player-token"


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: fake store credentials, a sim URL and a sim admin token."""
    get_settings.cache_clear()
    return Settings(
        supabase_url="http://store.test",
        supabase_service_role_key="service-role-key",
        portfolio_sim_url="https://sim.test/play",
        sim_admin_token="sim-secret",
        log_format="console",
        redis_url="",
    )


@pytest.fixture
def store() -> FakeStore:
    """Fresh in-memory store with one admin and one player account."""
    fake = FakeStore()
    fake.users[ADMIN_TOKEN] = {"id": "admin-1", "email": "Admin@Mint.Edu"}
    fake.users[PLAYER_TOKEN] = {"id": "player-1", "email": "player@uni.edu"}
    fake.seed("admin_allowlist", {"email": "admin@mint.edu"})
    return fake


@pytest.fixture
def app(store: FakeStore, settings: Settings) -> FastAPI:
    """The application with the store and settings dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_store] = lambda: store
    application.dependency_overrides[get_settings] = lambda: settings
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def player_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {PLAYER_TOKEN}"}


async def create_event(client: AsyncClient, headers: dict[str, str], **fields: Any) -> dict[str, Any]:
    """Helper: create an event through the admin API and return it."""
    body = {"code": "ABC1", "name": "Demo"} | fields
    response = await client.post("/api/admin/events", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["event"]


async def join_event(client: AsyncClient, code: str, user_id: str) -> str:
    """Helper: create a run and return its id."""
    response = await client.post("/api/runs/create", json={"eventCode": code, "userId": user_id})
    assert response.status_code == 200, response.text
    return response.json()["runId"]


async def finish_run(client: AsyncClient, run_id: str, score: float | None, **metrics: Any) -> None:
    """Helper: submit results for a run."""
    response = await client.post("/api/runs/submit", json={"runId": run_id, "score": score, **metrics})
    assert response.status_code == 200, response.text
