"""API tests for admin event management and the public event list."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest
from httpx import AsyncClient

from conftest import create_event
from fake_store import FakeStore

pytestmark = pytest.mark.asyncio


async def _set_state(client: AsyncClient, headers, code: str, state: str):
    return await client.post(f"/api/admin/events/{code}/state", json={"state": state}, headers=headers)


class TestCreateEvent:
    async def test_defaults_filled_from_settings(self, client: AsyncClient, store: FakeStore, admin_headers):
        event = await create_event(client, admin_headers, code=" abc1 ", name=" Demo ")
        assert event["code"] == "ABC1"
        assert event["name"] == "Demo"
        assert event["sim_url"] == "https://sim.test/play"
        assert event["sim_type"] == "portfolio_sim"
        assert event["scenario_id"] == "portfolio_basics"
        assert event["duration_minutes"] == 45
        assert event["state"] == "draft"
        assert len(store.rows("events")) == 1

    async def test_explicit_fields(self, client: AsyncClient, admin_headers):
        event = await create_event(
            client,
            admin_headers,
            simUrl="https://other.sim/run",
            scenario_id="rates_shock",
            durationMinutes=30,
            state="active",
            startsAt="2026-04-01T09:00:00+00:00",
            endsAt="2026-04-01T10:00:00+00:00",
        )
        assert event["sim_url"] == "https://other.sim/run"
        assert event["scenario_id"] == "rates_shock"
        assert event["duration_minutes"] == 30
        assert event["state"] == "active"
        assert event["starts_at"].startswith("2026-04-01T09:00:00")

    async def test_legacy_route(self, client: AsyncClient, admin_headers):
        resp = await client.post("/api/events/create", json={"code": "OLD1", "name": "Legacy"}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json()["event"]["code"] == "OLD1"

    async def test_duplicate_code_conflicts(self, client: AsyncClient, store: FakeStore, admin_headers):
        await create_event(client, admin_headers)
        resp = await client.post("/api/admin/events", json={"code": "abc1", "name": "Again"}, headers=admin_headers)
        assert resp.status_code == 409
        assert len(store.rows("events")) == 1

    @pytest.mark.parametrize("body", [{"name": "Demo"}, {"code": "ABC1"}, {"code": "  ", "name": "Demo"}])
    async def test_code_and_name_required(self, client: AsyncClient, admin_headers, body):
        resp = await client.post("/api/admin/events", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "code and name are required"}

    async def test_cannot_create_live_event(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            "/api/admin/events", json={"code": "ABC1", "name": "Demo", "state": "live"}, headers=admin_headers,
        )
        assert resp.status_code == 400

    async def test_end_before_start_rejected(self, client: AsyncClient, admin_headers):
        body = {
            "code": "ABC1",
            "name": "Demo",
            "startsAt": "2026-04-01T10:00:00Z",
            "endsAt": "2026-04-01T09:00:00Z",
        }
        resp = await client.post("/api/admin/events", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert "endsAt" in resp.json()["error"]

    async def test_non_positive_duration_rejected(self, client: AsyncClient, admin_headers):
        body = {"code": "ABC1", "name": "Demo", "durationMinutes": 0}
        resp = await client.post("/api/admin/events", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("durationMinutes")

    async def test_player_cannot_create(self, client: AsyncClient, store: FakeStore, player_headers):
        resp = await client.post("/api/admin/events", json={"code": "ABC1", "name": "Demo"}, headers=player_headers)
        assert resp.status_code == 403
        assert resp.json() == {"error": "forbidden"}
        assert store.rows("events") == []

    async def test_anonymous_cannot_create(self, client: AsyncClient):
        resp = await client.post("/api/events/create", json={"code": "ABC1", "name": "Demo"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "unauthorized"}


class TestListEvents:
    async def test_admin_list_newest_first(self, client: AsyncClient, admin_headers):
        await create_event(client, admin_headers, code="FIRST")
        await create_event(client, admin_headers, code="SECOND")
        resp = await client.get("/api/admin/events", headers=admin_headers)
        assert resp.status_code == 200
        assert [e["code"] for e in resp.json()["events"]] == ["SECOND", "FIRST"]

    async def test_public_list_hides_draft_and_ended(self, client: AsyncClient, store: FakeStore, admin_headers):
        await create_event(client, admin_headers, code="DRAFT")
        await create_event(client, admin_headers, code="OPEN", state="active")
        await create_event(client, admin_headers, code="GONE", state="active")
        store.rows("events")[2]["state"] = "ended"

        resp = await client.get("/api/events/public")
        assert resp.status_code == 200
        events = resp.json()["events"]
        assert [e["code"] for e in events] == ["OPEN"]
        assert "sim_url" not in events[0]


class TestEventState:
    async def test_full_lifecycle(self, client: AsyncClient, admin_headers):
        await create_event(client, admin_headers)

        resp = await _set_state(client, admin_headers, "abc1", "active")
        assert resp.json()["event"]["state"] == "active"
        assert resp.json()["event"]["started_at"] is None

        live = (await _set_state(client, admin_headers, "ABC1", "live")).json()["event"]
        assert live["started_at"] is not None

        await _set_state(client, admin_headers, "ABC1", "paused")
        resumed = (await _set_state(client, admin_headers, "ABC1", "live")).json()["event"]
        assert resumed["started_at"] == live["started_at"]

        ended = (await _set_state(client, admin_headers, "ABC1", "ended")).json()["event"]
        assert ended["state"] == "ended"
        assert ended["ended_at"] is not None

    @pytest.mark.parametrize("target", ["live", "paused", "ended", "draft"])
    async def test_illegal_transitions_from_draft(self, client: AsyncClient, store: FakeStore, admin_headers, target):
        await create_event(client, admin_headers)
        resp = await _set_state(client, admin_headers, "ABC1", target)
        assert resp.status_code == 409
        assert store.rows("events")[0]["state"] == "draft"

    async def test_ended_is_terminal(self, client: AsyncClient, store: FakeStore, admin_headers):
        await create_event(client, admin_headers)
        store.rows("events")[0]["state"] = "ended"
        resp = await _set_state(client, admin_headers, "ABC1", "live")
        assert resp.status_code == 409

    async def test_unknown_state(self, client: AsyncClient, admin_headers):
        await create_event(client, admin_headers)
        resp = await _set_state(client, admin_headers, "ABC1", "archived")
        assert resp.status_code == 400

    async def test_unknown_event(self, client: AsyncClient, admin_headers):
        resp = await _set_state(client, admin_headers, "NOPE", "active")
        assert resp.status_code == 404


class TestSimAdminLink:
    async def test_link_for_event(self, client: AsyncClient, admin_headers):
        await create_event(client, admin_headers, scenarioId="macro_rotation")
        resp = await client.get("/api/admin/events/abc1/sim-admin-link", headers=admin_headers)
        assert resp.status_code == 200

        parts = urlsplit(resp.json()["adminUrl"])
        assert parts.netloc == "sim.test"
        assert parts.path == "/play/admin"
        query = parse_qs(parts.query)
        assert query["event_code"] == ["ABC1"]
        assert query["scenario_id"] == ["macro_rotation"]
        assert query["token"] == ["sim-secret"]

    async def test_link_by_body(self, client: AsyncClient, admin_headers):
        await create_event(client, admin_headers)
        resp = await client.post("/api/admin/sim-admin-link", json={"eventCode": "ABC1"}, headers=admin_headers)
        assert resp.status_code == 200
        assert "token=sim-secret" in resp.json()["adminUrl"]

    async def test_missing_code(self, client: AsyncClient, admin_headers):
        resp = await client.post("/api/admin/sim-admin-link", json={}, headers=admin_headers)
        assert resp.status_code == 400

    async def test_unknown_event(self, client: AsyncClient, admin_headers):
        resp = await client.post("/api/admin/sim-admin-link", json={"eventCode": "NOPE"}, headers=admin_headers)
        assert resp.status_code == 404

    async def test_token_not_configured(self, client: AsyncClient, settings, admin_headers):
        await create_event(client, admin_headers)
        settings.sim_admin_token = ""
        resp = await client.get("/api/admin/events/ABC1/sim-admin-link", headers=admin_headers)
        assert resp.status_code == 503

    async def test_players_cannot_see_token(self, client: AsyncClient, admin_headers, player_headers):
        await create_event(client, admin_headers)
        resp = await client.get("/api/admin/events/ABC1/sim-admin-link", headers=player_headers)
        assert resp.status_code == 403
        assert "sim-secret" not in resp.text
