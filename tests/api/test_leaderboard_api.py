"""API tests for the event leaderboard."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import create_event, finish_run, join_event
from fake_store import FakeStore

pytestmark = pytest.mark.asyncio


async def test_single_finished_run(client: AsyncClient, admin_headers):
    created = await client.post("/api/admin/events", json={"code": "ABC1", "name": "Demo"}, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["event"]["id"]

    run = await client.post("/api/runs/create", json={"eventCode": "abc1", "userId": "u1"})
    assert run.status_code == 200
    run_id = run.json()["runId"]
    assert f"run_id={run_id}" in run.json()["simUrl"]

    submitted = await client.post("/api/runs/submit", json={"runId": run_id, "score": 87.5})
    assert submitted.json() == {"ok": True}

    resp = await client.get("/api/events/ABC1/leaderboard")
    assert resp.status_code == 200
    data = resp.json()
    assert data["event"] == {"code": "ABC1", "name": "Demo"}
    assert len(data["rows"]) == 1
    row = data["rows"][0]
    assert row["rank"] == 1
    assert row["runId"] == run_id
    assert row["score"] == 87.5
    assert row["trader"] == "Trader-u1"


async def test_ordering_and_tie_break(client: AsyncClient, admin_headers):
    await create_event(client, admin_headers)
    low = await join_event(client, "ABC1", "low-user")
    tie_low_pnl = await join_event(client, "ABC1", "tie-a")
    tie_high_pnl = await join_event(client, "ABC1", "tie-b")
    unfinished = await join_event(client, "ABC1", "quitter")

    await finish_run(client, low, 10.0, pnl=900.0)
    await finish_run(client, tie_low_pnl, 50.0, pnl=-5.0)
    await finish_run(client, tie_high_pnl, 50.0, pnl=20.0)

    rows = (await client.get("/api/events/abc1/leaderboard")).json()["rows"]
    assert [r["runId"] for r in rows] == [tie_high_pnl, tie_low_pnl, low]
    assert [r["rank"] for r in rows] == [1, 2, 3]
    assert unfinished not in {r["runId"] for r in rows}


async def test_missing_pnl_sorts_last_among_ties(client: AsyncClient, admin_headers):
    await create_event(client, admin_headers)
    no_pnl = await join_event(client, "ABC1", "a")
    with_pnl = await join_event(client, "ABC1", "b")
    await finish_run(client, no_pnl, 5.0)
    await finish_run(client, with_pnl, 5.0, pnl=-100.0)

    rows = (await client.get("/api/events/ABC1/leaderboard")).json()["rows"]
    assert [r["runId"] for r in rows] == [with_pnl, no_pnl]
    assert rows[1]["pnl"] is None


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(None, 20), ("3", 3), ("0", 1), ("-4", 1), ("500", 25), ("abc", 20)],
)
async def test_limit_is_clamped(client: AsyncClient, store: FakeStore, admin_headers, limit, expected):
    await create_event(client, admin_headers)
    event_id = store.rows("events")[0]["id"]
    for i in range(25):
        run = store.seed("runs", {"event_id": event_id, "user_id": f"user-{i}", "finished_at": store.next_timestamp()})
        store.seed("run_results", {"run_id": run["id"], "score": float(i)})

    params = {} if limit is None else {"limit": limit}
    resp = await client.get("/api/events/ABC1/leaderboard", params=params)
    assert resp.status_code == 200
    rows = resp.json()["rows"]
    assert len(rows) == expected
    assert rows[0]["score"] == 24.0
    assert [r["rank"] for r in rows] == list(range(1, expected + 1))


async def test_email_user_ids_are_masked(client: AsyncClient, admin_headers):
    await create_event(client, admin_headers)
    run_id = await join_event(client, "ABC1", "jane.doe@uni.edu")
    await finish_run(client, run_id, 1.0)
    rows = (await client.get("/api/events/ABC1/leaderboard")).json()["rows"]
    assert rows[0]["trader"] == "ja***"
    assert "uni.edu" not in str(rows)


async def test_empty_event(client: AsyncClient, store: FakeStore, admin_headers):
    await create_event(client, admin_headers)
    resp = await client.get("/api/events/ABC1/leaderboard")
    assert resp.json()["rows"] == []
    assert ("select", "run_results") not in store.calls


async def test_unknown_event(client: AsyncClient):
    resp = await client.get("/api/events/NOPE/leaderboard")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Event not found"}
