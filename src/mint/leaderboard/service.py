"""Event leaderboard assembly: finished runs joined with their results, then ranked."""

from __future__ import annotations

from typing import Any

from mint.events.service import get_event_by_code
from mint.exceptions import NotFound
from mint.leaderboard.ranking import rank_rows, trader_label
from mint.store import SupabaseStore, eq, not_null, select_in
from mint.store.schema import RESULT_COLUMNS, columns


async def get_event_leaderboard(store: SupabaseStore, code: str, limit: int) -> dict[str, Any]:
    """Top ``limit`` finished runs of an event. Raises NotFound for an unknown code.

    Runs are read oldest first, so runs tied on score and pnl rank in creation order.
    """
    event = await get_event_by_code(store, code, select=("id", "code", "name"))
    if event is None:
        raise NotFound("Event not found")

    runs = await store.select(
        "runs",
        "id,user_id,created_at",
        filters=[eq("event_id", event["id"]), not_null("finished_at")],
        order="created_at",
    )

    result_rows = await select_in(store, "run_results", columns(RESULT_COLUMNS), "run_id", [r["id"] for r in runs])
    results = {str(r["run_id"]): r for r in result_rows}

    rows = []
    for run in runs:
        metrics = results.get(str(run["id"]), {})
        user_id = run.get("user_id")
        rows.append({
            "runId": str(run["id"]),
            "createdAt": run.get("created_at"),
            "trader": trader_label(str(user_id) if user_id is not None else None),
            "score": metrics.get("score"),
            "pnl": metrics.get("pnl"),
            "sharpe": metrics.get("sharpe"),
            "max_drawdown": metrics.get("max_drawdown"),
            "win_rate": metrics.get("win_rate"),
        })

    return {
        "event": {"code": event["code"], "name": event["name"]},
        "rows": rank_rows(rows, limit),
    }
