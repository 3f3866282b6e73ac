"""
Run business logic: joining an event, submitting results, reading runs back.

The store offers no multi-statement transactions, so the two-step writes here
carry their own repair paths:

- create: the event lookup and the run insert are separate; a foreign-key
  violation on insert (event removed in between) is reported as 404.
- submit: the result insert and ``runs.finished_at`` update are separate; if
  the update fails the inserted result is deleted again, and a run found with
  a result but no ``finished_at`` is finished on the next submission attempt.
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timezone
from typing import Any

import structlog

from mint.events.links import build_launch_url
from mint.events.service import get_event_by_code, normalize_code
from mint.exceptions import Conflict, NotFound, ValidationFailed
from mint.runs.schemas import SubmitResultsRequest
from mint.store import StoreError, SupabaseStore, eq, is_null, select_in
from mint.store.schema import EVENT_COLUMNS, RESULT_COLUMNS, RUN_COLUMNS, columns

logger = structlog.get_logger()

OPTIONAL_METRICS = ("pnl", "sharpe", "max_drawdown", "win_rate")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(value: Any) -> str:  # noqa: ANN401
    return "" if value is None else str(value).strip()


def is_number(value: Any) -> bool:  # noqa: ANN401
    """JSON numbers only: booleans, numeric strings, NaN/inf and ints beyond float range are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        number = float(value)
    except OverflowError:
        return False
    return math.isfinite(number)


async def _find_run(store: SupabaseStore, run_id: str, select: str = "id,finished_at") -> dict[str, Any] | None:
    """Fetch a run by id; ids the store cannot parse count as missing."""
    try:
        return await store.select_one("runs", select, filters=[eq("id", run_id)])
    except StoreError as exc:
        if exc.is_invalid_input:
            return None
        raise


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_run(store: SupabaseStore, event_code: Any, user_id: str | None) -> dict[str, str]:  # noqa: ANN401
    """Create a run for ``user_id`` in the event with ``event_code``; return its launch URL."""
    code = normalize_code(_text(event_code))
    if not code:
        raise ValidationFailed("eventCode is required")
    if not user_id:
        raise ValidationFailed("userId is required to create a run")

    event = await get_event_by_code(store, code, select=("id", "code", "sim_url", "scenario_id", "state"))
    if event is None:
        raise NotFound("Event not found for provided code")
    if event.get("state") == "ended":
        raise Conflict("Event has ended")
    if not event.get("sim_url"):
        raise Conflict("Event has no simulation URL")

    try:
        run = await store.insert("runs", {"event_id": event["id"], "user_id": user_id})
    except StoreError as exc:
        if exc.is_foreign_key_violation:
            raise NotFound("Event not found for provided code") from exc
        raise

    run_id = str(run["id"])
    sim_url = build_launch_url(
        event["sim_url"],
        run_id=run_id,
        event_id=str(event["id"]),
        event_code=event["code"],
        scenario_id=event.get("scenario_id"),
    )
    logger.info("run_created", run_id=run_id, event_id=event["id"], event_code=code, user_id=user_id)
    return {"runId": run_id, "simUrl": sim_url}


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


def validate_submission(body: SubmitResultsRequest) -> tuple[str, dict[str, Any]]:
    """Return ``(run_id, result_row)`` or raise ValidationFailed."""
    run_id = _text(body.run_id)
    if not run_id:
        raise ValidationFailed("runId is required")
    if not is_number(body.score):
        raise ValidationFailed("score must be provided as a number")

    row: dict[str, Any] = {"run_id": run_id, "score": body.score}
    for name in OPTIONAL_METRICS:
        value = getattr(body, name)
        if value is not None and not is_number(value):
            raise ValidationFailed(f"{name} must be a number")
        row[name] = value
    row["extra"] = body.extra
    return run_id, row


async def _finish_run(store: SupabaseStore, run_id: str) -> None:
    await store.update(
        "runs",
        {"finished_at": _now_iso()},
        filters=[eq("id", run_id), is_null("finished_at")],
    )


async def submit_results(store: SupabaseStore, body: SubmitResultsRequest) -> None:
    """Record a run's results exactly once and mark the run finished."""
    run_id, row = validate_submission(body)

    run = await _find_run(store, run_id)
    if run is None:
        raise NotFound("Run not found")

    existing = await store.select_one("run_results", "run_id", filters=[eq("run_id", run_id)])
    if existing is not None:
        if not run.get("finished_at"):
            await _finish_run(store, run_id)
            logger.warning("run_finish_reconciled", run_id=run_id)
        raise Conflict("Results already submitted for this run")

    try:
        await store.insert("run_results", row)
    except StoreError as exc:
        if exc.is_unique_violation:
            raise Conflict("Results already submitted for this run") from exc
        raise

    try:
        await _finish_run(store, run_id)
    except StoreError:
        logger.error("run_finish_failed", run_id=run_id)
        try:
            await store.delete("run_results", filters=[eq("run_id", run_id)])
        except StoreError as cleanup_exc:
            logger.error("result_compensation_failed", run_id=run_id, error=cleanup_exc.message)
        raise

    logger.info("results_submitted", run_id=run_id, score=row["score"], pnl=row["pnl"])


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


def _run_view(
    run: dict[str, Any],
    event: dict[str, Any] | None,
    result: dict[str, Any] | None,
) -> dict[str, Any]:
    return {
        "id": str(run["id"]),
        "event_id": str(run["event_id"]) if run.get("event_id") is not None else None,
        "user_id": str(run["user_id"]) if run.get("user_id") is not None else None,
        "created_at": run.get("created_at"),
        "finished_at": run.get("finished_at"),
        "event": {**event, "id": str(event["id"])} if event else None,
        "result": result,
    }


async def get_run_detail(store: SupabaseStore, run_id: str) -> dict[str, Any]:
    """A run with its event and result (None until submitted)."""
    run = await _find_run(store, run_id.strip(), select=columns(RUN_COLUMNS))
    if run is None:
        raise NotFound("Run not found")

    event, result = await asyncio.gather(
        _event_by_id(store, run.get("event_id")),
        store.select_one("run_results", columns(RESULT_COLUMNS), filters=[eq("run_id", run["id"])]),
    )
    return _run_view(run, event, result)


async def _event_by_id(store: SupabaseStore, event_id: Any) -> dict[str, Any] | None:  # noqa: ANN401
    if event_id is None:
        return None
    return await store.select_one("events", columns(EVENT_COLUMNS), filters=[eq("id", event_id)])


async def list_user_runs(store: SupabaseStore, user_id: str) -> list[dict[str, Any]]:
    """Run history of one user, newest first."""
    runs = await store.select(
        "runs",
        columns(RUN_COLUMNS),
        filters=[eq("user_id", user_id)],
        order="created_at",
        desc=True,
    )
    if not runs:
        return []

    event_ids = sorted({str(r["event_id"]) for r in runs if r.get("event_id") is not None})
    events, results = await asyncio.gather(
        select_in(store, "events", "id,code,name", "id", event_ids),
        select_in(store, "run_results", columns(RESULT_COLUMNS), "run_id", [r["id"] for r in runs]),
    )
    events_by_id = {str(e["id"]): e for e in events}
    results_by_run = {str(r["run_id"]): r for r in results}
    return [
        _run_view(run, events_by_id.get(str(run.get("event_id"))), results_by_run.get(str(run["id"])))
        for run in runs
    ]
