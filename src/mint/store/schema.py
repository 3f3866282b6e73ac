"""Table layout the service expects, and the startup check that enforces it.

A store that lacks a column fails the check with a configuration error at
startup instead of degrading requests one at a time.
"""

from __future__ import annotations

import structlog

from mint.store.client import SchemaMismatchError, StoreError, SupabaseStore

logger = structlog.get_logger()

EVENT_COLUMNS = (
    "id",
    "code",
    "name",
    "sim_url",
    "sim_type",
    "scenario_id",
    "duration_minutes",
    "state",
    "created_at",
    "starts_at",
    "ends_at",
    "started_at",
    "ended_at",
)
PUBLIC_EVENT_COLUMNS = (
    "id",
    "code",
    "name",
    "sim_type",
    "scenario_id",
    "duration_minutes",
    "state",
    "starts_at",
    "ends_at",
)
RUN_COLUMNS = ("id", "event_id", "user_id", "created_at", "finished_at")
RESULT_COLUMNS = ("run_id", "score", "pnl", "sharpe", "max_drawdown", "win_rate", "extra")
ALLOWLIST_COLUMNS = ("email",)

REQUIRED_COLUMNS: dict[str, tuple[str, ...]] = {
    "events": EVENT_COLUMNS,
    "runs": RUN_COLUMNS,
    "run_results": RESULT_COLUMNS,
    "admin_allowlist": ALLOWLIST_COLUMNS,
}


def columns(names: tuple[str, ...]) -> str:
    """Render a column tuple as a select list."""
    return ",".join(names)


async def verify_schema(
    store: SupabaseStore,
    required: dict[str, tuple[str, ...]] | None = None,
) -> None:
    """Select every required column with ``limit=0``; raise SchemaMismatchError on drift."""
    for table, names in (required or REQUIRED_COLUMNS).items():
        try:
            await store.select(table, columns(names), limit=0)
        except StoreError as exc:
            if not exc.is_schema_error:
                raise
            msg = (
                f"Store schema is out of date: table '{table}' must provide columns "
                f"{', '.join(names)} ({exc.message})"
            )
            logger.error("schema_mismatch", table=table, code=exc.code, error=exc.message)
            raise SchemaMismatchError(msg, code=exc.code, status_code=exc.status_code) from exc
    logger.info("schema_verified", tables=sorted((required or REQUIRED_COLUMNS).keys()))
