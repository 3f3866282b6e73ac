"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError

from mint.config import Settings, get_settings
from mint.dependencies import get_store
from mint.redis_client import redis_or_none
from mint.store import StoreError, SupabaseStore

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, bool]:
    """Liveness probe: 200 while the process is up."""
    return {"ok": True}


@router.get("/ready")
async def readiness(
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    """Readiness probe: checks the store and, when configured, Redis."""
    checks: dict[str, object] = {}

    try:
        await store.select("events", "id", limit=1)
        checks["store"] = "ok"
    except StoreError as exc:
        checks["store"] = f"error: {exc.message}"

    if settings.redis_url:
        redis = redis_or_none()
        if redis is None:
            checks["redis"] = "error: not connected"
        else:
            try:
                await redis.ping()
                checks["redis"] = "ok"
            except RedisError as exc:
                checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Return API version and environment."""
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
