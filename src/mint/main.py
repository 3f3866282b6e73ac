"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from mint.auth.router import router as auth_router
from mint.config import get_settings
from mint.events.router import admin_router as admin_events_router
from mint.events.router import router as events_router
from mint.health.router import router as health_router
from mint.leaderboard.router import router as leaderboard_router
from mint.middleware import setup_middleware
from mint.redis_client import connect_redis, disconnect_redis
from mint.runs.router import router as runs_router
from mint.store import create_store
from mint.store.schema import verify_schema

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the store client and Redis pool, and tear them down on shutdown."""
    settings = get_settings()
    store = create_store(settings)
    app.state.store = store
    await connect_redis(settings.redis_url)

    try:
        if settings.schema_check_on_startup:
            await verify_schema(store)
        logger.info("startup_complete", environment=settings.environment, version=settings.app_version)
        yield
    finally:
        await store.close()
        app.state.store = None
        await disconnect_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Mint Events API",
        description="Events, runs and leaderboards for Mint multiplayer simulations",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(runs_router)
    app.include_router(events_router)
    app.include_router(leaderboard_router)
    app.include_router(auth_router)
    app.include_router(admin_events_router)

    return app
