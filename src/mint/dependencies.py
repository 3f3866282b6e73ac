"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from mint.store import SupabaseStore


def get_store(request: Request) -> SupabaseStore:
    """Return the store client owned by the app lifespan."""
    store: SupabaseStore | None = getattr(request.app.state, "store", None)
    if store is None:
        msg = "Store not initialized. The app lifespan must create it first."
        raise RuntimeError(msg)
    return store
