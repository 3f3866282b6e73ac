"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mint.auth.service import AuthUser, check_admin, resolve_user
from mint.dependencies import get_store
from mint.exceptions import Forbidden, Unauthorized
from mint.store import SupabaseStore

_bearer = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> str | None:
    """The raw bearer token, or None when no Authorization header was sent."""
    if credentials is None or not credentials.credentials.strip():
        return None
    return credentials.credentials.strip()


async def get_current_user(
    token: str | None = Depends(get_bearer_token),
    store: SupabaseStore = Depends(get_store),
) -> AuthUser:
    """Resolve the bearer token to a user. Raises 401 on any failure."""
    if token is None:
        raise Unauthorized("unauthorized")
    user = await resolve_user(store, token)
    if user is None:
        raise Unauthorized("unauthorized")
    return user


async def require_admin(
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
) -> AuthUser:
    """Allow only allowlisted admins through. Raises 403 otherwise."""
    result = await check_admin(store, user)
    if not result.is_admin:
        raise Forbidden("forbidden")
    return user
