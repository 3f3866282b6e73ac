"""
Caller identity and admin allowlist resolution.

Every admin request re-resolves the bearer token through the auth service and
re-reads the ``admin_allowlist`` table; nothing is cached between requests.
The table is the only allowlist source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from mint.store import StoreError, SupabaseStore, ilike
from mint.store.schema import ALLOWLIST_COLUMNS, columns

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthUser:
    """A user resolved from a bearer token."""

    id: str
    email: str | None = None


@dataclass(frozen=True)
class AdminCheck:
    """Outcome of an admin check, as reported by ``GET /api/admin/me``."""

    is_admin: bool
    detail: dict[str, Any] = field(default_factory=dict)


def normalize_email(email: str | None) -> str | None:
    """Trim and lower-case an email; blank becomes None."""
    if not email:
        return None
    normalized = email.strip().lower()
    return normalized or None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def resolve_user(store: SupabaseStore, access_token: str) -> AuthUser | None:
    """Exchange a bearer token for a user. Any auth failure yields None (fail closed)."""
    try:
        record = await store.get_user(access_token)
    except StoreError as exc:
        logger.info("auth_token_rejected", status=exc.status_code, error=exc.message)
        return None

    user_id = record.get("id")
    if not user_id:
        return None
    return AuthUser(id=str(user_id), email=normalize_email(record.get("email")))


async def is_allowlisted(store: SupabaseStore, email: str | None) -> bool:
    """Case-insensitive membership test against ``admin_allowlist``.

    Raises StoreError when the allowlist cannot be read.
    """
    normalized = normalize_email(email)
    if normalized is None:
        return False

    rows = await store.select(
        "admin_allowlist",
        columns(ALLOWLIST_COLUMNS),
        filters=[ilike("email", _escape_like(normalized))],
    )
    return any(normalize_email(row.get("email")) == normalized for row in rows)


async def check_admin(store: SupabaseStore, user: AuthUser) -> AdminCheck:
    """Resolve admin status for an authenticated user without raising."""
    if user.email is None:
        return AdminCheck(False, {"userId": user.id, "reason": "account has no email"})

    try:
        allowed = await is_allowlisted(store, user.email)
    except StoreError as exc:
        logger.error("admin_allowlist_lookup_failed", user_id=user.id, error=exc.message)
        return AdminCheck(False, {"userId": user.id, "email": user.email, "reason": "allowlist lookup failed"})

    if not allowed:
        return AdminCheck(False, {"userId": user.id, "email": user.email, "reason": "email not allowlisted"})
    return AdminCheck(True, {"userId": user.id, "email": user.email})


async def resolve_user_id(
    store: SupabaseStore,
    *,
    explicit: str | None,
    header: str | None,
    access_token: str | None,
) -> str | None:
    """Pick the acting user id: request body, then ``x-user-id`` header, then bearer subject."""
    for candidate in (explicit, header):
        if candidate and candidate.strip():
            return candidate.strip()
    if access_token:
        user = await resolve_user(store, access_token)
        if user is not None:
            return user.id
    return None
