"""
Async REST client for the Supabase store.

Tables are reached through the PostgREST interface (``/rest/v1/<table>``)
and bearer tokens are resolved through the auth service (``/auth/v1/user``).
The client is created once per process by the app lifespan and injected into
handlers; it holds no state besides the underlying ``httpx.AsyncClient``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import httpx
import structlog

from mint.config import Settings

logger = structlog.get_logger()

Filter = tuple[str, str, Any]

# PostgREST / Postgres error codes the service reacts to
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_TEXT_REPRESENTATION = "22P02"
MISSING_COLUMN_CODES = frozenset({"42703", "PGRST204"})
MISSING_TABLE_CODES = frozenset({"42P01", "PGRST205"})

_RESERVED_CHARS = frozenset(',()"')

# Ids per ``in.(...)`` filter; 100 uuids keep a request URL under 4 KB
IN_CHUNK_SIZE = 100


class StoreError(Exception):
    """A store request failed (HTTP error status or transport failure)."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.code == FOREIGN_KEY_VIOLATION

    @property
    def is_invalid_input(self) -> bool:
        """A filter value the column type cannot parse, e.g. a malformed uuid."""
        return self.code == INVALID_TEXT_REPRESENTATION

    @property
    def is_schema_error(self) -> bool:
        return self.code in MISSING_COLUMN_CODES or self.code in MISSING_TABLE_CODES


class SchemaMismatchError(StoreError):
    """The store is missing a table or column this service requires."""


# ── Filters ──


def eq(column: str, value: Any) -> Filter:  # noqa: ANN401
    return (column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return (column, "in", list(values))


def is_null(column: str) -> Filter:
    return (column, "is", None)


def not_null(column: str) -> Filter:
    return (column, "not.is", None)


def ilike(column: str, pattern: str) -> Filter:
    return (column, "ilike", pattern)


def _format_value(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:  # noqa: ANN401
    text = _format_value(value)
    if _RESERVED_CHARS.intersection(text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def render_filter(flt: Filter) -> tuple[str, str]:
    """Render a filter tuple as a PostgREST query parameter."""
    column, op, value = flt
    if op == "in":
        rendered = "(" + ",".join(_quote(v) for v in value) + ")"
    elif op in ("is", "not.is"):
        rendered = "null"
    else:
        rendered = _format_value(value)
    return column, f"{op}.{rendered}"


def _error_from_response(response: httpx.Response) -> StoreError:
    """Build a StoreError from a PostgREST or auth-service error body."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = (
            payload.get("message")
            or payload.get("error_description")
            or payload.get("msg")
            or payload.get("error")
            or f"Store request failed with status {response.status_code}"
        )
        code = payload.get("code")
        return StoreError(
            str(message),
            code=str(code) if code is not None else None,
            status_code=response.status_code,
            details=payload.get("details"),
        )

    text = response.text.strip()
    return StoreError(
        text or f"Store request failed with status {response.status_code}",
        status_code=response.status_code,
    )


class SupabaseStore:
    """Generic filtered select/insert/update/delete over the store's REST API."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Sequence[tuple[str, str]] | None = None,
        json: Any = None,  # noqa: ANN401
        headers: dict[str, str] | None = None,
    ) -> Any:  # noqa: ANN401
        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("store_request_failed", method=method, path=path, error=str(exc))
            raise StoreError(f"Store request failed: {exc}") from exc

        if response.is_error:
            error = _error_from_response(response)
            logger.warning(
                "store_error",
                method=method,
                path=path,
                status=response.status_code,
                code=error.code,
                error=error.message,
            )
            raise error

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Sequence[Filter] = (),
        order: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows from a table."""
        params: list[tuple[str, str]] = [("select", columns)]
        params.extend(render_filter(f) for f in filters)
        if order:
            params.append(("order", f"{order}.{'desc' if desc else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        rows = await self._request("GET", f"/rest/v1/{table}", params=params)
        return rows or []

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Sequence[Filter] = (),
    ) -> dict[str, Any] | None:
        """Select the first matching row, or None."""
        rows = await self.select(table, columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        rows = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise StoreError(f"Insert into '{table}' returned no row")
        return rows[0]

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: Sequence[Filter],
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""
        if not filters:
            raise ValueError("update requires at least one filter")
        rows = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=[render_filter(f) for f in filters],
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return rows or []

    async def delete(self, table: str, *, filters: Sequence[Filter]) -> list[dict[str, Any]]:
        """Delete matching rows and return them."""
        if not filters:
            raise ValueError("delete requires at least one filter")
        rows = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=[render_filter(f) for f in filters],
            headers={"Prefer": "return=representation"},
        )
        return rows or []

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """Resolve an end-user access token to the auth service's user record."""
        user = await self._request(
            "GET",
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not isinstance(user, dict):
            raise StoreError("Auth service returned no user")
        return user


async def select_in(
    store: SupabaseStore,
    table: str,
    columns: str,
    column: str,
    values: Iterable[Any],
    *,
    filters: Sequence[Filter] = (),
    chunk_size: int = IN_CHUNK_SIZE,
) -> list[dict[str, Any]]:
    """Select rows whose ``column`` is in ``values``, ``chunk_size`` values per request.

    Duplicate values are sent once; an empty ``values`` makes no request.
    """
    unique = list(dict.fromkeys(values))
    rows: list[dict[str, Any]] = []
    for start in range(0, len(unique), chunk_size):
        chunk = unique[start:start + chunk_size]
        rows.extend(await store.select(table, columns, filters=[*filters, in_(column, chunk)]))
    return rows


def create_store(settings: Settings) -> SupabaseStore:
    """Build the store client from settings. Fails fast when credentials are missing."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        msg = "Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY environment variables."
        raise RuntimeError(msg)

    key = settings.supabase_service_role_key
    http = httpx.AsyncClient(
        base_url=settings.supabase_url.rstrip("/"),
        headers={
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        },
        timeout=settings.store_timeout_seconds,
    )
    return SupabaseStore(http)
