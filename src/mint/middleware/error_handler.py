"""Global error handlers: every error leaves the service as ``{"error": message}``."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mint.exceptions import MintError
from mint.store import SchemaMismatchError, StoreError

logger = structlog.get_logger()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validation_message(errors: list[dict[str, Any]]) -> str:
    """Turn the first pydantic error into a one-line message naming the field."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"{field} is required"
    return f"{field}: {first.get('msg', 'invalid value')}"


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(MintError)
    async def mint_error_handler(request: Request, exc: MintError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, status=exc.status_code, error=exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, validation_message(list(exc.errors())))

    @app.exception_handler(SchemaMismatchError)
    async def schema_error_handler(request: Request, exc: SchemaMismatchError) -> JSONResponse:
        logger.error("schema_mismatch", path=request.url.path, error=exc.message)
        return _error(500, "Store schema is out of date; apply the latest migrations")

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        # Store messages can carry table and constraint names; they are logged, not returned.
        logger.error(
            "store_error",
            path=request.url.path,
            method=request.method,
            code=exc.code,
            status=exc.status_code,
            error=exc.message,
        )
        if exc.is_schema_error:
            return _error(500, "Store schema is out of date; apply the latest migrations")
        return _error(500, "Internal server error")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return _error(500, "Internal server error")
