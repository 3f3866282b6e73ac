"""Domain exceptions mapped to HTTP status codes by the error handlers."""

from __future__ import annotations


class MintError(Exception):
    """Base class for errors rendered as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(MintError):
    status_code = 400


class Unauthorized(MintError):
    status_code = 401


class Forbidden(MintError):
    status_code = 403


class NotFound(MintError):
    status_code = 404


class Conflict(MintError):
    status_code = 409


class ServiceUnavailable(MintError):
    status_code = 503
