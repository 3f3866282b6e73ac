"""Errors raised by the API client."""

from __future__ import annotations


class ClientConfigError(Exception):
    """The client is missing configuration (e.g. the backend URL)."""


class BackendError(Exception):
    """A backend request failed; ``message`` is safe to show to the user."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthRequiredError(BackendError):
    """Raised before any network call when an authenticated request has no credentials."""

    def __init__(self, message: str = "Please sign in") -> None:
        super().__init__(message, status_code=None)
