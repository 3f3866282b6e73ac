"""Logging, error handlers and the HTTP middleware stack."""

from fastapi import FastAPI

from mint.config import Settings
from mint.middleware.cors import setup_cors
from mint.middleware.error_handler import setup_error_handlers
from mint.middleware.logging import setup_logging
from mint.middleware.rate_limit import RateLimitMiddleware
from mint.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging and error handlers, then the middleware stack.

    Outermost to innermost: CORS, request id, rate limit. The request id is
    bound before a request can be rate limited, and CORS headers reach 429s.
    """
    setup_logging(settings)
    setup_error_handlers(app)

    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
