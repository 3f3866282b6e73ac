"""CORS for the web app and admin console."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mint.config import Settings

# Headers the browser client sends on top of the CORS-safelisted ones
ALLOWED_REQUEST_HEADERS = ["Authorization", "Content-Type", "x-user-id", "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=ALLOWED_REQUEST_HEADERS,
        expose_headers=["X-Request-Id", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
        max_age=600,
    )
