"""Response models for admin identity."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class AdminMeResponse(BaseModel):
    isAdmin: bool  # noqa: N815
    detail: dict[str, Any]
