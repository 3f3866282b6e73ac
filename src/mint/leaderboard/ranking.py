"""Deterministic event leaderboard ranking.

Rows ranked by score DESC, then by pnl DESC. A missing score or pnl sorts
below every number. Rows that tie on both keep their input order. Ranks are
sequential (1, 2, 3, ...) even when scores tie.
"""

from __future__ import annotations

import math
from typing import Any

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def clamp_limit(raw: str | int | None, default: int = DEFAULT_LIMIT) -> int:
    """Parse a ``limit`` query value and clamp it to [1, MAX_LIMIT].

    Missing or non-numeric values fall back to ``default``.
    """
    if raw is None or raw == "":
        value = default
    else:
        try:
            value = int(float(raw))
        except (TypeError, ValueError, OverflowError):
            value = default
    return max(1, min(MAX_LIMIT, value))


def _metric(value: Any) -> float:  # noqa: ANN401
    if value is None or isinstance(value, bool):
        return -math.inf
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return -math.inf
    return -math.inf if math.isnan(number) else number


def rank_rows(rows: list[dict[str, Any]], limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    """Sort rows, keep the top ``limit`` and prepend a 1-based ``rank`` to each."""
    if not rows or limit < 1:
        return []

    ordered = sorted(
        rows,
        key=lambda r: (_metric(r.get("score")), _metric(r.get("pnl"))),
        reverse=True,
    )
    return [{"rank": idx + 1, **row} for idx, row in enumerate(ordered[:limit])]


def trader_label(user_id: str | None) -> str:
    """Public display name for a run's owner.

    E-mail addresses are masked to their first two characters; other ids are
    shortened to a ``Trader-`` handle.
    """
    if not user_id or not user_id.strip():
        return "anonymous"
    user_id = user_id.strip()
    if "@" in user_id:
        prefix = user_id.split("@", 1)[0]
        return f"{prefix[:2]}***" if prefix else "anonymous"
    return f"Trader-{user_id[:6]}"
