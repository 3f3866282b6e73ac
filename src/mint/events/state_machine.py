"""Event lifecycle state machine.

State progression: draft -> active -> live <-> paused -> ended
Transitions are validated server-side; ``ended`` is terminal.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

EVENT_STATES: tuple[str, ...] = ("draft", "active", "live", "paused", "ended")
PUBLIC_STATES: tuple[str, ...] = ("active", "live", "paused")
INITIAL_STATES: tuple[str, ...] = ("draft", "active")

VALID_TRANSITIONS: dict[str, list[str]] = {
    "draft": ["active"],
    "active": ["live"],
    "live": ["paused", "ended"],
    "paused": ["live", "ended"],
    "ended": [],
}


def current_state(event: dict[str, Any]) -> str:
    """Rows created before the state column existed count as drafts."""
    return event.get("state") or "draft"


def validate_transition(current: str, target: str) -> None:
    """Validate a state transition. Raises ValueError if invalid."""
    valid = VALID_TRANSITIONS.get(current, [])
    if target not in valid:
        raise ValueError(
            f"Invalid transition: {current} -> {target}. "
            f"Valid transitions: {valid}"
        )


def transition_values(event: dict[str, Any], target: str, now: datetime) -> dict[str, Any]:
    """Column values to write when moving ``event`` to ``target``."""
    values: dict[str, Any] = {"state": target}
    if target == "live" and not event.get("started_at"):
        values["started_at"] = now.isoformat()
    if target == "ended":
        values["ended_at"] = now.isoformat()
    return values
