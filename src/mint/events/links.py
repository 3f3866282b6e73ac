"""Simulation URL builders."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def append_query(url: str, params: dict[str, str | None]) -> str:
    """Append non-empty params to ``url``, keeping its existing query string and fragment."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((key, value) for key, value in params.items() if value)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def build_launch_url(
    sim_url: str,
    *,
    run_id: str,
    event_id: str,
    event_code: str,
    scenario_id: str | None,
) -> str:
    """The URL a player opens to start a run in the external simulation."""
    return append_query(
        sim_url,
        {
            "run_id": run_id,
            "event_id": event_id,
            "event_code": event_code,
            "scenario_id": scenario_id,
        },
    )


def sim_base_url(sim_url: str) -> str:
    """Scheme, host and path of the simulation, without query or fragment."""
    parts = urlsplit(sim_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path.rstrip("/"), "", ""))


def build_sim_admin_url(sim_url: str, *, event_code: str, scenario_id: str | None, token: str) -> str:
    """The simulation's own admin console URL for one event."""
    return append_query(
        f"{sim_base_url(sim_url)}/admin",
        {"event_code": event_code, "scenario_id": scenario_id, "token": token},
    )
