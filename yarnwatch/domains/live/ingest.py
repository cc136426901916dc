"""Fetch live shift snapshots, filter options and server-built shift trends."""

import logging
from datetime import date

import httpx

from yarnwatch.aggregation.assemble import TrendTable
from yarnwatch.config import load_dashboard_config
from yarnwatch.utils.io import QueryParams, fetch_json

logger = logging.getLogger(__name__)

LIVE_ENDPOINT = "/quantum/live"
FILTERS_ENDPOINT = "/quantum/available-filters"
TREND_ENDPOINT = "/quantum/trend"


def _get(path: str, params: QueryParams, client: httpx.Client | None, env: str):
    config = load_dashboard_config(env)
    owns_client = client is None
    client = client or httpx.Client(base_url=config.api.base_url, timeout=config.api.timeout)
    try:
        return fetch_json(client, path, params, max_retries=config.api.max_retries)
    finally:
        if owns_client:
            client.close()


def _joined(values) -> str:
    match values:
        case None:
            return ""
        case str():
            return values
        case _:
            return ",".join(str(v) for v in values)


def ingest_live_snapshot(
    snapshot_date: date | str | None = None,
    shift: str | int | None = None,
    unit: str | None = None,
    machine: str | None = None,
    dashboard: bool = False,
    client: httpx.Client | None = None,
    env: str = "production",
) -> list[dict]:
    """Pull the per-unit live report for one date and shift.

    Dashboard mode returns every unit, so the unit and machine filters are
    only sent for the detailed views.
    """
    params = {}
    if snapshot_date:
        params["date"] = str(snapshot_date)
    if shift:
        params["shift"] = str(shift)
    if dashboard:
        params["mode"] = "dashboard"
    else:
        if unit:
            params["unit"] = unit
        if machine:
            params["machine"] = machine

    payload = _get(LIVE_ENDPOINT, params, client, env)
    match payload:
        case list():
            units = [u for u in payload if isinstance(u, dict)]
        case dict():
            units = [payload]
        case _:
            raise ValueError(f"Malformed live payload: {type(payload).__name__}")

    logger.info(f"Ingested live snapshot for {len(units)} units")
    return units


def ingest_available_filters(
    unit: str | None = None,
    client: httpx.Client | None = None,
    env: str = "production",
) -> dict:
    """Filter options (dates, shifts, units, machines, articles) offered by the live views."""
    payload = _get(FILTERS_ENDPOINT, {"unit": unit} if unit else {}, client, env)
    if not isinstance(payload, dict):
        raise ValueError(f"Malformed filter payload: {type(payload).__name__}")
    return payload


def default_snapshot_date(filters: dict) -> str | None:
    """The dashboard opens on the previous day: the second listed date, else the first."""
    dates = filters.get("dates") or []
    if not dates:
        return None
    return dates[1] if len(dates) > 1 else dates[0]


def ingest_shift_trend(
    group: str,
    first_column: str,
    parameter: str,
    report_type: str = "shift",
    unit: str | None = None,
    filter_values=None,
    dates=None,
    filter_type: str | None = None,
    additional_filter_values=None,
    client: httpx.Client | None = None,
    env: str = "production",
) -> TrendTable:
    """Fetch a trend the server already assembled and wrap it as a TrendTable."""
    params = {
        "group": group,
        "firstColumn": first_column,
        "parameter": parameter,
        "reportType": report_type,
    }
    if unit:
        params["unit"] = unit
    if _joined(filter_values):
        params["filterValues"] = _joined(filter_values)
    if _joined(dates):
        params["dates"] = _joined(dates)
    if filter_type and _joined(additional_filter_values):
        params["filterType"] = filter_type
        params["additionalFilterValues"] = _joined(additional_filter_values)

    payload = _get(TREND_ENDPOINT, params, client, env)
    if not isinstance(payload, dict):
        raise ValueError(f"Malformed trend payload: {type(payload).__name__}")

    table = TrendTable.from_dict({"reportType": report_type, **payload})
    logger.info(f"Ingested server {parameter} trend with {len(table.labels)} labels")
    return table
