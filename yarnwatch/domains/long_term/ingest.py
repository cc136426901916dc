"""Fetch long-term production records from the dashboard API."""

import logging
from datetime import date

import httpx

from yarnwatch.config import load_dashboard_config
from yarnwatch.utils.io import fetch_json
from yarnwatch.utils.types import RecordBatch
from yarnwatch.utils.validators import validate_record_batch

logger = logging.getLogger(__name__)

LONG_TERM_ENDPOINT = "/long-term/data"
ARTICLE_SUGGESTIONS_ENDPOINT = "/long-term/unique-article-numbers"


def _build_params(
    start_date: date | str | None,
    end_date: date | str | None,
    lot_ids: str | None,
    articles: str | None,
) -> dict[str, str]:
    params = {}
    if start_date:
        params["startDate"] = str(start_date)
    if end_date:
        params["endDate"] = str(end_date)
    if lot_ids:
        params["lotId"] = lot_ids
    if articles:
        params["articles"] = articles
    return params


def ingest_long_term_records(
    start_date: date | str | None = None,
    end_date: date | str | None = None,
    lot_ids: str | None = None,
    articles: str | None = None,
    client: httpx.Client | None = None,
    env: str = "production",
) -> RecordBatch:
    """Pull per-shift production records for a reporting window.

    Lot IDs and article numbers are comma separated, exactly as the search
    form submits them. A payload that is not a list of records is treated as
    a failed fetch.
    """
    config = load_dashboard_config(env)
    params = _build_params(start_date, end_date, lot_ids, articles)
    owns_client = client is None
    client = client or httpx.Client(base_url=config.api.base_url, timeout=config.api.timeout)

    try:
        payload = fetch_json(client, LONG_TERM_ENDPOINT, params, max_retries=config.api.max_retries)
    finally:
        if owns_client:
            client.close()

    check = validate_record_batch(payload)
    if not check["valid"]:
        raise ValueError(f"Malformed long-term payload: {'; '.join(check['errors'])}")

    logger.info(f"Ingested {len(payload)} long-term records with filters {params or 'none'}")
    return payload


def ingest_article_suggestions(
    query: str,
    client: httpx.Client | None = None,
    env: str = "production",
) -> list[str]:
    """Article numbers matching a partial query, for the article multi-select."""
    query = query.strip()
    if not query:
        return []

    config = load_dashboard_config(env)
    owns_client = client is None
    client = client or httpx.Client(base_url=config.api.base_url, timeout=config.api.timeout)

    try:
        payload = fetch_json(client, ARTICLE_SUGGESTIONS_ENDPOINT, {"q": query}, max_retries=config.api.max_retries)
    finally:
        if owns_client:
            client.close()

    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of article numbers, got {type(payload).__name__}")
    return [str(article) for article in payload]
