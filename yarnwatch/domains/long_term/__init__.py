"""Long-term report domain: record fetch, trend report and grouped search report."""

from yarnwatch.aggregation.models import ProductionRecordSchema
from yarnwatch.aggregation.request import AggregationRequest, build_request
from yarnwatch.aggregation.trend import build_trend, ensure_normalized
from yarnwatch.domains.long_term.ingest import ingest_article_suggestions, ingest_long_term_records
from yarnwatch.domains.long_term.search import SearchReport, build_search_report, search_request
from yarnwatch.domains.long_term.session import ReportSession
from yarnwatch.utils.validators import validate_dataframe


def validate(records=None) -> dict:
    """Run pandera validation against the normalized record schema."""
    if records is None:
        return {"status": "skipped", "reason": "no records loaded"}
    return validate_dataframe(ensure_normalized(records), ProductionRecordSchema)


def run(
    records=None,
    request: AggregationRequest | None = None,
    search: AggregationRequest | None = None,
    visible_columns: list[str] | None = None,
    env: str = "production",
):
    """Fetch (unless records are given), validate, then build the trend and search reports."""
    raw = records if records is not None else ingest_long_term_records(env=env)
    frame = ensure_normalized(raw)
    result = validate(frame)
    if result["status"] == "error":
        raise ValueError(f"Long-term records failed validation: {'; '.join(result['errors'])}")

    request = request or build_request()
    search = search or search_request()
    return {
        "trend": build_trend(frame, request),
        "search": build_search_report(frame, search, visible_columns),
    }
