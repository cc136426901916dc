"""Grouped search report: one row per group key, one column per report metric."""

import logging
from dataclasses import dataclass, field

import pandas as pd

from yarnwatch.aggregation.accumulate import ALARM_BREAKDOWN_KEYS, accumulate, alarm_breakdown
from yarnwatch.aggregation.catalog import REPORT_COLUMNS, ReportColumn
from yarnwatch.aggregation.filters import apply_filters
from yarnwatch.aggregation.finalize import SEARCH_POLICY, FinalizerPolicy, finalize_columns
from yarnwatch.aggregation.grouping import (
    SEARCH_FALLBACK_LABEL,
    natural_sorted,
    resolve_labels,
    sort_buckets,
)
from yarnwatch.aggregation.request import AggregationRequest, build_request
from yarnwatch.aggregation.trend import ensure_normalized
from yarnwatch.utils.types import GroupKey, RecordBatch

logger = logging.getLogger(__name__)

GROUP_BY_LABELS = {
    GroupKey.UNIT: "Mill Unit",
    GroupKey.ARTICLE_NAME: "Article Name",
    GroupKey.ARTICLE_NUMBER: "Article Number",
    GroupKey.MACHINE_NAME: "Machine No",
    GroupKey.LOT_ID: "Lot ID",
    GroupKey.SHIFT_START_TIME: "Date",
}


@dataclass(frozen=True)
class SearchReport:
    group_label: str
    columns: list[str]
    rows: list[dict[str, str]]
    # group key -> alarm key -> summed alarm blocks
    alarms: dict[str, dict[str, float]] = field(default_factory=dict)

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(self.rows, columns=["groupKey", *self.columns])
        return frame.rename(columns={"groupKey": self.group_label}).set_index(self.group_label)

    def alarms_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame.from_dict(self.alarms, orient="index", columns=ALARM_BREAKDOWN_KEYS)
        frame.index.name = self.group_label
        return frame


def search_request(
    group_by: str = "MillUnit",
    report_type: str = "daily",
    filter_field: str | None = None,
    filter_values=None,
    start_date=None,
    end_date=None,
    fallback_label: str = SEARCH_FALLBACK_LABEL,
) -> AggregationRequest:
    """Request for the search report, which falls back to "N/A" labels."""
    return build_request(
        group_key=group_by,
        granularity=report_type,
        filter_field=filter_field,
        filter_values=filter_values,
        start_date=start_date,
        end_date=end_date,
        hide_empty_latest=False,
        fallback_label=fallback_label,
        drill_down=False,
    )


def build_search_report(
    records: RecordBatch | pd.DataFrame,
    request: AggregationRequest,
    visible_columns: list[str] | None = None,
    policy: FinalizerPolicy = SEARCH_POLICY,
) -> SearchReport:
    """Group records by the request's key and finalize every report column.

    Date grouping uses the request's granularity (daily, weekly or monthly
    buckets); any other key is sorted naturally.
    """
    columns: list[ReportColumn] = [
        c for c in REPORT_COLUMNS if visible_columns is None or c.title in visible_columns
    ]
    group_label = GROUP_BY_LABELS[request.group_key]

    frame = ensure_normalized(records)
    selected = apply_filters(frame, request)
    if selected.empty:
        logger.info("Search report has no records after selection")
        return SearchReport(group_label=group_label, columns=[c.title for c in columns], rows=[])

    work = selected.copy()
    work["group_key"] = resolve_labels(work, request.group_key, request.fallback_label, request.granularity)

    fields = [c.field for c in REPORT_COLUMNS if c.field]
    acc = accumulate(work, ["group_key"], fields, include_alarms=True)
    finalized = finalize_columns(acc, columns, policy)
    finalized.index = acc["group_key"]

    if request.group_key is GroupKey.SHIFT_START_TIME:
        order = sort_buckets(acc["group_key"], request.granularity)
    else:
        order = natural_sorted(acc["group_key"].unique())

    rows = [{"groupKey": key, **finalized.loc[key].to_dict()} for key in order]
    by_key = acc.set_index("group_key")
    alarms = {key: alarm_breakdown(by_key.loc[key]) for key in order}
    logger.info(f"Search report grouped {len(selected)} records into {len(rows)} rows by {group_label}")
    return SearchReport(group_label=group_label, columns=[c.title for c in columns], rows=rows, alarms=alarms)
