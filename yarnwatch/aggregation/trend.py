"""Trend pass: filter, group, accumulate, finalize and assemble in one call."""

import logging

import pandas as pd

from yarnwatch.aggregation.accumulate import accumulate_with_drill_down
from yarnwatch.aggregation.assemble import TrendTable, assemble_trend
from yarnwatch.aggregation.filters import apply_filters
from yarnwatch.aggregation.finalize import TREND_POLICY, FinalizerPolicy, finalize
from yarnwatch.aggregation.grouping import group_records
from yarnwatch.aggregation.request import AggregationRequest
from yarnwatch.aggregation.transform import normalize_records
from yarnwatch.utils.types import RecordBatch

logger = logging.getLogger(__name__)

TREND_KEYS = ["bucket", "label"]


def ensure_normalized(records: RecordBatch | pd.DataFrame) -> pd.DataFrame:
    """Normalize raw records unless the frame already came out of normalize_records."""
    if isinstance(records, pd.DataFrame) and records.attrs.get("normalized"):
        return records
    return normalize_records(records)


def _finalized(acc: pd.DataFrame, keys: list[str], request: AggregationRequest, policy: FinalizerPolicy) -> pd.DataFrame:
    values = acc[keys].copy()
    values["value"] = finalize(acc, request.parameter, request.metric_type, policy)
    return values


def build_trend(
    records: RecordBatch | pd.DataFrame,
    request: AggregationRequest,
    policy: FinalizerPolicy = TREND_POLICY,
    shift_hours: dict[int, tuple[int, int]] | None = None,
) -> TrendTable:
    """Run one full aggregation pass and return the assembled trend table.

    The pass reads only from its input and allocates fresh accumulators, so
    concurrent or repeated calls never interfere with each other.
    """
    frame = ensure_normalized(records)
    selected = apply_filters(frame, request)
    grouped = group_records(
        selected, request.group_key, request.granularity, request.fallback_label, shift_hours
    )

    acc, drill = accumulate_with_drill_down(grouped, TREND_KEYS, "machine", [request.parameter])
    values = _finalized(acc, TREND_KEYS, request, policy)
    drill_values = _finalized(drill, [*TREND_KEYS, "machine"], request, policy) if request.drill_down else None

    table = assemble_trend(values, request.granularity, request.hide_empty_latest, drill_values)
    logger.info(
        f"Built {request.parameter} trend ({request.granularity}) with "
        f"{len(table.labels)} labels over {len(table.all_keys)} buckets"
    )
    return table
