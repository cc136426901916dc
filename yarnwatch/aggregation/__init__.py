"""Trend/aggregation engine: records in, presentation-ready tables out."""

from yarnwatch.aggregation.accumulate import accumulate, accumulate_with_drill_down, alarm_breakdown
from yarnwatch.aggregation.assemble import DrillDown, TrendTable, assemble_trend, header_rows, percent_change
from yarnwatch.aggregation.filters import apply_filters, unique_values
from yarnwatch.aggregation.finalize import SEARCH_POLICY, TREND_POLICY, FinalizerPolicy, finalize
from yarnwatch.aggregation.grouping import (
    SEARCH_FALLBACK_LABEL,
    TREND_FALLBACK_LABEL,
    group_records,
    natural_sorted,
)
from yarnwatch.aggregation.request import AggregationRequest, build_request
from yarnwatch.aggregation.transform import normalize_records
from yarnwatch.aggregation.trend import build_trend
