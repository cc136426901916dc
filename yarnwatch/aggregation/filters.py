"""Selection layer: narrows the record frame before grouping."""

import logging

import pandas as pd

from yarnwatch.aggregation.grouping import natural_sorted, resolve_labels, resolve_values
from yarnwatch.aggregation.request import AggregationRequest
from yarnwatch.utils.types import GroupKey

logger = logging.getLogger(__name__)


def filter_date_range(frame: pd.DataFrame, request: AggregationRequest) -> pd.DataFrame:
    """Keep records whose shift start date falls inside the inclusive range."""
    if frame.empty or (request.start_date is None and request.end_date is None):
        return frame
    days = frame["shift_start_time"].dt.date
    mask = pd.Series(True, index=frame.index)
    if request.start_date is not None:
        mask &= days >= request.start_date
    if request.end_date is not None:
        mask &= days <= request.end_date
    return frame[mask]


def apply_filters(frame: pd.DataFrame, request: AggregationRequest) -> pd.DataFrame:
    """Apply date range, unit, selected labels and the secondary filter.

    Values are compared after resolving them with the request's fallback
    label, so selecting "N/A" (or "Unknown") matches records that lack the
    dimension entirely.
    """
    before = len(frame)
    frame = filter_date_range(frame, request)

    if request.unit:
        frame = frame[frame["mill_unit"] == request.unit]

    if request.label_values:
        labels = resolve_labels(frame, request.group_key, request.fallback_label, request.granularity)
        frame = frame[labels.isin(request.label_values)]

    if request.filter_field is not None and request.filter_values:
        values = resolve_values(frame, request.filter_field.column, request.fallback_label)
        frame = frame[values.isin(request.filter_values)]

    if len(frame) != before:
        logger.debug(f"Selection kept {len(frame)} of {before} records")
    return frame


def unique_values(frame: pd.DataFrame, field: GroupKey | str, fallback: str) -> list[str]:
    """Distinct resolved values of a dimension, as offered by a multi-select."""
    if frame.empty:
        return []
    column = GroupKey.parse(field).column
    return natural_sorted(resolve_values(frame, column, fallback).unique())
