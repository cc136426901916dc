"""Time bucketing, label resolution and ordering for aggregation passes."""

import logging
import re

import numpy as np
import pandas as pd

from yarnwatch.utils.types import Granularity, GroupKey

logger = logging.getLogger(__name__)

TREND_FALLBACK_LABEL = "Unknown"
SEARCH_FALLBACK_LABEL = "N/A"

# Fixed day-of-month cut points, not ISO weeks.
WEEK_CUTOFFS = [7, 14, 21, 28]

DEFAULT_SHIFT_HOURS = {
    1: (6, 14),
    2: (14, 22),
    3: (22, 6),
}

_DIGITS = re.compile(r"(\d+)")
_WEEK_LABEL = re.compile(r"^(\d+)-W(\d+)$")


def natural_key(value: str) -> tuple:
    """Numeric-aware, case-insensitive sort key: "M2" sorts before "M10"."""
    parts = _DIGITS.split(str(value).casefold())
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p != "")


def natural_sorted(values) -> list[str]:
    return sorted(values, key=lambda v: (natural_key(v), str(v)))


def week_of_month(day: int) -> int:
    for index, cutoff in enumerate(WEEK_CUTOFFS, start=1):
        if day <= cutoff:
            return index
    return len(WEEK_CUTOFFS) + 1


def shift_for_hour(hour: int, shift_hours: dict[int, tuple[int, int]] | None = None) -> int | None:
    """Find the shift whose [start, end) window contains the hour."""
    for shift, (start_h, end_h) in (shift_hours or DEFAULT_SHIFT_HOURS).items():
        if start_h < end_h and start_h <= hour < end_h:
            return shift
        if start_h >= end_h and (hour >= start_h or hour < end_h):
            return shift
    return None


def shift_numbers(
    frame: pd.DataFrame,
    shift_hours: dict[int, tuple[int, int]] | None = None,
) -> pd.Series:
    """Shift number per record, from the record itself or from its start hour."""
    derived = frame["shift_start_time"].dt.hour.map(lambda h: shift_for_hour(int(h), shift_hours))
    explicit = frame["shift_number"] if "shift_number" in frame.columns else pd.Series(np.nan, index=frame.index)
    numbers = explicit.where(explicit.notna(), derived)
    return numbers.map(lambda n: "0" if pd.isna(n) else str(int(n)))


def bucket_labels(
    frame: pd.DataFrame,
    granularity: Granularity,
    shift_hours: dict[int, tuple[int, int]] | None = None,
) -> pd.Series:
    """Map each record's shift start time onto its time bucket label."""
    times = frame["shift_start_time"]
    if frame.empty:
        return pd.Series([], index=frame.index, dtype=object)

    match granularity:
        case Granularity.DAILY:
            return times.dt.strftime("%Y-%m-%d").astype(object)
        case Granularity.WEEKLY:
            weeks = times.dt.day.map(week_of_month)
            return (times.dt.month.astype(str) + "-W" + weeks.astype(str)).astype(object)
        case Granularity.MONTHLY:
            return times.dt.strftime("%Y-%m").astype(object)
        case Granularity.SHIFT:
            days = times.dt.strftime("%Y-%m-%d")
            return (days + "_" + shift_numbers(frame, shift_hours)).astype(object)
        case other:
            raise ValueError(f"Unknown granularity: {other}")


def bucket_sort_key(granularity: Granularity):
    """Sort key for bucket labels of the given granularity."""
    match granularity:
        case Granularity.WEEKLY:
            def _weekly(label: str) -> tuple:
                parsed = _WEEK_LABEL.match(label)
                if parsed is None:
                    return (1, 0, 0, label)
                return (0, int(parsed.group(1)), int(parsed.group(2)), label)
            return _weekly
        case Granularity.SHIFT:
            def _shift(label: str) -> tuple:
                day, _, shift = label.partition("_")
                return (day, int(shift) if shift.isdigit() else 0, label)
            return _shift
        case _:
            return lambda label: label


def sort_buckets(buckets, granularity: Granularity) -> list[str]:
    return sorted(set(buckets), key=bucket_sort_key(granularity))


def bucket_date(key: str) -> str:
    """Date part of a bucket key ("2024-01-01_2" -> "2024-01-01")."""
    return key.partition("_")[0]


def resolve_values(frame: pd.DataFrame, column: str, fallback: str) -> pd.Series:
    """Read a dimension column, substituting the fallback for missing or empty values."""
    if column not in frame.columns:
        return pd.Series(fallback, index=frame.index, dtype=object)
    values = frame[column]
    missing = values.isna() | (values.astype(str) == "")
    return values.where(~missing, fallback).astype(str).astype(object)


def resolve_labels(
    frame: pd.DataFrame,
    group_key: GroupKey,
    fallback: str,
    granularity: Granularity = Granularity.DAILY,
    shift_hours: dict[int, tuple[int, int]] | None = None,
) -> pd.Series:
    """Row label per record for the configured group key."""
    if group_key is GroupKey.SHIFT_START_TIME:
        return bucket_labels(frame, granularity, shift_hours)
    return resolve_values(frame, group_key.column, fallback)


def group_records(
    frame: pd.DataFrame,
    group_key: GroupKey,
    granularity: Granularity,
    fallback: str,
    shift_hours: dict[int, tuple[int, int]] | None = None,
) -> pd.DataFrame:
    """Attach bucket, label and machine key columns to a filtered frame.

    The frame is partitioned conceptually by (bucket, label); the records are
    folded into accumulators downstream rather than materialized per group.
    """
    grouped = frame.copy()
    grouped["bucket"] = bucket_labels(grouped, granularity, shift_hours)
    grouped["label"] = resolve_labels(grouped, group_key, fallback, granularity, shift_hours)
    grouped["machine"] = resolve_values(grouped, "machine_name", fallback)
    logger.debug(
        f"Grouped {len(grouped)} records into {grouped['bucket'].nunique()} buckets "
        f"and {grouped['label'].nunique()} labels"
    )
    return grouped
