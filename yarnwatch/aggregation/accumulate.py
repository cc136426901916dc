"""Fold grouped production records into per-group running sums."""

import logging

import pandas as pd

from yarnwatch.aggregation.catalog import ALARM_COLUMNS
from yarnwatch.aggregation.transform import observation_column

logger = logging.getLogger(__name__)

# record column -> accumulator column
BASE_SUMS = {
    "yarn_length": "total_length",
    "ip_ref_length": "ref_length",
    "IPI": "total_ipi",
    "HSIPI": "total_hsipi",
    "totalAlarms": "total_alarms",
}

ALARM_BREAKDOWN_KEYS = ["YABlks", *ALARM_COLUMNS]


def sum_column(metric: str) -> str:
    return f"{metric}_sum"


def count_column(metric: str) -> str:
    return f"{metric}_count"


def accumulator_columns(metrics: list[str]) -> list[str]:
    columns = ["records", *BASE_SUMS.values()]
    for metric in metrics:
        columns += [sum_column(metric), count_column(metric)]
    return columns


def accumulate(
    frame: pd.DataFrame,
    keys: list[str],
    metrics: list[str],
    include_alarms: bool = False,
) -> pd.DataFrame:
    """Build one accumulator row per distinct key combination.

    Count metrics are summed, ratio metrics are summed alongside the number
    of numeric observations, and every group tracks its record count, yarn
    length, IP reference length, composite index totals and alarm total.
    """
    metrics = list(dict.fromkeys(metrics))
    if include_alarms:
        metrics += [m for m in ALARM_BREAKDOWN_KEYS if m not in metrics]

    if frame.empty:
        return pd.DataFrame(columns=[*keys, *accumulator_columns(metrics)])

    work = frame[keys].copy()
    work["records"] = 1
    for source, target in BASE_SUMS.items():
        work[target] = frame[source]

    for metric in metrics:
        work[sum_column(metric)] = frame[metric]
        obs = observation_column(metric)
        work[count_column(metric)] = frame[obs] if obs in frame.columns else 1

    acc = work.groupby(keys, sort=False).sum().reset_index()
    logger.debug(f"Accumulated {len(frame)} records into {len(acc)} groups over {keys}")
    return acc


def accumulate_with_drill_down(
    frame: pd.DataFrame,
    keys: list[str],
    drill_key: str,
    metrics: list[str],
    include_alarms: bool = False,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Accumulate by keys and, mirrored, by keys plus a secondary dimension."""
    acc = accumulate(frame, keys, metrics, include_alarms)
    drill = accumulate(frame, [*keys, drill_key], metrics, include_alarms)
    return acc, drill


def alarm_breakdown(row: pd.Series) -> dict[str, float]:
    """Nested alarm key -> count mapping for one accumulator row."""
    return {
        key: float(row[sum_column(key)])
        for key in ALARM_BREAKDOWN_KEYS
        if sum_column(key) in row.index
    }
