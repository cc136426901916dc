"""Normalize raw production records into the frame the aggregation engine reads."""

import logging

import pandas as pd

from yarnwatch.aggregation.catalog import (
    ALARM_COLUMNS,
    HSIPI_COMPONENTS,
    IPI_COMPONENTS,
    NUMERIC_METRICS,
    RATIO_METRICS,
    canonical_metric,
)
from yarnwatch.utils.transforms import coerce_numeric, count_numeric, normalize_columns, row_sum
from yarnwatch.utils.types import RecordBatch

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "ShiftStartTime": "shift_start_time",
    "MillUnit": "mill_unit",
    "MachineName": "machine_name",
    "ArticleNumber": "article_number",
    "ArticleName": "article_name",
    "LotID": "lot_id",
    "ShiftNumber": "shift_number",
    "YarnLength": "yarn_length",
    "IPRefLength": "ip_ref_length",
}

DIMENSION_COLUMNS = ["mill_unit", "machine_name", "article_number", "article_name", "lot_id"]
LENGTH_COLUMNS = ["yarn_length", "ip_ref_length"]


def observation_column(metric: str) -> str:
    return f"{metric}__obs"


def _dimension_text(value) -> str | None:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # numeric ids lose their int dtype when a batch has gaps
        return str(int(value))
    return str(value)


def _as_text(series: pd.Series) -> pd.Series:
    return pd.Series([_dimension_text(v) for v in series], index=series.index, dtype=object)


def _canonicalize_metric_columns(df: pd.DataFrame) -> pd.DataFrame:
    renames = {}
    for col in df.columns:
        if col in FIELD_MAP.values():
            continue
        try:
            name = canonical_metric(col)
        except ValueError:
            continue
        if name != col and name not in df.columns:
            renames[col] = name
    return df.rename(columns=renames)


def _to_frame(records: RecordBatch | pd.DataFrame) -> pd.DataFrame:
    match records:
        case pd.DataFrame():
            return records.copy()
        case list() | tuple() if all(isinstance(r, dict) for r in records):
            return pd.DataFrame.from_records(list(records))
        case _:
            raise TypeError(
                f"Expected a list of record mappings or a DataFrame, got {type(records).__name__}"
            )


def normalize_records(records: RecordBatch | pd.DataFrame) -> pd.DataFrame:
    """Turn API records into a clean, fully numeric production frame.

    - dimension and length columns renamed to snake_case
    - metric columns renamed to their catalog casing
    - every metric coerced to float, missing or non-numeric values become 0
    - ratio metrics keep a per-row flag of whether a real value was observed
    - composite IPI, HSIPI and totalAlarms derived per record
    - records without a parseable shift start time are dropped
    """
    df = _to_frame(records)
    df = normalize_columns(df, FIELD_MAP)
    df = _canonicalize_metric_columns(df)

    for col in DIMENSION_COLUMNS:
        df[col] = _as_text(df[col] if col in df.columns else pd.Series(None, index=df.index, dtype=object))

    observed = count_numeric(df, RATIO_METRICS)
    for metric in RATIO_METRICS:
        df[observation_column(metric)] = observed[metric]

    df = coerce_numeric(df, [*NUMERIC_METRICS, *LENGTH_COLUMNS])

    df["IPI"] = row_sum(df, IPI_COMPONENTS)
    df["HSIPI"] = row_sum(df, HSIPI_COMPONENTS)
    df["totalAlarms"] = row_sum(df, ALARM_COLUMNS)

    if "shift_number" in df.columns:
        df["shift_number"] = pd.to_numeric(df["shift_number"], errors="coerce")
    else:
        df["shift_number"] = float("nan")

    raw_times = df["shift_start_time"] if "shift_start_time" in df.columns else pd.Series(None, index=df.index)
    df["shift_start_time"] = pd.to_datetime(raw_times, errors="coerce", utc=True, format="ISO8601")

    unparsed = df["shift_start_time"].isna()
    if unparsed.any():
        logger.debug(f"Dropping {int(unparsed.sum())} records without a parseable shift start time")
        df = df[~unparsed]

    df = df.reset_index(drop=True)
    df.attrs["normalized"] = True
    logger.info(f"Normalized {len(df)} production records")
    return df
