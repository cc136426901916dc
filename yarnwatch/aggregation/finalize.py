"""Convert accumulated sums into displayed metric values.

Two finalizer policies exist and are kept apart on purpose: the grouped
search report and the trend engine round and fill empty groups
differently, and report consumers depend on each convention.

    metric type        search policy                    trend policy
    perLength          sum/length*100, 0 dp, "N/A"      sum/length*100, 2 dp, "0.00"
    simpleAvg          sum/observations, 2 dp, "N/A"    sum/records, 2 dp, "0.00"
    perRefLength       -                                sum/refLength, 2 dp, "0.00"
    customTotal(HS)IPI total/refLength, 0 dp, "N/A"     total/refLength, 0 dp, "N/A"
    rawCount           plain sum                        plain sum
"""

from dataclasses import dataclass

import pandas as pd

from yarnwatch.aggregation.accumulate import count_column, sum_column
from yarnwatch.aggregation.catalog import ReportColumn
from yarnwatch.utils.types import MetricType


@dataclass(frozen=True)
class FinalizerPolicy:
    name: str
    per_length_decimals: int
    simple_avg_decimals: int
    ref_length_decimals: int
    index_decimals: int
    empty: str
    index_empty: str
    average_over: str  # "observations" | "records"


SEARCH_POLICY = FinalizerPolicy(
    name="search",
    per_length_decimals=0,
    simple_avg_decimals=2,
    ref_length_decimals=0,
    index_decimals=0,
    empty="N/A",
    index_empty="N/A",
    average_over="observations",
)

TREND_POLICY = FinalizerPolicy(
    name="trend",
    per_length_decimals=2,
    simple_avg_decimals=2,
    ref_length_decimals=2,
    index_decimals=0,
    empty="0.00",
    index_empty="N/A",
    average_over="records",
)


def format_fixed(value: float, decimals: int) -> str:
    text = f"{value:.{decimals}f}"
    if text.startswith("-") and float(text) == 0:
        return text[1:]
    return text


def format_raw_count(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def _ratio(
    numerator: pd.Series,
    denominator: pd.Series,
    decimals: int,
    empty: str,
    scale: float = 1.0,
) -> pd.Series:
    numerator = numerator.astype(float)
    denominator = denominator.astype(float)
    valid = denominator > 0

    out = pd.Series(empty, index=numerator.index, dtype=object)
    if valid.any():
        values = numerator[valid] / denominator[valid] * scale
        out[valid] = values.map(lambda v: format_fixed(v, decimals))
    return out


def finalize(
    acc: pd.DataFrame,
    metric: str | None,
    metric_type: MetricType,
    policy: FinalizerPolicy,
) -> pd.Series:
    """Displayed value per accumulator row for one metric."""
    if acc.empty:
        return pd.Series([], index=acc.index, dtype=object)

    match metric_type:
        case MetricType.PER_LENGTH:
            return _ratio(
                acc[sum_column(metric)], acc["total_length"],
                policy.per_length_decimals, policy.empty, scale=100.0,
            )
        case MetricType.SIMPLE_AVG:
            counts = acc["records"] if policy.average_over == "records" else acc[count_column(metric)]
            return _ratio(acc[sum_column(metric)], counts, policy.simple_avg_decimals, policy.empty)
        case MetricType.PER_REF_LENGTH:
            return _ratio(
                acc[sum_column(metric)], acc["ref_length"],
                policy.ref_length_decimals, policy.empty,
            )
        case MetricType.CUSTOM_TOTAL_IPI:
            return _ratio(acc["total_ipi"], acc["ref_length"], policy.index_decimals, policy.index_empty)
        case MetricType.CUSTOM_TOTAL_HSIPI:
            return _ratio(acc["total_hsipi"], acc["ref_length"], policy.index_decimals, policy.index_empty)
        case MetricType.RAW_COUNT:
            column = "total_alarms" if metric == "totalAlarms" else sum_column(metric)
            return acc[column].map(format_raw_count).astype(object)
        case other:
            raise ValueError(f"Unsupported metric type: {other}")


def finalize_columns(
    acc: pd.DataFrame,
    columns: list[ReportColumn],
    policy: FinalizerPolicy,
) -> pd.DataFrame:
    """Finalize a set of report columns, one output column per title."""
    out = pd.DataFrame(index=acc.index)
    for column in columns:
        out[column.title] = finalize(acc, column.field, column.type, policy)
    return out
