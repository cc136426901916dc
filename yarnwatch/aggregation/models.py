"""Pandera schemas for normalized production records and accumulator frames."""

import pandas as pd
import pandera as pa
from pandera import Check, Column

from yarnwatch.aggregation.catalog import COMPOSITE_METRICS, NUMERIC_METRICS

_is_datetime = Check(
    lambda s: pd.api.types.is_datetime64_any_dtype(s),
    element_wise=False,
    error="shift_start_time must be a datetime column",
)

ProductionRecordSchema = pa.DataFrameSchema(
    columns={
        "shift_start_time": Column(None, _is_datetime, nullable=False),
        "mill_unit": Column(None, nullable=True),
        "machine_name": Column(None, nullable=True),
        "article_number": Column(None, nullable=True),
        "article_name": Column(None, nullable=True),
        "lot_id": Column(None, nullable=True),
        "yarn_length": Column(float, Check.ge(0), nullable=False),
        "ip_ref_length": Column(float, Check.ge(0), nullable=False),
        **{
            metric: Column(float, Check.ge(0), nullable=False)
            for metric in [*NUMERIC_METRICS, *COMPOSITE_METRICS]
        },
    },
    coerce=False,
    strict=False,
)


AccumulatorSchema = pa.DataFrameSchema(
    columns={
        "records": Column(int, Check.ge(1)),
        "total_length": Column(float, Check.ge(0)),
        "ref_length": Column(float, Check.ge(0)),
        "total_ipi": Column(float, Check.ge(0)),
        "total_hsipi": Column(float, Check.ge(0)),
        "total_alarms": Column(float, Check.ge(0)),
    },
    coerce=True,
    strict=False,
)
