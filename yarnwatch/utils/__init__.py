"""Shared utilities for the dashboard engine."""

from yarnwatch.utils.io import fetch_json, read_records_file, write_json, write_output
from yarnwatch.utils.transforms import coerce_numeric, normalize_columns
from yarnwatch.utils.validators import validate_dataframe, validate_record_batch
from yarnwatch.utils.types import Granularity, GroupKey, MetricGroup, MetricType
