"""Immutable description of one aggregation pass."""

from dataclasses import dataclass
from datetime import date

from yarnwatch.aggregation.catalog import (
    DEFAULT_GROUP_PARAMETERS,
    GROUP_PARAMETERS,
    canonical_metric,
    metric_group_of,
    trend_metric_type,
)
from yarnwatch.aggregation.grouping import TREND_FALLBACK_LABEL
from yarnwatch.utils.types import Granularity, GroupKey, MetricGroup, MetricType


@dataclass(frozen=True)
class AggregationRequest:
    group_key: GroupKey = GroupKey.UNIT
    granularity: Granularity = Granularity.DAILY
    metric_group: MetricGroup = MetricGroup.QUALITY
    metric: str | None = None
    hide_empty_latest: bool = True
    label_values: tuple[str, ...] = ()
    filter_field: GroupKey | None = None
    filter_values: tuple[str, ...] = ()
    unit: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    fallback_label: str = TREND_FALLBACK_LABEL
    drill_down: bool = True

    def __post_init__(self):
        if self.metric is not None and self.metric not in GROUP_PARAMETERS[self.metric_group]:
            raise ValueError(
                f"Metric {self.metric} is not a {self.metric_group} parameter"
            )
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(f"Start date {self.start_date} is after end date {self.end_date}")

    @property
    def parameter(self) -> str:
        return self.metric or DEFAULT_GROUP_PARAMETERS[self.metric_group]

    @property
    def metric_type(self) -> MetricType:
        return trend_metric_type(self.metric_group, self.parameter)


def _as_date(value: date | str | None) -> date | None:
    match value:
        case None | "":
            return None
        case date():
            return value
        case str():
            return date.fromisoformat(value)
        case other:
            raise ValueError(f"Cannot interpret {other!r} as a date")


def _as_values(values) -> tuple[str, ...]:
    match values:
        case None | "":
            return ()
        case str():
            return tuple(v.strip() for v in values.split(",") if v.strip())
        case _:
            return tuple(str(v) for v in values)


def build_request(
    group_key: str = "unit",
    granularity: str = "daily",
    metric_group: str | None = None,
    metric: str | None = None,
    hide_empty_latest: bool = True,
    label_values=None,
    filter_field: str | None = None,
    filter_values=None,
    unit: str | None = None,
    start_date: date | str | None = None,
    end_date: date | str | None = None,
    fallback_label: str = TREND_FALLBACK_LABEL,
    drill_down: bool = True,
) -> AggregationRequest:
    """Build a request from loosely typed UI or CLI options.

    Comma separated strings are accepted for the value lists, matching the
    query-string form the dashboard sends. Without a metric group the group
    is taken from the metric, else quality.
    """
    try:
        parsed_granularity = Granularity(granularity.lower())
        if metric_group:
            parsed_group = MetricGroup(metric_group.lower())
        else:
            parsed_group = metric_group_of(metric) if metric else MetricGroup.QUALITY
    except ValueError as exc:
        raise ValueError(f"Invalid aggregation option: {exc}") from exc

    return AggregationRequest(
        group_key=GroupKey.parse(group_key),
        granularity=parsed_granularity,
        metric_group=parsed_group,
        metric=canonical_metric(metric) if metric else None,
        hide_empty_latest=hide_empty_latest,
        label_values=_as_values(label_values),
        filter_field=GroupKey.parse(filter_field) if filter_field else None,
        filter_values=_as_values(filter_values),
        unit=unit or None,
        start_date=_as_date(start_date),
        end_date=_as_date(end_date),
        fallback_label=fallback_label,
        drill_down=drill_down,
    )
