"""Selection layer and request building."""

from datetime import date

import pytest

from yarnwatch.aggregation.filters import apply_filters, unique_values
from yarnwatch.aggregation.request import AggregationRequest, build_request
from yarnwatch.aggregation.transform import normalize_records
from yarnwatch.utils.types import Granularity, GroupKey, MetricGroup, MetricType


@pytest.fixture
def frame(record):
    return normalize_records([
        record(ShiftStartTime="2024-01-01T06:00:00", MillUnit="U1", MachineName="M1"),
        record(ShiftStartTime="2024-01-02T06:00:00", MillUnit="U2", MachineName="M10"),
        record(ShiftStartTime="2024-01-03T06:00:00", MillUnit="U1", MachineName=None),
        record(ShiftStartTime="2024-01-04T06:00:00", MillUnit="U1", MachineName="M2"),
    ])


class TestApplyFilters:

    def test_date_range_is_inclusive(self, frame):
        request = build_request(start_date="2024-01-02", end_date="2024-01-03")
        assert len(apply_filters(frame, request)) == 2

    def test_unit(self, frame):
        assert len(apply_filters(frame, build_request(unit="U2"))) == 1

    def test_label_values(self, frame):
        request = build_request(group_key="machineName", label_values="M1,M2")
        selected = apply_filters(frame, request)
        assert sorted(selected["machine_name"]) == ["M1", "M2"]

    def test_secondary_filter_matches_fallback(self, frame):
        request = build_request(filter_field="MachineName", filter_values=["N/A"], fallback_label="N/A")
        selected = apply_filters(frame, request)
        assert len(selected) == 1
        assert selected["machine_name"].isna().all()

    def test_no_filters_keeps_everything(self, frame):
        assert len(apply_filters(frame, build_request())) == len(frame)


class TestUniqueValues:

    def test_natural_order_with_fallback(self, frame):
        assert unique_values(frame, "machineName", "Unknown") == ["M1", "M2", "M10", "Unknown"]

    def test_empty_frame(self):
        assert unique_values(normalize_records([]), "unit", "Unknown") == []


class TestBuildRequest:

    def test_parses_loose_options(self):
        request = build_request(
            group_key="ArticleNumber",
            granularity="Weekly",
            metric_group="cuts",
            metric="ncuts",
            filter_values="A1, A2",
            start_date="2024-01-01",
        )
        assert request.group_key is GroupKey.ARTICLE_NUMBER
        assert request.granularity is Granularity.WEEKLY
        assert request.metric == "NCuts"
        assert request.filter_values == ("A1", "A2")
        assert request.start_date == date(2024, 1, 1)

    def test_group_inferred_from_metric(self):
        assert build_request(metric="PPCuts").metric_group is MetricGroup.CUTS
        assert build_request(metric="yablks").metric_group is MetricGroup.ALARMS
        assert build_request().metric_group is MetricGroup.QUALITY

    def test_default_parameter_per_group(self):
        assert build_request(metric_group="quality").parameter == "IPI"
        assert build_request(metric_group="alarms").parameter == "totalAlarms"

    def test_metric_types(self):
        assert build_request(metric_group="quality", metric="CVAvg").metric_type is MetricType.SIMPLE_AVG
        assert build_request(metric_group="quality", metric="Nep200").metric_type is MetricType.PER_REF_LENGTH
        assert build_request(metric_group="cmt", metric="B_A1Events").metric_type is MetricType.PER_LENGTH
        assert build_request(metric_group="alarms", metric="YABlks").metric_type is MetricType.RAW_COUNT

    @pytest.mark.parametrize("options", [
        {"group_key": "color"},
        {"granularity": "hourly"},
        {"metric_group": "energy"},
        {"metric": "NotAMetric"},
        {"metric_group": "cuts", "metric": "Nep200"},
        {"start_date": "2024-02-01", "end_date": "2024-01-01"},
    ])
    def test_invalid_options_raise(self, options):
        with pytest.raises(ValueError):
            build_request(**options)

    def test_request_is_immutable(self):
        request = AggregationRequest(metric_group=MetricGroup.CUTS)
        with pytest.raises(AttributeError):
            request.metric = "NCuts"
