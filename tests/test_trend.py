"""Full trend passes from raw records."""

import random

import pytest

from yarnwatch.aggregation.request import build_request
from yarnwatch.aggregation.transform import normalize_records
from yarnwatch.aggregation.trend import build_trend


class TestBuildTrend:

    def test_two_records_per_length(self, two_shift_records):
        request = build_request(metric_group="cuts", metric="YarnFaults")
        table = build_trend(two_shift_records, request)
        assert table.labels == ["U1"]
        assert table.dates == ["2024-01-01"]
        assert table.data == [{"date": "2024-01-01", "U1": "1.50"}]

    def test_drill_down_by_machine(self, two_shift_records):
        request = build_request(metric_group="cuts", metric="YarnFaults")
        table = build_trend(two_shift_records, request)
        drill = table.drill_down["U1"]
        assert drill.labels == ["M1", "M2"]
        assert drill.data == [{"date": "2024-01-01", "M1": "1.00", "M2": "2.00"}]

    def test_drill_down_can_be_skipped(self, two_shift_records):
        request = build_request(metric_group="cuts", metric="YarnFaults", drill_down=False)
        assert build_trend(two_shift_records, request).drill_down == {}

    def test_growth_between_days(self, record):
        records = [
            record(YarnFaults=10),
            record(YarnFaults=15, ShiftStartTime="2024-01-02T06:00:00"),
        ]
        table = build_trend(records, build_request(metric_group="cuts", metric="YarnFaults"))
        assert table.deltas == {"U1": "+50.0%"}

    def test_new_label(self, record):
        records = [
            record(YarnFaults=0),
            record(YarnFaults=5, ShiftStartTime="2024-01-02T06:00:00"),
        ]
        table = build_trend(records, build_request(metric_group="cuts", metric="YarnFaults"))
        assert table.deltas == {"U1": "New"}

    def test_quality_metrics(self, record):
        records = [
            record(Thin50=10, Thick50=20, Nep200=30, IPRefLength=10, CVAvg=12),
            record(Thin50=0, Thick50=0, Nep200=0, IPRefLength=10, CVAvg=None),
        ]
        ipi = build_trend(records, build_request(metric_group="quality"))
        assert ipi.data == [{"date": "2024-01-01", "U1": "3.00"}]
        cv = build_trend(records, build_request(metric_group="quality", metric="CVAvg"))
        assert cv.data == [{"date": "2024-01-01", "U1": "6.00"}]

    def test_alarm_totals(self, record):
        records = [record(NSABlks=2, YABlks=9), record(FABlks=3)]
        table = build_trend(records, build_request(metric_group="alarms"))
        assert table.data == [{"date": "2024-01-01", "U1": "5"}]

    def test_unknown_label_for_missing_dimension(self, record):
        records = [record(ArticleName=None, YarnFaults=1)]
        request = build_request(group_key="articleName", metric_group="cuts")
        assert build_trend(records, request).labels == ["Unknown"]

    def test_numeric_units_in_a_batch_with_gaps(self, record):
        records = [record(MillUnit=1, YarnFaults=4), record(MillUnit=None, YarnFaults=2)]
        table = build_trend(records, build_request(metric_group="cuts"))
        assert table.labels == ["1", "Unknown"]
        assert build_trend(records, build_request(metric_group="cuts", unit="1")).labels == ["1"]

    def test_labels_without_latest_value_are_hidden(self, record):
        records = [
            record(MillUnit="U1", YarnFaults=1),
            record(MillUnit="U2", YarnFaults=1),
            record(MillUnit="U1", YarnFaults=2, ShiftStartTime="2024-01-02T06:00:00"),
        ]
        request = build_request(metric_group="cuts")
        assert build_trend(records, request).labels == ["U1"]
        shown = build_trend(records, build_request(metric_group="cuts", hide_empty_latest=False))
        assert shown.labels == ["U1", "U2"]

    def test_weekly_trend(self, record):
        records = [
            record(YarnFaults=1, ShiftStartTime="2024-01-07T06:00:00"),
            record(YarnFaults=3, ShiftStartTime="2024-01-08T06:00:00"),
        ]
        table = build_trend(records, build_request(granularity="weekly", metric_group="cuts"))
        assert table.all_keys == ["1-W1", "1-W2"]
        assert table.deltas == {"U1": "+200.0%"}

    def test_shift_trend(self, record):
        records = [
            record(YarnFaults=1, ShiftStartTime="2024-01-01T06:00:00"),
            record(YarnFaults=2, ShiftStartTime="2024-01-01T14:00:00"),
        ]
        table = build_trend(records, build_request(granularity="shift", metric_group="cuts"))
        assert table.all_keys == ["2024-01-01_1", "2024-01-01_2"]
        assert table.dates == ["2024-01-01"]
        assert table.is_shift_report

    def test_custom_shift_schedule(self, record):
        records = [record(YarnFaults=1, ShiftStartTime="2024-01-01T08:00:00")]
        request = build_request(granularity="shift", metric_group="cuts")
        table = build_trend(records, request, shift_hours={1: (8, 20), 2: (20, 8)})
        assert table.all_keys == ["2024-01-01_1"]

    def test_empty_input(self):
        table = build_trend([], build_request())
        assert table.labels == [] and table.dates == [] and table.data == []

    def test_everything_filtered_out(self, two_shift_records):
        table = build_trend(two_shift_records, build_request(unit="U9"))
        assert table.to_dict()["labels"] == []

    def test_idempotent_and_order_independent(self, record):
        records = [
            record(MillUnit=f"U{i % 3}", MachineName=f"M{i % 4}", YarnFaults=i,
                   ShiftStartTime=f"2024-01-0{1 + i % 5}T06:00:00")
            for i in range(20)
        ]
        request = build_request(metric_group="cuts", hide_empty_latest=False)
        first = build_trend(records, request)
        assert build_trend(records, request) == first

        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        assert build_trend(shuffled, request) == first

    def test_accepts_normalized_frame(self, normalized):
        request = build_request(metric_group="cuts")
        assert build_trend(normalized, request).data == [{"date": "2024-01-01", "U1": "1.50"}]

    def test_rejects_malformed_records(self):
        with pytest.raises(TypeError):
            build_trend({"not": "a list"}, build_request())
