"""Command line runner with file input and output."""

import json

import pytest

from yarnwatch.run import build_parser, main


@pytest.fixture
def records_file(tmp_path, two_shift_records):
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"data": two_shift_records}))
    return path


class TestCommands:

    def test_trend_to_json(self, records_file, tmp_path):
        out = tmp_path / "trend.json"
        code = main(["trend", "--input", str(records_file), "--metric-group", "cuts", "--output", str(out)])
        assert code == 0
        payload = json.loads(out.read_text())
        assert payload["data"] == [{"date": "2024-01-01", "U1": "1.50"}]
        assert payload["reportType"] == "daily"
        assert payload["drillDownData"]["U1"]["labels"] == ["M1", "M2"]

    def test_search_to_json(self, records_file, tmp_path):
        out = tmp_path / "search.json"
        code = main(["search", "--input", str(records_file), "--columns", "YF,IPI", "--output", str(out)])
        assert code == 0
        assert json.loads(out.read_text()) == [{"groupKey": "U1", "YF": "2", "IPI": "0"}]

    def test_search_alarm_breakdown(self, tmp_path, record):
        source = tmp_path / "alarms.json"
        source.write_text(json.dumps([record(NSABlks=2), record(NSABlks=1, LABlks=5)]))
        out = tmp_path / "breakdown.json"
        assert main(["search", "--input", str(source), "--alarms", "--output", str(out)]) == 0
        breakdown = json.loads(out.read_text())["U1"]
        assert breakdown["NSABlks"] == 3.0
        assert breakdown["LABlks"] == 5.0

    def test_search_to_csv(self, records_file, tmp_path):
        out = tmp_path / "search.csv"
        assert main(["search", "--input", str(records_file), "--columns", "YF", "--output", str(out)]) == 0
        assert out.read_text().splitlines() == ["Mill Unit,YF", "U1,2"]

    def test_trend_prints_table(self, records_file, capsys):
        assert main(["trend", "--input", str(records_file), "--metric-group", "cuts", "--drill-down"]) == 0
        assert "1.50" in capsys.readouterr().out

    def test_live_dashboard_cards(self, tmp_path):
        snapshot = tmp_path / "live.json"
        snapshot.write_text(json.dumps([{"unit": "Unit 1", "yarnFaults": 3.14, "totalAlarms": 2}]))
        out = tmp_path / "cards.json"
        assert main(["live", "--input", str(snapshot), "--dashboard", "--output", str(out)]) == 0
        assert json.loads(out.read_text())[0]["YF"] == "3.1"

    def test_validate(self, records_file):
        assert main(["validate", "--input", str(records_file)]) == 0

    def test_invalid_group_reports_error(self, records_file):
        assert main(["trend", "--input", str(records_file), "--group", "colour"]) == 2

    def test_unsupported_output_type(self, records_file, tmp_path):
        out = tmp_path / "trend.xml"
        assert main(["trend", "--input", str(records_file), "--output", str(out)]) == 2


class TestParser:

    def test_requires_a_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_granularity(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["trend", "--granularity", "hourly"])
