"""Live snapshot rollups and dashboard cards."""

import pytest

from yarnwatch.domains import live
from yarnwatch.domains.live.dashboard import format_one_decimal, select_units, unit_cards
from yarnwatch.domains.live.rollup import article_wise_rows, machine_wise_rollup, rollup_frame


@pytest.fixture
def unit_snapshot():
    return {
        "unit": "Unit 1",
        "shiftStartTime": "2024-01-01T06:00:00",
        "yarnFaults": 12.345,
        "totalAlarms": 7,
        "alarmsPer1000km": None,
        "articles": [
            {
                "articleNumber": "A10",
                "IPI": "40",
                "machines": [
                    {"machineName": "AC-M10", "YarnFaults": "3", "NCuts": "1", "totalAlarms": 2,
                     "alarmBreakdown": {"NSABlks": 2}},
                    {"machineName": "AC-M2", "YarnFaults": "1", "NCuts": "", "alarmBreakdown": {"LABlks": 1, "TABlks": 2}},
                ],
            },
            {
                "articleNumber": "A2",
                "machines": [
                    {"machineName": "AC-M10", "YarnFaults": "4", "NCuts": "bad", "totalAlarms": 1,
                     "alarmBreakdown": {"NSABlks": 1}},
                ],
            },
        ],
    }


class TestMachineWiseRollup:

    def test_sums_per_machine(self, unit_snapshot):
        rows = machine_wise_rollup(unit_snapshot)
        assert [r["machineName"] for r in rows] == ["AC-M2", "AC-M10"]
        m10 = rows[1]
        assert m10["YarnFaults"] == 7
        assert m10["NCuts"] == 1
        assert m10["totalAlarms"] == 3
        assert m10["alarmBreakdown"] == {"NSABlks": 3}

    def test_display_name_is_last_two_characters(self, unit_snapshot):
        rows = machine_wise_rollup(unit_snapshot)
        assert [r["displayMachineName"] for r in rows] == ["M2", "10"]

    def test_total_alarms_from_breakdown_when_absent(self, unit_snapshot):
        m2 = machine_wise_rollup(unit_snapshot)[0]
        assert m2["totalAlarms"] == 3

    def test_articles_carry_machine_figures(self, unit_snapshot):
        m10 = machine_wise_rollup(unit_snapshot)[1]
        assert [a["articleNumber"] for a in m10["articles"]] == ["A2", "A10"]
        a10 = m10["articles"][1]
        assert a10["YarnFaults"] == "3"
        assert a10["IPI"] == "40"
        assert a10["displayMachineName"] == "10"
        assert a10["machines"] == []

    def test_unit_without_articles(self):
        assert machine_wise_rollup({"unit": "Unit 2"}) == []

    def test_rollup_frame(self, unit_snapshot):
        frame = rollup_frame(machine_wise_rollup(unit_snapshot))
        assert frame.loc["AC-M10", "YarnFaults"] == 7
        assert frame.loc["AC-M2", "PPCuts"] == 0


class TestArticleWiseRows:

    def test_natural_order(self, unit_snapshot):
        rows = article_wise_rows(unit_snapshot)
        assert [r["articleNumber"] for r in rows] == ["A2", "A10"]
        assert [m["machineName"] for m in rows[1]["machines"]] == ["AC-M2", "AC-M10"]
        assert rows[1]["machines"][0]["displayMachineName"] == "M2"


class TestUnitCards:

    def test_one_decimal(self, unit_snapshot):
        card = unit_cards([unit_snapshot])[0]
        assert card == {
            "unit": "Unit 1",
            "shiftStartTime": "2024-01-01T06:00:00",
            "YF": "12.3",
            "Alarms": "7.0",
            "Alarms/1000km": "0.0",
        }

    @pytest.mark.parametrize("value, expected", [
        (None, "0.0"), ("", "0.0"), ("abc", "0.0"), (float("nan"), "0.0"), ("2.26", "2.3"), (4, "4.0"),
    ])
    def test_format_one_decimal(self, value, expected):
        assert format_one_decimal(value) == expected

    def test_select_units_in_configured_order(self):
        units = [{"unit": "Unit 1"}, {"unit": "Unit 2"}, {"unit": "Unit 3"}]
        assert [u["unit"] for u in select_units(units, ["Unit 3", "Unit 1", "Unit 9"])] == ["Unit 3", "Unit 1"]
        assert select_units(units, []) == units


class TestLiveDomain:

    def test_run_with_snapshot(self, unit_snapshot):
        views = live.run(units=[unit_snapshot])
        assert views["cards"][0]["YF"] == "12.3"
        assert [m["machineName"] for m in views["units"]["Unit 1"]["machines"]] == ["AC-M2", "AC-M10"]

    def test_run_limited_to_named_units(self, unit_snapshot):
        other = {"unit": "Unit 2", "yarnFaults": 1}
        views = live.run(units=[unit_snapshot, other], unit_names=["Unit 2"])
        assert [c["unit"] for c in views["cards"]] == ["Unit 2"]
        assert list(views["units"]) == ["Unit 2"]

    def test_run_rejects_malformed_snapshot(self):
        with pytest.raises(ValueError):
            live.run(units=["not a unit"])
