"""Article-wise and machine-wise views of one unit's live snapshot."""

import logging
import math

import pandas as pd

from yarnwatch.aggregation.grouping import natural_key, natural_sorted

logger = logging.getLogger(__name__)

LIVE_CUT_FIELDS = [
    "YarnFaults", "YarnJoints", "YarnBreaks", "NCuts", "SCuts",
    "LCuts", "TCuts", "FDCuts", "PPCuts",
]


def _number(value) -> float:
    """Numeric value of a live cell; blanks and junk count as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def display_machine_name(machine_name: str) -> str:
    return str(machine_name)[-2:]


def _machine_alarms(machine: dict) -> tuple[float, dict[str, float]]:
    breakdown = {key: _number(val) for key, val in (machine.get("alarmBreakdown") or {}).items()}
    if machine.get("totalAlarms") is not None:
        return _number(machine["totalAlarms"]), breakdown
    return sum(breakdown.values()), breakdown


def machine_wise_rollup(unit_data: dict) -> list[dict]:
    """Re-key a unit's article -> machine tree by machine.

    Cut counts, alarm totals and the alarm breakdown are summed per machine
    across every article it ran; each machine keeps the list of articles
    with that machine's own figures merged over the article's.
    """
    machines: dict[str, dict] = {}
    for article in unit_data.get("articles") or []:
        for machine in article.get("machines") or []:
            name = str(machine.get("machineName", ""))
            entry = machines.setdefault(name, {
                "machineName": name,
                "displayMachineName": display_machine_name(name),
                **{f: 0.0 for f in LIVE_CUT_FIELDS},
                "totalAlarms": 0.0,
                "alarmBreakdown": {},
                "articles": [],
            })

            for f in LIVE_CUT_FIELDS:
                entry[f] += _number(machine.get(f))

            total, breakdown = _machine_alarms(machine)
            entry["totalAlarms"] += total
            for key, val in breakdown.items():
                entry["alarmBreakdown"][key] = entry["alarmBreakdown"].get(key, 0.0) + val

            entry["articles"].append({
                **article,
                **machine,
                "articleNumber": article.get("articleNumber"),
                "displayMachineName": display_machine_name(name),
                "machines": [],
            })

    rows = [machines[name] for name in natural_sorted(machines)]
    for row in rows:
        row["articles"].sort(key=lambda a: natural_key(str(a.get("articleNumber") or "")))
    logger.debug(f"Rolled up {len(rows)} machines for unit {unit_data.get('unit')}")
    return rows


def article_wise_rows(unit_data: dict) -> list[dict]:
    """Articles sorted by article number, each with its machines in natural order."""
    rows = []
    for article in unit_data.get("articles") or []:
        machines = sorted(
            article.get("machines") or [],
            key=lambda m: natural_key(str(m.get("machineName", ""))),
        )
        rows.append({
            **article,
            "machines": [
                {**m, "displayMachineName": display_machine_name(m.get("machineName", ""))}
                for m in machines
            ],
        })
    return sorted(rows, key=lambda r: natural_key(str(r.get("articleNumber") or "")))


def rollup_frame(rows: list[dict], key: str = "machineName") -> pd.DataFrame:
    """Flatten rollup rows to a table of cut sums and alarm totals for export."""
    columns = [key, *LIVE_CUT_FIELDS, "totalAlarms"]
    frame = pd.DataFrame([{c: row.get(c) for c in columns} for row in rows], columns=columns)
    for f in [*LIVE_CUT_FIELDS, "totalAlarms"]:
        frame[f] = frame[f].map(_number)
    return frame.set_index(key)
