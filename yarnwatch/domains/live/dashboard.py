"""Per-unit headline cards for the live dashboard."""

import math

import pandas as pd

CARD_FIELDS = {
    "YF": "yarnFaults",
    "Alarms": "totalAlarms",
    "Alarms/1000km": "alarmsPer1000km",
}


def format_one_decimal(value) -> str:
    if value is None or value == "":
        return "0.0"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0.0"
    if math.isnan(number):
        return "0.0"
    return f"{number:.1f}"


def unit_cards(units: list[dict]) -> list[dict[str, str]]:
    """One card per unit: YF, alarms and alarms per 1000 km, to one decimal."""
    return [
        {
            "unit": str(unit.get("unit", "")),
            "shiftStartTime": unit.get("shiftStartTime") or "",
            **{title: format_one_decimal(unit.get(field)) for title, field in CARD_FIELDS.items()},
        }
        for unit in units
    ]


def cards_frame(units: list[dict]) -> pd.DataFrame:
    return pd.DataFrame(unit_cards(units), columns=["unit", "shiftStartTime", *CARD_FIELDS]).set_index("unit")


def select_units(units: list[dict], names: list[str]) -> list[dict]:
    """Keep only the named units, in the configured order; every unit when none are named."""
    if not names:
        return list(units)
    by_name = {str(unit.get("unit", "")): unit for unit in units}
    return [by_name[name] for name in names if name in by_name]
