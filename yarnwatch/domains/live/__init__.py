"""Live report domain: shift snapshots, machine/article rollups, unit cards and shift trends."""

from yarnwatch.domains.live.dashboard import cards_frame, format_one_decimal, select_units, unit_cards
from yarnwatch.domains.live.ingest import (
    default_snapshot_date,
    ingest_available_filters,
    ingest_live_snapshot,
    ingest_shift_trend,
)
from yarnwatch.domains.live.rollup import article_wise_rows, machine_wise_rollup, rollup_frame
from yarnwatch.utils.validators import validate_record_batch


def validate(units=None) -> dict:
    """Structural check of a live snapshot payload."""
    if units is None:
        return {"status": "skipped", "reason": "no snapshot loaded"}
    return validate_record_batch(units)


def run(
    snapshot_date=None,
    shift=None,
    unit: str | None = None,
    machine: str | None = None,
    units: list[dict] | None = None,
    unit_names: list[str] | None = None,
    env: str = "production",
):
    """Fetch (unless a snapshot is given) and build every live view per unit.

    `unit_names` narrows and orders the units shown; all units are kept when empty.
    """
    if units is None:
        units = ingest_live_snapshot(snapshot_date, shift, unit=unit, machine=machine, env=env)

    result = validate(units)
    if result["status"] == "error":
        raise ValueError(f"Live snapshot failed validation: {'; '.join(result['errors'])}")
    units = select_units(units, unit_names or [])

    return {
        "cards": unit_cards(units),
        "units": {
            str(u.get("unit", "")): {
                "articles": article_wise_rows(u),
                "machines": machine_wise_rollup(u),
            }
            for u in units
        },
    }
