"""Assemble finalized per-bucket values into dense trend tables."""

import logging
import math
from dataclasses import dataclass, field

import pandas as pd

from yarnwatch.aggregation.grouping import bucket_date, natural_sorted, sort_buckets
from yarnwatch.utils.types import Granularity, TrendRow

logger = logging.getLogger(__name__)

MISSING_CELL = "-"
DIFF_COLUMN = "% Diff"

type Cells = dict[tuple[str, str], str]


@dataclass(frozen=True)
class DrillDown:
    labels: list[str]
    data: list[TrendRow]
    deltas: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TrendTable:
    dates: list[str]
    labels: list[str]
    data: list[TrendRow]
    drill_down: dict[str, DrillDown] = field(default_factory=dict)
    deltas: dict[str, str] = field(default_factory=dict)
    all_keys: list[str] = field(default_factory=list)
    report_type: str = Granularity.DAILY.value

    @classmethod
    def empty(cls, report_type: str = Granularity.DAILY.value) -> "TrendTable":
        return cls(dates=[], labels=[], data=[], report_type=report_type)

    @property
    def is_shift_report(self) -> bool:
        return self.report_type == Granularity.SHIFT

    def cell(self, key: str, label: str) -> str:
        for row in self.data:
            if row["date"] == key:
                return row.get(label, MISSING_CELL)
        return MISSING_CELL

    def to_dict(self) -> dict:
        """Render the TrendResponse shape consumed by the dashboard views."""
        return {
            "data": [dict(row) for row in self.data],
            "labels": list(self.labels),
            "dates": list(self.dates),
            "drillDownData": {
                label: {"labels": list(drill.labels), "data": [dict(r) for r in drill.data]}
                for label, drill in self.drill_down.items()
            },
            "allKeys": list(self.all_keys),
            "reportType": self.report_type,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "TrendTable":
        """Rebuild a table from a TrendResponse payload (e.g. a server-built trend)."""
        data = [{k: str(v) for k, v in row.items()} for row in payload.get("data") or []]
        dates = list(payload.get("dates") or dict.fromkeys(row["date"] for row in data))
        all_keys = list(payload.get("allKeys") or dates)
        labels = list(payload.get("labels") or [])

        drill_down = {}
        for label, drill in (payload.get("drillDownData") or {}).items():
            drill_rows = [{k: str(v) for k, v in row.items()} for row in drill.get("data") or []]
            drill_down[label] = DrillDown(
                labels=list(drill.get("labels") or []),
                data=drill_rows,
                deltas=_row_deltas(_cells_from_rows(drill_rows), drill.get("labels") or [], all_keys),
            )

        return cls(
            dates=dates,
            labels=labels,
            data=data,
            drill_down=drill_down,
            deltas=_row_deltas(_cells_from_rows(data), labels, all_keys),
            all_keys=all_keys,
            report_type=payload.get("reportType") or Granularity.DAILY.value,
        )

    def to_frame(self, include_drill_down: bool = False) -> pd.DataFrame:
        """Labels x bucket keys, missing cells as "-", with a trailing % Diff column."""
        index, rows = [], []
        for label in self.labels:
            index.append((label, ""))
            rows.append([self.cell(key, label) for key in self.all_keys] + [self.deltas.get(label, MISSING_CELL)])
            drill = self.drill_down.get(label)
            if include_drill_down and drill is not None:
                cells = _cells_from_rows(drill.data)
                for sub in drill.labels:
                    index.append((label, sub))
                    rows.append(
                        [cells.get((key, sub), MISSING_CELL) for key in self.all_keys]
                        + [drill.deltas.get(sub, MISSING_CELL)]
                    )
        return pd.DataFrame(
            rows,
            index=pd.MultiIndex.from_tuples(index, names=["label", "sub_label"]) if index else None,
            columns=[*self.all_keys, DIFF_COLUMN],
        )


def _to_number(value) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def percent_change(values: list[str | None]) -> str:
    """Change between the earliest defined value and the latest bucket's value.

    `values` is ordered by bucket; None marks a bucket without data. The
    earliest endpoint is the first defined value, the latest endpoint is
    always the last bucket. Earliest 0 with a non-zero latest reads "New".
    """
    if not values or values[-1] is None:
        return MISSING_CELL

    first = next((i for i, v in enumerate(values) if v is not None), None)
    if first is None or first == len(values) - 1:
        return MISSING_CELL

    earliest, latest = _to_number(values[first]), _to_number(values[-1])
    if earliest is None or latest is None:
        return MISSING_CELL
    if earliest == 0:
        return "New" if latest != 0 else MISSING_CELL

    diff = (latest - earliest) / earliest * 100
    return f"{'+' if diff > 0 else ''}{diff:.1f}%"


def _cells_from_rows(rows: list[TrendRow]) -> Cells:
    return {(row["date"], label): value for row in rows for label, value in row.items() if label != "date"}


def _cells_from_frame(values: pd.DataFrame, label_column: str) -> Cells:
    return {
        (bucket, label): value
        for bucket, label, value in zip(values["bucket"], values[label_column], values["value"])
    }


def _row_deltas(cells: Cells, labels: list[str], keys: list[str]) -> dict[str, str]:
    return {label: percent_change([cells.get((key, label)) for key in keys]) for label in labels}


def _rows(cells: Cells, labels: list[str], keys: list[str]) -> list[TrendRow]:
    rows = []
    for key in keys:
        row = {"date": key}
        for label in labels:
            if (key, label) in cells:
                row[label] = cells[(key, label)]
        rows.append(row)
    return rows


def _has_latest_value(cells: Cells, label: str, keys: list[str], granularity: Granularity) -> bool:
    latest = keys[-1]
    if granularity is Granularity.SHIFT:
        candidates = [k for k in keys if bucket_date(k) == bucket_date(latest)]
    else:
        candidates = [latest]
    for key in candidates:
        number = _to_number(cells.get((key, label)))
        if number is not None and number != 0:
            return True
    return False


def assemble_trend(
    values: pd.DataFrame,
    granularity: Granularity,
    hide_empty_latest: bool = False,
    drill_values: pd.DataFrame | None = None,
) -> TrendTable:
    """Pivot finalized values into a TrendTable.

    `values` carries one row per (bucket, label) with its display value;
    `drill_values` optionally adds a `machine` column one level deeper. The
    result depends only on the inputs, never on their row order.
    """
    if values.empty:
        return TrendTable.empty(granularity.value)

    keys = sort_buckets(values["bucket"], granularity)
    dates = list(dict.fromkeys(bucket_date(k) for k in keys))
    cells = _cells_from_frame(values, "label")

    labels = natural_sorted(values["label"].unique())
    if hide_empty_latest:
        hidden = [label for label in labels if not _has_latest_value(cells, label, keys, granularity)]
        if hidden:
            logger.debug(f"Hiding {len(hidden)} labels without a value in the latest bucket")
        labels = [label for label in labels if label not in hidden]

    drill_down = {}
    if drill_values is not None and not drill_values.empty:
        for label in labels:
            subset = drill_values[drill_values["label"] == label]
            sub_labels = natural_sorted(subset["machine"].unique())
            if not sub_labels:
                continue
            sub_cells = _cells_from_frame(subset, "machine")
            drill_down[label] = DrillDown(
                labels=sub_labels,
                data=_rows(sub_cells, sub_labels, keys),
                deltas=_row_deltas(sub_cells, sub_labels, keys),
            )

    return TrendTable(
        dates=dates,
        labels=labels,
        data=_rows(cells, labels, keys),
        drill_down=drill_down,
        deltas=_row_deltas(cells, labels, keys),
        all_keys=keys,
        report_type=granularity.value,
    )


def header_rows(table: TrendTable, first_column: str = "Label") -> list[list[dict]]:
    """Column header layout for rendering a trend table.

    Shift reports get two rows: each date spans its shift sub-columns
    (S1, S2, ...) and the label and % Diff columns span both rows.
    """
    if not table.is_shift_report:
        return [[{"content": first_column}, *({"content": d} for d in table.dates), {"content": DIFF_COLUMN}]]

    top = [{"content": first_column, "rowSpan": 2}]
    bottom = []
    for day in table.dates:
        shifts = [key for key in table.all_keys if bucket_date(key) == day]
        top.append({"content": day, "colSpan": len(shifts)})
        bottom.extend({"content": f"S{key.partition('_')[2]}"} for key in shifts)
    top.append({"content": DIFF_COLUMN, "rowSpan": 2})
    return [top, bottom]
