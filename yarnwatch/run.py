"""Command line entry point: build trend, search and live reports from the API or a file."""

import argparse
import logging
import sys
import tomllib
from pathlib import Path

import pandas as pd
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from yarnwatch.aggregation.catalog import REPORT_COLUMNS, short_name
from yarnwatch.aggregation.request import build_request
from yarnwatch.config import load_dashboard_config
from yarnwatch.domains import live, long_term
from yarnwatch.utils.io import read_records_file, write_json, write_output

console = Console()


def load_config() -> dict:
    config_path = Path(__file__).parent.parent / "yarnwatch.yaml"
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}

    pyproject = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject.exists():
        return {}
    with open(pyproject, "rb") as f:
        return tomllib.load(f).get("tool", {}).get("yarnwatch", {})


def print_frame(frame: pd.DataFrame, title: str) -> None:
    table = Table(title=title)
    index_names = [n for n in frame.index.names if n]
    for name in index_names:
        table.add_column(str(name), style="bold")
    for column in frame.columns:
        table.add_column(str(column), justify="right")

    for index, row in frame.iterrows():
        keys = index if isinstance(index, tuple) else (index,)
        table.add_row(*[str(k) for k in keys][: len(index_names)], *[str(v) for v in row])
    console.print(table)


def emit(payload, frame: pd.DataFrame, output: str | None, title: str) -> None:
    if output is None:
        print_frame(frame, title)
        return
    match Path(output).suffix.lower():
        case ".json":
            write_json(payload, output)
        case ".csv":
            write_output(frame, output, "csv")
        case ".parquet":
            write_output(frame, output, "parquet")
        case ext:
            raise ValueError(f"Unsupported output file type: {ext or output}")


def _long_term_records(args, env: str):
    if args.input:
        return read_records_file(args.input)
    with long_term.ReportSession(env=env) as session:
        session.load(args.start, args.end, args.lots, args.articles)
        return session.records


def cmd_trend(args, config: dict) -> int:
    env = args.env or config.get("env", "production")
    report = load_dashboard_config(env).report
    request = build_request(
        group_key=args.group,
        granularity=args.granularity,
        metric_group=args.metric_group,
        metric=args.metric,
        hide_empty_latest=report.hide_empty_latest and not args.show_empty,
        label_values=args.labels,
        filter_field=args.filter_field,
        filter_values=args.filter_values,
        unit=args.unit,
        start_date=args.start,
        end_date=args.end,
        fallback_label=report.trend_fallback_label,
    )
    records = _long_term_records(args, env)
    table = long_term.build_trend(records, request, shift_hours=report.shift_hours)
    title = f"{short_name(request.parameter)} trend by {request.group_key} ({request.granularity})"
    emit(table.to_dict(), table.to_frame(include_drill_down=args.drill_down), args.output, title)
    return 0


def cmd_search(args, config: dict) -> int:
    env = args.env or config.get("env", "production")
    report = load_dashboard_config(env).report
    request = long_term.search_request(
        group_by=args.group,
        report_type=args.granularity,
        filter_field=args.filter_field,
        filter_values=args.filter_values,
        start_date=args.start,
        end_date=args.end,
        fallback_label=report.search_fallback_label,
    )
    columns = [c.strip() for c in args.columns.split(",")] if args.columns else config.get("visible_columns")
    records = _long_term_records(args, env)
    result = long_term.build_search_report(records, request, columns)
    if args.alarms:
        emit(result.alarms, result.alarms_frame(), args.output, f"Alarm blocks by {result.group_label}")
        return 0
    emit(result.rows, result.to_frame(), args.output, f"Search report by {result.group_label}")
    return 0


def cmd_live(args, config: dict) -> int:
    env = args.env or config.get("env", "production")
    if args.input:
        units = read_records_file(args.input)
    else:
        units = live.ingest_live_snapshot(
            args.date, args.shift, unit=args.unit, machine=args.machine, dashboard=args.dashboard, env=env
        )

    names = config.get("units") or load_dashboard_config(env).units
    units = live.select_units(units, list(names))
    views = live.run(units=units)
    if args.dashboard:
        emit(views["cards"], live.cards_frame(units), args.output, "Live dashboard")
        return 0

    if args.output:
        write_json(views, args.output)
        return 0
    for unit in units:
        name = str(unit.get("unit", ""))
        print_frame(live.rollup_frame(views["units"][name]["machines"]), f"{name} machine-wise cuts")
    return 0


def cmd_validate(args, config: dict) -> int:
    env = args.env or config.get("env", "production")
    records = _long_term_records(args, env)
    result = long_term.validate(records)

    table = Table(title="Validation Results")
    table.add_column("Domain")
    table.add_column("Valid")
    table.add_column("Details")
    valid = result["status"] != "error"
    status = "[green]✓[/green]" if valid else "[red]✗[/red]"
    table.add_row("long_term", status, "; ".join(result.get("errors") or []) or result.get("reason", "OK"))
    console.print(table)
    return 0 if valid else 1


def _add_record_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", type=str, help="Read records from a JSON/CSV/Parquet file instead of the API")
    parser.add_argument("--start", type=str, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="End date (YYYY-MM-DD)")
    parser.add_argument("--lots", type=str, help="Comma separated lot IDs")
    parser.add_argument("--articles", type=str, help="Comma separated article numbers")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--env", type=str, help="production, staging or development")
    common.add_argument("--output", type=str, help="Write the report to a .json, .csv or .parquet file")
    common.add_argument("-v", "--verbose", action="store_true")

    parser = argparse.ArgumentParser(prog="yarnwatch", description="Yarn clearer quality reports")
    sub = parser.add_subparsers(dest="command", required=True)

    trend = sub.add_parser("trend", parents=[common], help="Time-bucketed trend table with drill-down")
    _add_record_source(trend)
    trend.add_argument("--group", default="unit", help="Row label dimension")
    trend.add_argument("--granularity", default="daily", choices=["daily", "weekly", "monthly", "shift"])
    trend.add_argument("--metric-group", choices=["quality", "cuts", "alarms", "cmt"])
    trend.add_argument("--metric", type=str, help="Parameter within the group")
    trend.add_argument("--labels", type=str, help="Comma separated row labels to keep")
    trend.add_argument("--filter-field", type=str)
    trend.add_argument("--filter-values", type=str)
    trend.add_argument("--unit", type=str)
    trend.add_argument("--show-empty", action="store_true", help="Keep labels with no value in the latest bucket")
    trend.add_argument("--drill-down", action="store_true", help="Include per-machine rows")
    trend.set_defaults(handler=cmd_trend)

    search = sub.add_parser("search", parents=[common], help="Grouped search report")
    _add_record_source(search)
    search.add_argument("--group", default="MillUnit")
    search.add_argument("--granularity", default="daily", choices=["daily", "weekly", "monthly"])
    search.add_argument("--filter-field", type=str)
    search.add_argument("--filter-values", type=str)
    search.add_argument(
        "--columns", type=str,
        help=f"Comma separated column titles ({', '.join(c.title for c in REPORT_COLUMNS)})",
    )
    search.add_argument(
        "--alarms", action="store_true", help="Alarm block breakdown per group instead of the report columns",
    )
    search.set_defaults(handler=cmd_search)

    live_cmd = sub.add_parser("live", parents=[common], help="Live shift snapshot views")
    live_cmd.add_argument("--input", type=str, help="Read a saved snapshot instead of calling the API")
    live_cmd.add_argument("--date", type=str)
    live_cmd.add_argument("--shift", type=str)
    live_cmd.add_argument("--unit", type=str)
    live_cmd.add_argument("--machine", type=str)
    live_cmd.add_argument("--dashboard", action="store_true", help="Unit cards for every unit")
    live_cmd.set_defaults(handler=cmd_live)

    validate = sub.add_parser("validate", parents=[common], help="Validate long-term records against the schema")
    _add_record_source(validate)
    validate.set_defaults(handler=cmd_validate)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        return args.handler(args, load_config())
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        return 2


if __name__ == "__main__":
    sys.exit(main())
