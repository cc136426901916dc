"""Dashboard configuration and environment setup."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from yarnwatch.aggregation.grouping import (
    DEFAULT_SHIFT_HOURS,
    SEARCH_FALLBACK_LABEL,
    TREND_FALLBACK_LABEL,
)

type ConfigDict = dict[str, str | int | bool | list[str]]

API_URL_ENV = "YARNWATCH_API_URL"


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout: float
    max_retries: int


@dataclass(frozen=True)
class ReportConfig:
    trend_fallback_label: str = TREND_FALLBACK_LABEL
    search_fallback_label: str = SEARCH_FALLBACK_LABEL
    hide_empty_latest: bool = True
    shift_hours: dict[int, tuple[int, int]] = field(default_factory=lambda: dict(DEFAULT_SHIFT_HOURS))


@dataclass(frozen=True)
class DashboardConfig:
    api: ApiConfig
    report: ReportConfig
    units: list[str]


def _shift_hours(table) -> dict[int, tuple[int, int]]:
    """Shift schedule from a TOML table such as {"1" = [6, 14]}."""
    if not table:
        return dict(DEFAULT_SHIFT_HOURS)
    return {int(shift): (int(start), int(end)) for shift, (start, end) in table.items()}


def load_dashboard_config(env: str = "production") -> DashboardConfig:
    match env:
        case "production":
            api = ApiConfig(base_url="http://quantum-gateway.mill.local:8000", timeout=30.0, max_retries=3)
        case "staging":
            api = ApiConfig(base_url="http://quantum-gateway-staging.mill.local:8000", timeout=30.0, max_retries=3)
        case "development":
            api = ApiConfig(base_url="http://localhost:8000", timeout=10.0, max_retries=1)
        case other:
            raise ValueError(f"Unknown environment: {other}")

    override = os.environ.get(API_URL_ENV)
    if override:
        api = ApiConfig(base_url=override.rstrip("/"), timeout=api.timeout, max_retries=api.max_retries)

    settings = get_env_config()
    report = ReportConfig(
        trend_fallback_label=str(settings.get("trend_fallback_label", TREND_FALLBACK_LABEL)),
        search_fallback_label=str(settings.get("search_fallback_label", SEARCH_FALLBACK_LABEL)),
        hide_empty_latest=bool(settings.get("hide_empty_latest", True)),
        shift_hours=_shift_hours(settings.get("shift_hours")),
    )

    return DashboardConfig(
        api=api,
        report=report,
        units=list(settings.get("units", [])),
    )


def get_env_config() -> ConfigDict:
    """Read dashboard settings from the [tool.yarnwatch] table of pyproject.toml."""
    pyproject = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject.exists():
        return {}
    with open(pyproject, "rb") as f:
        data = tomllib.load(f)
    return data.get("tool", {}).get("yarnwatch", {})
