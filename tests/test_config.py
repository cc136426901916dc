"""Dashboard configuration."""

import pytest

from yarnwatch.config import API_URL_ENV, _shift_hours, get_env_config, load_dashboard_config


class TestDashboardConfig:

    @pytest.mark.parametrize("env", ["production", "staging", "development"])
    def test_known_environments(self, env):
        config = load_dashboard_config(env)
        assert config.api.base_url.startswith("http")
        assert config.api.max_retries >= 1

    def test_unknown_environment(self):
        with pytest.raises(ValueError):
            load_dashboard_config("qa")

    def test_api_url_override(self, monkeypatch):
        monkeypatch.setenv(API_URL_ENV, "http://gateway.test:9000/")
        assert load_dashboard_config("production").api.base_url == "http://gateway.test:9000"

    def test_report_defaults(self):
        report = load_dashboard_config("development").report
        assert report.trend_fallback_label == "Unknown"
        assert report.search_fallback_label == "N/A"
        assert report.hide_empty_latest is True
        assert report.shift_hours[3] == (22, 6)

    def test_project_settings(self):
        settings = get_env_config()
        assert list(settings.get("units", [])) == load_dashboard_config().units

    def test_shift_schedule_table(self):
        assert _shift_hours({"1": [8, 20], "2": [20, 8]}) == {1: (8, 20), 2: (20, 8)}
        assert _shift_hours(None)[1] == (6, 14)
