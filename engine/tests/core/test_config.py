"""Unit tests for core.config module.

Tests cover:
- Settings defaults
- model_validator range checks
- Environment variable loading
- get_settings / clear_settings_cache lru_cache behavior
"""

import pytest
from pydantic import ValidationError

from core.config import MAX_GRID_WEEKS, Settings, clear_settings_cache, get_settings


@pytest.mark.unit
class TestSettingsDefaults:
    def test_defaults(self):
        settings = Settings()
        assert settings.week_start_day == 1
        assert settings.grid_week_start_day == 0
        assert settings.grid_weeks == 52
        assert settings.log_level == "INFO"
        assert settings.use_json_logs is False

    def test_json_logs(self):
        assert Settings(log_format="JSON").use_json_logs is True


@pytest.mark.unit
class TestSettingsValidation:
    @pytest.mark.parametrize("value", [-1, 7])
    def test_week_start_day_range(self, value):
        with pytest.raises(ValidationError, match="WEEK_START_DAY"):
            Settings(week_start_day=value)

    def test_grid_week_start_day_range(self):
        with pytest.raises(ValidationError, match="GRID_WEEK_START_DAY"):
            Settings(grid_week_start_day=9)

    @pytest.mark.parametrize("value", [0, MAX_GRID_WEEKS + 1])
    def test_grid_weeks_range(self, value):
        with pytest.raises(ValidationError, match="GRID_WEEKS"):
            Settings(grid_weeks=value)

    def test_cache_settings_positive(self):
        with pytest.raises(ValidationError, match="cache"):
            Settings(summary_cache_max_size=0)

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.week_start_day = 0


@pytest.mark.unit
class TestGetSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("WEEK_START_DAY", "0")
        monkeypatch.setenv("GRID_WEEKS", "26")
        settings = get_settings()
        assert settings.week_start_day == 0
        assert settings.grid_weeks == 26

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("WEEK_START_DAY", "3")
        clear_settings_cache()
        second = get_settings()
        assert second is not first
        assert second.week_start_day == 3
