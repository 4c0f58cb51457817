"""Engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upper bound on rendered grid columns; a calendar year needs at most 54
MAX_GRID_WEEKS = 260


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # First day of the week for weekly streaks and weekly targets
    # 0 = Sunday, 1 = Monday, ..., 6 = Saturday
    week_start_day: int = 1

    # Contribution grids are laid out Sunday-first unless overridden
    grid_week_start_day: int = 0
    grid_weeks: int = 52

    # Summary memoization (per process, see core.cache)
    summary_cache_ttl_seconds: int = 60
    summary_cache_max_size: int = 1000

    log_level: str = "INFO"
    log_format: str = ""  # "json" or "console"; empty picks console

    @model_validator(mode="after")
    def validate_config(self) -> Self:
        for name in ("week_start_day", "grid_week_start_day"):
            value = getattr(self, name)
            if not 0 <= value <= 6:
                raise ValueError(
                    f"{name.upper()} must be between 0 (Sunday) and 6 (Saturday), "
                    f"got {value}."
                )
        if not 1 <= self.grid_weeks <= MAX_GRID_WEEKS:
            raise ValueError(
                f"GRID_WEEKS must be between 1 and {MAX_GRID_WEEKS}, got {self.grid_weeks}."
            )
        if self.summary_cache_ttl_seconds < 1 or self.summary_cache_max_size < 1:
            raise ValueError("Summary cache TTL and size must be positive.")
        return self

    @property
    def use_json_logs(self) -> bool:
        return self.log_format.lower() == "json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this in tests to reset settings between test cases.
    After clearing, the next get_settings() call will create
    a fresh Settings instance with current environment variables.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("WEEK_START_DAY", "0")
            clear_settings_cache()
            settings = get_settings()  # Fresh instance
    """
    get_settings.cache_clear()
