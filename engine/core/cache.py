"""In-memory TTL caching utilities.

Streaks and grids are meant to be computed once per data refresh rather than
per render. Cache entries automatically expire after the configured TTL.

The summary cache is created on first use from SUMMARY_CACHE_MAX_SIZE and
SUMMARY_CACHE_TTL_SECONDS. Call configure_summary_cache() to rebuild it with
other settings.

Note: Cache is per-process, not shared across instances. Entries are keyed
by a snapshot key derived from the exact inputs, so a stale entry can only be
served when the inputs are identical.
"""

from typing import TYPE_CHECKING

from cachetools import TTLCache

from core.config import Settings, get_settings

if TYPE_CHECKING:
    from services.summary_service import HabitSummary

# Habit summary cache: keyed by (habit_id, snapshot_key), stores HabitSummary
_summary_cache: "TTLCache[tuple[str, str], HabitSummary] | None" = None


def configure_summary_cache(settings: Settings | None = None) -> None:
    """Rebuild the summary cache with the configured size and TTL.

    Existing entries are dropped.
    """
    global _summary_cache
    settings = settings or get_settings()
    _summary_cache = TTLCache(
        maxsize=settings.summary_cache_max_size,
        ttl=settings.summary_cache_ttl_seconds,
    )


def _get_summary_cache() -> "TTLCache[tuple[str, str], HabitSummary]":
    if _summary_cache is None:
        configure_summary_cache()
    return _summary_cache


def get_cached_summary(habit_id: str, snapshot_key: str) -> "HabitSummary | None":
    return _get_summary_cache().get((habit_id, snapshot_key))


def set_cached_summary(
    habit_id: str, snapshot_key: str, summary: "HabitSummary"
) -> None:
    _get_summary_cache()[(habit_id, snapshot_key)] = summary


def invalidate_habit_cache(habit_id: str) -> None:
    """Drop every cached summary for a habit.

    Call after a completion record or the habit itself is written.
    """
    cache = _get_summary_cache()
    for key in [k for k in cache if k[0] == habit_id]:
        cache.pop(key, None)


def clear_summary_cache() -> None:
    """Drop the summary cache; the next use rebuilds it from current settings."""
    global _summary_cache
    _summary_cache = None
