"""Dashboard summaries built on the scheduling and streak functions.

This module handles:
- The "due today" list: which habits are scheduled today and how far along
  each one is
- Per-habit summaries (streak, today's target, this week's progress, next
  due date) memoized per data refresh

CACHING:
- Summaries are cached by (habit_id, snapshot_key) for the configured TTL
- The snapshot key hashes every input, so identical inputs hit the cache
- Call core.cache.invalidate_habit_cache(habit_id) after writes to free memory
"""

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from core import get_logger
from core.cache import get_cached_summary, set_cached_summary
from core.config import get_settings
from models import CompletionState, MissedCyclePolicy, RecurrenceKind
from schemas import CompletionRecord, Habit
from services import dates
from services.schedule import (
    CompletionLookup,
    completion_state,
    index_completions,
    is_scheduled,
    last_successful_completion,
    next_scheduled_date,
    target_for_date,
    weekly_completion_count,
    weekly_target,
)
from services.streaks import StreakResult, compute_streak

logger = get_logger(__name__)


@dataclass(frozen=True)
class DueHabit:
    """A habit that is due today, with its progress so far."""

    habit: Habit
    target: int
    progress: int
    state: CompletionState
    note: str | None = None


@dataclass(frozen=True)
class HabitSummary:
    """Everything the summary view shows for one habit."""

    habit_id: str
    streak: StreakResult
    scheduled_today: bool
    target_today: int
    weekly_target: int
    weekly_count: int
    next_due: date | None


def _reset_anchor(habit: Habit, lookup: dict[date, CompletionRecord]) -> date | None:
    if habit.missed_cycle_policy != MissedCyclePolicy.RESET_ON_MISS:
        return None
    return last_successful_completion(lookup)


def due_today(
    habits: Iterable[tuple[Habit, CompletionLookup | Iterable[CompletionRecord]]],
    today: date | None = None,
    week_start_day: int | None = None,
) -> list[DueHabit]:
    """Return the habits scheduled for ``today`` in input order.

    Every-N-days habits with the RESET_ON_MISS policy are evaluated against
    their last successful completion. Weekly-aggregate habits report the
    week's total against the weekly target.
    """
    today = today or dates.today()
    if week_start_day is None:
        week_start_day = get_settings().week_start_day

    due: list[DueHabit] = []
    for habit, completions in habits:
        lookup = index_completions(completions)
        if not is_scheduled(habit, today, _reset_anchor(habit, lookup)):
            continue

        record = lookup.get(today)
        target = target_for_date(habit, today)
        state_record = record
        if habit.recurrence_kind == RecurrenceKind.WEEKLY_AGGREGATE:
            progress = weekly_completion_count(lookup, today, week_start_day)
            # Progress made earlier in the week outranks a skip logged today
            if progress > 0:
                state_record = CompletionRecord(date=today, count=progress)
        else:
            progress = record.count if record else 0

        due.append(
            DueHabit(
                habit=habit,
                target=target,
                progress=progress,
                state=completion_state(state_record, target),
                note=record.note if record else None,
            )
        )
    return due


def snapshot_key(
    habit: Habit,
    lookup: dict[date, CompletionRecord],
    today: date,
    week_start_day: int,
) -> str:
    """Stable hash of every input that affects a summary."""
    digest = hashlib.sha256()
    digest.update(habit.model_dump_json().encode())
    for day in sorted(lookup):
        digest.update(lookup[day].model_dump_json(exclude={"note"}).encode())
    digest.update(f"{today.isoformat()}:{week_start_day}".encode())
    return digest.hexdigest()


def get_habit_summary(
    habit: Habit,
    completions: CompletionLookup | Iterable[CompletionRecord],
    today: date | None = None,
    week_start_day: int | None = None,
) -> HabitSummary:
    """Compute (or fetch from cache) the summary for one habit."""
    today = today or dates.today()
    if week_start_day is None:
        week_start_day = get_settings().week_start_day

    lookup = index_completions(completions)
    key = snapshot_key(habit, lookup, today, week_start_day)
    cached = get_cached_summary(habit.id, key)
    if cached is not None:
        logger.debug("summary.cache.hit", habit_id=habit.id)
        return cached

    anchor = _reset_anchor(habit, lookup)
    week_start = dates.week_bounds(today, week_start_day).start
    summary = HabitSummary(
        habit_id=habit.id,
        streak=compute_streak(habit, lookup, today, week_start_day),
        scheduled_today=is_scheduled(habit, today, anchor),
        target_today=target_for_date(habit, today),
        weekly_target=weekly_target(habit, week_start, week_start_day),
        weekly_count=weekly_completion_count(lookup, today, week_start_day),
        next_due=next_scheduled_date(habit, today, anchor),
    )
    set_cached_summary(habit.id, key, summary)

    logger.info(
        "summary.computed",
        habit_id=habit.id,
        current_streak=summary.streak.current_streak,
        best_streak=summary.streak.best_streak,
        unit=summary.streak.unit.value,
    )
    return summary
