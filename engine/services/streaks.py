"""Streak calculation for recurring habits.

Walks backward from today through scheduled days (or whole weeks for
weekly-aggregate habits) and counts consecutive periods where the target was
met.

Rules:
- A scheduled day whose count reaches the target extends the run.
- A skipped day is neutral: it neither extends nor breaks the run.
- The most recent scheduled period that is not yet complete is "pending" and
  is passed over once, so the streak does not read as broken before the user
  has had a chance to log today (or this week).
- Any older incomplete period breaks the run. current_streak stops updating
  at the first break; best_streak keeps tracking runs further back.
- Unscheduled days are ignored.

The walk is capped at two years (730 days / 104 weeks). The cap is an
engineering bound that keeps every call finite, including for habits whose
configuration never schedules anything; it is not a limit on how long a
streak can be in principle.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from models import RecurrenceKind, StreakUnit
from schemas import CompletionRecord, Habit
from services import dates
from services.dates import DAYS_PER_WEEK, add_days, week_bounds
from services.schedule import (
    CompletionLookup,
    index_completions,
    is_completed,
    is_scheduled,
    target_for_date,
    weekly_target,
)

MAX_STREAK_DAYS = 730
MAX_STREAK_WEEKS = 104

DEFAULT_WEEK_START_DAY = 1  # Monday


@dataclass(frozen=True)
class StreakResult:
    """Current and best streak lengths, in days or weeks."""

    current_streak: int
    best_streak: int
    unit: StreakUnit


class _StreakCounter:
    """Accumulates the backward walk shared by day and week streaks."""

    def __init__(self) -> None:
        self.current = 0
        self.best = 0
        self._run = 0
        self._broken = False
        self._pending_available = True

    def met(self) -> None:
        self._run += 1
        self.best = max(self.best, self._run)
        if not self._broken:
            self.current = self._run
        self._pending_available = False

    def skipped(self) -> None:
        self._pending_available = False

    def missed(self) -> None:
        if self._pending_available:
            # Most recent period is still in progress
            self._pending_available = False
            return
        self._broken = True
        self._run = 0


def _day_streak(
    habit: Habit, lookup: dict[date, CompletionRecord], today: date
) -> _StreakCounter:
    counter = _StreakCounter()
    day = today
    for _ in range(MAX_STREAK_DAYS):
        if is_scheduled(habit, day):
            record = lookup.get(day)
            count = record.count if record else 0
            if is_completed(count, target_for_date(habit, day)):
                counter.met()
            elif record is not None and record.skipped:
                counter.skipped()
            else:
                counter.missed()
        day = add_days(day, -1)
    return counter


def _week_streak(
    habit: Habit,
    lookup: dict[date, CompletionRecord],
    today: date,
    week_start_day: int,
) -> _StreakCounter:
    counter = _StreakCounter()
    week_start = week_bounds(today, week_start_day).start
    for _ in range(MAX_STREAK_WEEKS):
        weekly_count = 0
        for offset in range(DAYS_PER_WEEK):
            record = lookup.get(add_days(week_start, offset))
            if record is not None:
                weekly_count += record.count
        if is_completed(weekly_count, weekly_target(habit, week_start, week_start_day)):
            counter.met()
        else:
            counter.missed()
        week_start = add_days(week_start, -DAYS_PER_WEEK)
    return counter


def compute_streak(
    habit: Habit,
    completions: CompletionLookup | Iterable[CompletionRecord],
    today: date | None = None,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> StreakResult:
    """Calculate current and best streaks for a habit.

    Args:
        habit: The habit to calculate streaks for
        completions: Records keyed by date, or an iterable of records
        today: Date the walk starts from, defaults to the local date
        week_start_day: 0 = Sunday .. 6 = Saturday, used by weekly habits

    Returns:
        StreakResult in weeks for weekly-aggregate habits, days otherwise.
        A habit with no completions yields 0 / 0.
    """
    today = today or dates.today()
    lookup = index_completions(completions)

    if habit.recurrence_kind == RecurrenceKind.WEEKLY_AGGREGATE:
        counter = _week_streak(habit, lookup, today, week_start_day)
        return StreakResult(counter.current, counter.best, StreakUnit.WEEKS)

    counter = _day_streak(habit, lookup, today)
    return StreakResult(counter.current, counter.best, StreakUnit.DAYS)
