"""Recurrence evaluation: is a habit due on a date, and how much is due.

All functions are total over a validated Habit. When a habit is structurally
incomplete (for example built with ``Habit.model_construct``) they degrade to
"not scheduled" and a target of 0 instead of raising, since they run inside
rendering loops.
"""

from collections.abc import Iterable, Mapping
from datetime import date

from models import CompletionState, MissedCyclePolicy, RecurrenceKind
from schemas import CompletionRecord, Habit
from services.dates import DAYS_PER_WEEK, add_days, day_of_week, days_between, week_bounds

# How far ahead next_scheduled_date searches before giving up
NEXT_SCHEDULED_SEARCH_DAYS = 365

CompletionLookup = Mapping[date, CompletionRecord]


def index_completions(
    completions: CompletionLookup | Iterable[CompletionRecord],
) -> dict[date, CompletionRecord]:
    """Return a date -> record lookup.

    Accepts an existing mapping or any iterable of records. If the iterable
    holds two records for one date, the later one wins.
    """
    if isinstance(completions, Mapping):
        return dict(completions)
    return {record.date: record for record in completions}


def _weekday_targets(habit: Habit) -> Mapping[int, int]:
    targets = habit.weekday_targets
    if not isinstance(targets, Mapping):
        return {}
    return targets


def _every_n_configured(habit: Habit) -> bool:
    return (
        isinstance(habit.interval_days, int)
        and habit.interval_days > 0
        and habit.cycle_start_date is not None
    )


def is_scheduled(
    habit: Habit,
    day: date,
    last_successful_completion: date | None = None,
) -> bool:
    """Return True if the habit is due on ``day``.

    ``last_successful_completion`` only matters for every-N-days habits with
    the RESET_ON_MISS policy: cycles are then counted from that date instead
    of ``cycle_start_date``. Without it the start date is used.
    """
    kind = habit.recurrence_kind

    if kind == RecurrenceKind.DAILY:
        return True

    if kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
        return day_of_week(day) in _weekday_targets(habit)

    if kind == RecurrenceKind.EVERY_N_DAYS:
        if not _every_n_configured(habit):
            return False
        anchor = habit.cycle_start_date
        if (
            habit.missed_cycle_policy == MissedCyclePolicy.RESET_ON_MISS
            and last_successful_completion is not None
        ):
            anchor = last_successful_completion
        delta = days_between(day, anchor)
        return delta >= 0 and delta % habit.interval_days == 0

    if kind == RecurrenceKind.WEEKLY_AGGREGATE:
        # Any day of the week may be logged; the target is checked per week
        return True

    return False


def target_for_date(habit: Habit, day: date) -> int:
    """Target count for ``day``; 0 means not applicable.

    For weekly-aggregate habits this is the whole week's target.
    """
    kind = habit.recurrence_kind

    if kind == RecurrenceKind.DAILY:
        return habit.daily_target

    if kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
        return _weekday_targets(habit).get(day_of_week(day), 0)

    if kind == RecurrenceKind.EVERY_N_DAYS:
        return habit.daily_target if _every_n_configured(habit) else 0

    if kind == RecurrenceKind.WEEKLY_AGGREGATE:
        return habit.daily_target

    return 0


def weekly_target(habit: Habit, week_start: date, week_start_day: int = 1) -> int:
    """Total due across the week containing ``week_start``.

    Weekly-aggregate habits return their weekly target directly. Every other
    kind sums the targets of the scheduled days in that week.
    """
    if habit.recurrence_kind == RecurrenceKind.WEEKLY_AGGREGATE:
        return habit.daily_target

    start = week_bounds(week_start, week_start_day).start
    total = 0
    for offset in range(DAYS_PER_WEEK):
        day = add_days(start, offset)
        if is_scheduled(habit, day):
            total += target_for_date(habit, day)
    return total


def is_completed(count: int, target: int) -> bool:
    return count >= target


def completion_percentage(count: int, target: int) -> float:
    """Fraction of the target reached, capped at 1.0."""
    if target <= 0:
        return 0.0
    return min(count / target, 1.0)


def completion_state(record: CompletionRecord | None, target: int) -> CompletionState:
    """Map a record (or its absence) against a target to a CompletionState."""
    if record is None:
        return CompletionState.NOT_STARTED
    if record.skipped:
        return CompletionState.SKIPPED
    if record.count == 0:
        return CompletionState.NOT_STARTED
    if record.count >= target:
        return CompletionState.COMPLETED
    return CompletionState.IN_PROGRESS


def last_successful_completion(
    completions: CompletionLookup | Iterable[CompletionRecord],
    before: date | None = None,
) -> date | None:
    """Most recent date with a non-skipped, non-zero record.

    ``before`` (exclusive) limits the search, e.g. to ignore today's log.
    """
    records = completions.values() if isinstance(completions, Mapping) else completions
    candidates = [
        record.date
        for record in records
        if record.count > 0
        and not record.skipped
        and (before is None or record.date < before)
    ]
    return max(candidates, default=None)


def next_scheduled_date(
    habit: Habit,
    from_date: date,
    last_successful_completion: date | None = None,
) -> date | None:
    """First due date on or after ``from_date``, or None within a year."""
    for offset in range(NEXT_SCHEDULED_SEARCH_DAYS):
        day = add_days(from_date, offset)
        if is_scheduled(habit, day, last_successful_completion):
            return day
    return None


def weekly_completion_count(
    completions: CompletionLookup | Iterable[CompletionRecord],
    day: date,
    week_start_day: int = 1,
) -> int:
    """Sum of non-skipped counts in the week containing ``day``."""
    lookup = index_completions(completions)
    start = week_bounds(day, week_start_day).start
    total = 0
    for offset in range(DAYS_PER_WEEK):
        record = lookup.get(add_days(start, offset))
        if record is not None and not record.skipped:
            total += record.count
    return total


def can_increment(habit: Habit, current_count: int, target: int) -> bool:
    """Whether one more occurrence may be logged.

    Habits with ``allow_overload`` disabled are capped at their target.
    """
    if habit.allow_overload:
        return True
    return current_count < target
