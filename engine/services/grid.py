"""Contribution grid (calendar heatmap) construction.

Lays out whole 7-day weeks as columns and shades each day with an intensity
between 0.0 and 1.0, similar to GitHub's contribution graph. Two windows are
supported: a rolling number of weeks ending at a date, and a calendar year.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from core.config import MAX_GRID_WEEKS, get_settings
from models import DisplayMode
from schemas import CompletionRecord, Habit
from services.dates import DAYS_PER_WEEK, add_days, days_between, week_bounds
from services.schedule import (
    CompletionLookup,
    completion_percentage,
    index_completions,
    is_scheduled,
    target_for_date,
)

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Logged on a day the habit was not due: shown as extra effort
OFF_SCHEDULE_INTENSITY = 0.5


def _validate_week_start(week_start_day: int) -> None:
    if not 0 <= week_start_day <= 6:
        raise ValueError(f"week_start_day must be 0..6, got {week_start_day}")


@dataclass(frozen=True)
class RollingWindow:
    """``week_count`` whole weeks ending with the week that contains ``end_date``.

    ``week_count`` and ``week_start_day`` default to the GRID_WEEKS and
    GRID_WEEK_START_DAY settings. ``week_count`` must be 1..MAX_GRID_WEEKS;
    anything else raises ValueError rather than rendering fewer columns.
    """

    end_date: date
    week_count: int | None = None
    week_start_day: int | None = None

    def __post_init__(self) -> None:
        settings = get_settings()
        if self.week_count is None:
            object.__setattr__(self, "week_count", settings.grid_weeks)
        if self.week_start_day is None:
            object.__setattr__(self, "week_start_day", settings.grid_week_start_day)

        if not 1 <= self.week_count <= MAX_GRID_WEEKS:
            raise ValueError(
                f"week_count must be between 1 and {MAX_GRID_WEEKS}, got {self.week_count}"
            )
        _validate_week_start(self.week_start_day)


@dataclass(frozen=True)
class YearWindow:
    """Whole weeks covering Jan 1 through Dec 31 of ``year``.

    ``week_start_day`` defaults to the GRID_WEEK_START_DAY setting.
    """

    year: int
    week_start_day: int | None = None

    def __post_init__(self) -> None:
        if self.week_start_day is None:
            object.__setattr__(
                self, "week_start_day", get_settings().grid_week_start_day
            )
        _validate_week_start(self.week_start_day)


GridWindow = RollingWindow | YearWindow


@dataclass(frozen=True)
class ContributionCell:
    date: date
    intensity: float
    completion_record: CompletionRecord | None = None


@dataclass(frozen=True)
class MonthLabel:
    week_index: int
    label: str


@dataclass(frozen=True)
class ContributionGrid:
    """Week columns plus the month labels to draw above them."""

    weeks: list[list[ContributionCell]]
    month_labels: list[MonthLabel]
    start_date: date
    end_date: date


def cell_intensity(habit: Habit, day: date, record: CompletionRecord | None) -> float:
    """Shade for one day.

    - nothing logged: 0.0
    - logged on an unscheduled day: OFF_SCHEDULE_INTENSITY
    - BINARY display: 1.0 once the target is met, else 0.0
    - PARTIAL display: count / target, capped at 1.0
    """
    if record is None or record.count == 0:
        return 0.0

    if not is_scheduled(habit, day):
        return OFF_SCHEDULE_INTENSITY

    target = target_for_date(habit, day)
    if target <= 0:
        return 0.0
    if habit.display_mode == DisplayMode.BINARY:
        return 1.0 if record.count >= target else 0.0
    return completion_percentage(record.count, target)


def window_bounds(window: GridWindow) -> tuple[date, date]:
    """First and last date rendered for ``window``."""
    if isinstance(window, YearWindow):
        start = week_bounds(date(window.year, 1, 1), window.week_start_day).start
        end = week_bounds(date(window.year, 12, 31), window.week_start_day).end
        return start, end

    end = week_bounds(window.end_date, window.week_start_day).end
    start = add_days(end, -(window.week_count * DAYS_PER_WEEK - 1))
    return start, end


def build_grid(
    habit: Habit,
    completions: CompletionLookup | Iterable[CompletionRecord],
    window: GridWindow,
) -> list[list[ContributionCell]]:
    """Return week columns of 7 cells each, oldest week first.

    A RollingWindow always yields exactly ``week_count`` columns; windows
    longer than MAX_GRID_WEEKS are rejected when the window is created.
    """
    lookup = index_completions(completions)
    start, end = window_bounds(window)
    week_count = (days_between(end, start) + 1) // DAYS_PER_WEEK

    weeks: list[list[ContributionCell]] = []
    day = start
    for _ in range(week_count):
        column = []
        for _ in range(DAYS_PER_WEEK):
            record = lookup.get(day)
            column.append(
                ContributionCell(
                    date=day,
                    intensity=cell_intensity(habit, day, record),
                    completion_record=record,
                )
            )
            day = add_days(day, 1)
        weeks.append(column)
    return weeks


def month_labels(
    weeks: list[list[ContributionCell]], target_year: int | None = None
) -> list[MonthLabel]:
    """Place a label on each column whose first day starts a new month.

    With ``target_year`` set, columns starting in another year (the padding
    days of a calendar-year grid) never get a label.
    """
    labels: list[MonthLabel] = []
    last_month: int | None = None

    for index, column in enumerate(weeks):
        first_day = column[0].date
        if target_year is not None and first_day.year != target_year:
            continue
        if first_day.month != last_month:
            labels.append(MonthLabel(week_index=index, label=MONTH_LABELS[first_day.month - 1]))
            last_month = first_day.month

    return labels


def build_contribution_grid(
    habit: Habit,
    completions: CompletionLookup | Iterable[CompletionRecord],
    window: GridWindow,
) -> ContributionGrid:
    """build_grid plus month labels, ready for the calendar view."""
    weeks = build_grid(habit, completions, window)
    target_year = window.year if isinstance(window, YearWindow) else None
    start, end = window_bounds(window)
    return ContributionGrid(
        weeks=weeks,
        month_labels=month_labels(weeks, target_year),
        start_date=start,
        end_date=end,
    )
