"""Tests for services/grid.py - contribution grid layout and intensity."""

from datetime import date

import pytest

from models import DisplayMode
from schemas import CompletionRecord
from services.grid import (
    MAX_GRID_WEEKS,
    OFF_SCHEDULE_INTENSITY,
    ContributionGrid,
    MonthLabel,
    RollingWindow,
    YearWindow,
    build_contribution_grid,
    build_grid,
    cell_intensity,
    month_labels,
    window_bounds,
)
from tests.factories import (
    HabitFactory,
    SpecificWeekdaysHabitFactory,
    completions_for,
)

MONDAY = date(2026, 1, 12)
TUESDAY = date(2026, 1, 13)


@pytest.mark.unit
class TestCellIntensity:
    def test_no_record_is_zero(self):
        assert cell_intensity(HabitFactory.build(), MONDAY, None) == 0.0

    def test_zero_count_is_zero(self):
        record = CompletionRecord(date=MONDAY, count=0)
        assert cell_intensity(HabitFactory.build(), MONDAY, record) == 0.0

    def test_skipped_is_zero(self):
        record = CompletionRecord(date=MONDAY, skipped=True)
        assert cell_intensity(HabitFactory.build(), MONDAY, record) == 0.0

    def test_partial_mode_is_fraction_of_target(self):
        habit = HabitFactory.build(daily_target=4, display_mode=DisplayMode.PARTIAL)
        record = CompletionRecord(date=MONDAY, count=1)
        assert cell_intensity(habit, MONDAY, record) == 0.25

    def test_partial_mode_caps_at_one(self):
        habit = HabitFactory.build(daily_target=2, display_mode=DisplayMode.PARTIAL)
        record = CompletionRecord(date=MONDAY, count=5)
        assert cell_intensity(habit, MONDAY, record) == 1.0

    def test_binary_mode_has_no_partial_shading(self):
        habit = HabitFactory.build(daily_target=4, display_mode=DisplayMode.BINARY)
        assert cell_intensity(habit, MONDAY, CompletionRecord(date=MONDAY, count=3)) == 0.0
        assert cell_intensity(habit, MONDAY, CompletionRecord(date=MONDAY, count=4)) == 1.0

    def test_off_schedule_completion(self):
        habit = SpecificWeekdaysHabitFactory.build(weekday_targets={1: 1})
        record = CompletionRecord(date=TUESDAY, count=3)
        assert cell_intensity(habit, TUESDAY, record) == OFF_SCHEDULE_INTENSITY

    def test_off_schedule_applies_in_binary_mode_too(self):
        habit = SpecificWeekdaysHabitFactory.build(
            weekday_targets={1: 1}, display_mode=DisplayMode.BINARY
        )
        record = CompletionRecord(date=TUESDAY, count=1)
        assert cell_intensity(habit, TUESDAY, record) == 0.5


@pytest.mark.unit
class TestRollingWindow:
    def test_shape_and_last_cell(self):
        # Thu 2026-01-15, Sunday-first weeks end on Saturday 01-17
        weeks = build_grid(HabitFactory.build(), [], RollingWindow(date(2026, 1, 15), 4))
        assert len(weeks) == 4
        assert all(len(column) == 7 for column in weeks)
        assert weeks[-1][-1].date == date(2026, 1, 17)
        assert weeks[0][0].date == date(2025, 12, 21)

    def test_monday_first_weeks(self):
        window = RollingWindow(date(2026, 1, 15), 1, week_start_day=1)
        weeks = build_grid(HabitFactory.build(), [], window)
        assert [cell.date for cell in weeks[0]][0] == date(2026, 1, 12)
        assert weeks[0][-1].date == date(2026, 1, 18)

    def test_cells_are_consecutive_days(self):
        weeks = build_grid(HabitFactory.build(), [], RollingWindow(date(2026, 3, 1), 3))
        days = [cell.date for column in weeks for cell in column]
        assert all((b - a).days == 1 for a, b in zip(days, days[1:]))

    def test_carries_completion_records(self):
        records = completions_for(MONDAY)
        weeks = build_grid(HabitFactory.build(), records, RollingWindow(MONDAY, 1))
        cells = {cell.date: cell for cell in weeks[0]}
        assert cells[MONDAY].completion_record == records[0]
        assert cells[MONDAY].intensity == 1.0
        assert cells[TUESDAY].completion_record is None

    @pytest.mark.parametrize("week_count", [0, MAX_GRID_WEEKS + 1])
    def test_rejects_out_of_range_week_count(self, week_count):
        with pytest.raises(ValueError, match="week_count"):
            RollingWindow(MONDAY, week_count)

    def test_rejects_bad_week_start(self):
        with pytest.raises(ValueError, match="week_start_day"):
            RollingWindow(MONDAY, 4, week_start_day=7)

    def test_accepts_maximum_week_count(self):
        weeks = build_grid(HabitFactory.build(), [], RollingWindow(MONDAY, MAX_GRID_WEEKS))
        assert len(weeks) == MAX_GRID_WEEKS

    def test_defaults_come_from_settings(self):
        window = RollingWindow(date(2026, 1, 15))
        assert window.week_count == 52
        assert window.week_start_day == 0
        assert len(build_grid(HabitFactory.build(), [], window)) == 52

    def test_grid_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("GRID_WEEK_START_DAY", "1")
        monkeypatch.setenv("GRID_WEEKS", "4")
        window = RollingWindow(date(2026, 1, 15))
        assert window.week_count == 4
        assert window.week_start_day == 1

        weeks = build_grid(HabitFactory.build(), [], window)
        assert len(weeks) == 4
        assert weeks[-1][0].date == date(2026, 1, 12)

    def test_explicit_values_override_settings(self, monkeypatch):
        monkeypatch.setenv("GRID_WEEK_START_DAY", "1")
        window = RollingWindow(date(2026, 1, 15), 2, week_start_day=0)
        assert window.week_count == 2
        assert window.week_start_day == 0


@pytest.mark.unit
class TestYearWindow:
    def test_bounds_cover_whole_year(self):
        # 2026-01-01 is a Thursday, 2026-12-31 a Thursday
        start, end = window_bounds(YearWindow(2026))
        assert start == date(2025, 12, 28)
        assert end == date(2027, 1, 2)

    def test_whole_weeks(self):
        weeks = build_grid(HabitFactory.build(), [], YearWindow(2026))
        assert len(weeks) == 53
        assert all(len(column) == 7 for column in weeks)

    def test_year_starting_on_week_start_has_no_leading_padding(self):
        # 2023-01-01 is a Sunday
        weeks = build_grid(HabitFactory.build(), [], YearWindow(2023))
        assert weeks[0][0].date == date(2023, 1, 1)

    def test_week_start_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("GRID_WEEK_START_DAY", "1")
        window = YearWindow(2026)
        assert window.week_start_day == 1
        assert window_bounds(window)[0] == date(2025, 12, 29)

    def test_monday_first_year(self):
        start, end = window_bounds(YearWindow(2026, week_start_day=1))
        assert start == date(2025, 12, 29)
        assert end == date(2027, 1, 3)


@pytest.mark.unit
class TestMonthLabels:
    def test_year_grid_labels_only_target_year(self):
        grid = build_contribution_grid(HabitFactory.build(), [], YearWindow(2026))
        labels = [label.label for label in grid.month_labels]
        assert labels == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ]
        # First column starts in Dec 2025 and gets no label
        assert grid.month_labels[0].week_index == 1

    def test_rolling_grid_labels_every_new_month(self):
        weeks = build_grid(HabitFactory.build(), [], RollingWindow(date(2026, 1, 15), 4))
        # Columns start 12-21, 12-28, 01-04, 01-11
        assert month_labels(weeks) == [
            MonthLabel(week_index=0, label="Dec"),
            MonthLabel(week_index=2, label="Jan"),
        ]

    def test_contribution_grid_bounds(self):
        grid = build_contribution_grid(
            HabitFactory.build(), [], RollingWindow(date(2026, 1, 15), 2)
        )
        assert isinstance(grid, ContributionGrid)
        assert grid.start_date == grid.weeks[0][0].date
        assert grid.end_date == grid.weeks[-1][-1].date
