"""Enumerations shared by the habit engine.

Values match what the storage layer persists, so a stored row can be
passed straight into schemas.Habit.
"""

from enum import Enum as PyEnum
from enum import IntEnum


class RecurrenceKind(str, PyEnum):
    """How a habit recurs.

    This is a closed set. The evaluator in services/schedule.py handles
    every member explicitly.
    """

    DAILY = "daily"
    SPECIFIC_WEEKDAYS = "specific_days"
    EVERY_N_DAYS = "every_n_days"
    WEEKLY_AGGREGATE = "weekly"


class MissedCyclePolicy(str, PyEnum):
    """Where the next cycle of an every-N-days habit is anchored."""

    CONTINUE = "continue"  # always cycle_start_date
    RESET_ON_MISS = "reset"  # last successful completion


class DisplayMode(str, PyEnum):
    """How completion is shaded in the contribution grid."""

    PARTIAL = "partial"
    BINARY = "binary"


class CompletionState(str, PyEnum):
    """Progress of a single date (or week) against its target."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class StreakUnit(str, PyEnum):
    DAYS = "days"
    WEEKS = "weeks"


class Weekday(IntEnum):
    """Day-of-week numbering used throughout: 0 = Sunday .. 6 = Saturday."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
