"""Pydantic schemas for the records the engine consumes.

Habit and CompletionRecord are read-only snapshots handed over by the
storage layer. Both are validated on construction, so configuration errors
surface as pydantic.ValidationError before a habit ever reaches the
computations in services/.
"""

import json
from collections.abc import Mapping
from datetime import date
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    model_validator,
)

from core import get_logger
from models import DisplayMode, MissedCyclePolicy, RecurrenceKind

logger = get_logger(__name__)

MIN_INTERVAL_DAYS = 2

# Validation context flag used when a stored weekday mapping had to be dropped
_RECOVERED_TARGETS = "recovered_weekday_targets"


def parse_weekday_targets(raw: str | Mapping[Any, Any] | None) -> dict[int, int] | None:
    """Parse a serialized weekday -> target mapping.

    Accepts the JSON text stored by the persistence layer (``{"1": 3, "3": 2}``)
    or an already-decoded mapping. Returns None when the data is missing or
    malformed in any way; callers treat that as "no targets configured".
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("schedule.weekday_targets.malformed", reason="invalid_json")
            return None
    else:
        decoded = raw

    if not isinstance(decoded, Mapping):
        logger.warning("schedule.weekday_targets.malformed", reason="not_a_mapping")
        return None

    targets: dict[int, int] = {}
    for key, value in decoded.items():
        try:
            day = int(key)
        except (TypeError, ValueError):
            logger.warning("schedule.weekday_targets.malformed", reason="bad_key", key=key)
            return None
        # bool is an int subclass; reject it along with floats and strings
        if not 0 <= day <= 6 or isinstance(value, bool) or not isinstance(value, int):
            logger.warning(
                "schedule.weekday_targets.malformed", reason="bad_entry", key=key
            )
            return None
        if value < 1:
            logger.warning(
                "schedule.weekday_targets.malformed", reason="non_positive", key=key
            )
            return None
        targets[day] = value

    return targets


class Habit(BaseModel):
    """Recurrence configuration of a habit.

    Exactly the fields required by ``recurrence_kind`` must be set:

    - SPECIFIC_WEEKDAYS: ``weekday_targets`` (weekday 0=Sunday..6 -> target)
    - EVERY_N_DAYS: ``interval_days`` (>= 2), ``cycle_start_date`` and
      ``missed_cycle_policy``
    - DAILY / WEEKLY_AGGREGATE: none of the above

    ``daily_target`` is per day for DAILY, per cycle for EVERY_N_DAYS and per
    week for WEEKLY_AGGREGATE. ``display_mode`` and ``allow_overload`` only
    affect presentation and logging limits, never due-ness.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    recurrence_kind: RecurrenceKind
    daily_target: int = Field(default=1, ge=1)
    weekday_targets: dict[int, int] | None = None
    interval_days: int | None = None
    cycle_start_date: date | None = None
    missed_cycle_policy: MissedCyclePolicy | None = None
    display_mode: DisplayMode = DisplayMode.PARTIAL
    allow_overload: bool = True

    @model_validator(mode="after")
    def validate_recurrence(self, info: ValidationInfo) -> Self:
        kind = self.recurrence_kind
        every_n_fields = {
            "interval_days": self.interval_days,
            "cycle_start_date": self.cycle_start_date,
            "missed_cycle_policy": self.missed_cycle_policy,
        }

        if kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
            if self.weekday_targets is None:
                raise ValueError("weekday_targets is required for specific weekdays")
            recovered = bool(info.context and info.context.get(_RECOVERED_TARGETS))
            if not self.weekday_targets and not recovered:
                raise ValueError("weekday_targets must schedule at least one weekday")
            for day, target in self.weekday_targets.items():
                if not 0 <= day <= 6:
                    raise ValueError(f"weekday {day} is outside 0 (Sunday)..6 (Saturday)")
                if target < 1:
                    raise ValueError(f"target for weekday {day} must be positive")
        elif self.weekday_targets is not None:
            raise ValueError(f"weekday_targets is not allowed for {kind.value} habits")

        if kind == RecurrenceKind.EVERY_N_DAYS:
            missing = [name for name, value in every_n_fields.items() if value is None]
            if missing:
                raise ValueError(
                    f"{', '.join(missing)} required for every-N-days habits"
                )
            if self.interval_days < MIN_INTERVAL_DAYS:
                raise ValueError(
                    f"interval_days must be at least {MIN_INTERVAL_DAYS}, "
                    f"got {self.interval_days}"
                )
        else:
            present = [name for name, value in every_n_fields.items() if value is not None]
            if present:
                raise ValueError(
                    f"{', '.join(present)} not allowed for {kind.value} habits"
                )

        return self

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Habit":
        """Build a Habit from a stored habits-table row.

        The row uses the persisted column names (``frequency_type``,
        ``target_count``, ``frequency_days`` as JSON text, ...). A corrupted
        weekday mapping is logged and replaced by an empty one, so the habit
        is never scheduled instead of failing to load.
        """
        kind = RecurrenceKind(row["frequency_type"])
        data: dict[str, Any] = {
            "id": str(row["id"]),
            "name": row.get("name"),
            "recurrence_kind": kind,
            "daily_target": row.get("target_count", 1),
            "display_mode": row.get("completion_display") or DisplayMode.PARTIAL,
            "allow_overload": bool(row.get("allow_overload", 1)),
        }
        context: dict[str, bool] = {}

        if kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
            targets = parse_weekday_targets(row.get("frequency_days"))
            # Missing, malformed and empty ("{}") mappings all load as never due
            if not targets:
                logger.warning("habit.weekday_targets.recovered", habit_id=data["id"])
                targets = {}
                context[_RECOVERED_TARGETS] = True
            data["weekday_targets"] = targets
        elif kind == RecurrenceKind.EVERY_N_DAYS:
            data["interval_days"] = row.get("frequency_interval")
            data["cycle_start_date"] = row.get("frequency_start_date")
            data["missed_cycle_policy"] = (
                row.get("missed_day_behavior") or MissedCyclePolicy.CONTINUE
            )

        return cls.model_validate(data, context=context)


class CompletionRecord(BaseModel):
    """What was logged for one habit on one calendar date."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(default=0, ge=0)
    skipped: bool = False
    note: str | None = None

    @model_validator(mode="after")
    def validate_skipped(self) -> Self:
        if self.skipped and self.count != 0:
            raise ValueError("Cannot have count > 0 when skipped")
        return self
