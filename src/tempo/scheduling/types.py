"""Schedule types.

Public types:
- Frequency: Coarse recurrence category stored alongside each binding
- RecurrenceDescriptor: Validated cadence (hourly/daily/weekly/monthly)
- RecurrenceRequest: Raw request coming from the UI collaborator
- ScheduleBinding: Stored association of handle -> resource + frequency
- CreateResult / DeleteResult: Per-call outcomes returned by the manager
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from tempo.scheduling.errors import NativeSchedulerError, PartialFailure, ValidationError

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DEFAULT_HOUR = 8
DEFAULT_MINUTE = 0
DEFAULT_MONTH_DAY = 1
DEFAULT_INTERVAL_HOURS = 1
DEFAULT_WEEKDAY = 1  # Monday


class Frequency(StrEnum):
    """Allowed recurrence categories."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: str | None) -> Frequency | None:
        """Return the frequency for a stored tag, or None if unrecognized."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class HourlyRecurrence:
    interval_hours: int = DEFAULT_INTERVAL_HOURS

    @property
    def frequency(self) -> Frequency:
        return Frequency.HOURLY


@dataclass(frozen=True)
class DailyRecurrence:
    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE

    @property
    def frequency(self) -> Frequency:
        return Frequency.DAILY


@dataclass(frozen=True)
class WeeklyRecurrence:
    """One weekday of a weekly schedule (Monday=1..Sunday=7)."""

    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE
    weekday: int = DEFAULT_WEEKDAY

    @property
    def frequency(self) -> Frequency:
        return Frequency.WEEKLY


@dataclass(frozen=True)
class MonthlyRecurrence:
    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE
    day_of_month: int = DEFAULT_MONTH_DAY

    @property
    def frequency(self) -> Frequency:
        return Frequency.MONTHLY


RecurrenceDescriptor = (
    HourlyRecurrence | DailyRecurrence | WeeklyRecurrence | MonthlyRecurrence
)


@dataclass
class RecurrenceRequest:
    """A schedule request as collected by the UI.

    Weekly requests may name several weekdays; each one becomes its own
    descriptor (and its own native registration).
    """

    frequency: str
    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE
    weekdays: list[int] = field(default_factory=list)
    month_day: int = DEFAULT_MONTH_DAY
    interval_hours: int = DEFAULT_INTERVAL_HOURS


@dataclass(frozen=True)
class ScheduleBinding:
    """Why a native registration exists: which resource, which cadence."""

    handle: str
    resource_name: str
    recurrence_tag: str | None = None

    @property
    def frequency(self) -> Frequency | None:
        return Frequency.parse(self.recurrence_tag)


@dataclass(frozen=True)
class ScheduleDescription:
    category: str
    description: str


@dataclass
class ScheduleSummary:
    """A live, labeled schedule as shown to the user."""

    handle: str
    category: str
    description: str
    next_fire: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "handle": self.handle,
            "category": self.category,
            "description": self.description,
            "next_fire": self.next_fire.isoformat() if self.next_fire else None,
        }


@dataclass
class CreateFailure:
    """A single failed native create within a batch."""

    error: str
    weekday: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.error}
        if self.weekday is not None:
            data["weekday"] = self.weekday
        return data


@dataclass
class CreateResult:
    """Itemized outcome of a create request.

    The call counts as successful when at least one handle was created;
    failures are kept per item so the caller can retry selectively.
    """

    handles: list[ScheduleSummary] = field(default_factory=list)
    failures: list[CreateFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.handles)

    @property
    def is_partial(self) -> bool:
        return bool(self.handles) and bool(self.failures)

    def raise_for_failures(self) -> None:
        """Raise if any item failed.

        Raises:
            PartialFailure: Some, but not all, items failed.
            NativeSchedulerError: Every item failed.
        """
        if not self.failures:
            return
        errors = "; ".join(f.error for f in self.failures)
        if self.handles:
            raise PartialFailure(
                f"{len(self.failures)} of {len(self.handles) + len(self.failures)} "
                f"schedules failed: {errors}",
                failures=self.failures,
            )
        raise NativeSchedulerError(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "handles": [h.to_dict() for h in self.handles],
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class DeleteResult:
    success: bool
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            data["error"] = self.error
        return data


def _require_int(name: str, value: Any, low: int, high: int | None = None) -> int:
    # bool is an int subclass; a checkbox value is never a valid hour
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ValidationError(f"{name} must be {bounds}, got {value}")
    return value


def build_descriptors(request: RecurrenceRequest) -> list[RecurrenceDescriptor]:
    """Validate a request and expand it into native-ready descriptors.

    Weekly requests produce one descriptor per distinct weekday, in
    ascending order; an empty weekday selection defaults to Monday.

    Raises:
        ValidationError: If any field is out of range or the frequency is
            unknown.
    """
    frequency = Frequency.parse(request.frequency)
    if frequency is None:
        allowed = ", ".join(f.value for f in Frequency)
        raise ValidationError(
            f"Unknown frequency {request.frequency!r}. Expected one of: {allowed}"
        )

    if frequency == Frequency.HOURLY:
        interval = _require_int("interval_hours", request.interval_hours, 1)
        return [HourlyRecurrence(interval_hours=interval)]

    hour = _require_int("hour", request.hour, 0, 23)
    minute = _require_int("minute", request.minute, 0, 59)

    if frequency == Frequency.DAILY:
        return [DailyRecurrence(hour=hour, minute=minute)]

    if frequency == Frequency.WEEKLY:
        weekdays = {
            _require_int("weekday", day, 1, 7) for day in request.weekdays or []
        }
        if not weekdays:
            weekdays = {DEFAULT_WEEKDAY}
        return [
            WeeklyRecurrence(hour=hour, minute=minute, weekday=day)
            for day in sorted(weekdays)
        ]

    day_of_month = _require_int("month_day", request.month_day, 1, 31)
    return [MonthlyRecurrence(hour=hour, minute=minute, day_of_month=day_of_month)]
