"""Human-readable schedule descriptions."""

from __future__ import annotations

from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.types import (
    WEEKDAY_NAMES,
    Frequency,
    ScheduleBinding,
    ScheduleDescription,
)

FALLBACK_CATEGORY = "Scheduled"
FALLBACK_DESCRIPTION = "Automatic sync"


def format_clock(hour: int, minute: int) -> str:
    """Format a 24h time as "H:MM AM/PM"."""
    hour12 = 12 if hour % 12 == 0 else hour % 12
    ampm = "AM" if hour < 12 else "PM"
    return f"{hour12}:{minute:02d} {ampm}"


def weekday_name(weekday: int) -> str | None:
    """Name for Monday=1..Sunday=7, None when out of range."""
    if 1 <= weekday <= len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[weekday - 1]
    return None


def describe_schedule(
    handle: str,
    binding: ScheduleBinding | None,
    adapter: SchedulerAdapter,
) -> ScheduleDescription:
    """Describe a live handle from its binding and whatever the adapter resolves.

    Never raises: unresolvable fields drop their clause, and an unknown
    recurrence renders the generic fallback.
    """
    suffix = f' for resource "{binding.resource_name}"' if binding else ""
    frequency = binding.frequency if binding else None

    match frequency:
        case Frequency.HOURLY:
            interval = adapter.interval_hours(handle) or 1
            unit = "hour" if interval == 1 else "hours"
            return ScheduleDescription("Hourly", f"Every {interval} {unit}{suffix}")

        case Frequency.DAILY:
            hour = adapter.hour(handle)
            minute = adapter.minute(handle)
            time_str = ""
            if hour is not None and minute is not None:
                time_str = f" at {format_clock(hour, minute)}"
            return ScheduleDescription("Daily", f"Every day{time_str}{suffix}")

        case Frequency.WEEKLY:
            weekday = adapter.weekday(handle)
            name = weekday_name(weekday) if weekday is not None else None
            day_str = f" on {name}" if name else ""
            return ScheduleDescription("Weekly", f"Every week{day_str}{suffix}")

        case Frequency.MONTHLY:
            month_day = adapter.month_day(handle)
            day_str = f" on day {month_day}" if month_day is not None else ""
            return ScheduleDescription("Monthly", f"Every month{day_str}{suffix}")

        case _:
            return ScheduleDescription(
                FALLBACK_CATEGORY, f"{FALLBACK_DESCRIPTION}{suffix}"
            )
