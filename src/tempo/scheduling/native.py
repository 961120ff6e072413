"""Native scheduler backends.

The native scheduler is the authoritative record of which recurring
registrations exist. It knows handles and timing parameters only; it has no
idea which resource a registration serves (that lives in the metadata
store).

Backends:
- InMemoryNativeScheduler: Process-local registry
- LocalNativeScheduler: JSON file under an exclusive fcntl lock
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Protocol, TypeVar

from tempo.scheduling.persistence import lock_path_for, locked, write_json_atomic
from tempo.scheduling.types import (
    DailyRecurrence,
    HourlyRecurrence,
    MonthlyRecurrence,
    RecurrenceDescriptor,
    WeeklyRecurrence,
)

logger = logging.getLogger(__name__)

CLOCK_EVENT = "CLOCK"

_T = TypeVar("_T")


@dataclass
class NativeRegistration:
    """A single recurring registration held by the native scheduler.

    Only the fields relevant to the registration's kind are populated;
    the rest stay None.
    """

    handle: str
    handler: str
    event_type: str = CLOCK_EVENT
    every_hours: int | None = None
    at_hour: int | None = None
    near_minute: int | None = None
    week_day: int | None = None  # Monday=1..Sunday=7
    month_day: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_descriptor(
        cls, handle: str, handler: str, descriptor: RecurrenceDescriptor
    ) -> NativeRegistration:
        registration = cls(handle=handle, handler=handler)
        match descriptor:
            case HourlyRecurrence(interval_hours=interval):
                registration.every_hours = interval
            case DailyRecurrence(hour=hour, minute=minute):
                registration.at_hour = hour
                registration.near_minute = minute
            case WeeklyRecurrence(hour=hour, minute=minute, weekday=weekday):
                registration.at_hour = hour
                registration.near_minute = minute
                registration.week_day = weekday
            case MonthlyRecurrence(hour=hour, minute=minute, day_of_month=day):
                registration.at_hour = hour
                registration.near_minute = minute
                registration.month_day = day
            case _:
                raise TypeError(f"Unsupported descriptor: {descriptor!r}")
        return registration

    @property
    def cron(self) -> str | None:
        """Cron expression for calendar registrations, None for intervals."""
        if self.at_hour is None or self.near_minute is None:
            return None
        day_of_month = str(self.month_day) if self.month_day is not None else "*"
        # cron counts Sunday as 0
        day_of_week = str(self.week_day % 7) if self.week_day is not None else "*"
        return f"{self.near_minute} {self.at_hour} {day_of_month} * {day_of_week}"

    def next_fire_time(
        self, timezone: str = "UTC", now: datetime | None = None
    ) -> datetime | None:
        """Get the next fire time in UTC, or None if not computable.

        Args:
            timezone: IANA timezone name for evaluating calendar fields.
            now: Reference instant (defaults to the current time).
        """
        now = now or datetime.now(UTC)

        if self.every_hours:
            created_at = _as_utc(self.created_at)
            step = timedelta(hours=self.every_hours)
            elapsed = _as_utc(now) - created_at
            periods = max(1, math.ceil(elapsed / step))
            return created_at + periods * step

        cron = self.cron
        if cron is None:
            return None
        try:
            from zoneinfo import ZoneInfo

            from croniter import croniter

            try:
                tz = ZoneInfo(timezone)
            except Exception:
                logger.warning(
                    "invalid_timezone", extra={"schedule.timezone": timezone}
                )
                tz = ZoneInfo("UTC")

            next_local = croniter(cron, now.astimezone(tz)).get_next(datetime)
            return next_local.astimezone(UTC)
        except Exception as e:
            logger.warning(
                "next_fire_time_failed",
                extra={
                    "schedule.handle": self.handle,
                    "schedule.cron": cron,
                    "error.message": str(e),
                },
            )
            return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "handle": self.handle,
            "handler": self.handler,
            "event_type": self.event_type,
            "created_at": self.created_at.isoformat(),
        }
        for key in ("every_hours", "at_hour", "near_minute", "week_day", "month_day"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NativeRegistration | None:
        handle = data.get("handle")
        handler = data.get("handler")
        if not handle or not handler:
            return None
        created_at = _parse_timestamp(data.get("created_at"))
        return cls(
            handle=handle,
            handler=handler,
            event_type=data.get("event_type", CLOCK_EVENT),
            every_hours=data.get("every_hours"),
            at_hour=data.get("at_hour"),
            near_minute=data.get("near_minute"),
            week_day=data.get("week_day"),
            month_day=data.get("month_day"),
            created_at=created_at or datetime.now(UTC),
        )


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(str(value)))
    except ValueError:
        logger.warning("invalid_timestamp", extra={"schedule.created_at": value})
        return None


class NativeScheduler(Protocol):
    """Capability contract for the external, authoritative scheduler."""

    def create(
        self, handler: str, descriptor: RecurrenceDescriptor
    ) -> NativeRegistration: ...

    def get(self, handle: str) -> NativeRegistration | None: ...

    def delete(self, handle: str) -> bool: ...

    def registrations(self) -> list[NativeRegistration]: ...


def new_handle() -> str:
    return uuid.uuid4().hex


class InMemoryNativeScheduler:
    """Native scheduler that keeps registrations in process memory."""

    def __init__(self) -> None:
        self._registrations: dict[str, NativeRegistration] = {}

    def create(
        self, handler: str, descriptor: RecurrenceDescriptor
    ) -> NativeRegistration:
        registration = NativeRegistration.from_descriptor(
            new_handle(), handler, descriptor
        )
        self._registrations[registration.handle] = registration
        return registration

    def get(self, handle: str) -> NativeRegistration | None:
        return self._registrations.get(handle)

    def delete(self, handle: str) -> bool:
        return self._registrations.pop(handle, None) is not None

    def registrations(self) -> list[NativeRegistration]:
        return list(self._registrations.values())


class LocalNativeScheduler:
    """Native scheduler persisted to a JSON file.

    Every mutation runs under an exclusive lock on a sibling lock file and
    rewrites the document atomically.
    """

    def __init__(self, state_path: Path) -> None:
        self._state_path = state_path
        self._lock_file = lock_path_for(state_path)

    @property
    def state_path(self) -> Path:
        return self._state_path

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get(self, handle: str) -> NativeRegistration | None:
        return self._load().get(handle)

    def registrations(self) -> list[NativeRegistration]:
        return list(self._load().values())

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self, handler: str, descriptor: RecurrenceDescriptor
    ) -> NativeRegistration:
        registration = NativeRegistration.from_descriptor(
            new_handle(), handler, descriptor
        )

        def mutate(registrations: dict[str, NativeRegistration]) -> None:
            registrations[registration.handle] = registration

        self._mutate(mutate)
        return registration

    def delete(self, handle: str) -> bool:
        def mutate(registrations: dict[str, NativeRegistration]) -> bool:
            return registrations.pop(handle, None) is not None

        return bool(self._mutate(mutate))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, NativeRegistration]:
        if not self._state_path.exists():
            return {}
        data = json.loads(self._state_path.read_text() or "{}")
        registrations: dict[str, NativeRegistration] = {}
        for raw in data.get("registrations", []):
            registration = NativeRegistration.from_dict(raw)
            if registration is None:
                logger.warning(
                    "invalid_native_registration",
                    extra={"file.path": str(self._state_path)},
                )
                continue
            registrations[registration.handle] = registration
        return registrations

    def _mutate(
        self, mutate: Callable[[dict[str, NativeRegistration]], _T | None]
    ) -> _T | None:
        with locked(self._lock_file):
            registrations = self._load()
            result = mutate(registrations)
            write_json_atomic(
                self._state_path,
                {"registrations": [r.to_dict() for r in registrations.values()]},
            )
            return result
