"""Adapter over the native scheduler capability.

The adapter is the boundary where backend exceptions become
NativeSchedulerError, and where registrations that belong to other handlers
(or are not clock-driven) are filtered out. Per-handle accessors return None
instead of raising when a field does not apply to a registration's kind.
"""

from __future__ import annotations

import logging
from datetime import datetime

from tempo.scheduling.errors import NativeSchedulerError
from tempo.scheduling.native import CLOCK_EVENT, NativeRegistration, NativeScheduler
from tempo.scheduling.types import RecurrenceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_HANDLER = "sync_resource"


class SchedulerAdapter:
    """Thin wrapper around a native scheduler. Exposes handles only."""

    def __init__(self, native: NativeScheduler, handler: str = DEFAULT_HANDLER):
        self._native = native
        self._handler = handler

    @property
    def handler(self) -> str:
        return self._handler

    def create(self, descriptor: RecurrenceDescriptor) -> str:
        """Create one native registration and return its handle.

        Raises:
            NativeSchedulerError: If the native call fails.
        """
        try:
            registration = self._native.create(self._handler, descriptor)
        except Exception as e:
            logger.warning(
                "native_create_failed",
                extra={
                    "schedule.frequency": descriptor.frequency.value,
                    "error.message": str(e),
                },
            )
            raise NativeSchedulerError(f"Failed to create schedule: {e}") from e
        return registration.handle

    def delete(self, handle: str) -> bool:
        """Delete a registration. Returns False if it could not be deleted."""
        try:
            return self._native.delete(handle)
        except Exception as e:
            logger.warning(
                "native_delete_failed",
                extra={"schedule.handle": handle, "error.message": str(e)},
            )
            return False

    def list(self) -> list[str]:
        """List live handles owned by this handler, in native order.

        Raises:
            NativeSchedulerError: If the native listing fails.
        """
        try:
            registrations = self._native.registrations()
        except Exception as e:
            logger.error("native_list_failed", extra={"error.message": str(e)})
            raise NativeSchedulerError(f"Failed to list schedules: {e}") from e
        return [r.handle for r in registrations if self._owns(r)]

    def exists(self, handle: str) -> bool:
        """Check whether a live registration exists for the handle.

        Raises:
            NativeSchedulerError: If the native lookup fails.
        """
        try:
            registration = self._native.get(handle)
        except Exception as e:
            raise NativeSchedulerError(f"Failed to look up schedule: {e}") from e
        return registration is not None and self._owns(registration)

    # ------------------------------------------------------------------
    # Per-handle accessors (value or None, never raise)
    # ------------------------------------------------------------------

    def hour(self, handle: str) -> int | None:
        registration = self._resolve(handle)
        return registration.at_hour if registration else None

    def minute(self, handle: str) -> int | None:
        registration = self._resolve(handle)
        return registration.near_minute if registration else None

    def weekday(self, handle: str) -> int | None:
        registration = self._resolve(handle)
        return registration.week_day if registration else None

    def month_day(self, handle: str) -> int | None:
        registration = self._resolve(handle)
        return registration.month_day if registration else None

    def interval_hours(self, handle: str) -> int | None:
        registration = self._resolve(handle)
        return registration.every_hours if registration else None

    def next_fire_time(self, handle: str, timezone: str = "UTC") -> datetime | None:
        registration = self._resolve(handle)
        return registration.next_fire_time(timezone) if registration else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _owns(self, registration: NativeRegistration) -> bool:
        return (
            registration.handler == self._handler
            and registration.event_type == CLOCK_EVENT
        )

    def _resolve(self, handle: str) -> NativeRegistration | None:
        try:
            registration = self._native.get(handle)
        except Exception as e:
            logger.debug(
                "native_lookup_failed",
                extra={"schedule.handle": handle, "error.message": str(e)},
            )
            return None
        if registration is None or not self._owns(registration):
            return None
        return registration
