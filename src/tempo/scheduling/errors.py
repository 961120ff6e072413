"""Schedule error taxonomy.

Every error carries a stable ``code`` so callers (CLI, UI) can branch on it
without matching message text.
"""

from __future__ import annotations


class ScheduleError(Exception):
    """Schedule operation error with stable error code."""

    code = "schedule_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ScheduleError):
    """Malformed recurrence request. Raised before any side effect."""

    code = "validation_error"


class NativeSchedulerError(ScheduleError):
    """A create/delete/list call to the native scheduler failed."""

    code = "native_scheduler_error"


class NotFoundError(ScheduleError):
    """No live native registration exists for the handle."""

    code = "not_found"

    def __init__(self, handle: str) -> None:
        super().__init__(f"Schedule not found: {handle}")
        self.handle = handle


class PartialFailure(ScheduleError):
    """Some items of a multi-weekday create batch failed."""

    code = "partial_failure"

    def __init__(self, message: str, failures: list | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []
