"""Scheduling subsystem: recurring schedule registration and reconciliation.

Public API:
- ScheduleManager: Facade for create/list/delete
- SchedulerAdapter: Wrapper around a native scheduler capability
- MetadataStore: Handle -> binding mapping over a key-value capability
- Reconciler: Read-repair of stale bindings

Types:
- RecurrenceRequest: Raw request from the UI
- ScheduleBinding: Stored handle/resource/frequency association
- ScheduleSummary: A described live schedule
"""

from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.errors import (
    NativeSchedulerError,
    NotFoundError,
    PartialFailure,
    ScheduleError,
    ValidationError,
)
from tempo.scheduling.formatter import describe_schedule
from tempo.scheduling.manager import ScheduleManager
from tempo.scheduling.native import (
    InMemoryNativeScheduler,
    LocalNativeScheduler,
    NativeRegistration,
    NativeScheduler,
)
from tempo.scheduling.reconciler import Reconciler, ReconcileReport
from tempo.scheduling.store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MetadataStore,
)
from tempo.scheduling.types import (
    CreateResult,
    DeleteResult,
    Frequency,
    RecurrenceRequest,
    ScheduleBinding,
    ScheduleSummary,
)

__all__ = [
    "CreateResult",
    "DeleteResult",
    "Frequency",
    "InMemoryKeyValueStore",
    "InMemoryNativeScheduler",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalNativeScheduler",
    "MetadataStore",
    "NativeRegistration",
    "NativeScheduler",
    "NativeSchedulerError",
    "NotFoundError",
    "PartialFailure",
    "ReconcileReport",
    "Reconciler",
    "RecurrenceRequest",
    "ScheduleBinding",
    "ScheduleError",
    "ScheduleManager",
    "ScheduleSummary",
    "SchedulerAdapter",
    "ValidationError",
    "describe_schedule",
]
