"""Schedule manager facade.

The only entry point the UI collaborator calls. Orchestrates the adapter,
metadata store, reconciler and formatter:

- create: validate -> native create (per descriptor) -> store binding
- list: reconcile -> live handles with a binding for the resource -> describe
- delete: native delete -> on success, drop the binding
"""

from __future__ import annotations

import logging

from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.errors import (
    NativeSchedulerError,
    NotFoundError,
    ScheduleError,
    ValidationError,
)
from tempo.scheduling.formatter import describe_schedule
from tempo.scheduling.reconciler import Reconciler
from tempo.scheduling.store import MetadataStore
from tempo.scheduling.types import (
    CreateFailure,
    CreateResult,
    DeleteResult,
    RecurrenceRequest,
    ScheduleBinding,
    ScheduleSummary,
    WeeklyRecurrence,
    build_descriptors,
)

logger = logging.getLogger(__name__)


class ScheduleManager:
    """Creates, lists and deletes recurring schedules for named resources."""

    def __init__(
        self,
        adapter: SchedulerAdapter,
        store: MetadataStore,
        *,
        reconciler: Reconciler | None = None,
        timezone: str = "UTC",
    ) -> None:
        self._adapter = adapter
        self._store = store
        self._reconciler = reconciler or Reconciler(adapter, store)
        self._timezone = timezone

    @property
    def adapter(self) -> SchedulerAdapter:
        return self._adapter

    @property
    def store(self) -> MetadataStore:
        return self._store

    def create_schedule(
        self, resource_name: str, request: RecurrenceRequest
    ) -> CreateResult:
        """Register a recurring schedule for a resource.

        Weekly requests create one registration per weekday. Each is
        attempted independently; earlier successes are kept when a later
        weekday fails, and the failure is reported per item. A registration
        whose metadata cannot be stored is rolled back and reported as a
        failure too.

        Raises:
            ValidationError: If the request is malformed. Nothing has been
                created when this is raised.
        """
        if not resource_name or not resource_name.strip():
            raise ValidationError("Resource name is required")
        descriptors = build_descriptors(request)
        frequency = descriptors[0].frequency

        logger.info(
            "schedule_create_requested",
            extra={
                "schedule.resource": resource_name,
                "schedule.frequency": frequency.value,
                "schedule.count": len(descriptors),
            },
        )

        result = CreateResult()
        for descriptor in descriptors:
            weekday = (
                descriptor.weekday if isinstance(descriptor, WeeklyRecurrence) else None
            )
            try:
                handle = self._adapter.create(descriptor)
            except NativeSchedulerError as e:
                result.failures.append(CreateFailure(error=e.message, weekday=weekday))
                continue

            binding = ScheduleBinding(
                handle=handle,
                resource_name=resource_name,
                recurrence_tag=frequency.value,
            )
            try:
                self._store.put(binding)
            except Exception as e:
                result.failures.append(
                    CreateFailure(
                        error=f"Failed to record schedule metadata: {e}",
                        weekday=weekday,
                    )
                )
                self._discard_unbound(handle, e)
                continue

            described = describe_schedule(handle, binding, self._adapter)
            result.handles.append(
                ScheduleSummary(
                    handle=handle,
                    category=described.category,
                    description=described.description,
                    next_fire=self._adapter.next_fire_time(handle, self._timezone),
                )
            )
            logger.info(
                "schedule_created",
                extra={
                    "schedule.handle": handle,
                    "schedule.resource": resource_name,
                    "schedule.frequency": frequency.value,
                },
            )

        if result.is_partial:
            logger.warning(
                "schedule_create_partial",
                extra={
                    "schedule.resource": resource_name,
                    "schedule.created": len(result.handles),
                    "schedule.failed": len(result.failures),
                },
            )
        elif not result.success:
            logger.warning(
                "schedule_create_failed",
                extra={
                    "schedule.resource": resource_name,
                    "error.message": "; ".join(f.error for f in result.failures),
                },
            )
        return result

    def list_schedules(self, resource_name: str) -> list[ScheduleSummary]:
        """List live schedules for a resource, repairing stale metadata first.

        Raises:
            NativeSchedulerError: If the native scheduler cannot be listed.
        """
        report = self._reconciler.run(resource_name)
        bindings = {b.handle: b for b in self._store.list_all(resource_name)}

        summaries: list[ScheduleSummary] = []
        for handle in report.live:
            binding = bindings.get(handle)
            if binding is None:
                continue
            described = describe_schedule(handle, binding, self._adapter)
            summaries.append(
                ScheduleSummary(
                    handle=handle,
                    category=described.category,
                    description=described.description,
                    next_fire=self._adapter.next_fire_time(handle, self._timezone),
                )
            )
        return summaries

    def delete_schedule(self, handle: str) -> DeleteResult:
        """Delete a schedule.

        The native registration goes first. The binding is only dropped once
        that succeeds, so a still-live registration is never orphaned from
        its metadata.
        """
        try:
            exists = self._adapter.exists(handle)
        except NativeSchedulerError as e:
            return _delete_failed(handle, e)
        if not exists:
            return _delete_failed(handle, NotFoundError(handle))

        if not self._adapter.delete(handle):
            return _delete_failed(
                handle, NativeSchedulerError(f"Failed to delete schedule {handle}")
            )

        self._store.delete(handle)
        logger.info("schedule_deleted", extra={"schedule.handle": handle})
        return DeleteResult(success=True)

    def _discard_unbound(self, handle: str, error: Exception) -> None:
        """Roll back a registration whose binding could not be stored.

        A partially written binding left behind is purged by the reconciler
        once the registration is gone.
        """
        rolled_back = self._adapter.delete(handle)
        logger.warning(
            "schedule_binding_failed",
            extra={
                "schedule.handle": handle,
                "schedule.rolled_back": rolled_back,
                "error.message": str(error),
            },
        )


def _delete_failed(handle: str, error: ScheduleError) -> DeleteResult:
    logger.warning(
        "schedule_delete_failed",
        extra={
            "schedule.handle": handle,
            "error.code": error.code,
            "error.message": error.message,
        },
    )
    return DeleteResult(success=False, error=error.message, code=error.code)
