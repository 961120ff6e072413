"""Read-repair between the native scheduler and the metadata store.

Runs inline before every listing. Bindings whose handle is no longer live
are purged; live handles without a binding are left alone (this subsystem
does not adopt registrations it cannot explain).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.store import MetadataStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    live: list[str] = field(default_factory=list)
    purged: list[str] = field(default_factory=list)
    unlabeled: list[str] = field(default_factory=list)


class Reconciler:
    """Purges stale bindings. Idempotent and safe to run concurrently."""

    def __init__(self, adapter: SchedulerAdapter, store: MetadataStore) -> None:
        self._adapter = adapter
        self._store = store

    def run(self, resource_name: str | None = None) -> ReconcileReport:
        """Reconcile bindings for one resource (or all when None).

        Raises:
            NativeSchedulerError: If the native listing fails. Nothing is
                purged in that case.
        """
        live = self._adapter.list()
        live_set = set(live)
        stored = self._store.list_all(resource_name)
        stored_handles = {b.handle for b in stored}

        report = ReconcileReport(live=live)
        for binding in stored:
            if binding.handle in live_set:
                continue
            self._store.delete(binding.handle)
            report.purged.append(binding.handle)
            logger.info(
                "stale_binding_purged",
                extra={
                    "schedule.handle": binding.handle,
                    "schedule.resource": binding.resource_name,
                },
            )

        # A live handle missing from a filtered listing may belong to another
        # resource; only count it as unlabeled when it has no binding at all.
        for handle in live:
            if handle in stored_handles:
                continue
            if resource_name is None or self._store.get(handle) is None:
                report.unlabeled.append(handle)

        if report.unlabeled:
            logger.debug(
                "unlabeled_handles_skipped",
                extra={"schedule.count": len(report.unlabeled)},
            )
        return report
