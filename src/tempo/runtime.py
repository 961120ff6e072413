"""Wire a ScheduleManager from configuration."""

from __future__ import annotations

import logging

from tempo.config.models import TempoConfig
from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.manager import ScheduleManager
from tempo.scheduling.native import (
    InMemoryNativeScheduler,
    LocalNativeScheduler,
    NativeScheduler,
)
from tempo.scheduling.store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MetadataStore,
)

logger = logging.getLogger(__name__)


def create_native_scheduler(config: TempoConfig) -> NativeScheduler:
    if config.scheduler.backend == "memory":
        return InMemoryNativeScheduler()
    return LocalNativeScheduler(config.scheduler.state_path.expanduser())


def create_key_value_store(config: TempoConfig) -> KeyValueStore:
    if config.metadata.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(config.metadata.path.expanduser())


def create_schedule_manager(config: TempoConfig) -> ScheduleManager:
    """Build a ScheduleManager for the configured backends.

    Raises:
        ConfigError: If the configured timezone is unknown.
    """
    config.resolve_timezone()

    adapter = SchedulerAdapter(
        create_native_scheduler(config), handler=config.scheduler.handler
    )
    store = MetadataStore(create_key_value_store(config))
    logger.debug(
        "schedule_manager_created",
        extra={
            "scheduler.backend": config.scheduler.backend,
            "metadata.backend": config.metadata.backend,
        },
    )
    return ScheduleManager(adapter, store, timezone=config.timezone)
