"""Shared test fixtures and factories."""

from pathlib import Path

import pytest

from tempo.scheduling.adapter import SchedulerAdapter
from tempo.scheduling.manager import ScheduleManager
from tempo.scheduling.native import InMemoryNativeScheduler, NativeRegistration
from tempo.scheduling.store import InMemoryKeyValueStore, MetadataStore
from tempo.scheduling.types import RecurrenceDescriptor, WeeklyRecurrence

# =============================================================================
# Native Scheduler Doubles
# =============================================================================


class FlakyNativeScheduler(InMemoryNativeScheduler):
    """In-memory scheduler that fails on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_weekdays: set[int] = set()
        self.fail_create = False
        self.fail_delete = False
        self.fail_list = False
        self.create_calls: list[RecurrenceDescriptor] = []

    def create(
        self, handler: str, descriptor: RecurrenceDescriptor
    ) -> NativeRegistration:
        self.create_calls.append(descriptor)
        if self.fail_create:
            raise RuntimeError("quota exceeded")
        if (
            isinstance(descriptor, WeeklyRecurrence)
            and descriptor.weekday in self.fail_weekdays
        ):
            raise RuntimeError(f"cannot schedule weekday {descriptor.weekday}")
        return super().create(handler, descriptor)

    def delete(self, handle: str) -> bool:
        if self.fail_delete:
            raise RuntimeError("scheduler unavailable")
        return super().delete(handle)

    def registrations(self) -> list[NativeRegistration]:
        if self.fail_list:
            raise RuntimeError("scheduler unavailable")
        return super().registrations()


# =============================================================================
# Scheduling Fixtures
# =============================================================================


@pytest.fixture
def native() -> FlakyNativeScheduler:
    return FlakyNativeScheduler()


@pytest.fixture
def adapter(native: FlakyNativeScheduler) -> SchedulerAdapter:
    return SchedulerAdapter(native)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def metadata_store(kv: InMemoryKeyValueStore) -> MetadataStore:
    return MetadataStore(kv)


@pytest.fixture
def manager(adapter: SchedulerAdapter, metadata_store: MetadataStore) -> ScheduleManager:
    return ScheduleManager(adapter, metadata_store)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_toml_content(tmp_path: Path) -> str:
    """Valid TOML config content with state under tmp_path."""
    return f"""
timezone = "UTC"

[scheduler]
backend = "local"
state_path = "{tmp_path / "scheduler.json"}"
handler = "sync_resource"

[metadata]
backend = "file"
path = "{tmp_path / "metadata.json"}"

[logging]
level = "INFO"
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})
