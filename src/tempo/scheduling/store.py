"""Schedule metadata store backed by a key-value capability.

Each binding is stored as two keys:

    TRIGGER_<handle>_RESOURCE   -> resource name
    TRIGGER_<handle>_FREQUENCY  -> recurrence tag (hourly/daily/weekly/monthly)

There is no transaction boundary across keys or across callers. Writes only
ever follow a successful native create, and the reconciler repairs bindings
whose native registration has disappeared.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TypeVar

from tempo.scheduling.persistence import lock_path_for, locked, write_json_atomic
from tempo.scheduling.types import ScheduleBinding

logger = logging.getLogger(__name__)

KEY_PREFIX = "TRIGGER_"
RESOURCE_SUFFIX = "_RESOURCE"
FREQUENCY_SUFFIX = "_FREQUENCY"

_RESOURCE_KEY = re.compile(r"^TRIGGER_(?P<handle>.+)_RESOURCE$")

_T = TypeVar("_T")


def resource_key(handle: str) -> str:
    return f"{KEY_PREFIX}{handle}{RESOURCE_SUFFIX}"


def frequency_key(handle: str) -> str:
    return f"{KEY_PREFIX}{handle}{FREQUENCY_SUFFIX}"


class KeyValueStore(Protocol):
    """String-keyed persistence capability."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileKeyValueStore:
    """Key-value store persisted as a single JSON object."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock_file = lock_path_for(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def keys(self) -> list[str]:
        return list(self._load())

    def set(self, key: str, value: str) -> None:
        def mutate(data: dict[str, str]) -> None:
            data[key] = value

        self._mutate(mutate)

    def delete(self, key: str) -> None:
        def mutate(data: dict[str, str]) -> None:
            data.pop(key, None)

        self._mutate(mutate)

    def _load(self, *, quarantine: bool = False) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text() or "{}")
        except json.JSONDecodeError:
            data = None
        if not isinstance(data, dict):
            logger.warning("corrupt_metadata_file", extra={"file.path": str(self._path)})
            if quarantine:
                self._quarantine()
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _quarantine(self) -> None:
        # Keep the unreadable file for manual recovery before it is rewritten
        target = self._path.with_name(f"{self._path.name}.corrupt")
        self._path.replace(target)
        logger.warning(
            "corrupt_metadata_moved",
            extra={"file.path": str(self._path), "file.moved_to": str(target)},
        )

    def _mutate(self, mutate: Callable[[dict[str, str]], _T | None]) -> _T | None:
        with locked(self._lock_file):
            data = self._load(quarantine=True)
            result = mutate(data)
            write_json_atomic(self._path, data)
            return result


class MetadataStore:
    """Maps schedule handles to their bindings."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def put(self, binding: ScheduleBinding) -> None:
        self._kv.set(resource_key(binding.handle), binding.resource_name)
        if binding.recurrence_tag:
            self._kv.set(frequency_key(binding.handle), binding.recurrence_tag)

    def get(self, handle: str) -> ScheduleBinding | None:
        resource_name = self._kv.get(resource_key(handle))
        if resource_name is None:
            return None
        return ScheduleBinding(
            handle=handle,
            resource_name=resource_name,
            recurrence_tag=self._kv.get(frequency_key(handle)),
        )

    def delete(self, handle: str) -> None:
        self._kv.delete(resource_key(handle))
        self._kv.delete(frequency_key(handle))

    def list_all(self, resource_name: str | None = None) -> list[ScheduleBinding]:
        """List stored bindings, optionally only those for one resource."""
        bindings: list[ScheduleBinding] = []
        for key in self._kv.keys():
            match = _RESOURCE_KEY.match(key)
            if not match:
                continue
            binding = self.get(match.group("handle"))
            if binding is None:
                continue
            if resource_name is not None and binding.resource_name != resource_name:
                continue
            bindings.append(binding)
        return bindings
