"""Tests for logging configuration."""

import json
import logging
import os
import time
from pathlib import Path

import pytest
from rich.logging import RichHandler

from tempo.logging import (
    ComponentFormatter,
    JSONLHandler,
    configure_logging,
    prune_old_logs,
)


def _record(name: str = "tempo.scheduling.manager", **extra) -> logging.LogRecord:
    record = logging.LogRecord(name, logging.INFO, __file__, 1, "schedule_created", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONLHandler:
    def test_writes_structured_entry(self, tmp_path: Path):
        handler = JSONLHandler(tmp_path)
        try:
            handler.emit(_record(**{"schedule.handle": "abc"}))
        finally:
            handler.close()

        [log_file] = list(tmp_path.glob("*.jsonl"))
        entry = json.loads(log_file.read_text().strip())
        assert entry["level"] == "INFO"
        assert entry["component"] == "scheduling"
        assert entry["message"] == "schedule_created"
        assert entry["extra"] == {"schedule.handle": "abc"}

    def test_no_extra_key_without_context(self, tmp_path: Path):
        handler = JSONLHandler(tmp_path)
        try:
            handler.emit(_record())
        finally:
            handler.close()

        [log_file] = list(tmp_path.glob("*.jsonl"))
        assert "extra" not in json.loads(log_file.read_text())


class TestComponentFormatter:
    def test_component_and_context(self):
        formatter = ComponentFormatter("%(component)s | %(message)s")
        line = formatter.format(_record(**{"schedule.handle": "abc"}))
        assert line == "scheduling | schedule_created schedule.handle=abc"

    def test_foreign_logger(self):
        formatter = ComponentFormatter("%(component)s")
        assert formatter.format(_record(name="croniter.core")) == "croniter"


class TestPruneOldLogs:
    def test_prunes_only_old_files(self, tmp_path: Path):
        old = tmp_path / "2020-01-01.jsonl"
        new = tmp_path / "today.jsonl"
        other = tmp_path / "notes.txt"
        for path in (old, new, other):
            path.write_text("{}\n")
        ancient = time.time() - 30 * 86400
        os.utime(old, (ancient, ancient))
        os.utime(other, (ancient, ancient))

        assert prune_old_logs(tmp_path, retention_days=7) == 1
        assert not old.exists()
        assert new.exists()
        assert other.exists()

    def test_missing_dir(self, tmp_path: Path):
        assert prune_old_logs(tmp_path / "nope") == 0


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        yield
        root.handlers = saved_handlers
        root.setLevel(saved_level)

    def test_rich_console(self):
        configure_logging(level="DEBUG", use_rich=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [RichHandler]

    def test_plain_console_with_file(self, tmp_path: Path):
        configure_logging(level="WARNING", log_to_file=True, logs_dir=tmp_path)

        handlers = logging.getLogger().handlers
        assert isinstance(handlers[0], logging.StreamHandler)
        assert isinstance(handlers[1], JSONLHandler)
        handlers[1].close()

    def test_invalid_level_falls_back_to_info(self):
        configure_logging(level="LOUD")
        assert logging.getLogger().level == logging.INFO
