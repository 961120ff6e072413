"""Tests for native scheduler backends."""

from datetime import UTC, datetime
from pathlib import Path

from tempo.scheduling.native import (
    InMemoryNativeScheduler,
    LocalNativeScheduler,
    NativeRegistration,
)
from tempo.scheduling.types import (
    DailyRecurrence,
    HourlyRecurrence,
    MonthlyRecurrence,
    WeeklyRecurrence,
)

# 2026-01-12 is a Monday
MONDAY_8AM = datetime(2026, 1, 12, 8, 0, tzinfo=UTC)


class TestNativeRegistration:
    """Tests for NativeRegistration."""

    def test_from_hourly(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", HourlyRecurrence(interval_hours=6)
        )
        assert reg.every_hours == 6
        assert reg.at_hour is None
        assert reg.cron is None

    def test_from_daily(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", DailyRecurrence(hour=9, minute=30)
        )
        assert (reg.at_hour, reg.near_minute) == (9, 30)
        assert reg.week_day is None
        assert reg.cron == "30 9 * * *"

    def test_from_weekly_sunday_maps_to_cron_zero(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", WeeklyRecurrence(hour=7, minute=5, weekday=7)
        )
        assert reg.week_day == 7
        assert reg.cron == "5 7 * * 0"

    def test_from_monthly(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", MonthlyRecurrence(hour=0, minute=0, day_of_month=15)
        )
        assert reg.month_day == 15
        assert reg.cron == "0 0 15 * *"

    def test_next_fire_daily(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", DailyRecurrence(hour=9, minute=30)
        )
        assert reg.next_fire_time("UTC", now=MONDAY_8AM) == datetime(
            2026, 1, 12, 9, 30, tzinfo=UTC
        )

    def test_next_fire_weekly_rolls_to_next_week(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", WeeklyRecurrence(hour=7, minute=0, weekday=1)
        )
        assert reg.next_fire_time("UTC", now=MONDAY_8AM) == datetime(
            2026, 1, 19, 7, 0, tzinfo=UTC
        )

    def test_next_fire_weekly_sunday(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", WeeklyRecurrence(hour=10, minute=0, weekday=7)
        )
        assert reg.next_fire_time("UTC", now=MONDAY_8AM) == datetime(
            2026, 1, 18, 10, 0, tzinfo=UTC
        )

    def test_next_fire_respects_timezone(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", DailyRecurrence(hour=9, minute=0)
        )
        # 09:00 in New York (EST, UTC-5) is 14:00 UTC
        assert reg.next_fire_time("America/New_York", now=MONDAY_8AM) == datetime(
            2026, 1, 12, 14, 0, tzinfo=UTC
        )

    def test_next_fire_invalid_timezone_falls_back_to_utc(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", DailyRecurrence(hour=9, minute=0)
        )
        assert reg.next_fire_time("Not/AZone", now=MONDAY_8AM) == datetime(
            2026, 1, 12, 9, 0, tzinfo=UTC
        )

    def test_next_fire_hourly_steps_from_creation(self):
        reg = NativeRegistration(
            handle="h",
            handler="sync_resource",
            every_hours=3,
            created_at=datetime(2026, 1, 12, 0, 0, tzinfo=UTC),
        )
        now = datetime(2026, 1, 12, 4, 0, tzinfo=UTC)
        assert reg.next_fire_time(now=now) == datetime(2026, 1, 12, 6, 0, tzinfo=UTC)

    def test_next_fire_unknown_kind(self):
        reg = NativeRegistration(handle="h", handler="sync_resource")
        assert reg.next_fire_time(now=MONDAY_8AM) is None

    def test_dict_round_trip_keeps_only_populated_fields(self):
        reg = NativeRegistration.from_descriptor(
            "h", "sync_resource", WeeklyRecurrence(hour=7, minute=5, weekday=3)
        )
        data = reg.to_dict()
        assert "every_hours" not in data
        assert "month_day" not in data
        restored = NativeRegistration.from_dict(data)
        assert restored == reg

    def test_from_dict_requires_handle_and_handler(self):
        assert NativeRegistration.from_dict({"handler": "x"}) is None
        assert NativeRegistration.from_dict({"handle": "x"}) is None

    def test_from_dict_naive_created_at_is_utc(self):
        reg = NativeRegistration.from_dict(
            {
                "handle": "h",
                "handler": "sync_resource",
                "every_hours": 3,
                "created_at": "2026-01-12T00:00:00",
            }
        )
        assert reg.created_at == datetime(2026, 1, 12, 0, 0, tzinfo=UTC)
        now = datetime(2026, 1, 12, 4, 0, tzinfo=UTC)
        assert reg.next_fire_time(now=now) == datetime(2026, 1, 12, 6, 0, tzinfo=UTC)

    def test_from_dict_unparseable_created_at(self):
        reg = NativeRegistration.from_dict(
            {"handle": "h", "handler": "sync_resource", "created_at": "yesterday"}
        )
        assert reg is not None
        assert reg.created_at.tzinfo is not None

    def test_next_fire_hourly_naive_created_at(self):
        reg = NativeRegistration(
            handle="h",
            handler="sync_resource",
            every_hours=2,
            created_at=datetime(2026, 1, 12, 0, 0),
        )
        now = datetime(2026, 1, 12, 3, 0, tzinfo=UTC)
        assert reg.next_fire_time(now=now) == datetime(2026, 1, 12, 4, 0, tzinfo=UTC)


class TestInMemoryNativeScheduler:
    def test_create_assigns_unique_handles(self):
        native = InMemoryNativeScheduler()
        first = native.create("sync_resource", DailyRecurrence())
        second = native.create("sync_resource", DailyRecurrence())
        assert first.handle != second.handle
        assert [r.handle for r in native.registrations()] == [
            first.handle,
            second.handle,
        ]

    def test_delete(self):
        native = InMemoryNativeScheduler()
        reg = native.create("sync_resource", DailyRecurrence())
        assert native.delete(reg.handle) is True
        assert native.get(reg.handle) is None
        assert native.delete(reg.handle) is False


class TestLocalNativeScheduler:
    """Tests for the file-backed native scheduler."""

    def test_missing_file_is_empty(self, tmp_path: Path):
        native = LocalNativeScheduler(tmp_path / "scheduler.json")
        assert native.registrations() == []
        assert native.get("nope") is None

    def test_registrations_persist_across_instances(self, tmp_path: Path):
        state_path = tmp_path / "state" / "scheduler.json"
        reg = LocalNativeScheduler(state_path).create(
            "sync_resource", MonthlyRecurrence(hour=3, minute=15, day_of_month=10)
        )

        reopened = LocalNativeScheduler(state_path)
        loaded = reopened.get(reg.handle)
        assert loaded is not None
        assert loaded.month_day == 10
        assert loaded.at_hour == 3
        assert loaded.created_at == reg.created_at

    def test_delete(self, tmp_path: Path):
        native = LocalNativeScheduler(tmp_path / "scheduler.json")
        keep = native.create("sync_resource", DailyRecurrence())
        drop = native.create("sync_resource", HourlyRecurrence(interval_hours=2))

        assert native.delete(drop.handle) is True
        assert native.delete(drop.handle) is False
        assert [r.handle for r in native.registrations()] == [keep.handle]

    def test_invalid_entries_skipped(self, tmp_path: Path):
        state_path = tmp_path / "scheduler.json"
        state_path.write_text(
            '{"registrations": [{"handler": "sync_resource"}, '
            '{"handle": "ok", "handler": "sync_resource", "every_hours": 1}]}'
        )
        native = LocalNativeScheduler(state_path)
        assert [r.handle for r in native.registrations()] == ["ok"]

    def test_hand_edited_naive_timestamp_lists(self, tmp_path: Path):
        state_path = tmp_path / "scheduler.json"
        state_path.write_text(
            '{"registrations": [{"handle": "ok", "handler": "sync_resource", '
            '"every_hours": 1, "created_at": "2026-01-12T00:00:00"}]}'
        )
        [reg] = LocalNativeScheduler(state_path).registrations()
        assert reg.next_fire_time() is not None
