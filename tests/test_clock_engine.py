# SPDX-License-Identifier: MIT

import os
import threading

import pytest

from clocklet.exceptions import AmbiguousEntryId, EntryNotFound, InvalidInterval, WriteFailed
from clocklet.repository.data import DataRepository
from clocklet.service.clock import ClockEngine, ClockEventType
from clocklet.service.notification import NotificationKind

from .conftest import utc


def test_starts_idle(engine):
    assert not engine.is_tracking
    assert engine.entries == []
    assert engine.last_error is None


def test_clock_in_then_out_records_entry(engine, clock, notifier, data_file):
    engine.clock_in()
    assert engine.is_tracking
    assert engine.current_session == {"clock_in": utc(2026, 1, 18, 9)}

    clock.advance(hours=2, minutes=30)
    entry = engine.clock_out()

    assert entry is not None
    assert entry["clock_in"] == utc(2026, 1, 18, 9)
    assert entry["clock_out"] == utc(2026, 1, 18, 11, 30)
    assert not engine.is_tracking
    assert engine.entries == [entry]
    assert notifier.permission_requests == 1
    assert notifier.kinds() == [NotificationKind.CLOCK_IN, NotificationKind.CLOCK_OUT]
    assert notifier.notifications[1][1] == {"duration_seconds": 9000}

    persisted = DataRepository(data_file)
    assert persisted.get_current_session() is None
    assert [e["id"] for e in persisted.get_all_entries()] == [entry["id"]]


def test_clock_in_is_persisted_before_returning(engine, data_file):
    engine.clock_in()
    assert DataRepository(data_file).get_current_session() == {
        "clock_in": utc(2026, 1, 18, 9)
    }


def test_clock_in_twice_keeps_first_session(engine, clock, notifier):
    engine.clock_in()
    clock.advance(minutes=10)
    engine.clock_in()

    assert engine.current_session == {"clock_in": utc(2026, 1, 18, 9)}
    assert notifier.kinds() == [NotificationKind.CLOCK_IN]


def test_clock_out_when_idle_does_nothing(engine, notifier):
    assert engine.clock_out() is None
    assert engine.entries == []
    assert notifier.notifications == []


def test_clock_event_notifications_can_be_disabled(engine, clock, config, notifier):
    config["clock_event_notification_enabled"] = False
    engine.clock_in()
    clock.advance(hours=1)
    engine.clock_out()
    assert notifier.notifications == []


def test_clock_out_before_clock_in_keeps_session(engine, clock):
    engine.clock_in()
    clock.advance(minutes=-5)

    with pytest.raises(InvalidInterval):
        engine.clock_out()

    assert engine.is_tracking
    assert engine.entries == []
    assert isinstance(engine.last_error, InvalidInterval)


def test_toggle(engine, clock):
    assert engine.toggle() is None
    assert engine.is_tracking

    clock.advance(hours=1)
    entry = engine.toggle()

    assert entry is not None
    assert not engine.is_tracking


def test_add_update_delete_entry(engine, data_file):
    entry = engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 12))

    updated = engine.update_entry(entry["id"], utc(2026, 1, 17, 8), utc(2026, 1, 17, 12))
    assert updated is not None
    assert updated["created_at"] == entry["created_at"]
    assert updated["modified_at"] is not None
    assert engine.get_entry(entry["id"]) == updated

    assert engine.delete_entry(entry["id"]) == 1
    assert engine.entries == []
    assert DataRepository(data_file).get_all_entries() == []


def test_add_entry_rejects_invalid_interval(engine):
    with pytest.raises(InvalidInterval):
        engine.add_entry(utc(2026, 1, 17, 12), utc(2026, 1, 17, 12))
    assert engine.entries == []


def test_update_unknown_entry_returns_none(engine):
    assert engine.update_entry("missing", utc(2026, 1, 17, 9), utc(2026, 1, 17, 10)) is None


def test_update_with_invalid_interval_leaves_entry(engine):
    entry = engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 12))

    with pytest.raises(InvalidInterval):
        engine.update_entry(entry["id"], utc(2026, 1, 17, 13), utc(2026, 1, 17, 12))

    assert engine.get_entry(entry["id"]) == entry


def test_delete_unknown_entry_is_not_an_error(engine):
    entry = engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 12))

    assert engine.delete_entries(["missing"]) == 0
    assert engine.entries == [entry]
    assert engine.last_error is None


def test_resolve_entry_id(engine):
    entry = engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 12))

    assert engine.resolve_entry_id(entry["id"]) == entry["id"]
    assert engine.resolve_entry_id(entry["id"][:8]) == entry["id"]
    with pytest.raises(EntryNotFound):
        engine.resolve_entry_id("zzzz")


def test_resolve_ambiguous_prefix(engine):
    engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 12))
    engine.add_entry(utc(2026, 1, 16, 9), utc(2026, 1, 16, 12))

    with pytest.raises(AmbiguousEntryId):
        engine.resolve_entry_id("")


def test_complete_incomplete_session(engine, notifier):
    engine.clock_in()
    notifier.notifications.clear()

    entry = engine.complete_incomplete_session(utc(2026, 1, 18, 17))

    assert entry is not None
    assert entry["clock_out"] == utc(2026, 1, 18, 17)
    assert not engine.is_tracking
    assert notifier.notifications == []


def test_complete_incomplete_session_rejects_early_clock_out(engine):
    engine.clock_in()
    with pytest.raises(InvalidInterval):
        engine.complete_incomplete_session(utc(2026, 1, 18, 8))
    assert engine.is_tracking


def test_discard_incomplete_session_twice(engine, timers):
    engine.clock_in()

    engine.discard_incomplete_session()
    engine.discard_incomplete_session()

    assert not engine.is_tracking
    assert engine.entries == []
    assert timers.pending == []


@pytest.mark.parametrize("stop_on_sleep", [True, False])
def test_system_sleep(engine, clock, config, stop_on_sleep):
    config["stop_on_sleep"] = stop_on_sleep
    engine.clock_in()
    clock.advance(hours=1)

    entry = engine.handle_system_sleep()

    assert (entry is not None) == stop_on_sleep
    assert engine.is_tracking != stop_on_sleep


def test_start_reports_incomplete_session(repository, config, notifier, clock, timers):
    repository.set_current_session({"clock_in": utc(2026, 1, 18, 8)})
    repository.flush()

    engine = ClockEngine(repository, lambda: config, notifier, clock=clock)
    engine.reminder_scheduler.timer_factory = timers
    engine.start()

    assert engine.is_tracking
    assert notifier.kinds() == [NotificationKind.INCOMPLETE_SESSION]
    assert len(timers.pending) == 1


def test_start_counts_reminder_from_clock_in(repository, config, notifier, clock, timers):
    repository.set_current_session({"clock_in": utc(2026, 1, 18, 8, 10)})
    repository.flush()

    engine = ClockEngine(repository, lambda: config, notifier, clock=clock)
    engine.reminder_scheduler.timer_factory = timers
    engine.start()

    assert timers.last.interval == 10 * 60


def test_start_reminds_at_once_when_threshold_passed(
    repository, config, notifier, clock, timers
):
    repository.set_current_session({"clock_in": utc(2026, 1, 18, 7)})
    repository.flush()

    engine = ClockEngine(repository, lambda: config, notifier, clock=clock)
    engine.reminder_scheduler.timer_factory = timers
    engine.start()

    assert timers.last.interval == 0


def test_refresh_rearms_when_session_was_replaced(engine, clock, data_file, timers):
    engine.clock_in()
    first = timers.last

    other = DataRepository(data_file)
    other.set_current_session({"clock_in": utc(2026, 1, 18, 9, 30)})
    other.flush()
    stat = data_file.stat()
    os.utime(data_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
    clock.advance(minutes=40)

    assert engine.refresh()

    assert first.cancelled
    assert timers.pending == [timers.last]
    assert timers.last.interval == 50 * 60


def test_load_of_unreadable_file_starts_empty(data_file, config, notifier, clock):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("garbage", encoding="utf-8")

    engine = ClockEngine(DataRepository(data_file), lambda: config, notifier, clock=clock)
    engine.load()

    assert engine.entries == []
    assert engine.last_error is not None


def test_failed_save_keeps_change_in_memory(engine, repository, monkeypatch):
    def failing_flush():
        raise WriteFailed(OSError("read-only file system"))

    with monkeypatch.context() as patch:
        patch.setattr(repository, "flush", failing_flush)
        engine.clock_in()

    assert engine.is_tracking
    assert isinstance(engine.last_error, WriteFailed)

    engine.discard_incomplete_session()
    assert engine.last_error is None


def test_aggregation_shortcuts(engine, clock):
    engine.add_entry(utc(2026, 1, 18, 6), utc(2026, 1, 18, 8))
    engine.add_entry(utc(2025, 12, 18, 6), utc(2025, 12, 18, 7))
    engine.clock_in()
    clock.advance(minutes=30)

    assert engine.current_session_duration() == 1800
    assert engine.today_duration() == 2 * 3600 + 1800
    assert engine.this_month_duration() == 2 * 3600 + 1800
    assert engine.last_month_duration() == 3600
    assert [s["total_seconds"] for s in engine.monthly_statistics(2)] == [3600, 7200]
    assert len(engine.entries_by_date()) == 2


def test_subscribers_see_events_until_unsubscribed(engine, clock):
    events = []
    unsubscribe = engine.subscribe(events.append)

    engine.clock_in()
    clock.advance(hours=1)
    entry = engine.clock_out()
    unsubscribe()
    engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 10))

    assert [event["type"] for event in events] == [
        ClockEventType.CLOCKED_IN,
        ClockEventType.CLOCKED_OUT,
    ]
    assert events[1]["entry_ids"] == [entry["id"]]


def test_posted_messages_run_on_the_processing_thread(engine):
    calls = []

    def record(value):
        calls.append((value, threading.current_thread()))

    worker = threading.Thread(target=engine.post, args=(record, "from worker"))
    worker.start()
    worker.join()

    assert calls == []
    assert engine.process_messages() == 1
    assert calls == [("from worker", threading.current_thread())]
    assert engine.process_messages() == 0


def test_refresh_follows_changes_from_another_process(engine, data_file, timers):
    engine.add_entry(utc(2026, 1, 17, 9), utc(2026, 1, 17, 10))
    assert not engine.refresh()

    other = DataRepository(data_file)
    other.set_current_session({"clock_in": utc(2026, 1, 18, 8)})
    other.flush()
    stat = data_file.stat()
    os.utime(data_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert engine.refresh()
    assert engine.is_tracking
    assert len(timers.pending) == 1


def test_shutdown_stops_reminder_and_closes_notifier(engine, notifier, timers):
    engine.clock_in()

    engine.shutdown()

    assert timers.pending == []
    assert notifier.closed
