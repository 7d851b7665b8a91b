import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from sarah.cron import ScheduleError
from sarah.scheduler import CronLogAdapter, TaskScheduler, run_scheduler


@dataclass
class DummyScheduledTask:
    identifier: str = ""
    schedule: str = ""


@pytest.fixture
def scheduler():
    running = run_scheduler(timezone.utc)
    yield running
    running.stop()


def test_run_scheduler_sets_location(scheduler):
    assert isinstance(scheduler, TaskScheduler)
    assert scheduler.location is timezone.utc


def test_update_and_remove(scheduler):
    task_id = "id"
    task = DummyScheduledTask(identifier=task_id, schedule=" ")
    stored_bot_type = "Foo"

    with pytest.raises(ScheduleError):
        scheduler.update(stored_bot_type, task, lambda: None)

    task.schedule = "@daily"
    scheduler.update(stored_bot_type, task, lambda: None)
    assert list(scheduler.entries()) == [(stored_bot_type, task_id)]

    scheduler.remove("irrelevantBotType", task_id)
    scheduler.remove(stored_bot_type, "irrelevantID")
    assert len(scheduler.entries()) == 1

    scheduler.remove(stored_bot_type, task_id)
    assert len(scheduler.entries()) == 0


def test_update_with_empty_schedule(scheduler):
    with pytest.raises(ScheduleError):
        scheduler.update("dummy", DummyScheduledTask(), lambda: None)


def test_update_replaces_existing_entry(scheduler):
    scheduler.update("Foo", DummyScheduledTask("id", "@daily"), lambda: None)
    scheduler.update("Foo", DummyScheduledTask("id", "@hourly"), lambda: None)
    entries = scheduler.entries()
    assert list(entries) == [("Foo", "id")]
    assert entries[("Foo", "id")] - datetime.now(timezone.utc) <= timedelta(hours=1)


def test_invalid_schedule_removes_previous_entry(scheduler):
    scheduler.update("Foo", DummyScheduledTask("id", "@daily"), lambda: None)
    with pytest.raises(ScheduleError):
        scheduler.update("Foo", DummyScheduledTask("id", "not a schedule"), lambda: None)
    assert scheduler.entries() == {}


def test_scheduled_function_runs(scheduler):
    fired = threading.Event()
    scheduler.update("Foo", DummyScheduledTask("every", "@every 1s"), fired.set)
    assert fired.wait(5)


def test_update_after_stop_raises():
    stopped = run_scheduler(timezone.utc)
    stopped.stop()
    with pytest.raises(RuntimeError):
        stopped.update("Foo", DummyScheduledTask("id", "@daily"), lambda: None)


@pytest.fixture
def adapter_logger():
    return logging.getLogger("tests.scheduler.cron")


@pytest.mark.parametrize(
    ("msg", "args", "expected"),
    [
        ("foo", (), "foo"),
        ("foo bar", ("key1", "value1", "key2", "value2"), "foo bar, key1=value1, key2=value2"),
    ],
)
def test_cron_log_adapter_info(caplog, adapter_logger, msg, args, expected):
    adapter = CronLogAdapter(adapter_logger)
    with caplog.at_level(logging.INFO, logger=adapter_logger.name):
        adapter.info(msg, *args)
    assert caplog.records[-1].levelname == "INFO"
    assert caplog.records[-1].getMessage() == expected


class Stringer:
    def __str__(self):
        return "Hello, 世界"


@pytest.mark.parametrize(
    ("msg", "err", "args", "expected"),
    [
        ("foo", RuntimeError("this is an error"), (), "foo, error=this is an error"),
        (
            "foo bar",
            RuntimeError("this is an error: embedded"),
            (),
            "foo bar, error=this is an error: embedded",
        ),
        (
            "foo bar",
            RuntimeError("this is an error: embedded"),
            ("key1", "value1", "key2", "value2"),
            "foo bar, error=this is an error: embedded, key1=value1, key2=value2",
        ),
        (
            "foo bar",
            RuntimeError("this is an error: embedded"),
            (
                "key",
                "value",
                "string",
                Stringer(),
                "time",
                datetime(2022, 1, 9, 16, 22, tzinfo=timezone(timedelta(hours=9))),
            ),
            "foo bar, error=this is an error: embedded, key=value, string=Hello, 世界, "
            "time=2022-01-09T16:22:00+09:00",
        ),
    ],
)
def test_cron_log_adapter_error(caplog, adapter_logger, msg, err, args, expected):
    adapter = CronLogAdapter(adapter_logger)
    with caplog.at_level(logging.INFO, logger=adapter_logger.name):
        adapter.error(err, msg, *args)
    assert caplog.records[-1].levelname == "ERROR"
    assert caplog.records[-1].getMessage() == expected


def test_cron_log_adapter_formats_utc_time(caplog, adapter_logger):
    adapter = CronLogAdapter(adapter_logger)
    with caplog.at_level(logging.INFO, logger=adapter_logger.name):
        adapter.info("now", "time", datetime(2022, 1, 9, 7, 22, tzinfo=timezone.utc))
    assert caplog.records[-1].getMessage() == "now, time=2022-01-09T07:22:00Z"