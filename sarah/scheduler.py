"""Runs scheduled tasks on their schedules, one entry per bot type and task."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

from .cron import CronSchedule, IntervalSchedule, ScheduleError, parse_schedule

_log = logging.getLogger(__name__)


def _stringify(value: Any) -> str:
    if not isinstance(value, datetime):
        return str(value)
    text = value.astimezone(value.tzinfo).isoformat(timespec="seconds")
    return text[:-6] + "Z" if text.endswith("+00:00") else text


class CronLogAdapter:
    """Writes scheduler events as "message, key=value, ..." log lines."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else _log

    def info(self, msg: str, *args: Any) -> None:
        """Log an informational event with trailing key/value pairs."""
        self._logger.info(self._format(msg, args))

    def error(self, err: BaseException, msg: str, *args: Any) -> None:
        """Log an error event, the error first among the key/value pairs."""
        self._logger.error(self._format(msg, ("error", err, *args)))

    @staticmethod
    def _format(msg: str, keys_and_values: tuple[Any, ...]) -> str:
        values = [_stringify(value) for value in keys_and_values]
        return ", ".join([str(msg), *(f"{k}={v}" for k, v in zip(values[::2], values[1::2]))])


@dataclass
class _Entry:
    bot_type: str
    task_id: str
    schedule: CronSchedule | IntervalSchedule
    fn: Callable[[], Any]
    next_run: datetime | None


class TaskScheduler:
    """Runs registered functions on their schedules in a background thread."""

    def __init__(self, location: tzinfo | None = None, logger: logging.Logger | None = None) -> None:
        self.location = location
        self._log = CronLogAdapter(logger)
        self._cond = threading.Condition()
        self._entries: dict[tuple[str, str], _Entry] = {}
        self._stopped = False
        self._thread = threading.Thread(target=self._loop, name="task-scheduler", daemon=True)
        self._thread.start()

    def __enter__(self) -> TaskScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def update(self, bot_type: str, task: Any, fn: Callable[[], Any]) -> None:
        """Schedule fn for the task, replacing any entry the task already has."""
        task_id = task.identifier
        if not task.schedule:
            raise ScheduleError(f"empty schedule is given for {task_id}")
        with self._cond:
            if self._stopped:
                raise RuntimeError("scheduler is stopped")
            self._entries.pop((bot_type, task_id), None)
            schedule = parse_schedule(task.schedule)
            entry = _Entry(bot_type, task_id, schedule, fn, schedule.next_after(self._now()))
            self._entries[(bot_type, task_id)] = entry
            self._cond.notify_all()
        self._log.info("added", "bot", bot_type, "task", task_id, "next", entry.next_run)

    def remove(self, bot_type: str, task_id: str) -> None:
        """Drop the task's entry; unknown bot types and tasks are ignored."""
        with self._cond:
            removed = self._entries.pop((bot_type, task_id), None)
            self._cond.notify_all()
        if removed is not None:
            self._log.info("removed", "bot", bot_type, "task", task_id)

    def entries(self) -> dict[tuple[str, str], datetime | None]:
        """Map each (bot type, task id) to its next run, soonest first."""
        with self._cond:
            ordered = sorted(
                self._entries.values(),
                key=lambda entry: (entry.next_run is None, entry.next_run or datetime.min),
            )
            return {(entry.bot_type, entry.task_id): entry.next_run for entry in ordered}

    def stop(self) -> None:
        """Stop scheduling; functions already started run to completion."""
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            self._cond.notify_all()
        if threading.current_thread() is not self._thread:
            self._thread.join()
        _log.info("Stop cron jobs.")

    def _now(self) -> datetime:
        return datetime.now(self.location) if self.location is not None else datetime.now().astimezone()

    def _loop(self) -> None:
        with self._cond:
            while not self._stopped:
                now = self._now()
                for entry in self._entries.values():
                    if entry.next_run is not None and entry.next_run <= now:
                        self._log.info("run", "now", now, "bot", entry.bot_type, "task", entry.task_id)
                        threading.Thread(target=self._invoke, args=(entry,), daemon=True).start()
                        entry.next_run = entry.schedule.next_after(now)
                upcoming = [e.next_run for e in self._entries.values() if e.next_run is not None]
                timeout = max((min(upcoming) - now).total_seconds(), 0.0) if upcoming else None
                self._cond.wait(timeout)

    def _invoke(self, entry: _Entry) -> None:
        try:
            entry.fn()
        except Exception as exc:
            self._log.error(exc, "scheduled function failed", "bot", entry.bot_type, "task", entry.task_id)


def run_scheduler(location: tzinfo | None = None) -> TaskScheduler:
    """Start a scheduler that evaluates schedules in the given time zone."""
    return TaskScheduler(location)