"""Per-plugin read/write locks guarding configuration values."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """A lock shared by many readers or held by one writer; waiting writers go first."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        """Block until the lock can be held for reading."""
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release one hold for reading."""
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read of a lock not held for reading")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until the lock can be held exclusively."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        """Release the exclusive hold."""
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write of a lock not held for writing")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock for reading within a with-block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively within a with-block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class ConfigLocker:
    """Hands out one ReadWriteLock per bot type and plugin identifier.

    Commands and scheduled tasks may share an identifier and thus the same
    resource, so the lock is keyed by identifier rather than by instance.
    """

    def __init__(self) -> None:
        self._locks: dict[str, ReadWriteLock] = {}
        self._mutex = threading.Lock()

    def get(self, bot_type: str, plugin_id: str) -> ReadWriteLock:
        """Return the lock for the given bot type and plugin, creating it once."""
        lock_id = f"botType:{bot_type}::id:{plugin_id}"
        with self._mutex:
            lock = self._locks.get(lock_id)
            if lock is None:
                lock = ReadWriteLock()
                self._locks[lock_id] = lock
            return lock


config_locker = ConfigLocker()