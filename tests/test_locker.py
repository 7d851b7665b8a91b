import threading

import pytest

from sarah.locker import ConfigLocker, ReadWriteLock


def _in_thread(action):
    done = threading.Event()

    def run():
        action()
        done.set()

    threading.Thread(target=run, daemon=True).start()
    return done


def test_same_key_returns_same_lock():
    locker = ConfigLocker()
    locker.get("slack", "echo").acquire_write()

    # The lock held above is released through a second lookup of the same key.
    locker.get("slack", "echo").release_write()
    with pytest.raises(RuntimeError):
        locker.get("slack", "echo").release_write()


def test_different_keys_return_different_locks():
    locker = ConfigLocker()
    lock = locker.get("slack", "echo")
    assert locker.get("slack", "weather") is not lock
    assert locker.get("gitter", "echo") is not lock


def test_readers_share_and_block_writer():
    lock = ReadWriteLock()
    lock.acquire_read()
    lock.acquire_read()

    written = _in_thread(lambda: (lock.acquire_write(), lock.release_write()))
    assert not written.wait(0.1)

    lock.release_read()
    assert not written.wait(0.1)

    lock.release_read()
    assert written.wait(2)


def test_writer_blocks_reader():
    lock = ReadWriteLock()
    lock.acquire_write()

    read = _in_thread(lambda: (lock.acquire_read(), lock.release_read()))
    assert not read.wait(0.1)

    lock.release_write()
    assert read.wait(2)


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    lock.acquire_read()
    written = _in_thread(lambda: (lock.acquire_write(), lock.release_write()))
    assert not written.wait(0.1)

    read = _in_thread(lambda: (lock.acquire_read(), lock.release_read()))
    assert not read.wait(0.1)

    lock.release_read()
    assert written.wait(2)
    assert read.wait(2)


def test_release_without_hold_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_context_managers_release_lock():
    lock = ReadWriteLock()
    with lock.write_locked():
        pass
    with lock.read_locked():
        pass
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_context_manager_releases_on_error():
    lock = ReadWriteLock()
    with pytest.raises(KeyError):
        with lock.write_locked():
            raise KeyError("boom")
    read = _in_thread(lambda: (lock.acquire_read(), lock.release_read()))
    assert read.wait(2)