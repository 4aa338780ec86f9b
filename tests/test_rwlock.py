"""Tests for ReadWriteLock — shared readers, exclusive writers and writer preference."""

import threading
import time

import pytest

from gropher.engine.rwlock import ReadWriteLock


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _start(target) -> threading.Thread:
    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        barrier = threading.Barrier(3, timeout=2.0)
        failures: list[BaseException] = []

        def reader():
            with lock.read_locked():
                try:
                    barrier.wait()
                except threading.BrokenBarrierError as exc:
                    failures.append(exc)

        threads = [_start(reader) for _ in range(3)]
        for t in threads:
            t.join(timeout=5.0)

        assert failures == []
        assert lock.readers == 0

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader():
            with lock.read_locked():
                acquired.set()

        lock.acquire_write()
        t = _start(reader)
        assert not acquired.wait(0.1)
        lock.release_write()
        assert acquired.wait(2.0)
        t.join(timeout=2.0)

    def test_readers_exclude_writer(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer():
            with lock.write_locked():
                acquired.set()

        lock.acquire_read()
        t = _start(writer)
        assert not acquired.wait(0.1)
        lock.release_read()
        assert acquired.wait(2.0)
        t.join(timeout=2.0)
        assert not lock.write_held

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        order: list[str] = []

        def writer():
            with lock.write_locked():
                order.append("writer")

        def late_reader():
            with lock.read_locked():
                order.append("reader")

        lock.acquire_read()
        w = _start(writer)
        assert _wait_until(lambda: lock._writers_waiting == 1)
        r = _start(late_reader)
        time.sleep(0.05)
        assert order == []

        lock.release_read()
        w.join(timeout=2.0)
        r.join(timeout=2.0)
        assert order == ["writer", "reader"]

    def test_lock_released_on_exception(self):
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write_locked():
                raise ValueError("boom")
        assert not lock.write_held

        with pytest.raises(ValueError):
            with lock.read_locked():
                raise ValueError("boom")
        assert lock.readers == 0

    def test_interrupted_writer_wakes_parked_readers(self, monkeypatch):
        lock = ReadWriteLock()
        notified: list[int] = []
        original_notify = lock._cond.notify_all

        def interrupted_wait(timeout=None):
            raise InterruptedError("wait interrupted")

        def recording_notify():
            notified.append(1)
            original_notify()

        lock.acquire_read()
        monkeypatch.setattr(lock._cond, "wait", interrupted_wait)
        monkeypatch.setattr(lock._cond, "notify_all", recording_notify)

        with pytest.raises(InterruptedError):
            lock.acquire_write()

        assert lock._writers_waiting == 0
        assert not lock.write_held
        assert notified == [1]
        lock.release_read()

    def test_unbalanced_release(self):
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()
