"""
Unit tests for the operational state lock.
"""

import threading

from helpers import wait_for

from notify.ops import Operations, RWLock


class TestRWLock:

    def test_readers_share_the_lock(self):
        lock = RWLock()
        lock.acquire_read()
        acquired = threading.Event()

        def reader():
            with lock.read():
                acquired.set()

        threading.Thread(target=reader, daemon=True).start()
        assert acquired.wait(timeout=2.0)
        lock.release_read()

    def test_writer_waits_for_readers(self):
        lock = RWLock()
        lock.acquire_read()
        written = threading.Event()

        def writer():
            with lock.write():
                written.set()

        threading.Thread(target=writer, daemon=True).start()
        assert not written.wait(timeout=0.1)
        lock.release_read()
        assert written.wait(timeout=2.0)

    def test_waiting_writer_blocks_new_readers(self):
        lock = RWLock()
        lock.acquire_read()
        order: list[str] = []

        def writer():
            with lock.write():
                order.append("writer")

        def reader():
            with lock.read():
                order.append("reader")

        threading.Thread(target=writer, daemon=True).start()
        assert wait_for(lambda: lock._writers_waiting == 1)
        late_reader = threading.Thread(target=reader, daemon=True)
        late_reader.start()
        lock.release_read()
        late_reader.join(timeout=2.0)
        assert order == ["writer", "reader"]


class TestOperations:

    def test_initial_state(self):
        ops = Operations()
        assert not ops.is_running()
        assert not ops.is_halting()
        assert not ops.has_started()

    def test_started_outlives_running(self):
        ops = Operations()
        with ops.lock.write():
            ops.running = ops.started = True
        with ops.lock.write():
            ops.running = False
        assert not ops.is_running()
        assert ops.has_started()
