"""
Operations Module

Operational state of a notifier: not started -> running -> halting -> closed.
Every submission reads the halt switch under the read lock, state transitions
take the write lock.
"""

# System modules
from contextlib import contextmanager
import threading
from typing import Iterator


class RWLock:
    """
    Writer-preferring read-write lock.

    Any number of readers may hold the lock together. A waiting writer blocks new
    readers, so a stream of senders cannot starve a shutdown.
    """

    def __init__(self) -> None:
        self._cond: threading.Condition = threading.Condition(threading.Lock())
        self._readers: int = 0
        self._writer: bool = False
        self._writers_waiting: int = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class Operations:
    """Lockable operations indicator."""

    def __init__(self) -> None:
        self.lock: RWLock = RWLock()
        self.halt: bool = False      # Indicator of whether submissions are still accepted
        self.running: bool = False   # Indicator of whether Notifier.run() is consuming notes
        self.started: bool = False   # Set once by the first Notifier.run(), never cleared

    def is_running(self) -> bool:
        with self.lock.read():
            return self.running

    def is_halting(self) -> bool:
        with self.lock.read():
            return self.halt

    def has_started(self) -> bool:
        with self.lock.read():
            return self.started
