"""Reader/writer lock for the template set cache."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """A writer-preferring reader/writer lock.

    Any number of readers may hold the lock at once. A writer waits for active
    readers to leave and blocks new readers while it waits, so a stream of
    readers cannot starve a rebuild.
    """

    __slots__ = ("_condition", "_readers", "_writer", "_writers_waiting")

    def __init__(self) -> None:
        self._condition: threading.Condition = threading.Condition(threading.Lock())
        self._readers: int = 0
        self._writer: bool = False
        self._writers_waiting: int = 0

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        with self._condition:
            return self._readers

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock for reading."""
        with self._condition:
            while self._writer or self._writers_waiting:
                _ = self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    _ = self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()


class KeyedLocks:
    """One mutex per key, created on first use.

    Serializes work on the same key while letting different keys proceed in
    parallel.
    """

    __slots__ = ("_guard", "_locks")

    def __init__(self) -> None:
        self._guard: threading.Lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the mutex for ``key`` for the duration of the block."""
        with self.lock_for(key):
            yield
