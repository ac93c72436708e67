"""Keyed mutual exclusion for parent collections.

Each key names the collection a mutation renumbers or transitions:
("proposal", id), ("course", id) for a course's modules, ("module", id) for a
module's content items.  Keys are acquired in sorted order so two operations
that need overlapping sets can never deadlock.

A key exists only while someone holds or waits for it, so the table does not
grow with the number of entities ever touched.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

LockKey = tuple[str, int]


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # holder plus waiters
        self.users = 0


class KeyedLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[LockKey, _Entry] = {}

    @contextmanager
    def _held(self, key: LockKey) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    @contextmanager
    def hold(self, *keys: LockKey) -> Iterator[None]:
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._held(key))
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
