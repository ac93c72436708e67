from __future__ import annotations

import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime.datetime: ...


class SystemClock:
    def now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.UTC)


class FrozenClock:
    """Deterministic clock for tests and seed scripts.

    Each call to ``now()`` returns the current instant and then advances it by
    ``step`` so consecutive updates get strictly increasing timestamps.
    """

    def __init__(
        self,
        start: datetime.datetime | None = None,
        step: datetime.timedelta = datetime.timedelta(seconds=1),
    ) -> None:
        self._current = start or datetime.datetime(2024, 1, 1, tzinfo=datetime.UTC)
        self._step = step

    def now(self) -> datetime.datetime:
        value = self._current
        self._current = value + self._step
        return value

    def advance(self, delta: datetime.timedelta) -> None:
        self._current = self._current + delta
