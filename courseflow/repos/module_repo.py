from __future__ import annotations

import itertools
import threading
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

from courseflow.core.errors import NotFound
from courseflow.models.course import Module
from courseflow.services import ordering


class ModuleRepo(Protocol):
    def get(self, module_id: int) -> Module | None: ...
    def list_by_course(self, course_id: int) -> list[Module]: ...
    def add(self, module: Module) -> Module: ...
    def update(self, module: Module) -> Module: ...
    def delete(self, module_id: int) -> None: ...
    def reorder(self, course_id: int, ordered_ids: Sequence[int]) -> list[Module]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


class InMemoryModuleRepo:
    """Modules keyed by id; positions are dense per course.

    add/delete/reorder each run under one lock, so readers never observe a
    sequence with gaps or duplicates.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._by_id: dict[int, Module] = {}

    def get(self, module_id: int) -> Module | None:
        return self._by_id.get(module_id)

    def list_by_course(self, course_id: int) -> list[Module]:
        with self._lock:
            siblings = [m for m in self._by_id.values() if m.course_id == course_id]
        return sorted(siblings, key=lambda m: m.position)

    def add(self, module: Module) -> Module:
        with self._lock:
            count = len(self.list_by_course(module.course_id))
            stored = replace(
                module, id=next(self._ids), position=ordering.next_position(count)
            )
            self._by_id[stored.id] = stored
            return stored

    def update(self, module: Module) -> Module:
        with self._lock:
            existing = self._by_id.get(module.id)
            if existing is None:
                raise NotFound("module", module.id)
            # position only moves through reorder/delete
            stored = replace(
                module, course_id=existing.course_id, position=existing.position
            )
            self._by_id[module.id] = stored
            return stored

    def delete(self, module_id: int) -> None:
        with self._lock:
            existing = self._by_id.get(module_id)
            if existing is None:
                raise NotFound("module", module_id)
            ordered = [m.id for m in self.list_by_course(existing.course_id)]
            del self._by_id[module_id]
            self._apply(ordering.close_gap(ordered, module_id))

    def reorder(self, course_id: int, ordered_ids: Sequence[int]) -> list[Module]:
        with self._lock:
            current = [m.id for m in self.list_by_course(course_id)]
            ordering.validate_permutation(current, ordered_ids, scope="module")
            self._apply(ordering.positions_for(ordered_ids))
            return self.list_by_course(course_id)

    def _apply(self, positions: dict[int, int]) -> None:
        for module_id, position in positions.items():
            self._by_id[module_id] = replace(self._by_id[module_id], position=position)

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {"modules": len(self._by_id)}
