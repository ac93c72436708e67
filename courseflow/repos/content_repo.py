from __future__ import annotations

import itertools
import threading
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

from courseflow.core.errors import NotFound
from courseflow.models.content import ContentItem, Lecture
from courseflow.services import ordering


class ContentRepo(Protocol):
    def get(self, item_id: int) -> ContentItem | None: ...
    def get_lecture(self, item_id: int) -> Lecture | None: ...
    def list_by_module(self, module_id: int) -> list[ContentItem]: ...
    def add(self, item: ContentItem, lecture: Lecture) -> tuple[ContentItem, Lecture]: ...
    def update(self, item: ContentItem) -> ContentItem: ...
    def update_lecture(self, lecture: Lecture) -> Lecture: ...
    def delete(self, item_id: int) -> None: ...
    def delete_by_module(self, module_id: int) -> int: ...
    def reorder(
        self, module_id: int, ordered_ids: Sequence[int]
    ) -> list[ContentItem]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


class InMemoryContentRepo:
    """Content items and their lecture bodies, which share one lifetime."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._items: dict[int, ContentItem] = {}
        self._lectures: dict[int, Lecture] = {}

    def get(self, item_id: int) -> ContentItem | None:
        return self._items.get(item_id)

    def get_lecture(self, item_id: int) -> Lecture | None:
        return self._lectures.get(item_id)

    def list_by_module(self, module_id: int) -> list[ContentItem]:
        with self._lock:
            siblings = [i for i in self._items.values() if i.module_id == module_id]
        return sorted(siblings, key=lambda i: i.position)

    def add(self, item: ContentItem, lecture: Lecture) -> tuple[ContentItem, Lecture]:
        with self._lock:
            count = len(self.list_by_module(item.module_id))
            stored = replace(
                item, id=next(self._ids), position=ordering.next_position(count)
            )
            body = replace(lecture, content_item_id=stored.id)
            self._items[stored.id] = stored
            self._lectures[stored.id] = body
            return stored, body

    def update(self, item: ContentItem) -> ContentItem:
        with self._lock:
            existing = self._items.get(item.id)
            if existing is None:
                raise NotFound("content", item.id)
            stored = replace(
                item, module_id=existing.module_id, position=existing.position
            )
            self._items[item.id] = stored
            return stored

    def update_lecture(self, lecture: Lecture) -> Lecture:
        with self._lock:
            if lecture.content_item_id not in self._items:
                raise NotFound("content", lecture.content_item_id)
            self._lectures[lecture.content_item_id] = lecture
            return lecture

    def delete(self, item_id: int) -> None:
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                raise NotFound("content", item_id)
            ordered = [i.id for i in self.list_by_module(existing.module_id)]
            del self._items[item_id]
            self._lectures.pop(item_id, None)
            self._apply(ordering.close_gap(ordered, item_id))

    def delete_by_module(self, module_id: int) -> int:
        with self._lock:
            doomed = [i.id for i in self._items.values() if i.module_id == module_id]
            for item_id in doomed:
                del self._items[item_id]
                self._lectures.pop(item_id, None)
            return len(doomed)

    def reorder(self, module_id: int, ordered_ids: Sequence[int]) -> list[ContentItem]:
        with self._lock:
            current = [i.id for i in self.list_by_module(module_id)]
            ordering.validate_permutation(current, ordered_ids, scope="content")
            self._apply(ordering.positions_for(ordered_ids))
            return self.list_by_module(module_id)

    def _apply(self, positions: dict[int, int]) -> None:
        for item_id, position in positions.items():
            self._items[item_id] = replace(self._items[item_id], position=position)

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {
            "content_items": len(self._items),
            "published": sum(1 for i in self._items.values() if i.published),
        }
