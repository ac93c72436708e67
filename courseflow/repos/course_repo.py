from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Protocol

from courseflow.core.errors import Conflict, NotFound
from courseflow.models.course import Course


class CourseRepo(Protocol):
    def get(self, course_id: int) -> Course | None: ...
    def get_by_proposal(self, proposal_id: int) -> Course | None: ...
    def add(self, course: Course) -> Course: ...
    def update(self, course: Course) -> Course: ...
    def list_all(self) -> list[Course]: ...
    def list_published(self) -> list[Course]: ...
    def list_by_instructor(self, instructor_id: int) -> list[Course]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._by_id: dict[int, Course] = {}
        self._by_proposal: dict[int, int] = {}

    def get(self, course_id: int) -> Course | None:
        return self._by_id.get(course_id)

    def get_by_proposal(self, proposal_id: int) -> Course | None:
        course_id = self._by_proposal.get(proposal_id)
        if course_id is None:
            return None
        return self._by_id.get(course_id)

    def add(self, course: Course) -> Course:
        with self._lock:
            if course.proposal_id is not None and course.proposal_id in self._by_proposal:
                raise Conflict(f"proposal {course.proposal_id} already has a course")
            stored = replace(course, id=next(self._ids))
            self._by_id[stored.id] = stored
            if stored.proposal_id is not None:
                self._by_proposal[stored.proposal_id] = stored.id
            return stored

    def update(self, course: Course) -> Course:
        with self._lock:
            existing = self._by_id.get(course.id)
            if existing is None:
                raise NotFound("course", course.id)
            # instructor and proposal link are fixed at creation
            stored = replace(
                course,
                instructor_id=existing.instructor_id,
                proposal_id=existing.proposal_id,
            )
            self._by_id[course.id] = stored
            return stored

    def list_all(self) -> list[Course]:
        return sorted(self._by_id.values(), key=lambda c: c.id)

    def list_published(self) -> list[Course]:
        return [c for c in self.list_all() if c.is_live()]

    def list_by_instructor(self, instructor_id: int) -> list[Course]:
        return [c for c in self.list_all() if c.instructor_id == instructor_id]

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {
            "courses": len(self._by_id),
            "published": sum(1 for c in self._by_id.values() if c.is_live()),
        }
