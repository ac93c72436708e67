from __future__ import annotations

import threading
from typing import Protocol

from courseflow.core.errors import Conflict, NotFound
from courseflow.models.enrollment import Enrollment


class EnrollmentRepo(Protocol):
    def get(self, user_id: int, course_id: int) -> Enrollment | None: ...
    def add(self, enrollment: Enrollment) -> Enrollment: ...
    def delete(self, user_id: int, course_id: int) -> None: ...
    def list_by_user(self, user_id: int) -> list[Enrollment]: ...
    def list_by_course(self, course_id: int) -> list[Enrollment]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


def _oldest_first(enrollments: list[Enrollment]) -> list[Enrollment]:
    return sorted(enrollments, key=lambda e: (e.enrolled_at, e.course_id, e.user_id))


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[tuple[int, int], Enrollment] = {}

    def get(self, user_id: int, course_id: int) -> Enrollment | None:
        return self._store.get((user_id, course_id))

    def add(self, enrollment: Enrollment) -> Enrollment:
        key = (enrollment.user_id, enrollment.course_id)
        with self._lock:
            if key in self._store:
                raise Conflict("already enrolled")
            self._store[key] = enrollment
        return enrollment

    def delete(self, user_id: int, course_id: int) -> None:
        with self._lock:
            if self._store.pop((user_id, course_id), None) is None:
                raise NotFound("enrollment")

    def list_by_user(self, user_id: int) -> list[Enrollment]:
        with self._lock:
            found = [e for e in self._store.values() if e.user_id == user_id]
        return _oldest_first(found)

    def list_by_course(self, course_id: int) -> list[Enrollment]:
        with self._lock:
            found = [e for e in self._store.values() if e.course_id == course_id]
        return _oldest_first(found)

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {"enrollments": len(self._store)}
