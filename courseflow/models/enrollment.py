from __future__ import annotations

import datetime
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A user's membership in a course.  Keyed by (user_id, course_id)."""

    user_id: int
    course_id: int
    enrolled_at: datetime.datetime

    @staticmethod
    def new(*, user_id: int, course_id: int, now: datetime.datetime) -> Enrollment:
        return Enrollment(user_id=user_id, course_id=course_id, enrolled_at=now)
