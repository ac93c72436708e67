"""Enrollment façade.

Enrolling and leaving run under ("course", id), the same key that guards
publish and unpublish, so a course cannot be unpublished halfway through
an enrollment.  Only a published course accepts new enrollments; a course
that was unpublished afterwards stays visible to the people already
enrolled in it, so they can still check their status and leave.
"""

from __future__ import annotations

import logging

from courseflow.core.clock import Clock
from courseflow.core.errors import Conflict, InvalidTransition, NotFound
from courseflow.models.actor import Actor
from courseflow.models.course import Course
from courseflow.models.enrollment import Enrollment
from courseflow.repos.course_repo import CourseRepo
from courseflow.repos.enrollment_repo import EnrollmentRepo
from courseflow.services.authorization import Resource, require
from courseflow.services.course_service import course_resource
from courseflow.services.locks import KeyedLocks
from courseflow.services.tracking import tracked

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(
        self,
        *,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._courses = courses
        self._enrollments = enrollments
        self._locks = locks
        self._clock = clock

    def _current(self, course_id: int) -> Course:
        current = self._courses.get(course_id)
        if current is None:
            raise NotFound("course", course_id)
        return current

    def _participation(self, actor: Actor, course: Course) -> Resource:
        resource = course_resource(course)
        if resource.public or actor.user_id is None:
            return resource
        enrolled = self._enrollments.get(actor.user_id, course.id) is not None
        return Resource(
            kind="course",
            owner_id=course.instructor_id,
            public=enrolled,
            entity_id=course.id,
        )

    def _log(self, actor: Actor, action: str, course: Course) -> None:
        logger.info(
            "Course %s: id=%s status=%s actor=%s",
            action,
            course.id,
            course.status,
            actor.user_id,
            extra={
                "actor_id": actor.user_id,
                "entity": "course",
                "entity_id": course.id,
                "action": action,
            },
        )

    @tracked("enrollment", "enroll")
    def enroll(self, actor: Actor, course: Course) -> Enrollment:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, "enroll", self._participation(actor, current))
            user_id = actor.require_id()
            if not current.is_live():
                raise InvalidTransition("course", current.status, "enroll")
            if self._enrollments.get(user_id, current.id) is not None:
                raise Conflict("already enrolled")
            enrollment = self._enrollments.add(
                Enrollment.new(
                    user_id=user_id, course_id=current.id, now=self._clock.now()
                )
            )
        self._log(actor, "enroll", current)
        return enrollment

    @tracked("enrollment", "unenroll")
    def unenroll(self, actor: Actor, course: Course) -> None:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, "unenroll", self._participation(actor, current))
            self._enrollments.delete(actor.require_id(), current.id)
        self._log(actor, "unenroll", current)

    @tracked("enrollment", "status")
    def is_enrolled(self, actor: Actor, course: Course) -> bool:
        require(actor, "read", self._participation(actor, course))
        return self._enrollments.get(actor.require_id(), course.id) is not None

    @tracked("enrollment", "list_mine")
    def list_mine(self, actor: Actor) -> list[Enrollment]:
        require(actor, "list", Resource(kind="course", owner_id=actor.user_id))
        return self._enrollments.list_by_user(actor.require_id())

    @tracked("enrollment", "list_for_course")
    def list_for_course(self, actor: Actor, course: Course) -> list[Enrollment]:
        """The course roster, for its instructor and for admins."""
        require(actor, "list_enrollments", course_resource(course))
        return self._enrollments.list_by_course(course.id)
