"""Course and module façade.

Lock keys: ("course", id) guards course-level transitions and the course's
module collection; deleting a module also takes ("module", id) so it cannot
interleave with content changes inside that module.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from courseflow.core.clock import Clock
from courseflow.core.errors import NotFound
from courseflow.models.actor import Actor
from courseflow.models.course import Course, Module
from courseflow.repos.content_repo import ContentRepo
from courseflow.repos.course_repo import CourseRepo
from courseflow.repos.module_repo import ModuleRepo
from courseflow.services import course_lifecycle, validation
from courseflow.services.authorization import Resource, require
from courseflow.services.course_lifecycle import CourseAction
from courseflow.services.locks import KeyedLocks
from courseflow.services.tracking import tracked

logger = logging.getLogger(__name__)


def course_resource(course: Course) -> Resource:
    return Resource(
        kind="course",
        owner_id=course.instructor_id,
        public=course.is_live(),
        entity_id=course.id,
    )


def module_resource(course: Course, module: Module | None = None) -> Resource:
    return Resource(
        kind="module",
        owner_id=course.instructor_id,
        public=course.is_live(),
        entity_id=None if module is None else module.id,
    )


def _log(actor: Actor, entity: str, action: str, entity_id: int, detail: str) -> None:
    logger.info(
        "%s %s: id=%s %s actor=%s",
        entity.capitalize(),
        action,
        entity_id,
        detail,
        actor.user_id,
        extra={
            "actor_id": actor.user_id,
            "entity": entity,
            "entity_id": entity_id,
            "action": action,
        },
    )


class CourseService:
    def __init__(
        self,
        *,
        courses: CourseRepo,
        modules: ModuleRepo,
        contents: ContentRepo,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._courses = courses
        self._modules = modules
        self._contents = contents
        self._locks = locks
        self._clock = clock

    def _current(self, course_id: int) -> Course:
        current = self._courses.get(course_id)
        if current is None:
            raise NotFound("course", course_id)
        return current

    def _current_module(self, course: Course, module_id: int) -> Module:
        current = self._modules.get(module_id)
        if current is None or current.course_id != course.id:
            raise NotFound("module", module_id)
        return current

    # -- courses -------------------------------------------------------------

    @tracked("course", "read")
    def get(self, actor: Actor, course: Course) -> Course:
        require(actor, "read", course_resource(course))
        return course

    @tracked("course", "list_published")
    def list_published(self, actor: Actor) -> list[Course]:
        require(actor, "list_published", Resource.root("course"))
        return self._courses.list_published()

    @tracked("course", "list_mine")
    def list_mine(self, actor: Actor) -> list[Course]:
        require(actor, "list", Resource(kind="course", owner_id=actor.user_id))
        return self._courses.list_by_instructor(actor.require_id())

    @tracked("course", "create")
    def create(self, actor: Actor, fields: Mapping[str, object]) -> Course:
        """Direct creation, outside the proposal workflow.  Admin only."""
        require(actor, "create", Resource.root("course"))
        instructor_id = actor.require_id()
        clean = validation.course_fields(fields)
        course = self._courses.add(
            Course.new(instructor_id=instructor_id, fields=clean, now=self._clock.now())
        )
        _log(actor, "course", "create", course.id, f"status={course.status}")
        return course

    @tracked("course", "update")
    def update(
        self, actor: Actor, course: Course, fields: Mapping[str, object]
    ) -> Course:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, "update", course_resource(current))
            status = course_lifecycle.next_status(current.status, "update")
            clean = validation.course_fields(fields, partial=True)
            updated = self._courses.update(
                replace(current, **clean, status=status, updated_at=self._clock.now())
            )
        _log(actor, "course", "update", updated.id, f"status={updated.status}")
        return updated

    @tracked("course", "publish")
    def publish(self, actor: Actor, course: Course) -> Course:
        return self._transition(actor, course, "publish")

    @tracked("course", "unpublish")
    def unpublish(self, actor: Actor, course: Course) -> Course:
        return self._transition(actor, course, "unpublish")

    def _transition(self, actor: Actor, course: Course, action: CourseAction) -> Course:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, action, course_resource(current))
            status = course_lifecycle.next_status(current.status, action)
            updated = self._courses.update(
                replace(current, status=status, updated_at=self._clock.now())
            )
        _log(actor, "course", action, updated.id, f"status={updated.status}")
        return updated

    # -- modules -------------------------------------------------------------

    @tracked("module", "list")
    def list_modules(self, actor: Actor, course: Course) -> list[Module]:
        # A module is visible exactly when its course is.
        require(actor, "read", course_resource(course))
        return self._modules.list_by_course(course.id)

    @tracked("module", "read")
    def get_module(self, actor: Actor, course: Course, module: Module) -> Module:
        require(actor, "read", module_resource(course, module))
        return module

    @tracked("module", "create")
    def create_module(
        self, actor: Actor, course: Course, fields: Mapping[str, object]
    ) -> Module:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, "create", module_resource(current))
            clean = validation.module_fields(fields)
            module = self._modules.add(
                Module.new(
                    course_id=current.id,
                    title=clean["title"],
                    description=clean.get("description", ""),
                    now=self._clock.now(),
                )
            )
        _log(actor, "module", "create", module.id, f"position={module.position}")
        return module

    @tracked("module", "update")
    def update_module(
        self,
        actor: Actor,
        course: Course,
        module: Module,
        fields: Mapping[str, object],
    ) -> Module:
        with self._locks.hold(("course", course.id)):
            current = self._current_module(course, module.id)
            require(actor, "update", module_resource(course, current))
            clean = validation.module_fields(fields, partial=True)
            updated = self._modules.update(
                replace(current, **clean, updated_at=self._clock.now())
            )
        _log(actor, "module", "update", updated.id, f"position={updated.position}")
        return updated

    @tracked("module", "delete")
    def delete_module(self, actor: Actor, course: Course, module: Module) -> None:
        """Remove a module with all of its content; siblings close the gap."""
        with self._locks.hold(("course", course.id), ("module", module.id)):
            current = self._current_module(course, module.id)
            require(actor, "delete", module_resource(course, current))
            removed = self._contents.delete_by_module(current.id)
            self._modules.delete(current.id)
        _log(actor, "module", "delete", current.id, f"content_removed={removed}")

    @tracked("module", "reorder")
    def reorder_modules(
        self, actor: Actor, course: Course, ordered_ids: Sequence[int]
    ) -> list[Module]:
        with self._locks.hold(("course", course.id)):
            current = self._current(course.id)
            require(actor, "reorder", module_resource(current))
            modules = self._modules.reorder(current.id, list(ordered_ids))
        _log(actor, "course", "reorder", current.id, f"modules={len(modules)}")
        return modules
