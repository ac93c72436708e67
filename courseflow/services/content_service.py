"""Lecture content façade.

All mutations of a module's content collection run under ("module", id).
A content item is publicly visible only when its course is published and
the item itself is published; owners and admins see everything.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from courseflow.core.clock import Clock
from courseflow.core.errors import NotFound, ValidationError
from courseflow.models.actor import Actor
from courseflow.models.content import ContentItem, Lecture, LectureContent
from courseflow.models.course import Course, Module
from courseflow.repos.content_repo import ContentRepo
from courseflow.repos.module_repo import ModuleRepo
from courseflow.services import validation
from courseflow.services.authorization import Resource, require
from courseflow.services.course_service import course_resource
from courseflow.services.locks import KeyedLocks
from courseflow.services.tracking import tracked

logger = logging.getLogger(__name__)


def content_resource(course: Course, item: ContentItem | None = None) -> Resource:
    return Resource(
        kind="content",
        owner_id=course.instructor_id,
        public=course.is_live() and item is not None and item.published,
        entity_id=None if item is None else item.id,
    )


class ContentService:
    def __init__(
        self,
        *,
        modules: ModuleRepo,
        contents: ContentRepo,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._modules = modules
        self._contents = contents
        self._locks = locks
        self._clock = clock

    def _current(self, module: Module, item_id: int) -> ContentItem:
        current = self._contents.get(item_id)
        if current is None or current.module_id != module.id:
            raise NotFound("content", item_id)
        return current

    def _lecture(self, item: ContentItem) -> Lecture:
        lecture = self._contents.get_lecture(item.id)
        if lecture is None:
            raise NotFound("content", item.id)
        return lecture

    def _log(self, actor: Actor, action: str, item: ContentItem) -> None:
        logger.info(
            "Content %s: id=%s module=%s position=%s published=%s actor=%s",
            action,
            item.id,
            item.module_id,
            item.position,
            item.published,
            actor.user_id,
            extra={
                "actor_id": actor.user_id,
                "entity": "content",
                "entity_id": item.id,
                "action": action,
            },
        )

    # -- reads ---------------------------------------------------------------

    @tracked("content", "list")
    def list_items(
        self, actor: Actor, course: Course, module: Module
    ) -> list[LectureContent]:
        require(actor, "read", course_resource(course))
        items = self._contents.list_by_module(module.id)
        if not (actor.owns(course.instructor_id) or actor.is_admin()):
            items = [i for i in items if i.published]
        return [LectureContent(item=i, lecture=self._lecture(i)) for i in items]

    @tracked("content", "read")
    def get(
        self, actor: Actor, course: Course, module: Module, item: ContentItem
    ) -> LectureContent:
        require(actor, "read", content_resource(course, item))
        return LectureContent(item=item, lecture=self._lecture(item))

    # -- mutations -----------------------------------------------------------

    @tracked("content", "create")
    def create_lecture(
        self,
        actor: Actor,
        course: Course,
        module: Module,
        fields: Mapping[str, object],
    ) -> LectureContent:
        with self._locks.hold(("module", module.id)):
            if self._modules.get(module.id) is None:
                raise NotFound("module", module.id)
            require(actor, "create", content_resource(course))
            clean = validation.lecture_fields(fields)
            item, lecture = self._contents.add(
                ContentItem.new(module_id=module.id, now=self._clock.now()),
                Lecture(content_item_id=0, **clean),  # type: ignore[arg-type]
            )
        self._log(actor, "create", item)
        return LectureContent(item=item, lecture=lecture)

    @tracked("content", "update")
    def update_lecture(
        self,
        actor: Actor,
        course: Course,
        module: Module,
        item: ContentItem,
        fields: Mapping[str, object],
    ) -> LectureContent:
        with self._locks.hold(("module", module.id)):
            current = self._current(module, item.id)
            require(actor, "update", content_resource(course, current))
            clean = validation.lecture_fields(fields, partial=True)
            lecture = replace(self._lecture(current), **clean)
            if current.published and lecture.missing_fields():
                missing = lecture.missing_fields()
                raise ValidationError(
                    {name: "is required while published" for name in missing}
                )
            lecture = self._contents.update_lecture(lecture)
            current = self._contents.update(
                replace(current, updated_at=self._clock.now())
            )
        self._log(actor, "update", current)
        return LectureContent(item=current, lecture=lecture)

    @tracked("content", "delete")
    def delete(
        self, actor: Actor, course: Course, module: Module, item: ContentItem
    ) -> None:
        with self._locks.hold(("module", module.id)):
            current = self._current(module, item.id)
            require(actor, "delete", content_resource(course, current))
            self._contents.delete(current.id)
        self._log(actor, "delete", current)

    @tracked("content", "reorder")
    def reorder(
        self,
        actor: Actor,
        course: Course,
        module: Module,
        ordered_ids: Sequence[int],
    ) -> list[ContentItem]:
        with self._locks.hold(("module", module.id)):
            if self._modules.get(module.id) is None:
                raise NotFound("module", module.id)
            require(actor, "reorder", content_resource(course))
            items = self._contents.reorder(module.id, list(ordered_ids))
        logger.info(
            "Content reorder: module=%s items=%s actor=%s",
            module.id,
            len(items),
            actor.user_id,
            extra={
                "actor_id": actor.user_id,
                "entity": "module",
                "entity_id": module.id,
                "action": "reorder",
            },
        )
        return items

    @tracked("content", "publish")
    def publish(
        self, actor: Actor, course: Course, module: Module, item: ContentItem
    ) -> LectureContent:
        """Make an item visible; the lecture must have a title and a body."""
        with self._locks.hold(("module", module.id)):
            current = self._current(module, item.id)
            require(actor, "publish", content_resource(course, current))
            lecture = self._lecture(current)
            missing = lecture.missing_fields()
            if missing:
                raise ValidationError(
                    {name: "is required to publish" for name in missing}
                )
            current = self._set_published(current, True)
        self._log(actor, "publish", current)
        return LectureContent(item=current, lecture=lecture)

    @tracked("content", "unpublish")
    def unpublish(
        self, actor: Actor, course: Course, module: Module, item: ContentItem
    ) -> LectureContent:
        with self._locks.hold(("module", module.id)):
            current = self._current(module, item.id)
            require(actor, "unpublish", content_resource(course, current))
            current = self._set_published(current, False)
            lecture = self._lecture(current)
        self._log(actor, "unpublish", current)
        return LectureContent(item=current, lecture=lecture)

    def _set_published(self, item: ContentItem, published: bool) -> ContentItem:
        if item.published == published:
            return item
        return self._contents.update(
            replace(item, published=published, updated_at=self._clock.now())
        )
