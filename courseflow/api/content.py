"""Lecture content endpoints, nested under a course module."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import (
    ContentDep,
    CourseDep,
    CurrentActor,
    MaybeActor,
    ModuleDep,
    PlatformDep,
)
from courseflow.api.schemas import ContentOut, LectureIn, OrderIn, PositionOut

router = APIRouter(
    prefix="/v1/courses/{course_id}/modules/{module_id}/content",
    tags=["content"],
)


@router.get("", response_model=list[ContentOut])
def list_content(
    actor: MaybeActor, course: CourseDep, module: ModuleDep, platform: PlatformDep
) -> list[ContentOut]:
    items = platform.content.list_items(actor, course, module)
    return [ContentOut.of(c) for c in items]


@router.post("", response_model=ContentOut, status_code=status.HTTP_201_CREATED)
def create_lecture(
    actor: CurrentActor,
    payload: LectureIn,
    course: CourseDep,
    module: ModuleDep,
    platform: PlatformDep,
) -> ContentOut:
    return ContentOut.of(
        platform.content.create_lecture(actor, course, module, payload.supplied())
    )


@router.put("/order", response_model=list[PositionOut])
def reorder_content(
    actor: CurrentActor,
    payload: OrderIn,
    course: CourseDep,
    module: ModuleDep,
    platform: PlatformDep,
) -> list[PositionOut]:
    items = platform.content.reorder(actor, course, module, payload.ids)
    return [PositionOut(id=i.id, position=i.position) for i in items]


@router.get("/{item_id}", response_model=ContentOut)
def get_content(
    actor: MaybeActor,
    course: CourseDep,
    module: ModuleDep,
    item: ContentDep,
    platform: PlatformDep,
) -> ContentOut:
    return ContentOut.of(platform.content.get(actor, course, module, item))


@router.patch("/{item_id}", response_model=ContentOut)
def update_lecture(
    actor: CurrentActor,
    payload: LectureIn,
    course: CourseDep,
    module: ModuleDep,
    item: ContentDep,
    platform: PlatformDep,
) -> ContentOut:
    return ContentOut.of(
        platform.content.update_lecture(
            actor, course, module, item, payload.supplied()
        )
    )


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(
    actor: CurrentActor,
    course: CourseDep,
    module: ModuleDep,
    item: ContentDep,
    platform: PlatformDep,
) -> Response:
    platform.content.delete(actor, course, module, item)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{item_id}/publish", response_model=ContentOut)
def publish_content(
    actor: CurrentActor,
    course: CourseDep,
    module: ModuleDep,
    item: ContentDep,
    platform: PlatformDep,
) -> ContentOut:
    return ContentOut.of(platform.content.publish(actor, course, module, item))


@router.post("/{item_id}/unpublish", response_model=ContentOut)
def unpublish_content(
    actor: CurrentActor,
    course: CourseDep,
    module: ModuleDep,
    item: ContentDep,
    platform: PlatformDep,
) -> ContentOut:
    return ContentOut.of(platform.content.unpublish(actor, course, module, item))
