"""Course and module endpoints.

Reads accept anonymous callers (published courses are public); every write
needs a bearer token.  Visibility and ownership are decided by the façade,
so a draft course looks the same to a stranger as a missing one.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import (
    CourseDep,
    CurrentActor,
    MaybeActor,
    ModuleDep,
    PlatformDep,
)
from courseflow.api.schemas import CourseIn, CourseOut, ModuleIn, ModuleOut, OrderIn

router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get("", response_model=list[CourseOut])
def list_published_courses(actor: MaybeActor, platform: PlatformDep) -> list[CourseOut]:
    return [CourseOut.of(c) for c in platform.courses.list_published(actor)]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    actor: CurrentActor, payload: CourseIn, platform: PlatformDep
) -> CourseOut:
    return CourseOut.of(platform.courses.create(actor, payload.supplied()))


@router.get("/mine", response_model=list[CourseOut])
def list_my_courses(actor: CurrentActor, platform: PlatformDep) -> list[CourseOut]:
    """Courses the caller teaches, in any state."""
    return [CourseOut.of(c) for c in platform.courses.list_mine(actor)]


@router.get("/{course_id}", response_model=CourseOut)
def get_course(actor: MaybeActor, course: CourseDep, platform: PlatformDep) -> CourseOut:
    return CourseOut.of(platform.courses.get(actor, course))


@router.patch("/{course_id}", response_model=CourseOut)
def update_course(
    actor: CurrentActor, payload: CourseIn, course: CourseDep, platform: PlatformDep
) -> CourseOut:
    return CourseOut.of(platform.courses.update(actor, course, payload.supplied()))


@router.post("/{course_id}/publish", response_model=CourseOut)
def publish_course(
    actor: CurrentActor, course: CourseDep, platform: PlatformDep
) -> CourseOut:
    return CourseOut.of(platform.courses.publish(actor, course))


@router.post("/{course_id}/unpublish", response_model=CourseOut)
def unpublish_course(
    actor: CurrentActor, course: CourseDep, platform: PlatformDep
) -> CourseOut:
    return CourseOut.of(platform.courses.unpublish(actor, course))


# --- Modules --------------------------------------------------------------


@router.get("/{course_id}/modules", response_model=list[ModuleOut])
def list_modules(
    actor: MaybeActor, course: CourseDep, platform: PlatformDep
) -> list[ModuleOut]:
    return [ModuleOut.of(m) for m in platform.courses.list_modules(actor, course)]


@router.post(
    "/{course_id}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
def create_module(
    actor: CurrentActor, payload: ModuleIn, course: CourseDep, platform: PlatformDep
) -> ModuleOut:
    return ModuleOut.of(
        platform.courses.create_module(actor, course, payload.supplied())
    )


@router.put("/{course_id}/modules/order", response_model=list[ModuleOut])
def reorder_modules(
    actor: CurrentActor, payload: OrderIn, course: CourseDep, platform: PlatformDep
) -> list[ModuleOut]:
    """Replace the module order; ``ids`` must name every module exactly once."""
    modules = platform.courses.reorder_modules(actor, course, payload.ids)
    return [ModuleOut.of(m) for m in modules]


@router.get("/{course_id}/modules/{module_id}", response_model=ModuleOut)
def get_module(
    actor: MaybeActor, course: CourseDep, module: ModuleDep, platform: PlatformDep
) -> ModuleOut:
    return ModuleOut.of(platform.courses.get_module(actor, course, module))


@router.patch("/{course_id}/modules/{module_id}", response_model=ModuleOut)
def update_module(
    actor: CurrentActor,
    payload: ModuleIn,
    course: CourseDep,
    module: ModuleDep,
    platform: PlatformDep,
) -> ModuleOut:
    return ModuleOut.of(
        platform.courses.update_module(actor, course, module, payload.supplied())
    )


@router.delete(
    "/{course_id}/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_module(
    actor: CurrentActor, course: CourseDep, module: ModuleDep, platform: PlatformDep
) -> Response:
    platform.courses.delete_module(actor, course, module)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
