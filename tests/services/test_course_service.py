from __future__ import annotations

import pytest

from courseflow.core.errors import (
    Conflict,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from courseflow.models.actor import Actor
from courseflow.services import ordering
from courseflow.services.platform import Platform
from tests.conftest import add_modules, draft_course


def _positions(platform: Platform, course_id: int) -> dict[int, int]:
    return {m.id: m.position for m in platform.stores.modules.list_by_course(course_id)}


def test_direct_create_is_admin_only(
    platform: Platform, admin: Actor, author: Actor
) -> None:
    fields = {"title": "Compilers", "summary": "Front to back."}
    course = platform.courses.create(admin, fields)
    assert course.instructor_id == admin.user_id
    assert course.proposal_id is None
    assert course.status == "draft"

    with pytest.raises(Forbidden):
        platform.courses.create(author, fields)


def test_publish_cycle(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    course = platform.courses.publish(author, course)
    assert course.status == "published"
    with pytest.raises(InvalidTransition):
        platform.courses.publish(author, course)

    course = platform.courses.update(author, course, {"summary": "Revised."})
    assert course.status == "published"
    assert course.summary == "Revised."

    course = platform.courses.unpublish(author, course)
    assert course.status == "draft"


def test_update_validates_and_keeps_instructor(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    course = draft_course(platform, author, admin)
    with pytest.raises(ValidationError):
        platform.courses.update(author, course, {"title": "no"})
    with pytest.raises(ValidationError):
        platform.courses.update(author, course, {"instructor_id": 99})
    updated = platform.courses.update(author, course, {"title": "Parsing, Deeply"})
    assert updated.instructor_id == author.user_id


def test_draft_course_hidden_from_strangers(
    platform: Platform, author: Actor, admin: Actor, stranger: Actor
) -> None:
    course = draft_course(platform, author, admin)
    with pytest.raises(NotFound):
        platform.courses.get(stranger, course)
    with pytest.raises(NotFound):
        platform.courses.get(Actor.anonymous(), course)
    with pytest.raises(NotFound):
        platform.courses.list_modules(stranger, course)
    assert platform.courses.get(admin, course) == course
    assert platform.courses.list_published(stranger) == []

    live = platform.courses.publish(author, course)
    assert platform.courses.get(Actor.anonymous(), live).id == course.id
    assert [c.id for c in platform.courses.list_published(Actor.anonymous())] == [
        course.id
    ]


def test_stranger_cannot_write(
    platform: Platform, author: Actor, admin: Actor, stranger: Actor
) -> None:
    course = platform.courses.publish(author, draft_course(platform, author, admin))
    with pytest.raises(Forbidden):
        platform.courses.update(stranger, course, {"summary": "mine now"})
    with pytest.raises(Forbidden):
        platform.courses.create_module(stranger, course, {"title": "Intruder"})
    with pytest.raises(Forbidden):
        platform.courses.unpublish(admin, course)


def test_list_mine(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    assert [c.id for c in platform.courses.list_mine(author)] == [course.id]
    assert platform.courses.list_mine(admin) == []


def test_modules_append_in_order(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    modules = add_modules(platform, author, course, 3)
    assert [m.position for m in modules] == [0, 1, 2]
    listed = platform.courses.list_modules(author, course)
    assert [m.id for m in listed] == [m.id for m in modules]


def test_module_validation(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    with pytest.raises(ValidationError):
        platform.courses.create_module(author, course, {"title": "  "})
    with pytest.raises(ValidationError):
        platform.courses.create_module(
            author, course, {"title": "ok", "description": "x" * 2049}
        )


def test_update_module_keeps_position(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    course = draft_course(platform, author, admin)
    _, second = add_modules(platform, author, course, 2)
    updated = platform.courses.update_module(
        author, course, second, {"title": "Renamed", "description": "About it"}
    )
    assert updated.title == "Renamed"
    assert updated.description == "About it"
    assert updated.position == 1


def test_reorder_modules(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    a, b, c = add_modules(platform, author, course, 3)
    result = platform.courses.reorder_modules(author, course, [c.id, a.id, b.id])
    assert [m.id for m in result] == [c.id, a.id, b.id]
    assert _positions(platform, course.id) == {c.id: 0, a.id: 1, b.id: 2}


@pytest.mark.parametrize("shape", ["omit", "duplicate", "foreign"])
def test_reorder_mismatch_leaves_positions_unchanged(
    platform: Platform, author: Actor, admin: Actor, shape: str
) -> None:
    course = draft_course(platform, author, admin)
    a, b, c = add_modules(platform, author, course, 3)
    before = _positions(platform, course.id)
    requested = {
        "omit": [c.id, a.id],
        "duplicate": [c.id, a.id, a.id, b.id],
        "foreign": [c.id, a.id, b.id, 9999],
    }[shape]
    with pytest.raises(Conflict):
        platform.courses.reorder_modules(author, course, requested)
    assert _positions(platform, course.id) == before


def test_reorder_rejects_modules_of_another_course(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    first = draft_course(platform, author, admin)
    second = draft_course(platform, author, admin)
    (mine,) = add_modules(platform, author, first, 1)
    (theirs,) = add_modules(platform, author, second, 1)
    with pytest.raises(Conflict):
        platform.courses.reorder_modules(author, first, [theirs.id])
    with pytest.raises(Conflict):
        platform.courses.reorder_modules(author, first, [mine.id, theirs.id])


def test_delete_module_closes_gap_and_cascades(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    course = draft_course(platform, author, admin)
    a, b, c = add_modules(platform, author, course, 3)
    platform.content.create_lecture(author, course, b, {"title": "Doomed", "body": "x"})

    platform.courses.delete_module(author, course, b)

    assert _positions(platform, course.id) == {a.id: 0, c.id: 1}
    assert platform.stores.contents.list_by_module(b.id) == []
    assert platform.stores.contents.stats()["content_items"] == 0
    with pytest.raises(NotFound):
        platform.courses.delete_module(author, course, b)


def test_module_of_other_course_is_not_found(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    first = draft_course(platform, author, admin)
    second = draft_course(platform, author, admin)
    (module,) = add_modules(platform, author, second, 1)
    with pytest.raises(NotFound):
        platform.courses.update_module(author, first, module, {"title": "x"})


def test_positions_stay_dense(platform: Platform, author: Actor, admin: Actor) -> None:
    course = draft_course(platform, author, admin)
    modules = add_modules(platform, author, course, 5)
    platform.courses.delete_module(author, course, modules[0])
    platform.courses.delete_module(author, course, modules[3])
    add_modules(platform, author, course, 2)
    assert ordering.is_dense(_positions(platform, course.id).values())
