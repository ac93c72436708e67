from __future__ import annotations

import logging

import pytest

from courseflow.core.errors import Conflict, Forbidden, InvalidTransition, NotFound
from courseflow.models.actor import Actor
from courseflow.models.course import Course
from courseflow.services.platform import Platform
from tests.conftest import draft_course


@pytest.fixture
def live_course(platform: Platform, author: Actor, admin: Actor) -> Course:
    return platform.courses.publish(author, draft_course(platform, author, admin))


def test_enroll_and_leave(
    platform: Platform, live_course: Course, stranger: Actor
) -> None:
    enrollment = platform.enrollments.enroll(stranger, live_course)
    assert enrollment.user_id == stranger.user_id
    assert enrollment.course_id == live_course.id
    assert platform.enrollments.is_enrolled(stranger, live_course) is True
    assert platform.enrollments.list_mine(stranger) == [enrollment]

    platform.enrollments.unenroll(stranger, live_course)
    assert platform.enrollments.is_enrolled(stranger, live_course) is False
    assert platform.enrollments.list_mine(stranger) == []


def test_second_enrollment_conflicts(
    platform: Platform, live_course: Course, stranger: Actor
) -> None:
    platform.enrollments.enroll(stranger, live_course)
    with pytest.raises(Conflict):
        platform.enrollments.enroll(stranger, live_course)


def test_unenroll_without_enrollment_is_not_found(
    platform: Platform, live_course: Course, stranger: Actor
) -> None:
    with pytest.raises(NotFound):
        platform.enrollments.unenroll(stranger, live_course)


def test_draft_course_hidden_from_would_be_students(
    platform: Platform, author: Actor, admin: Actor, stranger: Actor
) -> None:
    course = draft_course(platform, author, admin)
    with pytest.raises(NotFound):
        platform.enrollments.enroll(stranger, course)
    with pytest.raises(NotFound):
        platform.enrollments.is_enrolled(stranger, course)


def test_draft_course_rejects_enrollment_from_those_who_see_it(
    platform: Platform, author: Actor, admin: Actor
) -> None:
    course = draft_course(platform, author, admin)
    for actor in (author, admin):
        with pytest.raises(InvalidTransition) as excinfo:
            platform.enrollments.enroll(actor, course)
        assert excinfo.value.details()["state"] == "draft"
    assert platform.stores.enrollments.list_by_course(course.id) == []


def test_anonymous_cannot_enroll(platform: Platform, live_course: Course) -> None:
    with pytest.raises(Forbidden):
        platform.enrollments.enroll(Actor.anonymous(), live_course)


def test_enrolled_student_can_leave_an_unpublished_course(
    platform: Platform, author: Actor, live_course: Course, stranger: Actor
) -> None:
    platform.enrollments.enroll(stranger, live_course)
    hidden = platform.courses.unpublish(author, live_course)

    assert platform.enrollments.is_enrolled(stranger, hidden) is True
    platform.enrollments.unenroll(stranger, hidden)
    with pytest.raises(NotFound):
        platform.enrollments.is_enrolled(stranger, hidden)


def test_roster_for_instructor_and_admin_only(
    platform: Platform,
    author: Actor,
    admin: Actor,
    stranger: Actor,
    live_course: Course,
) -> None:
    platform.enrollments.enroll(stranger, live_course)

    for actor in (author, admin):
        roster = platform.enrollments.list_for_course(actor, live_course)
        assert [e.user_id for e in roster] == [stranger.user_id]
    with pytest.raises(Forbidden):
        platform.enrollments.list_for_course(stranger, live_course)


def test_enroll_is_logged_with_workflow_context(
    platform: Platform,
    live_course: Course,
    stranger: Actor,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="courseflow.services.enrollment_service")
    platform.enrollments.enroll(stranger, live_course)
    record = caplog.records[-1]
    assert record.action == "enroll"  # type: ignore[attr-defined]
    assert record.entity == "course"  # type: ignore[attr-defined]
    assert record.entity_id == live_course.id  # type: ignore[attr-defined]
    assert record.actor_id == stranger.user_id  # type: ignore[attr-defined]
