from __future__ import annotations

import datetime
import threading
import time

import pytest
from sqlalchemy import delete

from courseflow.core.errors import DomainError
from courseflow.db.engine import make_engine, make_session_factory, transaction
from courseflow.db.tables import CourseRow, ModuleRow
from courseflow.models.content import ContentItem, Lecture
from courseflow.models.course import Course, Module
from courseflow.models.enrollment import Enrollment
from courseflow.models.user import User
from courseflow.services.platform import Stores, sql_stores

T0 = datetime.datetime(2024, 1, 1, tzinfo=datetime.UTC)


@pytest.fixture
def engine():
    return make_engine("sqlite:///:memory:")


@pytest.fixture
def stores(engine) -> Stores:
    return sql_stores(engine)


@pytest.fixture
def course(stores: Stores) -> Course:
    user = stores.users.add(
        User.new(
            email="instructor@example.com",
            password_hash="$argon2id$fake",
            name="Instructor",
            created_at=T0,
        )
    )
    return stores.courses.add(
        Course.new(instructor_id=user.id, fields={"title": "Compilers"}, now=T0)
    )


def test_failed_write_in_one_thread_keeps_another_threads_uncommitted_work(
    engine, stores: Stores, course: Course
) -> None:
    sessions = make_session_factory(engine)
    flushed = threading.Event()
    failures: list[DomainError] = []

    def writer() -> None:
        with transaction(sessions) as session:
            session.add(
                ModuleRow(
                    course_id=course.id,
                    title="Kept",
                    description="",
                    position=0,
                    created_at=T0,
                    updated_at=T0,
                )
            )
            session.flush()
            flushed.set()
            time.sleep(0.2)

    def failing_reorder() -> None:
        flushed.wait(timeout=5)
        try:
            stores.modules.reorder(course.id, [12345])
        except DomainError as exc:
            failures.append(exc)

    threads = [
        threading.Thread(target=writer),
        threading.Thread(target=failing_reorder),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(failures) == 1
    assert [m.title for m in stores.modules.list_by_course(course.id)] == ["Kept"]


def test_deleting_a_course_row_cascades_to_everything_beneath_it(
    engine, stores: Stores, course: Course
) -> None:
    module = stores.modules.add(Module.new(course_id=course.id, title="M", now=T0))
    item, _ = stores.contents.add(
        ContentItem.new(module_id=module.id, now=T0),
        Lecture(content_item_id=0, title="L", body="text"),
    )
    stores.enrollments.add(
        Enrollment.new(user_id=course.instructor_id, course_id=course.id, now=T0)
    )

    with transaction(make_session_factory(engine)) as session:
        session.execute(delete(CourseRow).where(CourseRow.id == course.id))

    assert stores.modules.get(module.id) is None
    assert stores.contents.get(item.id) is None
    assert stores.contents.get_lecture(item.id) is None
    assert stores.enrollments.list_by_course(course.id) == []
