"""SQLAlchemy implementation of CourseRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import Conflict, NotFound
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import CourseRow
from courseflow.models.course import COURSE_FIELDS, Course


class SqlCourseRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get(self, course_id: int) -> Course | None:
        with transaction(self._sessions) as session:
            row = session.get(CourseRow, course_id)
            return None if row is None else _row_to_course(row)

    def get_by_proposal(self, proposal_id: int) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.proposal_id == proposal_id)
        with transaction(self._sessions) as session:
            row = session.execute(stmt).scalar_one_or_none()
            return None if row is None else _row_to_course(row)

    def add(self, course: Course) -> Course:
        with transaction(self._sessions) as session:
            if course.proposal_id is not None:
                taken = session.execute(
                    select(CourseRow.id).where(CourseRow.proposal_id == course.proposal_id)
                ).first()
                if taken is not None:
                    raise Conflict(f"proposal {course.proposal_id} already has a course")
            row = CourseRow(
                instructor_id=course.instructor_id,
                proposal_id=course.proposal_id,
                created_at=course.created_at,
            )
            _copy_into(row, course)
            session.add(row)
            session.flush()
            return _row_to_course(row)

    def update(self, course: Course) -> Course:
        with transaction(self._sessions) as session:
            row = session.get(CourseRow, course.id, with_for_update=True)
            if row is None:
                raise NotFound("course", course.id)
            _copy_into(row, course)
            session.flush()
            return _row_to_course(row)

    def list_all(self) -> list[Course]:
        return self._list(select(CourseRow))

    def list_published(self) -> list[Course]:
        return self._list(select(CourseRow).where(CourseRow.status == "published"))

    def list_by_instructor(self, instructor_id: int) -> list[Course]:
        return self._list(
            select(CourseRow).where(CourseRow.instructor_id == instructor_id)
        )

    def _list(self, stmt) -> list[Course]:
        with transaction(self._sessions) as session:
            rows = session.execute(stmt.order_by(CourseRow.id)).scalars()
            return [_row_to_course(r) for r in rows]

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            total = session.execute(select(func.count(CourseRow.id))).scalar_one()
            published = session.execute(
                select(func.count(CourseRow.id)).where(CourseRow.status == "published")
            ).scalar_one()
        return {"courses": int(total), "published": int(published)}


def _copy_into(row: CourseRow, course: Course) -> None:
    # instructor_id and proposal_id are fixed at insert
    for name in COURSE_FIELDS:
        setattr(row, name, getattr(course, name))
    row.status = course.status
    row.updated_at = course.updated_at


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        instructor_id=row.instructor_id,
        proposal_id=row.proposal_id,
        status=row.status,  # type: ignore[arg-type]
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        **{name: getattr(row, name) or "" for name in COURSE_FIELDS},
    )
