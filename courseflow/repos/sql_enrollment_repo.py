"""SQLAlchemy implementation of EnrollmentRepo.

The composite primary key (user_id, course_id) is what makes a second
enrollment fail; ``transaction()`` turns the IntegrityError into Conflict.
"""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import NotFound
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import EnrollmentRow
from courseflow.models.enrollment import Enrollment

_ORDER = (EnrollmentRow.enrolled_at, EnrollmentRow.course_id, EnrollmentRow.user_id)


class SqlEnrollmentRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get(self, user_id: int, course_id: int) -> Enrollment | None:
        with transaction(self._sessions) as session:
            row = session.get(EnrollmentRow, (user_id, course_id))
            return None if row is None else _row_to_enrollment(row)

    def add(self, enrollment: Enrollment) -> Enrollment:
        with transaction(self._sessions) as session:
            session.add(
                EnrollmentRow(
                    user_id=enrollment.user_id,
                    course_id=enrollment.course_id,
                    enrolled_at=enrollment.enrolled_at,
                )
            )
        return enrollment

    def delete(self, user_id: int, course_id: int) -> None:
        stmt = delete(EnrollmentRow).where(
            EnrollmentRow.user_id == user_id, EnrollmentRow.course_id == course_id
        )
        with transaction(self._sessions) as session:
            if session.execute(stmt).rowcount == 0:
                raise NotFound("enrollment")

    def list_by_user(self, user_id: int) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.user_id == user_id)
        with transaction(self._sessions) as session:
            rows = session.execute(stmt.order_by(*_ORDER)).scalars()
            return [_row_to_enrollment(r) for r in rows]

    def list_by_course(self, course_id: int) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        with transaction(self._sessions) as session:
            rows = session.execute(stmt.order_by(*_ORDER)).scalars()
            return [_row_to_enrollment(r) for r in rows]

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            count = session.execute(select(func.count()).select_from(EnrollmentRow))
            return {"enrollments": int(count.scalar_one())}


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        user_id=row.user_id,
        course_id=row.course_id,
        enrolled_at=as_utc(row.enrolled_at),
    )
