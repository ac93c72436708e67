"""SQLAlchemy implementation of UserRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import Conflict
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import UserRow
from courseflow.models.user import User, normalize_email


class SqlUserRepo:
    """Satisfies the UserRepo Protocol using SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get_by_id(self, user_id: int) -> User | None:
        with transaction(self._sessions) as session:
            row = session.get(UserRow, user_id)
            return None if row is None else _row_to_user(row)

    def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == normalize_email(email))
        with transaction(self._sessions) as session:
            row = session.execute(stmt).scalar_one_or_none()
            return None if row is None else _row_to_user(row)

    def add(self, user: User) -> User:
        with transaction(self._sessions) as session:
            taken = session.execute(
                select(UserRow.id).where(UserRow.email == user.email)
            ).first()
            if taken is not None:
                raise Conflict("email already registered")
            row = UserRow(
                email=user.email,
                password_hash=user.password_hash,
                name=user.name,
                role=user.role,
                created_at=user.created_at,
            )
            session.add(row)
            session.flush()
            return _row_to_user(row)

    def list_all(self) -> list[User]:
        with transaction(self._sessions) as session:
            rows = session.execute(select(UserRow).order_by(UserRow.id)).scalars()
            return [_row_to_user(r) for r in rows]

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            count = session.execute(select(func.count(UserRow.id))).scalar_one()
        return {"users": int(count)}


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        role=row.role,  # type: ignore[arg-type]
        created_at=as_utc(row.created_at),
    )
