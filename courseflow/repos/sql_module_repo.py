"""SQLAlchemy implementation of ModuleRepo.

Sibling rows are locked (SELECT ... FOR UPDATE where the backend supports it)
before positions are rewritten, and the rewrite commits as one transaction.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import NotFound
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import ModuleRow
from courseflow.models.course import Module
from courseflow.services import ordering


class SqlModuleRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get(self, module_id: int) -> Module | None:
        with transaction(self._sessions) as session:
            row = session.get(ModuleRow, module_id)
            return None if row is None else _row_to_module(row)

    def list_by_course(self, course_id: int) -> list[Module]:
        with transaction(self._sessions) as session:
            return [_row_to_module(r) for r in _siblings(session, course_id)]

    def add(self, module: Module) -> Module:
        with transaction(self._sessions) as session:
            count = len(_siblings(session, module.course_id, lock=True))
            row = ModuleRow(
                course_id=module.course_id,
                title=module.title,
                description=module.description,
                position=ordering.next_position(count),
                created_at=module.created_at,
                updated_at=module.updated_at,
            )
            session.add(row)
            session.flush()
            return _row_to_module(row)

    def update(self, module: Module) -> Module:
        with transaction(self._sessions) as session:
            row = session.get(ModuleRow, module.id, with_for_update=True)
            if row is None:
                raise NotFound("module", module.id)
            row.title = module.title
            row.description = module.description
            row.updated_at = module.updated_at
            session.flush()
            return _row_to_module(row)

    def delete(self, module_id: int) -> None:
        with transaction(self._sessions) as session:
            row = session.get(ModuleRow, module_id)
            if row is None:
                raise NotFound("module", module_id)
            siblings = _siblings(session, row.course_id, lock=True)
            positions = ordering.close_gap([r.id for r in siblings], module_id)
            session.delete(row)
            session.flush()
            _apply(siblings, positions)

    def reorder(self, course_id: int, ordered_ids: Sequence[int]) -> list[Module]:
        with transaction(self._sessions) as session:
            siblings = _siblings(session, course_id, lock=True)
            ordering.validate_permutation(
                [r.id for r in siblings], ordered_ids, scope="module"
            )
            _apply(siblings, ordering.positions_for(ordered_ids))
            session.flush()
            return sorted((_row_to_module(r) for r in siblings), key=lambda m: m.position)

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            count = session.execute(select(func.count(ModuleRow.id))).scalar_one()
        return {"modules": int(count)}


def _siblings(session: Session, course_id: int, *, lock: bool = False) -> list[ModuleRow]:
    stmt = (
        select(ModuleRow)
        .where(ModuleRow.course_id == course_id)
        .order_by(ModuleRow.position, ModuleRow.id)
    )
    if lock:
        stmt = stmt.with_for_update()
    return list(session.execute(stmt).scalars())


def _apply(rows: list[ModuleRow], positions: dict[int, int]) -> None:
    for row in rows:
        if row.id in positions:
            row.position = positions[row.id]


def _row_to_module(row: ModuleRow) -> Module:
    return Module(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        description=row.description or "",
        position=row.position,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
