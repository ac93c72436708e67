"""SQLAlchemy implementation of ContentRepo."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import NotFound
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import ContentItemRow, LectureRow
from courseflow.models.content import ContentItem, Lecture
from courseflow.services import ordering


class SqlContentRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get(self, item_id: int) -> ContentItem | None:
        with transaction(self._sessions) as session:
            row = session.get(ContentItemRow, item_id)
            return None if row is None else _row_to_item(row)

    def get_lecture(self, item_id: int) -> Lecture | None:
        with transaction(self._sessions) as session:
            row = session.get(LectureRow, item_id)
            return None if row is None else _row_to_lecture(row)

    def list_by_module(self, module_id: int) -> list[ContentItem]:
        with transaction(self._sessions) as session:
            return [_row_to_item(r) for r in _siblings(session, module_id)]

    def add(self, item: ContentItem, lecture: Lecture) -> tuple[ContentItem, Lecture]:
        with transaction(self._sessions) as session:
            count = len(_siblings(session, item.module_id, lock=True))
            row = ContentItemRow(
                module_id=item.module_id,
                kind=item.kind,
                position=ordering.next_position(count),
                published=item.published,
                created_at=item.created_at,
                updated_at=item.updated_at,
            )
            session.add(row)
            session.flush()
            body = LectureRow(
                content_item_id=row.id,
                title=lecture.title,
                body=lecture.body,
                format=lecture.format,
                media=list(lecture.media),
            )
            session.add(body)
            session.flush()
            return _row_to_item(row), _row_to_lecture(body)

    def update(self, item: ContentItem) -> ContentItem:
        with transaction(self._sessions) as session:
            row = session.get(ContentItemRow, item.id, with_for_update=True)
            if row is None:
                raise NotFound("content", item.id)
            row.published = item.published
            row.updated_at = item.updated_at
            session.flush()
            return _row_to_item(row)

    def update_lecture(self, lecture: Lecture) -> Lecture:
        with transaction(self._sessions) as session:
            row = session.get(LectureRow, lecture.content_item_id, with_for_update=True)
            if row is None:
                raise NotFound("content", lecture.content_item_id)
            row.title = lecture.title
            row.body = lecture.body
            row.format = lecture.format
            row.media = list(lecture.media)
            session.flush()
            return _row_to_lecture(row)

    def delete(self, item_id: int) -> None:
        with transaction(self._sessions) as session:
            row = session.get(ContentItemRow, item_id)
            if row is None:
                raise NotFound("content", item_id)
            siblings = _siblings(session, row.module_id, lock=True)
            positions = ordering.close_gap([r.id for r in siblings], item_id)
            session.execute(delete(LectureRow).where(LectureRow.content_item_id == item_id))
            session.delete(row)
            session.flush()
            _apply(siblings, positions)

    def delete_by_module(self, module_id: int) -> int:
        with transaction(self._sessions) as session:
            ids = [r.id for r in _siblings(session, module_id, lock=True)]
            if ids:
                session.execute(
                    delete(LectureRow).where(LectureRow.content_item_id.in_(ids))
                )
                session.execute(delete(ContentItemRow).where(ContentItemRow.id.in_(ids)))
            return len(ids)

    def reorder(self, module_id: int, ordered_ids: Sequence[int]) -> list[ContentItem]:
        with transaction(self._sessions) as session:
            siblings = _siblings(session, module_id, lock=True)
            ordering.validate_permutation(
                [r.id for r in siblings], ordered_ids, scope="content"
            )
            _apply(siblings, ordering.positions_for(ordered_ids))
            session.flush()
            return sorted((_row_to_item(r) for r in siblings), key=lambda i: i.position)

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            total = session.execute(select(func.count(ContentItemRow.id))).scalar_one()
            published = session.execute(
                select(func.count(ContentItemRow.id)).where(ContentItemRow.published)
            ).scalar_one()
        return {"content_items": int(total), "published": int(published)}


def _siblings(
    session: Session, module_id: int, *, lock: bool = False
) -> list[ContentItemRow]:
    stmt = (
        select(ContentItemRow)
        .where(ContentItemRow.module_id == module_id)
        .order_by(ContentItemRow.position, ContentItemRow.id)
    )
    if lock:
        stmt = stmt.with_for_update()
    return list(session.execute(stmt).scalars())


def _apply(rows: list[ContentItemRow], positions: dict[int, int]) -> None:
    for row in rows:
        if row.id in positions:
            row.position = positions[row.id]


def _row_to_item(row: ContentItemRow) -> ContentItem:
    return ContentItem(
        id=row.id,
        module_id=row.module_id,
        kind=row.kind,  # type: ignore[arg-type]
        position=row.position,
        published=bool(row.published),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _row_to_lecture(row: LectureRow) -> Lecture:
    return Lecture(
        content_item_id=row.content_item_id,
        title=row.title,
        body=row.body or "",
        format=row.format,  # type: ignore[arg-type]
        media=tuple(row.media or ()),
    )
