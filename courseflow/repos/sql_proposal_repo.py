"""SQLAlchemy implementation of ProposalRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from courseflow.core.errors import NotFound
from courseflow.db.engine import as_utc, ping, transaction
from courseflow.db.tables import ProposalRow
from courseflow.models.proposal import PROPOSAL_FIELDS, Proposal

_ORDER = (ProposalRow.updated_at.desc(), ProposalRow.id.desc())


class SqlProposalRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def get(self, proposal_id: int) -> Proposal | None:
        with transaction(self._sessions) as session:
            row = session.get(ProposalRow, proposal_id)
            return None if row is None else _row_to_proposal(row)

    def add(self, proposal: Proposal) -> Proposal:
        with transaction(self._sessions) as session:
            row = ProposalRow(author_id=proposal.author_id)
            _copy_into(row, proposal)
            row.created_at = proposal.created_at
            session.add(row)
            session.flush()
            return _row_to_proposal(row)

    def update(self, proposal: Proposal) -> Proposal:
        with transaction(self._sessions) as session:
            row = session.get(ProposalRow, proposal.id, with_for_update=True)
            if row is None:
                raise NotFound("proposal", proposal.id)
            _copy_into(row, proposal)
            session.flush()
            return _row_to_proposal(row)

    def delete(self, proposal_id: int) -> None:
        with transaction(self._sessions) as session:
            row = session.get(ProposalRow, proposal_id)
            if row is None:
                raise NotFound("proposal", proposal_id)
            session.delete(row)

    def list_all(self) -> list[Proposal]:
        with transaction(self._sessions) as session:
            rows = session.execute(select(ProposalRow).order_by(*_ORDER)).scalars()
            return [_row_to_proposal(r) for r in rows]

    def list_by_author(self, author_id: int) -> list[Proposal]:
        stmt = (
            select(ProposalRow)
            .where(ProposalRow.author_id == author_id)
            .order_by(*_ORDER)
        )
        with transaction(self._sessions) as session:
            return [_row_to_proposal(r) for r in session.execute(stmt).scalars()]

    def ping(self) -> bool:
        return ping(self._sessions)

    def stats(self) -> dict[str, int]:
        with transaction(self._sessions) as session:
            count = session.execute(select(func.count(ProposalRow.id))).scalar_one()
        return {"proposals": int(count)}


def _copy_into(row: ProposalRow, proposal: Proposal) -> None:
    # author_id and created_at are never rewritten after insert
    for name in PROPOSAL_FIELDS:
        setattr(row, name, getattr(proposal, name))
    row.status = proposal.status
    row.reviewer_id = proposal.reviewer_id
    row.review_notes = proposal.review_notes
    row.updated_at = proposal.updated_at


def _row_to_proposal(row: ProposalRow) -> Proposal:
    return Proposal(
        id=row.id,
        author_id=row.author_id,
        status=row.status,  # type: ignore[arg-type]
        reviewer_id=row.reviewer_id,
        review_notes=row.review_notes or "",
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        **{name: getattr(row, name) or "" for name in PROPOSAL_FIELDS},
    )
