from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Literal

ProposalStatus = Literal[
    "draft", "submitted", "approved", "rejected", "changes_requested"
]

# Author-editable text fields, in display order.
PROPOSAL_FIELDS: tuple[str, ...] = (
    "title",
    "summary",
    "qualifications",
    "target_audience",
    "learning_objectives",
    "outline",
    "prerequisites",
)


@dataclass(frozen=True, slots=True)
class Proposal:
    id: int
    author_id: int
    title: str
    summary: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    qualifications: str = ""
    target_audience: str = ""
    learning_objectives: str = ""
    outline: str = ""
    prerequisites: str = ""
    status: ProposalStatus = "draft"
    reviewer_id: int | None = None
    review_notes: str = ""

    @staticmethod
    def new(
        *,
        author_id: int,
        fields: dict[str, str],
        now: datetime.datetime,
    ) -> Proposal:
        return Proposal(
            id=0,
            author_id=author_id,
            created_at=now,
            updated_at=now,
            **{name: fields.get(name, "") for name in PROPOSAL_FIELDS},
        )
