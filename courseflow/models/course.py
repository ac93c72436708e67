from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Literal

from courseflow.models.proposal import Proposal

CourseStatus = Literal["draft", "published"]

# Children are created unplaced; the store appends them at the end of their
# parent's sequence.
UNPLACED = -1

COURSE_FIELDS: tuple[str, ...] = (
    "title",
    "summary",
    "target_audience",
    "learning_objectives",
    "prerequisites",
)


@dataclass(frozen=True, slots=True)
class Course:
    id: int
    title: str
    summary: str
    instructor_id: int
    created_at: datetime.datetime
    updated_at: datetime.datetime
    target_audience: str = ""
    learning_objectives: str = ""
    prerequisites: str = ""
    proposal_id: int | None = None
    status: CourseStatus = "draft"

    @staticmethod
    def new(
        *,
        instructor_id: int,
        fields: dict[str, str],
        now: datetime.datetime,
    ) -> Course:
        return Course(
            id=0,
            instructor_id=instructor_id,
            created_at=now,
            updated_at=now,
            **{name: fields.get(name, "") for name in COURSE_FIELDS},
        )

    @staticmethod
    def from_proposal(proposal: Proposal, *, now: datetime.datetime) -> Course:
        """Materialize an approved proposal; the author becomes the instructor."""
        return Course(
            id=0,
            title=proposal.title,
            summary=proposal.summary,
            target_audience=proposal.target_audience,
            learning_objectives=proposal.learning_objectives,
            prerequisites=proposal.prerequisites,
            instructor_id=proposal.author_id,
            proposal_id=proposal.id,
            created_at=now,
            updated_at=now,
        )

    def is_live(self) -> bool:
        return self.status == "published"


@dataclass(frozen=True, slots=True)
class Module:
    id: int
    course_id: int
    title: str
    position: int
    created_at: datetime.datetime
    updated_at: datetime.datetime
    description: str = ""

    @staticmethod
    def new(
        *,
        course_id: int,
        title: str,
        now: datetime.datetime,
        description: str = "",
    ) -> Module:
        return Module(
            id=0,
            course_id=course_id,
            title=title,
            position=UNPLACED,
            description=description,
            created_at=now,
            updated_at=now,
        )
