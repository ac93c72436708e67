"""Request and response bodies for the v1 API.

Input models accept every field as optional and forbid unknown keys; the
façade's validation owns the field rules so that HTTP and direct callers get
the same per-field messages.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from courseflow.models.content import LectureContent
from courseflow.models.course import Course, Module
from courseflow.models.enrollment import Enrollment
from courseflow.models.proposal import Proposal
from courseflow.models.user import User
from courseflow.services import course_lifecycle, proposal_lifecycle


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def supplied(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


# --- Auth -----------------------------------------------------------------


class RegisterIn(_Input):
    name: str
    email: str
    password: str


class LoginIn(_Input):
    email: str
    password: str


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    role: str

    @classmethod
    def of(cls, user: User) -> UserOut:
        return cls(id=user.id, email=user.email, name=user.name, role=user.role)


class AuthResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    user: UserOut


# --- Proposals ------------------------------------------------------------


class ProposalIn(_Input):
    title: str | None = None
    summary: str | None = None
    qualifications: str | None = None
    target_audience: str | None = None
    learning_objectives: str | None = None
    outline: str | None = None
    prerequisites: str | None = None


class ReviewIn(_Input):
    notes: str | None = None


class ProposalOut(BaseModel):
    id: int
    author_id: int
    title: str
    summary: str
    qualifications: str
    target_audience: str
    learning_objectives: str
    outline: str
    prerequisites: str
    status: str
    reviewer_id: int | None
    review_notes: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    allowed_actions: list[str]

    @classmethod
    def of(cls, proposal: Proposal, *, materialized: bool = False) -> ProposalOut:
        return cls(
            id=proposal.id,
            author_id=proposal.author_id,
            title=proposal.title,
            summary=proposal.summary,
            qualifications=proposal.qualifications,
            target_audience=proposal.target_audience,
            learning_objectives=proposal.learning_objectives,
            outline=proposal.outline,
            prerequisites=proposal.prerequisites,
            status=proposal.status,
            reviewer_id=proposal.reviewer_id,
            review_notes=proposal.review_notes,
            created_at=proposal.created_at,
            updated_at=proposal.updated_at,
            allowed_actions=proposal_lifecycle.allowed_actions(
                proposal.status, materialized=materialized
            ),
        )


# --- Courses and modules --------------------------------------------------


class CourseIn(_Input):
    title: str | None = None
    summary: str | None = None
    target_audience: str | None = None
    learning_objectives: str | None = None
    prerequisites: str | None = None


class CourseOut(BaseModel):
    id: int
    title: str
    summary: str
    target_audience: str
    learning_objectives: str
    prerequisites: str
    instructor_id: int
    proposal_id: int | None
    status: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    allowed_actions: list[str]

    @classmethod
    def of(cls, course: Course) -> CourseOut:
        return cls(
            id=course.id,
            title=course.title,
            summary=course.summary,
            target_audience=course.target_audience,
            learning_objectives=course.learning_objectives,
            prerequisites=course.prerequisites,
            instructor_id=course.instructor_id,
            proposal_id=course.proposal_id,
            status=course.status,
            created_at=course.created_at,
            updated_at=course.updated_at,
            allowed_actions=course_lifecycle.allowed_actions(course.status),
        )


class ModuleIn(_Input):
    title: str | None = None
    description: str | None = None


class ModuleOut(BaseModel):
    id: int
    course_id: int
    title: str
    description: str
    position: int
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def of(cls, module: Module) -> ModuleOut:
        return cls(
            id=module.id,
            course_id=module.course_id,
            title=module.title,
            description=module.description,
            position=module.position,
            created_at=module.created_at,
            updated_at=module.updated_at,
        )


class OrderIn(_Input):
    ids: list[int] = Field(description="Every sibling id, in the desired order")


# --- Enrollment -----------------------------------------------------------


class EnrollmentOut(BaseModel):
    user_id: int
    course_id: int
    enrolled_at: datetime.datetime

    @classmethod
    def of(cls, enrollment: Enrollment) -> EnrollmentOut:
        return cls(
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            enrolled_at=enrollment.enrolled_at,
        )


class EnrollmentStatusOut(BaseModel):
    enrolled: bool


# --- Content --------------------------------------------------------------


class LectureIn(_Input):
    title: str | None = None
    body: str | None = None
    format: str | None = None
    media: list[str] | None = None


class LectureOut(BaseModel):
    title: str
    body: str
    format: str
    media: list[str]


class ContentOut(BaseModel):
    id: int
    module_id: int
    kind: str
    position: int
    published: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime
    lecture: LectureOut

    @classmethod
    def of(cls, content: LectureContent) -> ContentOut:
        item, lecture = content.item, content.lecture
        return cls(
            id=item.id,
            module_id=item.module_id,
            kind=item.kind,
            position=item.position,
            published=item.published,
            created_at=item.created_at,
            updated_at=item.updated_at,
            lecture=LectureOut(
                title=lecture.title,
                body=lecture.body,
                format=lecture.format,
                media=list(lecture.media),
            ),
        )


class PositionOut(BaseModel):
    id: int
    position: int
