"""Enrollment endpoints.

All of them need a bearer token.  A draft course a caller cannot see is
reported as missing, the same way the course endpoints report it.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import CourseDep, CurrentActor, PlatformDep
from courseflow.api.schemas import EnrollmentOut, EnrollmentStatusOut

router = APIRouter(tags=["enrollments"])


@router.post(
    "/v1/courses/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
def enroll(
    actor: CurrentActor, course: CourseDep, platform: PlatformDep
) -> EnrollmentOut:
    return EnrollmentOut.of(platform.enrollments.enroll(actor, course))


@router.delete(
    "/v1/courses/{course_id}/enroll", status_code=status.HTTP_204_NO_CONTENT
)
def unenroll(actor: CurrentActor, course: CourseDep, platform: PlatformDep) -> Response:
    platform.enrollments.unenroll(actor, course)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/v1/courses/{course_id}/enrollment", response_model=EnrollmentStatusOut)
def enrollment_status(
    actor: CurrentActor, course: CourseDep, platform: PlatformDep
) -> EnrollmentStatusOut:
    enrolled = platform.enrollments.is_enrolled(actor, course)
    return EnrollmentStatusOut(enrolled=enrolled)


@router.get("/v1/courses/{course_id}/enrollments", response_model=list[EnrollmentOut])
def course_roster(
    actor: CurrentActor, course: CourseDep, platform: PlatformDep
) -> list[EnrollmentOut]:
    """Everyone enrolled in the course, for its instructor and admins."""
    roster = platform.enrollments.list_for_course(actor, course)
    return [EnrollmentOut.of(e) for e in roster]


@router.get("/v1/enrollments/mine", response_model=list[EnrollmentOut])
def my_enrollments(actor: CurrentActor, platform: PlatformDep) -> list[EnrollmentOut]:
    return [EnrollmentOut.of(e) for e in platform.enrollments.list_mine(actor)]
