"""Course publish lifecycle: draft ⇄ published."""

from __future__ import annotations

from typing import Literal

from courseflow.core.errors import InvalidTransition
from courseflow.models.course import CourseStatus

CourseAction = Literal["update", "publish", "unpublish"]

TRANSITIONS: dict[tuple[CourseStatus, CourseAction], CourseStatus] = {
    ("draft", "update"): "draft",
    ("draft", "publish"): "published",
    ("published", "update"): "published",
    ("published", "unpublish"): "draft",
}


def allowed_actions(status: CourseStatus) -> list[str]:
    return [action for (state, action) in TRANSITIONS if state == status]


def next_status(status: CourseStatus, action: CourseAction) -> CourseStatus:
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise InvalidTransition(
            "course", status, action, allowed_actions(status)
        ) from None
