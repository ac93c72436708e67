from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Literal

from courseflow.models.course import UNPLACED

ContentKind = Literal["lecture"]
LectureFormat = Literal["markdown", "plain", "html"]
LECTURE_FORMATS: frozenset[str] = frozenset({"markdown", "plain", "html"})


@dataclass(frozen=True, slots=True)
class ContentItem:
    id: int
    module_id: int
    position: int
    created_at: datetime.datetime
    updated_at: datetime.datetime
    kind: ContentKind = "lecture"
    published: bool = False

    @staticmethod
    def new(*, module_id: int, now: datetime.datetime) -> ContentItem:
        return ContentItem(
            id=0,
            module_id=module_id,
            position=UNPLACED,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class Lecture:
    """Body of a lecture content item.  Same lifetime as its ContentItem."""

    content_item_id: int
    title: str
    body: str = ""
    format: LectureFormat = "markdown"
    media: tuple[str, ...] = ()  # immutable

    def missing_fields(self) -> list[str]:
        """Fields that must be non-blank before the item can be published."""
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.body.strip():
            missing.append("body")
        return missing


@dataclass(frozen=True, slots=True)
class LectureContent:
    """A content item together with its lecture, as returned by the façade."""

    item: ContentItem
    lecture: Lecture
