"""Input field rules shared by the façade services.

Every helper strips text values, collects per-field messages, and raises a
single ValidationError naming all offending fields at once.  ``None`` means
"not supplied" and is dropped before checking, so the same helpers serve
create (``partial=False``) and patch (``partial=True``) calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from courseflow.core.errors import ValidationError
from courseflow.models.content import LECTURE_FORMATS
from courseflow.models.course import COURSE_FIELDS
from courseflow.models.proposal import PROPOSAL_FIELDS

MAX_TEXT = 2048
TITLE_MIN = 4
TITLE_MAX = 128
NAME_MAX = 255


def _supplied(
    fields: Mapping[str, object], allowed: Iterable[str], errors: dict[str, str]
) -> dict[str, str]:
    allowed = tuple(allowed)
    out: dict[str, str] = {}
    for name, value in fields.items():
        if name not in allowed:
            errors[name] = "unknown field"
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            errors[name] = "must be a string"
            continue
        out[name] = value.strip()
    return out


def _length(
    errors: dict[str, str],
    name: str,
    value: str,
    *,
    min_len: int = 0,
    max_len: int = MAX_TEXT,
) -> None:
    if len(value) < min_len:
        if min_len <= 1:
            errors[name] = "is required"
        else:
            errors[name] = f"must be at least {min_len} characters"
    elif len(value) > max_len:
        errors[name] = f"must be at most {max_len} characters"


def _summary_fields(
    fields: Mapping[str, object], allowed: tuple[str, ...], *, partial: bool
) -> dict[str, str]:
    errors: dict[str, str] = {}
    clean = _supplied(fields, allowed, errors)

    if not partial:
        clean.setdefault("title", "")
        clean.setdefault("summary", "")

    for name, value in clean.items():
        if name == "title":
            _length(errors, name, value, min_len=TITLE_MIN, max_len=TITLE_MAX)
        elif name == "summary":
            _length(errors, name, value, min_len=1)
        else:
            _length(errors, name, value)

    if errors:
        raise ValidationError(errors)
    return clean


def proposal_fields(
    fields: Mapping[str, object], *, partial: bool = False
) -> dict[str, str]:
    return _summary_fields(fields, PROPOSAL_FIELDS, partial=partial)


def course_fields(
    fields: Mapping[str, object], *, partial: bool = False
) -> dict[str, str]:
    return _summary_fields(fields, COURSE_FIELDS, partial=partial)


def review_notes(action: str, notes: str | None) -> str:
    """Notes are optional for approve/reject and required for request_changes."""
    text = (notes or "").strip()
    errors: dict[str, str] = {}
    if action == "request_changes" and not text:
        errors["notes"] = "is required when requesting changes"
    elif len(text) > MAX_TEXT:
        errors["notes"] = f"must be at most {MAX_TEXT} characters"
    if errors:
        raise ValidationError(errors)
    return text


def module_fields(
    fields: Mapping[str, object], *, partial: bool = False
) -> dict[str, str]:
    errors: dict[str, str] = {}
    clean = _supplied(fields, ("title", "description"), errors)
    if not partial:
        clean.setdefault("title", "")
    if "title" in clean:
        _length(errors, "title", clean["title"], min_len=1, max_len=NAME_MAX)
    if "description" in clean:
        _length(errors, "description", clean["description"])
    if errors:
        raise ValidationError(errors)
    return clean


def lecture_fields(
    fields: Mapping[str, object], *, partial: bool = False
) -> dict[str, object]:
    """Title/body/format/media for a lecture.

    The body is kept verbatim apart from stripping; media is a list of
    non-blank reference strings and comes back as a tuple.
    """
    errors: dict[str, str] = {}
    text = {k: v for k, v in fields.items() if k != "media"}
    clean: dict[str, object] = dict(
        _supplied(text, ("title", "body", "format"), errors)
    )

    if not partial:
        clean.setdefault("title", "")
    if "title" in clean:
        _length(errors, "title", str(clean["title"]), min_len=1, max_len=NAME_MAX)
    if "format" in clean and clean["format"] not in LECTURE_FORMATS:
        allowed = ", ".join(sorted(LECTURE_FORMATS))
        errors["format"] = f"must be one of: {allowed}"

    media = fields.get("media")
    if media is not None:
        if not isinstance(media, (list, tuple)) or not all(
            isinstance(m, str) for m in media
        ):
            errors["media"] = "must be a list of strings"
        else:
            refs = tuple(m.strip() for m in media)
            if any(not ref for ref in refs):
                errors["media"] = "must not contain blank references"
            clean["media"] = refs

    if errors:
        raise ValidationError(errors)
    return clean
