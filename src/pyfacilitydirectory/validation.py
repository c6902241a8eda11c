"""Validation and sanitizing of write payloads.

Validators never raise. They collect every violated rule and always return a
sanitized copy of the payload, which is the only copy callers may persist.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

import bleach

from .const import (
    BLOCKED_TERMS,
    COMMENT_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    FREE_TEXT_MAX_LENGTH,
    MAX_RATING,
    MAX_TAGS,
    MIN_RATING,
    NAME_MAX_LENGTH,
    REPORT_DETAILS_MAX_LENGTH,
    REPORT_TYPES,
    TAG_MAX_LENGTH,
    TAG_MIN_LENGTH,
)
from .models import ReportPayload, ReviewPayload, SubmissionPayload, ValidationResult

_SCRIPT_BLOCK_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)

BLOCKED_CONTENT_MESSAGE = "Content contains inappropriate language."


def sanitize_text(text: Any) -> str:
    """Strip every HTML tag, attribute and script body from ``text``."""
    if not isinstance(text, str) or not text:
        return ""
    without_scripts = _SCRIPT_BLOCK_RE.sub("", text.strip())
    cleaned = bleach.clean(
        without_scripts,
        tags=set(),
        attributes={},
        strip=True,
        strip_comments=True,
    )
    return cleaned.strip()


def contains_blocked_term(text: Any, terms: Iterable[str] = BLOCKED_TERMS) -> bool:
    if not isinstance(text, str) or not text:
        return False
    lowered = text.lower()
    return any(term.lower() in lowered for term in terms)


def validate_submission(payload: SubmissionPayload) -> ValidationResult[SubmissionPayload]:
    """Validate a new facility entry."""
    errors: list[str] = []
    name = payload.name
    if not isinstance(name, str) or not name.strip():
        errors.append("Name is required.")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(f"Name must be at most {NAME_MAX_LENGTH} characters.")
    errors.extend(_coordinate_errors(payload.latitude, payload.longitude))
    if payload.rating is not None:
        errors.extend(_rating_errors(payload.rating))
    errors.extend(_tag_errors(payload.tags))
    errors.extend(_length_errors("Description", payload.description, DESCRIPTION_MAX_LENGTH))
    errors.extend(_length_errors("Notes", payload.free_text, FREE_TEXT_MAX_LENGTH))

    sanitized = replace(
        payload,
        name=sanitize_text(name),
        description=_sanitize_optional(payload.description),
        tags=tuple(sanitize_text(tag) for tag in _as_tags(payload.tags)),
        free_text=_sanitize_optional(payload.free_text),
    )
    if _any_blocked(
        name,
        payload.description,
        payload.free_text,
        *_as_tags(payload.tags),
        sanitized.name,
        sanitized.description,
        sanitized.free_text,
        *sanitized.tags,
    ):
        errors.append(BLOCKED_CONTENT_MESSAGE)
    return ValidationResult(valid=not errors, errors=tuple(errors), sanitized=sanitized)


def validate_review(payload: ReviewPayload) -> ValidationResult[ReviewPayload]:
    errors: list[str] = []
    errors.extend(_location_errors(payload.location_id))
    errors.extend(_rating_errors(payload.rating))
    comment = payload.comment
    if not isinstance(comment, str) or not comment.strip():
        errors.append("Review comment is required.")
    else:
        errors.extend(_length_errors("Review comment", comment, COMMENT_MAX_LENGTH))
    errors.extend(_tag_errors(payload.tags))

    sanitized = replace(
        payload,
        comment=sanitize_text(comment),
        tags=tuple(sanitize_text(tag) for tag in _as_tags(payload.tags)),
    )
    if _any_blocked(comment, *_as_tags(payload.tags), sanitized.comment, *sanitized.tags):
        errors.append(BLOCKED_CONTENT_MESSAGE)
    return ValidationResult(valid=not errors, errors=tuple(errors), sanitized=sanitized)


def validate_report(payload: ReportPayload) -> ValidationResult[ReportPayload]:
    errors: list[str] = []
    errors.extend(_location_errors(payload.location_id))
    if payload.issue_type not in REPORT_TYPES:
        errors.append(f"Issue type must be one of: {', '.join(REPORT_TYPES)}.")
    details = payload.details
    if not isinstance(details, str) or not details.strip():
        errors.append("Report details are required.")
    else:
        errors.extend(_length_errors("Report details", details, REPORT_DETAILS_MAX_LENGTH))

    sanitized = replace(payload, details=sanitize_text(details))
    if _any_blocked(details, sanitized.details):
        errors.append(BLOCKED_CONTENT_MESSAGE)
    return ValidationResult(valid=not errors, errors=tuple(errors), sanitized=sanitized)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coordinate_errors(latitude: Any, longitude: Any) -> list[str]:
    errors: list[str] = []
    if not _is_number(latitude) or not math.isfinite(latitude) or not -90 <= latitude <= 90:
        errors.append("Latitude must be between -90 and 90 degrees.")
    if not _is_number(longitude) or not math.isfinite(longitude) or not -180 <= longitude <= 180:
        errors.append("Longitude must be between -180 and 180 degrees.")
    return errors


def _rating_errors(rating: Any) -> list[str]:
    if isinstance(rating, int) and not isinstance(rating, bool):
        if MIN_RATING <= rating <= MAX_RATING:
            return []
    return [f"Rating must be a whole number between {MIN_RATING} and {MAX_RATING}."]


def _as_tags(tags: Any) -> tuple[Any, ...]:
    if tags is None or isinstance(tags, str):
        return ()
    return tuple(tags)


def _tag_errors(tags: Any) -> list[str]:
    if isinstance(tags, str):
        return ["Tags must be a list."]
    values = _as_tags(tags)
    errors: list[str] = []
    if len(values) > MAX_TAGS:
        errors.append(f"At most {MAX_TAGS} tags are allowed.")
    if any(
        not isinstance(tag, str) or not TAG_MIN_LENGTH <= len(tag.strip()) <= TAG_MAX_LENGTH
        for tag in values
    ):
        errors.append(f"Each tag must be between {TAG_MIN_LENGTH} and {TAG_MAX_LENGTH} characters.")
    return errors


def _length_errors(label: str, value: Any, limit: int) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, str):
        return [f"{label} must be text."]
    if len(value) > limit:
        return [f"{label} must be at most {limit} characters."]
    return []


def _location_errors(location_id: Any) -> list[str]:
    if not isinstance(location_id, str) or not location_id.strip():
        return ["Location id is required."]
    return []


def _any_blocked(*values: Any) -> bool:
    return any(contains_blocked_term(value) for value in values)


def _sanitize_optional(value: Any) -> str | None:
    if value is None:
        return None
    return sanitize_text(value)
