"""Record normalization.

Two deliberately separate policies:

``normalize``
    Lenient. Used for anything loaded from storage or imported from a
    file. Never raises; missing or malformed fields fall back to defaults,
    bad tags and attachments are dropped, and only non-objects are rejected.

``validate_submission``
    Strict. Used for a record a person just typed in. A missing date or
    title is an error the caller must surface, not something to paper over.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from daybook.core.exceptions import ValidationError

from .models import (
    DEFAULT_MOOD,
    MAX_ATTACHMENT_BYTES,
    MOOD_ALIASES,
    Attachment,
    Mood,
    Record,
    new_record_id,
)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATA_URL_RE = re.compile(r"^data:(image/[a-zA-Z+.-]+);base64,")


def parse_date(value: Any) -> date | None:
    """Return a calendar date for ``YYYY-MM-DD`` strings and date objects, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _DATE_RE.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def parse_mood(value: Any) -> Mood | None:
    if isinstance(value, Mood):
        return value
    if isinstance(value, str):
        key = value.strip()
        if key in MOOD_ALIASES:
            return MOOD_ALIASES[key]
        try:
            return Mood(key.lower())
        except ValueError:
            return None
    return None


def _text(value: Any) -> str:
    """Stringify, replacing lone surrogates so the result always encodes as UTF-8."""
    return str(value).encode("utf-8", "replace").decode("utf-8")


def normalize_tags(value: Any) -> list[str]:
    """Trim, drop empties, and deduplicate keeping first occurrence."""
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    seen: dict[str, None] = {}
    for tag in value:
        if not tag:
            continue
        text = _text(tag).strip()
        if text:
            seen.setdefault(text, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


def _field(obj: Any, *names: str) -> Any:
    if isinstance(obj, Attachment):
        obj = obj.to_dict()
    for name in names:
        if name in obj:
            return obj[name]
    return None


def _declared_size(obj: Any) -> int | float | None:
    size = _field(obj, "size")
    if isinstance(size, bool) or not isinstance(size, (int, float)):
        return None
    if not math.isfinite(size) or size < 0:
        return None
    return size


def _payload_size(data_url: str) -> int:
    """Decoded byte length of a base64 data URL payload."""
    payload = data_url.partition(",")[2].strip()
    padding = len(payload) - len(payload.rstrip("="))
    return max(0, len(payload) * 3 // 4 - padding)


def _is_well_formed(obj: Any) -> bool:
    if not isinstance(obj, (Mapping, Attachment)):
        return False
    data_url = _field(obj, "dataUrl", "data_url")
    return isinstance(data_url, str) and bool(_DATA_URL_RE.match(data_url))


def attachment_size(obj: Any) -> int:
    """Declared size if it is a finite, non-negative number, otherwise derived from the payload."""
    declared = _declared_size(obj)
    if declared is not None:
        return int(declared)
    return _payload_size(_field(obj, "dataUrl", "data_url"))


def is_oversized_attachment(obj: Any) -> bool:
    """True for a well-formed image attachment that breaks the 1 MiB limit."""
    return _is_well_formed(obj) and attachment_size(obj) > MAX_ATTACHMENT_BYTES


def is_valid_attachment(obj: Any) -> bool:
    """An attachment is kept iff it is an inline image no larger than 1 MiB."""
    return _is_well_formed(obj) and attachment_size(obj) <= MAX_ATTACHMENT_BYTES


def _build_attachment(obj: Any) -> Attachment:
    data_url = _field(obj, "dataUrl", "data_url")
    mime = _DATA_URL_RE.match(data_url).group(1)  # type: ignore[union-attr]
    declared_type = _field(obj, "type")
    name = _field(obj, "name")
    return Attachment(
        name=_text(name) if name else "",
        type=_text(declared_type) if isinstance(declared_type, str) and declared_type.startswith("image/") else mime,
        size=attachment_size(obj),
        data_url=_text(data_url),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def normalize(raw: Any) -> Record | None:
    """Coerce *raw* into a valid Record, or return None if it is not an object."""
    if isinstance(raw, Record):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        return None

    raw_id = raw.get("id")
    raw_title = raw.get("title")
    raw_content = raw.get("content")
    raw_attachments = raw.get("attachments")
    if not isinstance(raw_attachments, (list, tuple)):
        raw_attachments = []

    return Record(
        id=_text(raw_id) if raw_id else new_record_id(),
        date=parse_date(raw.get("date")) or date.today(),
        title=_text(raw_title).strip() if raw_title is not None else "",
        content=_text(raw_content) if raw_content is not None else "",
        mood=parse_mood(raw.get("mood")) or DEFAULT_MOOD,
        tags=normalize_tags(raw.get("tags")),
        attachments=[_build_attachment(a) for a in raw_attachments if is_valid_attachment(a)],
    )


def validate_submission(raw: Mapping[str, Any]) -> Record:
    """Validate a record entered by a person, then normalize it.

    Raises:
        ValidationError: If the date is missing or malformed, or the title is blank.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("record", "A record must be a mapping of fields.")

    raw_date = raw.get("date")
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        raise ValidationError("date", "Please choose a date.")
    if parse_date(raw_date) is None:
        raise ValidationError("date", f"Invalid date {raw_date!r}; expected YYYY-MM-DD.")

    title = raw.get("title")
    if title is None or not str(title).strip():
        raise ValidationError("title", "A title is required.")

    record = normalize(raw)
    assert record is not None
    return record
