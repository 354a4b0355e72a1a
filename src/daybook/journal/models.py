"""Core data models for the journal.

Pure data: records, their embedded image attachments, the mood
enumeration, and the before/after deltas the action log replays.
No I/O and no dependencies beyond stdlib.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

MAX_ATTACHMENT_BYTES = 1024 * 1024


class Mood(StrEnum):
    HAPPY = "happy"
    NEUTRAL = "neutral"
    LOW = "low"
    TENSE = "tense"
    TIRED = "tired"


DEFAULT_MOOD = Mood.NEUTRAL

# Labels written by the original Chinese-language app; accepted on input only.
MOOD_ALIASES: dict[str, Mood] = {
    "开心": Mood.HAPPY,
    "一般": Mood.NEUTRAL,
    "低落": Mood.LOW,
    "紧张": Mood.TENSE,
    "疲惫": Mood.TIRED,
}


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Attachment:
    """An inline image embedded in a record as a base64 data URL.

    Attributes:
        name: Original file name, informational only.
        type: MIME type, always ``image/...``.
        size: Size of the decoded image in bytes.
        data_url: ``data:image/<subtype>;base64,<payload>``.
    """

    name: str
    type: str
    size: int
    data_url: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "size": self.size, "dataUrl": self.data_url}


@dataclass
class Record:
    """A dated journal entry.

    Records inside a ``RecordStore`` always satisfy the normalization
    invariants (valid date and mood, distinct non-empty tags, valid
    attachments). Build them from untrusted data with
    ``daybook.journal.normalize.normalize`` rather than directly.
    """

    id: str
    date: date
    title: str = ""
    content: str = ""
    mood: Mood = DEFAULT_MOOD
    tags: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    def clone(self) -> Record:
        """Return an independent copy; no nested list is shared with ``self``."""
        return Record(
            id=self.id,
            date=self.date,
            title=self.title,
            content=self.content,
            mood=self.mood,
            tags=list(self.tags),
            attachments=[dataclasses.replace(a) for a in self.attachments],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "title": self.title,
            "content": self.content,
            "mood": self.mood.value,
            "tags": list(self.tags),
            "attachments": [a.to_dict() for a in self.attachments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Deserialize, applying the lenient normalization policy.

        Raises:
            TypeError: If *data* is not a mapping.
        """
        from .normalize import normalize

        record = normalize(data)
        if record is None:
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")
        return record

    def __repr__(self) -> str:
        preview = self.title[:30] + "..." if len(self.title) > 30 else self.title
        return f"Record(id='{self.id}', date={self.date.isoformat()}, title='{preview}')"


class DeltaOp(StrEnum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Delta:
    """A reversible record mutation.

    ``add`` carries ``after`` only, ``delete`` carries ``before`` only,
    ``update`` carries both. Snapshots are private clones, never the
    live records held by the store.
    """

    op: DeltaOp
    before: Record | None = None
    after: Record | None = None

    def __post_init__(self):
        if self.op == DeltaOp.ADD and (self.after is None or self.before is not None):
            raise ValueError("add delta needs 'after' only")
        if self.op == DeltaOp.DELETE and (self.before is None or self.after is not None):
            raise ValueError("delete delta needs 'before' only")
        if self.op == DeltaOp.UPDATE and (self.before is None or self.after is None):
            raise ValueError("update delta needs both 'before' and 'after'")

    @property
    def record_id(self) -> str:
        snapshot = self.after if self.after is not None else self.before
        assert snapshot is not None
        return snapshot.id

    def copy(self) -> Delta:
        return Delta(
            op=self.op,
            before=self.before.clone() if self.before is not None else None,
            after=self.after.clone() if self.after is not None else None,
        )
