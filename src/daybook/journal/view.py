"""Filtering, "load more" pagination and the tag vocabulary.

The functions here are pure: they take a record sequence and criteria and
return a new list without touching the store. ``ViewState`` is the only
stateful piece; it tracks the criteria a list view is showing and how many
pages the user has loaded so far.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from .models import Mood, Record
from .normalize import parse_date, parse_mood

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class FilterCriteria:
    """What the list is narrowed to. Empty fields don't constrain anything.

    Attributes:
        query: Case-insensitive substring matched against title, content and tags.
        date: Exact calendar date.
        mood: Exact mood.
        tags: Every one of these tags must be present (case-sensitive).
    """

    query: str = ""
    date: dt.date | None = None
    mood: Mood | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        query: str | None = None,
        date: dt.date | str | None = None,
        mood: Mood | str | None = None,
        tags: Iterable[str] | None = None,
    ) -> FilterCriteria:
        """Build criteria from loosely-typed input (e.g. CLI options)."""
        return cls(
            query=query or "",
            date=parse_date(date) if date else None,
            mood=parse_mood(mood) if mood else None,
            tags=frozenset(t for t in (tags or ()) if t),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.query.strip() or self.date or self.mood or self.tags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "date": self.date.isoformat() if self.date else None,
            "mood": self.mood.value if self.mood else None,
            "tags": sorted(self.tags),
        }


def _haystack(record: Record) -> str:
    return " ".join([record.title, record.content, ",".join(record.tags)]).lower()


def matches(record: Record, criteria: FilterCriteria) -> bool:
    if criteria.date and record.date != criteria.date:
        return False
    if criteria.mood and record.mood != criteria.mood:
        return False
    if criteria.tags and not criteria.tags.issubset(record.tags):
        return False
    needle = criteria.query.strip().lower()
    if needle and needle not in _haystack(record):
        return False
    return True


def filter_records(records: Iterable[Record], criteria: FilterCriteria) -> list[Record]:
    """Order-preserving subsequence of *records* matching *criteria*."""
    return [r for r in records if matches(r, criteria)]


def paginate(filtered: Sequence[Record], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[Record]:
    """Cumulative prefix: the first ``page * page_size`` records.

    Page 2 contains page 1 followed by the next ``page_size`` records.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    end = min(max(page, 1) * page_size, len(filtered))
    return list(filtered[:end])


def has_more(filtered: Sequence[Record], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> bool:
    return len(filtered) > max(page, 1) * page_size


def tag_vocabulary(records: Iterable[Record]) -> list[str]:
    """Every tag used anywhere in *records*, in first-seen order."""
    seen: dict[str, None] = {}
    for r in records:
        for tag in r.tags:
            seen.setdefault(tag, None)
    return list(seen)


class ViewState:
    """Current criteria plus the "load more" cursor for one list view."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.criteria = FilterCriteria()
        self.page = 1

    def set_criteria(self, criteria: FilterCriteria) -> bool:
        """Apply new criteria. Returns True if they differ from the current ones.

        The page cursor goes back to 1 either way.
        """
        changed = criteria != self.criteria
        self.criteria = criteria
        self.page = 1
        return changed

    def update_criteria(self, **changes: Any) -> bool:
        """Change individual criteria fields, e.g. ``update_criteria(mood=Mood.LOW)``."""
        return self.set_criteria(replace(self.criteria, **changes))

    def load_more(self) -> int:
        self.page += 1
        return self.page

    def reset(self) -> None:
        self.page = 1

    def filtered(self, records: Iterable[Record]) -> list[Record]:
        return filter_records(records, self.criteria)

    def visible(self, records: Iterable[Record]) -> list[Record]:
        return paginate(self.filtered(records), self.page, self.page_size)

    def has_more(self, records: Iterable[Record]) -> bool:
        return has_more(self.filtered(records), self.page, self.page_size)

    def remaining(self, records: Iterable[Record]) -> int:
        """How many matching records are not yet visible."""
        filtered = self.filtered(records)
        return max(0, len(filtered) - self.page * self.page_size)
