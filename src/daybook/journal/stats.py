"""Summary statistics over a record subset.

Feeds the mood bar chart and the 30-day activity chart. Drawing them is
somebody else's job; this module only counts.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .models import Mood, Record

DEFAULT_WINDOW_DAYS = 30


@dataclass
class JournalStats:
    """Counts for one set of records.

    Attributes:
        total: Number of records considered.
        moods: Records per mood; every mood is present, possibly with 0.
        daily: ``(day, count)`` for each of the last N days, oldest first.
    """

    total: int = 0
    moods: dict[Mood, int] = field(default_factory=dict)
    daily: list[tuple[date, int]] = field(default_factory=list)

    @property
    def window_total(self) -> int:
        """Records falling inside the daily window."""
        return sum(count for _, count in self.daily)


def mood_counts(records: Iterable[Record]) -> dict[Mood, int]:
    counter = Counter(r.mood for r in records)
    return {mood: counter.get(mood, 0) for mood in Mood}


def daily_counts(
    records: Iterable[Record],
    days: int = DEFAULT_WINDOW_DAYS,
    today: date | None = None,
) -> list[tuple[date, int]]:
    """Records per day for the *days* days ending at *today* (inclusive)."""
    if days < 1:
        return []
    end = today or date.today()
    start = end - timedelta(days=days - 1)
    counter = Counter(r.date for r in records if start <= r.date <= end)
    return [(start + timedelta(days=i), counter.get(start + timedelta(days=i), 0)) for i in range(days)]


def summarize(records: Iterable[Record], days: int = DEFAULT_WINDOW_DAYS, today: date | None = None) -> JournalStats:
    items = list(records)
    return JournalStats(
        total=len(items),
        moods=mood_counts(items),
        daily=daily_counts(items, days=days, today=today),
    )
