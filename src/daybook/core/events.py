"""Synchronous event bus for change notification.

The journal core never talks to a presentation layer directly. It emits
events; list views, tag menus, charts and undo buttons subscribe to the
ones they care about.

Usage::

    from daybook.core.events import EventBus, Event, RECORDS_CHANGED

    bus = EventBus()
    unsubscribe = bus.on(RECORDS_CHANGED, lambda e: print(e.payload["ids"]))
    bus.emit(Event(name=RECORDS_CHANGED, payload={"op": "add", "ids": ["a1"]}))
    unsubscribe()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

from loguru import logger

RECORDS_CHANGED = "journal.records.changed"  # payload: {op, ids}
CRITERIA_CHANGED = "journal.criteria.changed"  # payload: {criteria, page}
HISTORY_CHANGED = "journal.history.changed"  # payload: {can_undo, can_redo}

# Subscribing under this name receives every event.
ANY_EVENT = "*"


@dataclass(frozen=True)
class Event:
    """An immutable notification."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


Hook = Callable[[Event], None]


class EventBus:
    """Hooks run synchronously: named hooks first, then wildcard hooks, each in registration order."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Hook]] = {}

    def on(self, event_name: str, hook: Hook) -> Callable[[], None]:
        """Subscribe *hook* to *event_name*. Returns a callable that unsubscribes it."""
        self._subscribers.setdefault(event_name, []).append(hook)
        return lambda: self.off(event_name, hook)

    def on_all(self, hook: Hook) -> Callable[[], None]:
        return self.on(ANY_EVENT, hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unsubscribe *hook*; unknown hooks are ignored."""
        hooks = self._subscribers.get(event_name, [])
        if hook in hooks:
            hooks.remove(hook)

    def subscriber_count(self, event_name: str) -> int:
        named = len(self._subscribers.get(event_name, [])) if event_name != ANY_EVENT else 0
        return named + len(self._subscribers.get(ANY_EVENT, []))

    def emit(self, event: Event) -> int:
        """Deliver *event*. Returns how many hooks completed without raising.

        A hook that raises is logged at warning and skipped.
        """
        targets = [*self._subscribers.get(event.name, []), *self._subscribers.get(ANY_EVENT, [])]
        delivered = 0
        for hook in targets:
            try:
                hook(event)
            except Exception as exc:
                logger.warning(f"Event hook {getattr(hook, '__name__', hook)!r} failed for {event.name}: {exc}")
                continue
            delivered += 1
        return delivered
