"""The application context a front end talks to.

One ``Journal`` bundles a record store, its undo/redo log, the list view
state and an event bus. Nothing is global: a CLI, a GUI and a test suite
can each hold their own instance.

Events emitted (see ``daybook.core.events``):

- ``journal.records.changed`` after every successful mutation, undo, redo
  or non-empty import. Payload: ``{"op": ..., "ids": [...]}``.
- ``journal.criteria.changed`` when the filter criteria change.
- ``journal.history.changed`` whenever undo/redo availability may have moved.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from daybook.core.config import DEFAULT_PAGE_SIZE, DEFAULT_STORAGE_KEY, Config
from daybook.core.events import CRITERIA_CHANGED, HISTORY_CHANGED, RECORDS_CHANGED, Event, EventBus
from daybook.core.exceptions import ConfigurationError
from daybook.core.storage import LocalSlotStorage, MemorySlotStorage, SlotStorage

from .gateway import PersistenceGateway, SizeEstimate
from .history import ActionLog
from .models import Delta, Record
from .normalize import validate_submission
from .stats import DEFAULT_WINDOW_DAYS, JournalStats, summarize
from .store import RecordStore
from .transfer import ImportReport, export_records, import_records
from .view import FilterCriteria, ViewState, tag_vocabulary

_SOURCE = "journal"


class Journal:
    """Facade over store, history, view state and change notifications."""

    def __init__(
        self,
        store: RecordStore,
        *,
        bus: EventBus | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.store = store
        self.history = ActionLog()
        self.view = ViewState(page_size=page_size)
        self.bus = bus or EventBus()

    @classmethod
    def open(
        cls,
        storage: SlotStorage,
        key: str = DEFAULT_STORAGE_KEY,
        **kwargs: Any,
    ) -> Journal:
        """Load a journal from *storage* and wrap it in a context."""
        return cls(RecordStore.open(PersistenceGateway(storage, key=key)), **kwargs)

    @classmethod
    def from_config(cls, config: Config | None = None, *, bus: EventBus | None = None) -> Journal:
        """Build the storage backend described by *config* and open the journal.

        Raises:
            ConfigurationError: If the configuration does not validate.
        """
        try:
            settings = (config or Config()).validated()
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        storage_cfg = settings.storage
        if storage_cfg.backend == "memory":
            storage: SlotStorage = MemorySlotStorage(quota_bytes=storage_cfg.quota_bytes)
        else:
            storage = LocalSlotStorage(
                base_path=str(Path(settings.paths.data_dir) / "slots"),
                quota_bytes=storage_cfg.quota_bytes,
            )
        logger.debug(f"Opening journal '{storage_cfg.key}' on {storage_cfg.backend} storage")
        return cls.open(storage, key=storage_cfg.key, bus=bus, page_size=settings.view.page_size)

    # -- Notifications ------------------------------------------------------

    def _emit(self, name: str, **payload: Any) -> None:
        self.bus.emit(Event(name=name, payload=payload, source=_SOURCE))

    def _records_changed(self, op: str, ids: list[str]) -> None:
        self._emit(RECORDS_CHANGED, op=op, ids=ids)

    def _history_changed(self) -> None:
        self._emit(HISTORY_CHANGED, can_undo=self.history.can_undo, can_redo=self.history.can_redo)

    def _direct(self, delta: Delta) -> Delta:
        self.history.record(delta)
        self._records_changed(delta.op.value, [delta.record_id])
        self._history_changed()
        return delta

    # -- Mutations ----------------------------------------------------------

    def add(self, partial: Mapping[str, Any] | Record) -> Record:
        """Add a record through the lenient path. Returns the stored copy."""
        delta = self._direct(self.store.add(partial))
        assert delta.after is not None
        return delta.after.clone()

    def update(self, record_id: str, partial: Mapping[str, Any] | Record) -> Record:
        delta = self._direct(self.store.update(record_id, partial))
        assert delta.after is not None
        return delta.after.clone()

    def remove(self, record_id: str) -> Record:
        """Delete a record. Returns the removed record."""
        delta = self._direct(self.store.remove(record_id))
        assert delta.before is not None
        return delta.before.clone()

    def submit(self, raw: Mapping[str, Any]) -> Record:
        """Save a record a person entered: strict validation, then add or update.

        The record is updated when its id is already in the store and added
        otherwise.

        Raises:
            ValidationError: If the date or title is missing or malformed.
        """
        record = validate_submission(raw)
        record_id = raw.get("id")
        if record_id and str(record_id) in self.store:
            return self.update(str(record_id), record)
        return self.add(record)

    def undo(self) -> Delta:
        """Revert the last mutation.

        Raises:
            NotFoundError: If there is nothing to undo.
        """
        delta = self.history.undo(self.store)
        self._records_changed(f"undo-{delta.op.value}", [delta.record_id])
        self._history_changed()
        return delta

    def redo(self) -> Delta:
        """Re-apply the last undone mutation.

        Raises:
            NotFoundError: If there is nothing to redo.
        """
        delta = self.history.redo(self.store)
        self._records_changed(f"redo-{delta.op.value}", [delta.record_id])
        self._history_changed()
        return delta

    def import_records(self, payload: Any) -> ImportReport:
        """Merge an exported JSON list into the journal. Not undoable."""
        before = set(self.store.ids())
        report = import_records(self.store, payload)
        if report.added:
            self._records_changed("import", [i for i in self.store.ids() if i not in before])
        return report

    # -- Reads --------------------------------------------------------------

    def find(self, record_id: str) -> Record | None:
        return self.store.find(record_id)

    def all(self) -> tuple[Record, ...]:
        return self.store.all()

    def export_records(self, fmt: str = "json", *, filtered: bool = False) -> str:
        records = self.filtered() if filtered else self.all()
        return export_records(records, fmt)

    def estimate_size(self) -> SizeEstimate:
        return self.store.gateway.estimate_size(self.store.all())

    def tag_vocabulary(self) -> list[str]:
        """Tags across the whole journal, ignoring the current filter."""
        return tag_vocabulary(self.store.all())

    def stats(self, days: int = DEFAULT_WINDOW_DAYS, today: date | None = None) -> JournalStats:
        """Statistics over the currently filtered records."""
        return summarize(self.filtered(), days=days, today=today)

    # -- View ---------------------------------------------------------------

    def set_criteria(self, criteria: FilterCriteria | None = None, **fields: Any) -> list[Record]:
        """Replace the filter (or build one from *fields*) and return the first page."""
        if criteria is None:
            criteria = FilterCriteria.build(**fields)
        if self.view.set_criteria(criteria):
            self._emit(CRITERIA_CHANGED, criteria=criteria.to_dict(), page=self.view.page)
        return self.visible()

    def filtered(self) -> list[Record]:
        return self.view.filtered(self.store.all())

    def visible(self) -> list[Record]:
        return self.view.visible(self.store.all())

    def has_more(self) -> bool:
        return self.view.has_more(self.store.all())

    def load_more(self) -> list[Record]:
        self.view.load_more()
        return self.visible()
