"""Single-step undo/redo.

The log remembers exactly one undoable delta and one redoable delta. A new
direct mutation replaces the undo slot and forgets any pending redo.

    add    -- undo removes the record,         redo reinserts ``after``
    update -- undo writes back ``before``,     redo writes ``after`` again
    delete -- undo reinserts ``before``,       redo removes it again

Slots hold private clones, and re-applied snapshots are cloned again on
the way into the store, so the log and the live sequence never share a
record object.
"""

from __future__ import annotations

from loguru import logger

from daybook.core.exceptions import NotFoundError

from .models import Delta, DeltaOp
from .store import RecordStore


def _apply_inverse(store: RecordStore, delta: Delta) -> None:
    if delta.op == DeltaOp.ADD:
        store.discard(delta.record_id)
    elif delta.op == DeltaOp.UPDATE:
        assert delta.before is not None
        store.replace(delta.before)
    elif delta.op == DeltaOp.DELETE:
        assert delta.before is not None
        store.restore(delta.before)


def _apply_forward(store: RecordStore, delta: Delta) -> None:
    if delta.op == DeltaOp.ADD:
        assert delta.after is not None
        store.restore(delta.after)
    elif delta.op == DeltaOp.UPDATE:
        assert delta.after is not None
        store.replace(delta.after)
    elif delta.op == DeltaOp.DELETE:
        store.discard(delta.record_id)


class ActionLog:
    """Holds at most one undo delta and one redo delta."""

    def __init__(self) -> None:
        self._undo: Delta | None = None
        self._redo: Delta | None = None

    @property
    def can_undo(self) -> bool:
        return self._undo is not None

    @property
    def can_redo(self) -> bool:
        return self._redo is not None

    @property
    def undo_slot(self) -> Delta | None:
        return self._undo.copy() if self._undo else None

    @property
    def redo_slot(self) -> Delta | None:
        return self._redo.copy() if self._redo else None

    def record(self, delta: Delta) -> None:
        """Remember a direct mutation. Any pending redo is discarded."""
        self._undo = delta.copy()
        self._redo = None

    def undo(self, store: RecordStore) -> Delta:
        """Revert the last direct mutation and make it redoable.

        Raises:
            NotFoundError: If there is nothing to undo, or the record it
                refers to is gone. Both slots are left untouched on failure.
            DuplicateRecordError: If a deleted record's id has been reused since.
            StorageQuotaExceeded: If the reverted sequence cannot be saved.
        """
        if self._undo is None:
            raise NotFoundError("Nothing to undo")
        delta = self._undo
        _apply_inverse(store, delta)
        self._redo, self._undo = delta, None
        logger.debug(f"Undid {delta.op.value} of {delta.record_id}")
        return delta.copy()

    def redo(self, store: RecordStore) -> Delta:
        """Re-apply the last undone mutation and make it undoable again.

        Raises:
            NotFoundError: If there is nothing to redo, or the record it
                refers to is gone. Both slots are left untouched on failure.
            StorageQuotaExceeded: If the re-applied sequence cannot be saved.
        """
        if self._redo is None:
            raise NotFoundError("Nothing to redo")
        delta = self._redo
        _apply_forward(store, delta)
        self._undo, self._redo = delta, None
        logger.debug(f"Redid {delta.op.value} of {delta.record_id}")
        return delta.copy()

    def clear(self) -> None:
        self._undo = None
        self._redo = None
