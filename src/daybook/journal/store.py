"""The canonical, sorted record sequence.

The store owns every live record. Callers only ever receive clones, so
nothing outside the store can mutate a record behind its back.

Every mutation follows the same path: normalize the input, build the next
sequence, persist it, and only then swap it in. If persistence fails the
previous sequence is still in place, so memory never runs ahead of what
was last saved.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from loguru import logger

from daybook.core.exceptions import DuplicateRecordError, NotFoundError

from .gateway import PersistenceGateway
from .models import Delta, DeltaOp, Record, new_record_id
from .normalize import normalize


def sort_records(records: list[Record]) -> list[Record]:
    """Sort newest date first. Stable, so equal dates keep their relative order."""
    return sorted(records, key=lambda r: r.date, reverse=True)


def _as_mapping(partial: Mapping[str, Any] | Record) -> dict[str, Any]:
    if isinstance(partial, Record):
        return partial.to_dict()
    if not isinstance(partial, Mapping):
        raise TypeError(f"Expected a mapping or Record, got {type(partial).__name__}")
    return dict(partial)


class RecordStore:
    """In-memory record sequence kept in sync with a persistence gateway.

    Example::

        store = RecordStore.open(PersistenceGateway(MemorySlotStorage()))
        delta = store.add({"date": "2024-01-02", "title": "Walk"})
        store.find(delta.record_id)
    """

    def __init__(self, gateway: PersistenceGateway, records: Iterable[Record] = ()):
        self._gateway = gateway
        self._records: list[Record] = sort_records([r.clone() for r in records])
        self._check_unique(self._records)

    @classmethod
    def open(cls, gateway: PersistenceGateway) -> RecordStore:
        """Create a store from whatever the gateway has persisted."""
        return cls(gateway, gateway.load())

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @staticmethod
    def _check_unique(records: list[Record]) -> None:
        seen: set[str] = set()
        for r in records:
            if r.id in seen:
                raise DuplicateRecordError(f"Duplicate record id: {r.id}")
            seen.add(r.id)

    def _index(self, record_id: str) -> int:
        for i, r in enumerate(self._records):
            if r.id == record_id:
                return i
        raise NotFoundError(f"Record not found: {record_id}")

    def _commit(self, candidate: list[Record], action: str) -> None:
        """Persist *candidate* and make it the live sequence, or change nothing."""
        ordered = sort_records(candidate)
        try:
            self._gateway.save(ordered)
        except Exception as e:
            logger.warning(f"Rolled back {action}: {e}")
            raise
        self._records = ordered
        logger.debug(f"{action} committed ({len(ordered)} records)")

    # -- Direct mutations (return deltas) -----------------------------------

    def add(self, partial: Mapping[str, Any] | Record) -> Delta:
        """Insert a new record, generating an id if the input has none.

        Raises:
            DuplicateRecordError: If the id is already taken.
            StorageQuotaExceeded: If the new sequence does not fit; nothing changes.
        """
        data = _as_mapping(partial)
        if not data.get("id"):
            data["id"] = new_record_id()
        record = normalize(data)
        assert record is not None
        if record.id in self:
            raise DuplicateRecordError(f"Record already exists: {record.id}")

        self._commit([record, *self._records], f"add {record.id}")
        return Delta(op=DeltaOp.ADD, after=record.clone())

    def update(self, record_id: str, partial: Mapping[str, Any] | Record) -> Delta:
        """Replace a record's fields wholesale, keeping its id.

        Raises:
            NotFoundError: If no record has *record_id*.
            StorageQuotaExceeded: If the new sequence does not fit; nothing changes.
        """
        idx = self._index(record_id)
        data = _as_mapping(partial)
        data["id"] = record_id
        record = normalize(data)
        assert record is not None

        before = self._records[idx].clone()
        candidate = list(self._records)
        candidate[idx] = record
        self._commit(candidate, f"update {record_id}")
        return Delta(op=DeltaOp.UPDATE, before=before, after=record.clone())

    def remove(self, record_id: str) -> Delta:
        """Delete a record.

        Raises:
            NotFoundError: If no record has *record_id*.
        """
        idx = self._index(record_id)
        before = self._records[idx].clone()
        candidate = self._records[:idx] + self._records[idx + 1 :]
        self._commit(candidate, f"remove {record_id}")
        return Delta(op=DeltaOp.DELETE, before=before)

    # -- Snapshot re-application (used by ActionLog) ------------------------

    def restore(self, snapshot: Record) -> None:
        """Reinsert a previously removed record."""
        if snapshot.id in self:
            raise DuplicateRecordError(f"Record already exists: {snapshot.id}")
        self._commit([snapshot.clone(), *self._records], f"restore {snapshot.id}")

    def replace(self, snapshot: Record) -> None:
        """Overwrite the record sharing *snapshot*'s id."""
        idx = self._index(snapshot.id)
        candidate = list(self._records)
        candidate[idx] = snapshot.clone()
        self._commit(candidate, f"replace {snapshot.id}")

    def discard(self, record_id: str) -> None:
        """Remove a record without producing a delta."""
        idx = self._index(record_id)
        self._commit(self._records[:idx] + self._records[idx + 1 :], f"discard {record_id}")

    def extend(self, records: Iterable[Record]) -> None:
        """Append many records and persist once. Ids must be new."""
        incoming = [r.clone() for r in records]
        candidate = [*self._records, *incoming]
        self._check_unique(candidate)
        self._commit(candidate, f"extend +{len(incoming)}")

    # -- Queries ------------------------------------------------------------

    def find(self, record_id: str) -> Record | None:
        for r in self._records:
            if r.id == record_id:
                return r.clone()
        return None

    def all(self) -> tuple[Record, ...]:
        """Clones of every record, newest date first."""
        return tuple(r.clone() for r in self._records)

    def ids(self) -> list[str]:
        return [r.id for r in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return any(r.id == record_id for r in self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.all())
