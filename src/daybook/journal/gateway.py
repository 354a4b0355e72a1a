"""Persistence gateway: the record sequence as one JSON slot.

The whole sequence is serialized on every save and written to a single
key of a ``SlotStorage`` backend. Loading is forgiving: a missing,
unreadable or malformed slot yields an empty journal, and every element
goes back through the lenient normalizer.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from daybook.core.config import DEFAULT_STORAGE_KEY
from daybook.core.exceptions import StorageQuotaExceeded
from daybook.core.storage import SlotStorage, StorageError, StorageKeyError, StorageQuotaError

from .models import Record
from .normalize import normalize

_MIB = 1024 * 1024


@dataclass(frozen=True)
class SizeEstimate:
    """Serialized size of a record sequence."""

    bytes: int
    megabytes: float

    @classmethod
    def of(cls, size: int) -> SizeEstimate:
        return cls(bytes=size, megabytes=round(size / _MIB, 2))

    def __str__(self) -> str:
        return f"{self.megabytes:.2f} MB"


def serialize(records: Iterable[Record]) -> bytes:
    payload = [r.to_dict() for r in records]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class PersistenceGateway:
    """Reads and writes the record sequence through a slot storage backend.

    Args:
        storage: Backend holding the slot.
        key: Slot name. Defaults to ``daybook.v1``.
    """

    def __init__(self, storage: SlotStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def save(self, records: Iterable[Record]) -> int:
        """Persist the full sequence. Returns the number of bytes written.

        Raises:
            StorageQuotaExceeded: If the backend has no room for the new payload.
        """
        data = serialize(records)
        try:
            self.storage.write(self.key, data)
        except StorageQuotaError as e:
            raise StorageQuotaExceeded(
                f"Journal needs {SizeEstimate.of(len(data))}; storage is full. "
                "Remove large attachments or export and prune old entries."
            ) from e
        return len(data)

    def load(self) -> list[Record]:
        """Load and normalize the persisted sequence. Never raises."""
        try:
            raw = self.storage.read(self.key)
        except StorageKeyError:
            logger.debug(f"No journal data under '{self.key}', starting empty")
            return []
        except StorageError as e:
            logger.warning(f"Cannot read journal slot '{self.key}': {e}")
            return []

        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Corrupt journal data under '{self.key}': {e}. Starting empty.")
            return []

        if not isinstance(parsed, list):
            logger.warning(f"Journal data under '{self.key}' is not a list; ignoring it")
            return []

        records: list[Record] = []
        seen: set[str] = set()
        for item in parsed:
            record = normalize(item)
            if record is None:
                continue
            if record.id in seen:
                logger.warning(f"Dropping duplicate record id '{record.id}' from stored data")
                continue
            seen.add(record.id)
            records.append(record)

        dropped = len(parsed) - len(records)
        if dropped:
            logger.info(f"Loaded {len(records)} records, dropped {dropped} unusable entries")
        return records

    def estimate_size(self, records: Iterable[Record]) -> SizeEstimate:
        """Informational only; capacity is enforced by ``save``."""
        return SizeEstimate.of(len(serialize(records)))
