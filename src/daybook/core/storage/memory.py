"""In-process slot storage.

Behaves like a browser's ``localStorage``: a dict of byte strings with a
fixed total capacity. Useful for tests and for throwaway sessions.
"""

from collections.abc import Iterator
from datetime import datetime

from .base import SlotMetadata, SlotStorage, StorageKeyError


class MemorySlotStorage(SlotStorage):
    """Dict-backed slot storage with an optional quota."""

    def __init__(self, quota_bytes: int | None = None):
        super().__init__(quota_bytes=quota_bytes)
        self._slots: dict[str, bytes] = {}
        self._modified: dict[str, datetime] = {}

    def write(self, key: str, data: bytes) -> SlotMetadata:
        self._check_quota(key, len(data))
        self._slots[key] = bytes(data)
        self._modified[key] = datetime.now()
        return SlotMetadata(key=key, size=len(data), modified_at=self._modified[key])

    def read(self, key: str) -> bytes:
        try:
            return self._slots[key]
        except KeyError:
            raise StorageKeyError(f"Key not found: {key}") from None

    def exists(self, key: str) -> bool:
        return key in self._slots

    def delete(self, key: str) -> bool:
        self._modified.pop(key, None)
        return self._slots.pop(key, None) is not None

    def keys(self, prefix: str = "") -> Iterator[str]:
        for key in list(self._slots):
            if key.startswith(prefix):
                yield key

    def size_of(self, key: str) -> int:
        return len(self._slots.get(key, b""))
