"""
Abstract base class for byte-slot storage backends.

A slot store is a flat key-value map of raw bytes with an optional total
capacity, modelled on browser ``localStorage``. The journal keeps its whole
record sequence in a single slot.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime


@dataclass
class SlotMetadata:
    """Metadata for a stored slot."""

    key: str
    size: int
    modified_at: datetime


class SlotStorage(ABC):
    """Abstract base class for slot storage backends.

    Args:
        quota_bytes: Total capacity across all slots. ``None`` means unlimited.
    """

    def __init__(self, quota_bytes: int | None = None):
        self.quota_bytes = quota_bytes

    @abstractmethod
    def write(self, key: str, data: bytes) -> SlotMetadata:
        """Replace the contents of a slot. Raises StorageQuotaError if over capacity."""

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Read a slot. Raises StorageKeyError if not found."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if a slot exists."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a slot. Returns True if deleted, False if it didn't exist."""

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterator[str]:
        """Iterate over slot keys with an optional prefix filter."""

    @abstractmethod
    def size_of(self, key: str) -> int:
        """Stored size of one slot in bytes, 0 if absent."""

    def usage(self) -> int:
        """Total bytes stored across all slots."""
        return sum(self.size_of(key) for key in self.keys())

    def remaining(self) -> int | None:
        if self.quota_bytes is None:
            return None
        return max(0, self.quota_bytes - self.usage())

    def _check_quota(self, key: str, new_size: int) -> None:
        """Raise StorageQuotaError if replacing *key* with *new_size* bytes would overflow."""
        if self.quota_bytes is None:
            return
        projected = self.usage() - self.size_of(key) + new_size
        if projected > self.quota_bytes:
            raise StorageQuotaError(
                f"Writing {new_size} bytes to '{key}' would use {projected} of {self.quota_bytes} bytes."
            )


class StorageError(Exception):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key doesn't exist."""


class StoragePermissionError(StorageError):
    """Raised when storage operation is not permitted."""


class StorageQuotaError(StorageError):
    """Raised when storage quota is exceeded."""
