"""
Slot storage backends for daybook.

A slot store maps string keys to raw bytes under an optional total quota.
Two backends ship: an in-memory one and a local filesystem one.
"""

from .base import (
    SlotMetadata,
    SlotStorage,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageQuotaError,
)
from .local import LocalSlotStorage
from .memory import MemorySlotStorage

__all__ = [
    "LocalSlotStorage",
    "MemorySlotStorage",
    "SlotMetadata",
    "SlotStorage",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
    "StorageQuotaError",
]
