"""
Local filesystem slot storage.

Each slot is one file under ``base_path``; ``/`` in a key makes
subdirectories. Writes go to a temporary sibling first and are swapped in
with ``os.replace``, so a crash never leaves a half-written slot behind.
"""

import os
import tempfile
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path, PurePosixPath

from loguru import logger

from .base import SlotMetadata, SlotStorage, StorageKeyError, StoragePermissionError

_TMP_SUFFIX = ".tmp"


def _check_key(key: str) -> PurePosixPath:
    """Validate a slot key and return it as a relative POSIX path.

    Raises:
        StoragePermissionError: For empty keys, NUL bytes, backslashes, absolute
            or home-relative paths, and any ``..`` component.
    """
    cleaned = key.strip()
    if not cleaned:
        raise StoragePermissionError("Slot key cannot be empty.")
    for bad, why in (("\x00", "a NUL byte"), ("\\", "a backslash; use '/'")):
        if bad in cleaned:
            raise StoragePermissionError(f"Slot key {key!r} contains {why}.")
    path = PurePosixPath(cleaned)
    if path.is_absolute() or cleaned.startswith("~"):
        raise StoragePermissionError(f"Slot key {key!r} must be relative.")
    if ".." in path.parts:
        raise StoragePermissionError(f"Slot key {key!r} escapes the storage directory.")
    return path


class LocalSlotStorage(SlotStorage):
    """Filesystem-backed slot storage."""

    def __init__(self, base_path: str = "~/.daybook-data/slots", quota_bytes: int | None = None):
        super().__init__(quota_bytes=quota_bytes)
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _slot_path(self, key: str) -> Path:
        path = (self.base_path / _check_key(key)).resolve()
        # a symlink inside base_path could still point outside it
        if not path.is_relative_to(self.base_path):
            raise StoragePermissionError(f"Slot key {key!r} resolves outside the storage directory.")
        return path

    def write(self, key: str, data: bytes) -> SlotMetadata:
        path = self._slot_path(key)
        self._check_quota(key, len(data))
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=_TMP_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write slot {key!r}: {e}") from e
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Wrote slot '{key}' ({len(data)} bytes)")
        return self._metadata(key, path)

    def read(self, key: str) -> bytes:
        path = self._slot_path(key)
        if not path.is_file():
            raise StorageKeyError(f"Key not found: {key}")
        try:
            return path.read_bytes()
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read slot {key!r}: {e}") from e

    def exists(self, key: str) -> bool:
        return self._slot_path(key).is_file()

    def delete(self, key: str) -> bool:
        path = self._slot_path(key)
        if not path.is_file():
            return False
        path.unlink()
        logger.debug(f"Deleted slot '{key}'")
        return True

    def keys(self, prefix: str = "") -> Iterator[str]:
        for path in sorted(self.base_path.rglob("*")):
            if not path.is_file() or path.name.endswith(_TMP_SUFFIX):
                continue
            key = path.relative_to(self.base_path).as_posix()
            if key.startswith(prefix):
                yield key

    def size_of(self, key: str) -> int:
        path = self._slot_path(key)
        return path.stat().st_size if path.is_file() else 0

    def get_metadata(self, key: str) -> SlotMetadata:
        path = self._slot_path(key)
        if not path.is_file():
            raise StorageKeyError(f"Key not found: {key}")
        return self._metadata(key, path)

    @staticmethod
    def _metadata(key: str, path: Path) -> SlotMetadata:
        stat = path.stat()
        return SlotMetadata(key=key, size=stat.st_size, modified_at=datetime.fromtimestamp(stat.st_mtime))
