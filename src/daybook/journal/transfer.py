"""Import and export.

Import is lenient like loading: each element is normalized, and problems
with individual entries are counted rather than raised. Only a payload
that is not a list at all is rejected.

Export produces either an indented JSON dump that round-trips through
import, or a flat CSV for spreadsheets with attachment payloads left out.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from daybook.core.exceptions import ImportFormatError

from .models import Record
from .normalize import is_oversized_attachment, normalize
from .store import RecordStore

CSV_COLUMNS = ["id", "date", "title", "content", "mood", "tags", "attachmentsCount"]
EXPORT_FORMATS = ("json", "csv")


@dataclass(frozen=True)
class ImportReport:
    """Outcome of an import.

    Attributes:
        added: Records appended to the store.
        skipped: Entries whose id already existed.
        stripped: Attachments dropped for exceeding 1 MiB.
    """

    added: int = 0
    skipped: int = 0
    stripped: int = 0

    def __str__(self) -> str:
        text = f"Imported {self.added} new, skipped {self.skipped} duplicate"
        if self.stripped:
            text += f", removed {self.stripped} oversized attachment(s)"
        return text + "."


def parse_payload(payload: Any) -> list[Any]:
    """Decode *payload* (bytes, JSON text, or an already-parsed value) into a list.

    Raises:
        ImportFormatError: If the text is not JSON or the top level is not a list.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"Import file is not UTF-8 text: {e}") from e
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Import file is not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise ImportFormatError(f"Import data must be a list of records, got {type(payload).__name__}")
    return payload


def _count_oversized(item: Any) -> int:
    if not isinstance(item, Mapping):
        return 0
    attachments = item.get("attachments")
    if not isinstance(attachments, (list, tuple)):
        return 0
    return sum(1 for a in attachments if is_oversized_attachment(a))


def import_records(store: RecordStore, payload: Any) -> ImportReport:
    """Merge record-like entries into *store*, persisting once.

    Entries that are not objects are ignored. Entries whose id is already in
    the store, or appeared earlier in the same payload, are skipped.

    Raises:
        ImportFormatError: See ``parse_payload``.
        StorageQuotaExceeded: If the merged journal does not fit; nothing is added.
    """
    items = parse_payload(payload)
    known = set(store.ids())
    accepted: list[Record] = []
    skipped = stripped = 0

    for item in items:
        record = normalize(item)
        if record is None:
            continue
        if record.id in known:
            skipped += 1
            continue
        # normalize() already dropped them; count them from the raw entry
        stripped += _count_oversized(item)
        known.add(record.id)
        accepted.append(record)

    if accepted:
        store.extend(accepted)

    report = ImportReport(added=len(accepted), skipped=skipped, stripped=stripped)
    logger.info(str(report))
    return report


def _csv_row(record: Record) -> list[str]:
    return [
        record.id,
        record.date.isoformat(),
        record.title,
        record.content,
        record.mood.value,
        ";".join(record.tags),
        str(len(record.attachments)),
    ]


def export_records(records: Iterable[Record], fmt: str = "json") -> str:
    """Render *records* as ``json`` or ``csv`` text.

    Raises:
        ValueError: For an unknown format.
    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
    if fmt == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        writer.writerow(CSV_COLUMNS)
        writer.writerows(_csv_row(r) for r in records)
        return buffer.getvalue()
    raise ValueError(f"Unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")
