"""Journal records: model, normalization, storage, views and undo/redo.

Most callers only need ``Journal``::

    from daybook.journal import Journal
    from daybook.core.storage import MemorySlotStorage

    journal = Journal.open(MemorySlotStorage())
    journal.submit({"date": "2024-05-01", "title": "First entry"})
"""

from .context import Journal
from .gateway import PersistenceGateway, SizeEstimate
from .history import ActionLog
from .models import MAX_ATTACHMENT_BYTES, Attachment, Delta, DeltaOp, Mood, Record
from .normalize import is_valid_attachment, normalize, validate_submission
from .stats import JournalStats, summarize
from .store import RecordStore
from .transfer import ImportReport, export_records, import_records
from .view import FilterCriteria, ViewState, filter_records, paginate, tag_vocabulary

__all__ = [
    "MAX_ATTACHMENT_BYTES",
    "ActionLog",
    "Attachment",
    "Delta",
    "DeltaOp",
    "FilterCriteria",
    "ImportReport",
    "Journal",
    "JournalStats",
    "Mood",
    "PersistenceGateway",
    "Record",
    "RecordStore",
    "SizeEstimate",
    "ViewState",
    "export_records",
    "filter_records",
    "import_records",
    "is_valid_attachment",
    "normalize",
    "paginate",
    "summarize",
    "tag_vocabulary",
    "validate_submission",
]
