"""Tests for daybook.journal.transfer — import and export."""

import csv
import io
import json

import pytest

from daybook.core.exceptions import ImportFormatError, StorageQuotaExceeded
from daybook.core.storage import MemorySlotStorage
from daybook.journal import PersistenceGateway, RecordStore
from daybook.journal.transfer import CSV_COLUMNS, ImportReport, export_records, import_records, parse_payload

TWO_MIB = 2 * 1024 * 1024


class TestParsePayload:
    def test_list_passes_through(self):
        assert parse_payload([{"id": "a"}]) == [{"id": "a"}]

    def test_json_text(self):
        assert parse_payload('[{"id": "a"}]') == [{"id": "a"}]

    def test_bytes_with_bom(self):
        assert parse_payload(b'\xef\xbb\xbf[{"id": "a"}]') == [{"id": "a"}]

    @pytest.mark.parametrize("payload", ['{"id": "a"}', "null", "42", {"id": "a"}, None])
    def test_top_level_must_be_list(self, payload):
        with pytest.raises(ImportFormatError):
            parse_payload(payload)

    def test_invalid_json(self):
        with pytest.raises(ImportFormatError):
            parse_payload("[{oops")

    def test_not_utf8(self):
        with pytest.raises(ImportFormatError):
            parse_payload(b"\xff\xfe[]")


@pytest.mark.smoke
class TestImport:
    def test_skip_add_strip_scenario(self, store, make_image):
        store.add({"id": "X", "date": "2024-01-15", "title": "existing"})
        payload = [
            {"id": "X", "date": "2024-01-15", "title": "existing, again"},
            {"id": "Y", "date": "2024-02-01", "title": "new"},
            {"id": "Z", "title": "with picture", "attachments": [make_image(TWO_MIB)]},
        ]

        report = import_records(store, payload)

        assert report == ImportReport(added=2, skipped=1, stripped=1)
        assert sorted(store.ids()) == ["X", "Y", "Z"]
        assert store.find("X").title == "existing"
        assert store.find("Z").attachments == []

    def test_duplicates_within_payload(self, store):
        report = import_records(store, [{"id": "a", "title": "1"}, {"id": "a", "title": "2"}])
        assert report.added == 1
        assert report.skipped == 1
        assert store.find("a").title == "1"

    def test_non_objects_are_ignored(self, store):
        report = import_records(store, ["text", 3, None, {"id": "ok"}])
        assert report == ImportReport(added=1, skipped=0, stripped=0)

    def test_entries_are_normalized(self, store):
        import_records(store, [{"id": "n", "date": "bad", "mood": "紧张", "tags": ["a", "a"]}])
        record = store.find("n")
        assert record.mood.value == "tense"
        assert record.tags == ["a"]

    def test_missing_ids_are_generated(self, store):
        report = import_records(store, [{"title": "one"}, {"title": "two"}])
        assert report.added == 2
        assert len(set(store.ids())) == 2

    def test_skipped_entries_do_not_count_stripped(self, store, make_image):
        store.add({"id": "X", "title": "x"})
        report = import_records(store, [{"id": "X", "attachments": [make_image(TWO_MIB)]}])
        assert report.stripped == 0

    def test_persists_once(self, store, gateway):
        import_records(store, [{"id": "a"}, {"id": "b"}])
        assert sorted(r.id for r in gateway.load()) == ["a", "b"]

    def test_bad_payload_changes_nothing(self, store):
        store.add({"id": "keep", "title": "x"})
        with pytest.raises(ImportFormatError):
            import_records(store, '{"id": "a"}')
        assert store.ids() == ["keep"]

    def test_over_quota_adds_nothing(self):
        store = RecordStore.open(PersistenceGateway(MemorySlotStorage(quota_bytes=300)))
        store.add({"id": "keep", "title": "x"})
        with pytest.raises(StorageQuotaExceeded):
            import_records(store, [{"id": f"n{i}", "content": "x" * 100} for i in range(10)])
        assert store.ids() == ["keep"]

    def test_lone_surrogate_is_stored_safely(self, store, gateway):
        report = import_records(store, '[{"id": "s", "date": "2024-01-01", "title": "\\ud800", "tags": ["\\udfff"]}]')
        assert report.added == 1
        assert gateway.load()[0].title == "?"
        assert store.find("s").tags == ["?"]

    def test_report_text(self):
        assert str(ImportReport(added=2, skipped=1)) == "Imported 2 new, skipped 1 duplicate."
        assert "removed 3 oversized" in str(ImportReport(added=1, stripped=3))


class TestExport:
    @pytest.fixture
    def filled(self, store, make_image):
        store.add(
            {
                "id": "a",
                "date": "2024-01-02",
                "title": 'Says "hi", loudly',
                "content": "line one\nline two",
                "mood": "happy",
                "tags": ["x", "y"],
                "attachments": [make_image(10)],
            }
        )
        store.add({"id": "b", "date": "2024-01-01", "title": "Plain"})
        return store

    def test_json_round_trip(self, filled):
        text = export_records(filled.all(), "json")
        assert json.loads(text)[0]["id"] == "a"

        fresh = RecordStore.open(PersistenceGateway(MemorySlotStorage()))
        report = import_records(fresh, text)
        assert report.added == 2
        assert fresh.all() == filled.all()

    def test_json_keeps_non_ascii(self, store):
        store.add({"id": "u", "title": "晴天"})
        assert "晴天" in export_records(store.all(), "json")

    def test_csv_columns_and_quoting(self, filled):
        text = export_records(filled.all(), "csv")
        header = text.splitlines()[0]
        assert header == ",".join(CSV_COLUMNS)
        assert '"Says ""hi"", loudly"' in text
        assert '"line one\nline two"' in text

        rows = list(csv.DictReader(io.StringIO(text)))
        assert rows[0]["tags"] == "x;y"
        assert rows[0]["attachmentsCount"] == "1"
        assert rows[1]["title"] == "Plain"
        assert rows[1]["attachmentsCount"] == "0"

    def test_csv_excludes_payloads(self, filled):
        assert "base64" not in export_records(filled.all(), "csv")

    def test_format_is_case_insensitive(self, filled):
        assert export_records(filled.all(), "CSV").startswith("id,")

    def test_empty(self):
        assert export_records([], "json") == "[]"
        assert export_records([], "csv") == ",".join(CSV_COLUMNS) + "\n"

    def test_unknown_format(self, filled):
        with pytest.raises(ValueError):
            export_records(filled.all(), "xml")
