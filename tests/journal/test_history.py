"""Tests for daybook.journal.history: single-step undo and redo."""

import pytest

from daybook.core.exceptions import DuplicateRecordError, NotFoundError
from daybook.journal.history import ActionLog


@pytest.fixture
def log():
    return ActionLog()


def _full(**overrides):
    fields = {
        "id": "r",
        "date": "2024-04-01",
        "title": "Original",
        "content": "body",
        "mood": "low",
        "tags": ["x", "y"],
        "attachments": [{"name": "p.png", "type": "image/png", "size": 3, "dataUrl": "data:image/png;base64,AAAA"}],
    }
    fields.update(overrides)
    return fields


class TestEmpty:
    def test_nothing_to_undo(self, log, store):
        assert not log.can_undo
        with pytest.raises(NotFoundError):
            log.undo(store)

    def test_nothing_to_redo(self, log, store):
        assert not log.can_redo
        with pytest.raises(NotFoundError):
            log.redo(store)


class TestAdd:
    def test_undo_removes_redo_restores(self, log, store):
        log.record(store.add(_full()))
        original = store.find("r")

        log.undo(store)
        assert "r" not in store
        assert log.can_redo and not log.can_undo

        log.redo(store)
        assert store.find("r") == original
        assert log.can_undo and not log.can_redo


class TestUpdate:
    def test_undo_restores_exact_snapshot(self, log, store):
        store.add(_full())
        before = store.find("r")
        log.record(store.update("r", _full(title="Edited", tags=["z"], attachments=[])))

        log.undo(store)
        assert store.find("r") == before

        log.redo(store)
        after = store.find("r")
        assert after.title == "Edited"
        assert after.tags == ["z"]
        assert after.attachments == []


class TestDelete:
    def test_undo_reinserts_with_attachments(self, log, store):
        store.add(_full())
        before = store.find("r")
        log.record(store.remove("r"))
        assert "r" not in store

        log.undo(store)
        restored = store.find("r")
        assert restored == before
        assert len(restored.attachments) == 1

        log.redo(store)
        assert "r" not in store


class TestSlots:
    def test_new_mutation_clears_redo(self, log, store):
        log.record(store.add(_full(id="a")))
        log.undo(store)
        assert log.can_redo
        log.record(store.add(_full(id="b")))
        assert not log.can_redo
        assert log.undo_slot.record_id == "b"

    def test_only_one_level(self, log, store):
        log.record(store.add(_full(id="a")))
        log.record(store.add(_full(id="b")))
        log.undo(store)
        assert "a" in store
        with pytest.raises(NotFoundError):
            log.undo(store)

    def test_slots_are_copies(self, log, store):
        delta = store.add(_full())
        log.record(delta)
        delta.after.tags.append("mutated")
        log.undo_slot.after.tags.append("also mutated")
        log.undo(store)
        log.redo(store)
        assert store.find("r").tags == ["x", "y"]

    def test_failed_undo_leaves_slots(self, log, store):
        log.record(store.remove(store.add(_full()).record_id))
        # the id gets reused before the undo
        store.add(_full(title="Imposter"))
        with pytest.raises(DuplicateRecordError):
            log.undo(store)
        assert log.can_undo
        assert not log.can_redo

    def test_undo_of_vanished_record(self, log, store):
        log.record(store.add(_full()))
        store.remove("r")
        with pytest.raises(NotFoundError):
            log.undo(store)
        assert log.can_undo

    def test_clear(self, log, store):
        log.record(store.add(_full()))
        log.clear()
        assert not log.can_undo and not log.can_redo
