"""
Test suite for record stores
"""

import json

import pytest

from bibrank.core.errors import PersistenceError
from bibrank.core.record import Creator, Record
from bibrank.core.record_store import InMemoryRecordStore, JsonRecordStore


class TestInMemoryRecordStore:
    """Test InMemoryRecordStore"""

    def test_save_assigns_id(self, store, journal_record):
        record_id = store.save(journal_record)

        assert record_id == journal_record.id
        assert len(record_id) == 8

    def test_get_returns_snapshot(self, store, journal_record):
        """Test later in-place edits are invisible until saved"""
        store.save(journal_record)
        journal_record.set_field("volume", "8")

        assert store.get(journal_record.id).get_field("volume") == "7"

        store.save(journal_record)

        assert store.get(journal_record.id).get_field("volume") == "8"

    def test_get_unknown(self, store):
        with pytest.raises(KeyError):
            store.get("NOPE0000")

    def test_create(self, store):
        record = store.create("book")

        assert record.id is not None
        assert store.get(record.id).type == "book"

    def test_records_in_order(self, store):
        first = store.create("book")
        second = store.create("report")

        assert [r.id for r in store.records()] == [first.id, second.id]

    def test_erase(self, store, journal_record):
        store.save(journal_record)
        attachment = store.add_attachment(journal_record.id, title="PDF")

        store.erase(journal_record)

        assert store.records() == []
        assert store.attachments(journal_record.id) == []
        with pytest.raises(PersistenceError):
            store.reparent_attachment(attachment.id, "ANYWHERE")

    def test_erase_unsaved_is_noop(self, store, journal_record):
        store.erase(journal_record)

        assert store.records() == []

    def test_attachments(self, store, journal_record):
        store.save(journal_record)
        attachment = store.add_attachment(journal_record.id, title="PDF", path="/tmp/x.pdf")

        assert store.attachments(journal_record.id) == [attachment.id]
        assert store.get(journal_record.id).attachments == [attachment.id]

    def test_add_attachment_to_unsaved(self, store):
        with pytest.raises(PersistenceError):
            store.add_attachment("NOPE0000")

    def test_reparent_attachment(self, store, journal_record):
        store.save(journal_record)
        attachment = store.add_attachment(journal_record.id)
        other = store.create("conferencePaper")

        store.reparent_attachment(attachment.id, other.id)

        assert store.attachments(journal_record.id) == []
        assert store.attachments(other.id) == [attachment.id]

    def test_reparent_to_unsaved_record(self, store, journal_record):
        store.save(journal_record)
        attachment = store.add_attachment(journal_record.id)

        with pytest.raises(PersistenceError, match="unsaved"):
            store.reparent_attachment(attachment.id, "NOPE0000")

        assert store.attachments(journal_record.id) == [attachment.id]


class TestJsonRecordStore:
    """Test JsonRecordStore persistence"""

    def test_new_library(self, temp_dir):
        store = JsonRecordStore(temp_dir / "library.json")

        assert store.records() == []
        assert not (temp_dir / "library.json").exists()

    def test_commit_writes_file(self, temp_dir, journal_record):
        library = temp_dir / "library.json"
        store = JsonRecordStore(library)

        store.save(journal_record)
        store.add_attachment(journal_record.id, title="PDF")

        data = json.loads(library.read_text(encoding="utf-8"))
        assert data["records"][0]["fields"]["title"] == "Deep Ranking Networks"
        assert data["attachments"][0]["parent_id"] == journal_record.id

    def test_reload(self, temp_dir, journal_record):
        library = temp_dir / "library.json"
        store = JsonRecordStore(library)
        store.save(journal_record)
        attachment = store.add_attachment(journal_record.id)

        reloaded = JsonRecordStore(library).get(journal_record.id)

        assert reloaded.title == journal_record.title
        assert reloaded.creators == [Creator("Alice Smith")]
        assert reloaded.attachments == [attachment.id]

    def test_load_assigns_missing_ids(self, temp_dir):
        library = temp_dir / "library.json"
        library.write_text(json.dumps({
            "records": [{"type": "book", "fields": {"title": "No Id"}}],
        }), encoding="utf-8")

        records = JsonRecordStore(library).records()

        assert len(records) == 1
        assert records[0].id is not None
        assert records[0].title == "No Id"

    def test_malformed_library(self, temp_dir):
        library = temp_dir / "library.json"
        library.write_text("{broken", encoding="utf-8")

        with pytest.raises(PersistenceError, match="Cannot load library"):
            JsonRecordStore(library)

    def test_invalid_record(self, temp_dir):
        library = temp_dir / "library.json"
        library.write_text(json.dumps({"records": [{"type": "podcast"}]}), encoding="utf-8")

        with pytest.raises(PersistenceError):
            JsonRecordStore(library)

    def test_write_failure(self, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = JsonRecordStore(blocker / "library.json")

        with pytest.raises(PersistenceError, match="Cannot write library"):
            store.save(Record(type="book"))
