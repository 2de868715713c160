"""
Record store module
Store contract used by the orchestrator, with in-memory and JSON file stores
"""

import copy
import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from ..utils.file_utils import read_json_file, write_json_file
from .errors import PersistenceError
from .record import Record


class RecordStore(Protocol):
    """Persistence of records and their attachments"""

    def get(self, record_id: str) -> Record: ...

    def create(self, record_type: str) -> Record: ...

    def save(self, record: Record) -> str: ...

    def erase(self, record: Record) -> None: ...

    def attachments(self, record_id: str) -> list[str]: ...

    def reparent_attachment(self, attachment_id: str, parent_id: str) -> None: ...


@dataclass
class Attachment:
    """File or link attached to a record"""
    id: str
    parent_id: str
    title: str = ""
    path: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "parent_id": self.parent_id, "title": self.title, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        return cls(
            id=data["id"],
            parent_id=data["parent_id"],
            title=data.get("title", ""),
            path=data.get("path", ""),
        )


def new_key() -> str:
    """Random 8 character record key"""
    return uuid.uuid4().hex[:8].upper()


class InMemoryRecordStore:
    """
    Dict backed record store

    A saved record is kept as a snapshot of its dict form, so fields,
    creators and relations are committed together and later in-place edits
    are invisible until the next save.
    """

    def __init__(self):
        self._records: dict[str, dict[str, Any]] = {}
        self._attachments: dict[str, Attachment] = {}

    def get(self, record_id: str) -> Record:
        """
        Load a record

        Raises:
            KeyError: If no record has this id
        """
        record = Record.from_dict(copy.deepcopy(self._records[record_id]))
        record.attachments = self.attachments(record_id)
        return record

    def records(self) -> list[Record]:
        """All stored records in insertion order"""
        return [self.get(record_id) for record_id in self._records]

    def create(self, record_type: str) -> Record:
        """Create and save an empty record"""
        record = Record(type=record_type)
        self.save(record)
        return record

    def save(self, record: Record) -> str:
        """
        Commit a record

        Args:
            record: Record to commit; gets an id if it has none

        Returns:
            Record id
        """
        if record.id is None:
            record.id = new_key()

        snapshot = record.to_dict()
        snapshot["attachments"] = []
        self._records[record.id] = snapshot
        self._commit()

        logger.debug(f"Saved record {record.id}: {record.title}")
        return record.id

    def erase(self, record: Record) -> None:
        """Delete a record and its attachments"""
        if record.id is None or record.id not in self._records:
            return

        del self._records[record.id]
        for attachment_id in self.attachments(record.id):
            del self._attachments[attachment_id]
        self._commit()

        logger.debug(f"Erased record {record.id}")

    def add_attachment(self, parent_id: str, title: str = "", path: str = "") -> Attachment:
        """Attach a new attachment to a saved record"""
        if parent_id not in self._records:
            msg = f"Cannot attach to unsaved record {parent_id}"
            raise PersistenceError(msg)

        attachment = Attachment(id=new_key(), parent_id=parent_id, title=title, path=path)
        self._attachments[attachment.id] = attachment
        self._commit()
        return attachment

    def attachments(self, record_id: str) -> list[str]:
        """Ids of the attachments of a record"""
        return [a.id for a in self._attachments.values() if a.parent_id == record_id]

    def reparent_attachment(self, attachment_id: str, parent_id: str) -> None:
        """
        Move an attachment to another record

        Raises:
            PersistenceError: If the attachment or the new parent does not exist
        """
        if attachment_id not in self._attachments:
            msg = f"Unknown attachment {attachment_id}"
            raise PersistenceError(msg)
        if parent_id not in self._records:
            msg = f"Cannot move attachment {attachment_id} to unsaved record {parent_id}"
            raise PersistenceError(msg)

        self._attachments[attachment_id].parent_id = parent_id
        self._commit()

    def _commit(self) -> None:
        """Hook for durable stores"""

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": list(self._records.values()),
            "attachments": [a.to_dict() for a in self._attachments.values()],
        }


class JsonRecordStore(InMemoryRecordStore):
    """Record store persisted to a JSON library file on every commit"""

    def __init__(self, library_file: Path):
        super().__init__()
        self.library_file = Path(library_file)

        if self.library_file.exists():
            self._load()

    def _load(self) -> None:
        """
        Read the library file

        Raises:
            PersistenceError: If the file is unreadable or malformed
        """
        try:
            data = read_json_file(self.library_file)
            for item in data.get("records", []):
                record = Record.from_dict(item)
                if record.id is None:
                    record.id = new_key()
                snapshot = record.to_dict()
                snapshot["attachments"] = []
                self._records[record.id] = snapshot
            for item in data.get("attachments", []):
                attachment = Attachment.from_dict(item)
                self._attachments[attachment.id] = attachment
        except (OSError, json.JSONDecodeError, AttributeError, KeyError, ValueError) as e:
            msg = f"Cannot load library {self.library_file}: {e}"
            raise PersistenceError(msg) from e

        logger.debug(f"Loaded {len(self._records)} records from {self.library_file}")

    def _commit(self) -> None:
        try:
            write_json_file(self.library_file, self.to_dict())
        except OSError as e:
            msg = f"Cannot write library {self.library_file}: {e}"
            raise PersistenceError(msg) from e
