"""
Bibliographic record model
"""

from dataclasses import dataclass, field
from typing import Any

from .schema import get_type_fields, resolve_field

AUTHOR = "author"
EDITOR = "editor"
OTHER = "other"

CREATOR_ROLES = (AUTHOR, EDITOR, OTHER)


@dataclass(frozen=True)
class Creator:
    """Named contributor of a record"""
    name: str
    role: str = AUTHOR

    def __post_init__(self):
        if self.role not in CREATOR_ROLES:
            msg = f"Invalid creator role: {self.role}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "role": self.role}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Creator":
        return cls(name=data["name"], role=data.get("role", AUTHOR))


@dataclass
class Record:
    """Typed bibliographic record"""
    type: str
    fields: dict[str, str] = field(default_factory=dict)
    creators: list[Creator] = field(default_factory=list)
    id: str | None = None
    library_id: int = 1
    attachments: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)
    related: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate type and fields"""
        get_type_fields(self.type)

        fields = self.fields
        self.fields = {}
        for name, value in fields.items():
            self.set_field(name, value)

    @property
    def title(self) -> str:
        return self.get_field("title")

    @property
    def extra(self) -> str:
        return self.get_field("extra")

    @extra.setter
    def extra(self, value: str) -> None:
        self.set_field("extra", value)

    def get_field(self, name: str) -> str:
        """
        Get a field value, following base field aliases

        Args:
            name: Field name (type specific or base)

        Returns:
            Field value or "" when unset or not valid for this type
        """
        resolved = resolve_field(self.type, name)
        if resolved is None:
            return ""
        return self.fields.get(resolved, "")

    def set_field(self, name: str, value: str | None) -> None:
        """
        Set a field value, following base field aliases

        Args:
            name: Field name (type specific or base)
            value: New value; empty clears the field

        Raises:
            ValueError: If the field is not valid for this type
        """
        resolved = resolve_field(self.type, name)
        if resolved is None:
            msg = f"Invalid field '{name}' for record type {self.type}"
            raise ValueError(msg)

        if value:
            self.fields[resolved] = str(value)
        else:
            self.fields.pop(resolved, None)

    def add_related(self, record_id: str) -> None:
        if record_id and record_id != self.id and record_id not in self.related:
            self.related.append(record_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "type": self.type,
            "library_id": self.library_id,
            "fields": dict(self.fields),
            "creators": [c.to_dict() for c in self.creators],
            "attachments": list(self.attachments),
            "collections": list(self.collections),
            "related": list(self.related),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Create from dictionary"""
        return cls(
            type=data["type"],
            fields=dict(data.get("fields", {})),
            creators=[Creator.from_dict(c) for c in data.get("creators", [])],
            id=data.get("id"),
            library_id=data.get("library_id", 1),
            attachments=list(data.get("attachments", [])),
            collections=list(data.get("collections", [])),
            related=list(data.get("related", [])),
        )
