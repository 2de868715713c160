"""
BibTeX parser module
Turns BibTeX text into bibliographic records
"""

import re
from typing import Protocol

import bibtexparser
from bibtexparser.bparser import BibTexParser
from loguru import logger

from ..core.errors import ParseError
from ..core.record import AUTHOR, EDITOR, OTHER, Creator, Record
from ..core.schema import resolve_field

ENTRY_TYPES = {
    "article": "journalArticle",
    "inproceedings": "conferencePaper",
    "conference": "conferencePaper",
    "book": "book",
    "incollection": "bookSection",
    "inbook": "bookSection",
    "phdthesis": "thesis",
    "mastersthesis": "thesis",
    "techreport": "report",
    "software": "computerProgram",
}
DEFAULT_RECORD_TYPE = "document"

# BibTeX field -> record field (base names are resolved per record type)
FIELD_MAP = {
    "title": "title",
    "journal": "publicationTitle",
    "booktitle": "publicationTitle",
    "volume": "volume",
    "publisher": "publisher",
    "school": "publisher",
    "institution": "publisher",
    "address": "place",
    "doi": "DOI",
    "isbn": "ISBN",
    "issn": "ISSN",
    "url": "url",
    "abstract": "abstractNote",
    "edition": "edition",
    "series": "series",
    "language": "language",
}

CREATOR_FIELDS = {
    "author": AUTHOR,
    "editor": EDITOR,
    "translator": OTHER,
}


class RecordParser(Protocol):
    """Parser of fetched bibliographic content"""

    def parse(self, text: str) -> list[Record]: ...


def clean_value(value: str) -> str:
    """Strip TeX grouping braces and collapse whitespace"""
    value = re.sub(r"(?<!\\)[{}]", "", value)
    value = value.replace("\\&", "&").replace("\\%", "%").replace("\\_", "_")
    return re.sub(r"\s+", " ", value).strip()


def parse_creators(value: str, role: str) -> list[Creator]:
    """
    Split a BibTeX name list into creators

    Args:
        value: "Last, First and First Last and ..." string
        role: Creator role for every name

    Returns:
        List of creators in the listed order
    """
    creators = []
    for name in re.split(r"\s+and\s+", clean_value(value)):
        name = name.strip()
        if not name or name.lower() == "others":
            continue

        # "Last, First" -> "First Last"
        if "," in name:
            last, first = (part.strip() for part in name.split(",", 1))
            name = f"{first} {last}".strip()

        creators.append(Creator(name=name, role=role))

    return creators


class BibTeXRecordParser:
    """bibtexparser based BibTeX -> Record parser"""

    def parse(self, text: str) -> list[Record]:
        """
        Parse BibTeX text into records

        Args:
            text: BibTeX content

        Returns:
            Records in entry order (transient, without id)

        Raises:
            ParseError: If the content holds no BibTeX entry
        """
        if not text or "@" not in text:
            msg = "Content is not BibTeX"
            raise ParseError(msg)

        try:
            parser = BibTexParser(common_strings=True, ignore_nonstandard_types=False)
            db = bibtexparser.loads(text, parser)
        except Exception as e:
            msg = f"BibTeX parsing failed: {e}"
            raise ParseError(msg) from e

        if not db.entries:
            msg = "No BibTeX entry found"
            raise ParseError(msg)

        return [self.entry_to_record(entry) for entry in db.entries]

    def entry_to_record(self, entry: dict[str, str]) -> Record:
        """Convert one bibtexparser entry dict into a record"""
        entry_type = entry.get("ENTRYTYPE", "").lower()
        record = Record(type=ENTRY_TYPES.get(entry_type, DEFAULT_RECORD_TYPE))

        for key, value in entry.items():
            key = key.lower()
            if key in ("entrytype", "id") or not isinstance(value, str):
                continue

            if key in CREATOR_FIELDS:
                record.creators.extend(parse_creators(value, CREATOR_FIELDS[key]))
                continue

            self._set_mapped_field(record, key, clean_value(value))

        date = self._build_date(entry)
        if date:
            record.set_field("date", date)

        logger.debug(f"Parsed BibTeX entry {entry.get('ID', '?')} as {record.type}: {record.title}")
        return record

    def _set_mapped_field(self, record: Record, key: str, value: str) -> None:
        if not value:
            return

        if key == "number":
            field_name = "issue" if resolve_field(record.type, "issue") else "number"
        elif key == "pages":
            field_name = "pages"
            value = value.replace("--", "-")
        else:
            field_name = FIELD_MAP.get(key)

        if field_name and resolve_field(record.type, field_name):
            record.set_field(field_name, value)

    def _build_date(self, entry: dict[str, str]) -> str:
        year = clean_value(entry.get("year", ""))
        month = clean_value(entry.get("month", ""))
        if year and month:
            return f"{month} {year}"
        return year
