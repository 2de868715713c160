"""
Record type schema
Legal fields per record type and the base-field alias table
"""

from types import MappingProxyType

_COMMON_TAIL = (
    "shortTitle",
    "url",
    "accessDate",
    "archive",
    "archiveLocation",
    "libraryCatalog",
    "callNumber",
    "rights",
    "extra",
)

ITEM_TYPE_FIELDS = MappingProxyType({
    "journalArticle": (
        "title", "abstractNote", "publicationTitle", "volume", "issue", "pages",
        "date", "series", "seriesTitle", "seriesText", "journalAbbreviation",
        "language", "DOI", "ISSN",
    ) + _COMMON_TAIL,
    "conferencePaper": (
        "title", "abstractNote", "date", "proceedingsTitle", "conferenceName",
        "place", "publisher", "volume", "pages", "series", "language", "DOI",
        "ISBN",
    ) + _COMMON_TAIL,
    "book": (
        "title", "abstractNote", "series", "seriesNumber", "volume",
        "numberOfVolumes", "edition", "place", "publisher", "date", "numPages",
        "language", "ISBN",
    ) + _COMMON_TAIL,
    "bookSection": (
        "title", "abstractNote", "bookTitle", "series", "seriesNumber", "volume",
        "numberOfVolumes", "edition", "place", "publisher", "date", "pages",
        "language", "ISBN",
    ) + _COMMON_TAIL,
    "thesis": (
        "title", "abstractNote", "thesisType", "university", "place", "date",
        "numPages", "language",
    ) + _COMMON_TAIL,
    "report": (
        "title", "abstractNote", "reportNumber", "reportType", "seriesTitle",
        "place", "institution", "date", "pages", "language",
    ) + _COMMON_TAIL,
    "document": (
        "title", "abstractNote", "publisher", "date", "language",
    ) + _COMMON_TAIL,
    "computerProgram": (
        "title", "abstractNote", "seriesTitle", "versionNumber", "date", "system",
        "place", "company", "programmingLanguage", "ISBN",
    ) + _COMMON_TAIL,
})

# base field -> {record type: type specific field}
BASE_FIELD_ALIASES = MappingProxyType({
    "publicationTitle": MappingProxyType({
        "conferencePaper": "proceedingsTitle",
        "bookSection": "bookTitle",
    }),
    "publisher": MappingProxyType({
        "thesis": "university",
        "report": "institution",
        "computerProgram": "company",
    }),
    "number": MappingProxyType({
        "report": "reportNumber",
        "book": "seriesNumber",
        "bookSection": "seriesNumber",
    }),
    "type": MappingProxyType({
        "thesis": "thesisType",
        "report": "reportType",
    }),
})

def is_known_type(record_type: str) -> bool:
    """Check if record type has a schema"""
    return record_type in ITEM_TYPE_FIELDS


def get_type_fields(record_type: str) -> tuple[str, ...]:
    """
    Get the ordered legal fields of a record type

    Args:
        record_type: Record type name

    Returns:
        Tuple of field names

    Raises:
        ValueError: If the record type is unknown
    """
    try:
        return ITEM_TYPE_FIELDS[record_type]
    except KeyError:
        msg = f"Invalid record type: {record_type}"
        raise ValueError(msg) from None


def base_field_of(field_name: str) -> str:
    """Get the base field a type specific field maps to (itself if none)"""
    for base, mapping in BASE_FIELD_ALIASES.items():
        if field_name in mapping.values():
            return base
    return field_name


def resolve_field(record_type: str, field_name: str) -> str | None:
    """
    Resolve a field name to the field legal for a record type

    A base field resolves to the type's mapped field and a mapped field
    resolves through its base, so "publicationTitle" on a conferencePaper
    gives "proceedingsTitle" and "bookTitle" on a conferencePaper gives
    "proceedingsTitle" too.

    Args:
        record_type: Record type name
        field_name: Requested field name

    Returns:
        Legal field name or None if the type has no such field
    """
    fields = get_type_fields(record_type)
    if field_name in fields:
        return field_name

    base = base_field_of(field_name)
    if base in fields:
        return base

    mapped = BASE_FIELD_ALIASES.get(base, {}).get(record_type)
    if mapped and mapped in fields:
        return mapped

    return None
