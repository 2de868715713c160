"""
Venue matcher module
Classifies free-text venue strings against the venue ranking index
"""

import re
from dataclasses import dataclass

from loguru import logger

from .record import Record
from .venue_index import VenueIndex, normalize_venue

RANK_PREFIX = "CCF-Rank:"
VENUE_PREFIX = "CCF-Venue:"
ABBREVIATION_PREFIX = "CCF-Abbreviation:"

# Venue fields per record type, in lookup order
VENUE_FIELDS = {
    "conferencePaper": ("conferenceName", "proceedingsTitle"),
    "journalArticle": ("publicationTitle",),
}

_UPPERCASE_TOKEN = re.compile(r"\b[A-Z]{2,}(?:\s*\d{4})?\b")
_PARENTHESIZED = re.compile(r"\(([^)]+)\)")
_ABBREVIATION_LIKE = re.compile(r"^[A-Z0-9\s\-]+$")
_TRAILING_YEAR = re.compile(r"\s*\d{4}$")
_RANK_IN_EXTRA = re.compile(r"CCF-Rank:\s*([A-C])", re.IGNORECASE)


@dataclass(frozen=True)
class MatchResult:
    """Venue classification"""
    rank: str
    matched_name: str
    url: str
    matched_abbreviation: str | None = None


def extract_abbreviations(text: str) -> list[str]:
    """
    Extract candidate abbreviations from a venue string

    Candidates are standalone runs of two or more uppercase letters,
    optionally followed by a year ("KDD 2024"), and parenthesized spans made
    only of uppercase letters, digits, spaces and hyphens ("(ICML-W)").

    Args:
        text: Venue string

    Returns:
        Candidates in order of appearance, without duplicates
    """
    found = []

    for match in _UPPERCASE_TOKEN.finditer(text):
        found.append((match.start(), match.group(0)))

    for match in _PARENTHESIZED.finditer(text):
        content = match.group(1)
        if _ABBREVIATION_LIKE.match(content):
            found.append((match.start(1), content))

    candidates = []
    for _, candidate in sorted(found, key=lambda item: item[0]):
        candidate = candidate.strip()
        if candidate and candidate not in candidates:
            candidates.append(candidate)

    return candidates


class VenueMatcher:
    """Exact, substring and abbreviation venue classification"""

    def __init__(self, index: VenueIndex):
        self.index = index

    def match(self, venue: str | None) -> MatchResult | None:
        """
        Classify a venue string

        Args:
            venue: Free-text venue (journal or proceedings name)

        Returns:
            MatchResult or None if no strategy matched
        """
        if not venue or not venue.strip():
            return None

        try:
            return (
                self._match_exact(venue)
                or self._match_substring(venue)
                or self._match_abbreviation(venue)
            )
        except Exception as e:
            logger.warning(f"Venue classification skipped for '{venue}': {e}")
            return None

    def _match_exact(self, venue: str) -> MatchResult | None:
        entry = self.index.lookup_by_full_name(venue)
        if entry is None:
            return None
        return MatchResult(rank=entry.rank, matched_name=entry.full_name, url=entry.url)

    def _match_substring(self, venue: str) -> MatchResult | None:
        candidate = normalize_venue(venue)

        for full_name in self.index.full_names():
            if full_name in candidate or candidate in full_name:
                entry = self.index.lookup_by_full_name(full_name)
                return MatchResult(rank=entry.rank, matched_name=entry.full_name, url=entry.url)

        return None

    def _match_abbreviation(self, venue: str) -> MatchResult | None:
        for candidate in extract_abbreviations(venue):
            abbreviation = candidate
            entry = self.index.lookup_by_abbreviation(candidate)

            if entry is None:
                # "KDD 2024" -> "KDD"
                stripped = _TRAILING_YEAR.sub("", candidate)
                if stripped != candidate:
                    abbreviation = stripped
                    entry = self.index.lookup_by_abbreviation(stripped)

            if entry is not None and entry.rank:
                return MatchResult(
                    rank=entry.rank,
                    matched_name=entry.full_name,
                    url=entry.url,
                    matched_abbreviation=abbreviation,
                )

        return None

    def classify(self, record: Record) -> MatchResult | None:
        """Classify the venue of a record"""
        venue = venue_of(record)
        if not venue:
            logger.debug(f"No publication venue found for: {record.title}")
            return None

        result = self.match(venue)
        if result:
            logger.debug(f"Found rank {result.rank} for {venue}")
        else:
            logger.debug(f"No rank found for {venue}")
        return result


def venue_of(record: Record) -> str:
    """Get the venue string of a record ("" if its type has none)"""
    for field_name in VENUE_FIELDS.get(record.type, ()):
        value = record.get_field(field_name)
        if value:
            return value
    return ""


def annotate(record: Record, result: MatchResult) -> bool:
    """
    Write the venue rank into the record's extra field

    Existing annotations are left alone, so annotating twice is a no-op.

    Args:
        record: Record to annotate
        result: Venue classification

    Returns:
        True if the extra field changed
    """
    extra = record.extra
    if RANK_PREFIX in extra:
        return False

    if extra and not extra.endswith("\n"):
        extra += "\n"
    extra += f"{RANK_PREFIX} {result.rank}\n"
    extra += f"{VENUE_PREFIX} {result.matched_name}\n"
    if result.matched_abbreviation:
        extra += f"{ABBREVIATION_PREFIX} {result.matched_abbreviation}\n"

    record.extra = extra
    logger.debug(f"Added rank {result.rank} to record '{record.title}'")
    return True


def strip_annotation(extra: str | None) -> str:
    """Remove the lines written by annotate, keeping everything else"""
    prefixes = (RANK_PREFIX, VENUE_PREFIX, ABBREVIATION_PREFIX)
    lines = (extra or "").splitlines(keepends=True)
    return "".join(line for line in lines if not line.startswith(prefixes))


def rank_from_extra(extra: str | None) -> str | None:
    """Read a previously written rank back from an extra field"""
    match = _RANK_IN_EXTRA.search(extra or "")
    return match.group(1).upper() if match else None
