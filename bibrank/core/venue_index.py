"""
Venue ranking index
Read-only lookup tables over the CCF recommended venue list
"""

import json
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from loguru import logger

from ..utils.config import DEFAULT_VENUE_DATASET
from ..utils.file_utils import read_json_file
from .errors import DatasetLoadError, VenueIndexError

DATASET_TABLES = ("full_url", "url_rank", "abbr_full")


def normalize_venue(text: str) -> str:
    """Upper-case and collapse whitespace"""
    return re.sub(r"\s+", " ", text).strip().upper()


@dataclass(frozen=True)
class VenueRankEntry:
    """Ranked venue"""
    full_name: str
    abbreviations: frozenset[str]
    url: str
    rank: str


@dataclass(frozen=True)
class VenueDataset:
    """Raw ranking tables as supplied by the dataset file"""
    full_url: Mapping[str, str]
    url_rank: Mapping[str, str]
    abbr_full: Mapping[str, str]


def load_venue_dataset(dataset_file: Path | None = None) -> VenueDataset:
    """
    Load the venue ranking dataset

    Args:
        dataset_file: JSON dataset path (packaged CCF list if None)

    Returns:
        VenueDataset

    Raises:
        DatasetLoadError: If the file is missing, unreadable or incomplete
    """
    dataset_file = Path(dataset_file) if dataset_file else DEFAULT_VENUE_DATASET

    try:
        data = read_json_file(dataset_file)
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Failed to load venue ranking data from {dataset_file}: {e}"
        raise DatasetLoadError(msg) from e

    if not isinstance(data, dict):
        msg = f"Venue ranking data in {dataset_file} must be a JSON object"
        raise DatasetLoadError(msg)

    for table in DATASET_TABLES:
        if not isinstance(data.get(table), dict):
            msg = f"Venue ranking data in {dataset_file} has no '{table}' table"
            raise DatasetLoadError(msg)

    logger.debug(f"Venue ranking data loaded from {dataset_file}")

    return VenueDataset(
        full_url=data["full_url"],
        url_rank=data["url_rank"],
        abbr_full=data["abbr_full"],
    )


class VenueIndex:
    """
    Immutable venue -> rank lookup

    Built once from a VenueDataset. Construction checks referential integrity
    across the tables and fails with VenueIndexError on any dangling key.
    """

    def __init__(self, dataset: VenueDataset):
        full_url: dict[str, str] = {}
        for name, url in dataset.full_url.items():
            key = normalize_venue(name)
            if key in full_url and full_url[key] != url:
                msg = f"Venue '{key}' maps to both {full_url[key]} and {url}"
                raise VenueIndexError(msg)
            full_url[key] = url

        for name, url in full_url.items():
            if url not in dataset.url_rank:
                msg = f"Venue '{name}' points to {url} which has no rank"
                raise VenueIndexError(msg)

        named_urls = set(full_url.values())
        for url, rank in dataset.url_rank.items():
            if not rank:
                msg = f"Empty rank for {url}"
                raise VenueIndexError(msg)
            if url not in named_urls:
                msg = f"Rank for {url} has no venue name"
                raise VenueIndexError(msg)

        abbr_full: dict[str, str] = {}
        for abbr, name in dataset.abbr_full.items():
            key = normalize_venue(name)
            if key not in full_url:
                msg = f"Abbreviation '{abbr}' points to unknown venue '{name}'"
                raise VenueIndexError(msg)
            abbr_full[normalize_venue(abbr)] = key

        abbreviations: dict[str, set[str]] = {name: set() for name in full_url}
        for abbr, name in abbr_full.items():
            abbreviations[name].add(abbr)

        self._full_url = MappingProxyType(full_url)
        self._abbr_full = MappingProxyType(abbr_full)
        self._entries = MappingProxyType({
            name: VenueRankEntry(
                full_name=name,
                abbreviations=frozenset(abbreviations[name]),
                url=url,
                rank=dataset.url_rank[url],
            )
            for name, url in full_url.items()
        })

        # Longest first, so that "PATTERN RECOGNITION LETTERS" is tried before
        # "PATTERN RECOGNITION"; sorted() keeps insertion order among equals
        self._match_order = tuple(sorted(full_url, key=len, reverse=True))

        logger.debug(f"Venue index built: {len(full_url)} venues, {len(abbr_full)} abbreviations")

    @classmethod
    def from_file(cls, dataset_file: Path | None = None) -> "VenueIndex":
        """Load dataset and build index"""
        return cls(load_venue_dataset(dataset_file))

    def __len__(self) -> int:
        return len(self._entries)

    def lookup_by_full_name(self, name: str | None) -> VenueRankEntry | None:
        """Find a venue by exact (normalized) full name"""
        if not name:
            return None
        return self._entries.get(normalize_venue(name))

    def lookup_by_abbreviation(self, abbreviation: str | None) -> VenueRankEntry | None:
        """Find a venue by exact (normalized) abbreviation"""
        if not abbreviation:
            return None
        name = self._abbr_full.get(normalize_venue(abbreviation))
        if name is None:
            return None
        return self._entries.get(name)

    def full_names(self) -> Iterator[str]:
        """Normalized full names in substring match order"""
        return iter(self._match_order)
