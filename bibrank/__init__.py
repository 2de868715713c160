"""
BibRank: Bibliographic record reconciliation with CCF venue ranking
"""

__version__ = "0.1.0"

from .bibtex.bibtex_parser import BibTeXRecordParser
from .bibtex.fetcher import HttpFetcher
from .core.errors import (
    BibRankError,
    DatasetLoadError,
    FetchTimeoutError,
    NetworkError,
    ParseError,
    PersistenceError,
    ReconciliationError,
    SelectorNotFound,
    VenueIndexError,
)
from .core.orchestrator import ReconciliationOrchestrator
from .core.record import Creator, Record
from .core.record_merger import RecordMerger
from .core.record_store import InMemoryRecordStore, JsonRecordStore
from .core.report import ReconciliationReport, format_report
from .core.venue_index import VenueIndex, VenueRankEntry
from .core.venue_matcher import MatchResult, VenueMatcher
from .utils.config import Config, SourceConfig, SourceStep
from .utils.logging_config import get_logger, setup_logging

__all__ = [
    # Errors
    "BibRankError",
    # Fetching and parsing
    "BibTeXRecordParser",
    "Config",
    "Creator",
    "DatasetLoadError",
    "FetchTimeoutError",
    "HttpFetcher",
    # Stores
    "InMemoryRecordStore",
    "JsonRecordStore",
    "MatchResult",
    "NetworkError",
    "ParseError",
    "PersistenceError",
    # Core classes
    "Record",
    "RecordMerger",
    "ReconciliationError",
    "ReconciliationOrchestrator",
    "ReconciliationReport",
    "SelectorNotFound",
    "SourceConfig",
    "SourceStep",
    "VenueIndex",
    "VenueIndexError",
    "VenueMatcher",
    "VenueRankEntry",
    # Metadata
    "__version__",
    "format_report",
    "get_logger",
    # Logging
    "setup_logging",
]
