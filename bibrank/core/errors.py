"""
Error types for venue classification and record reconciliation
"""


class BibRankError(Exception):
    """Base class for all BibRank errors"""


class ReconciliationError(BibRankError):
    """Recoverable failure of one (record, source) pair"""


class SelectorNotFound(ReconciliationError):
    """A lookup step's target link could not be located"""

    def __init__(self, selector: str, url: str):
        self.selector = selector
        self.url = url
        super().__init__(f"Link for {selector} not found in {url}!")


class NetworkError(ReconciliationError):
    """A fetch failed"""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class FetchTimeoutError(NetworkError):
    """A fetch exceeded its time bound"""


class ParseError(ReconciliationError):
    """Fetched content is not a bibliographic record"""


class PersistenceError(ReconciliationError):
    """The record store rejected a write"""


class VenueIndexError(BibRankError):
    """The venue dataset violates referential integrity"""


class DatasetLoadError(BibRankError):
    """The venue dataset could not be loaded"""
