"""
Common test fixtures and configurations for all tests
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from bibrank.bibtex.fetcher import HttpFetcher
from bibrank.core.errors import NetworkError
from bibrank.core.record import AUTHOR, Creator, Record
from bibrank.core.record_store import InMemoryRecordStore
from bibrank.core.venue_index import VenueDataset, VenueIndex
from bibrank.core.venue_matcher import VenueMatcher
from bibrank.utils.config import Config, SourceConfig, SourceStep

SAMPLE_DATASET = {
    "full_url": {
        "International Conference on Machine Learning": "https://dblp.org/db/conf/icml/",
        "Knowledge Discovery and Data Mining": "https://dblp.org/db/conf/kdd/",
        "IEEE Transactions on Knowledge and Data Engineering": "https://dblp.org/db/journals/tkde/",
        "Pattern Recognition": "https://dblp.org/db/journals/pr/",
        "Pattern Recognition Letters": "https://dblp.org/db/journals/prl/",
    },
    "url_rank": {
        "https://dblp.org/db/conf/icml/": "A",
        "https://dblp.org/db/conf/kdd/": "A",
        "https://dblp.org/db/journals/tkde/": "A",
        "https://dblp.org/db/journals/pr/": "B",
        "https://dblp.org/db/journals/prl/": "C",
    },
    "abbr_full": {
        "ICML": "International Conference on Machine Learning",
        "KDD": "Knowledge Discovery and Data Mining",
        "TKDE": "IEEE Transactions on Knowledge and Data Engineering",
        "PRL": "Pattern Recognition Letters",
    },
}

SAMPLE_BIBTEX = """@inproceedings{DBLP:conf/icml/SmithD23,
  author    = {Smith, Alice and
               Bob Doe},
  title     = {Deep Ranking Networks},
  booktitle = {International Conference on Machine Learning},
  pages     = {100--110},
  year      = {2023},
  doi       = {10.5555/icml.2023.1}
}
"""

SEARCH_URL = "https://search.example.org/find?q=@@"
SEARCH_SELECTOR = "a.bib"


class FakeFetcher(HttpFetcher):
    """Fetcher serving canned pages, with real link selection"""

    def __init__(self, pages: dict[str, str] | None = None):
        super().__init__()
        self.pages = dict(pages or {})
        self.calls = []

    def fetch_text(self, url: str, timeout: float) -> str:
        self.calls.append(url)
        if url not in self.pages:
            msg = f"Request failed: 404 for {url}"
            raise NetworkError(msg, url=url)
        return self.pages[url]


def search_page(href: str) -> str:
    """Search result page with one BibTeX link"""
    return f'<html><body><ul><li><a class="bib" href="{href}">BibTeX</a></li></ul></body></html>'


def make_source(name: str) -> SourceConfig:
    """Single step source searching search.example.org/<name>"""
    return SourceConfig(
        name=name,
        steps=(
            SourceStep(
                url_template=f"https://search.example.org/{name}?q=@@",
                selector=SEARCH_SELECTOR,
                substring_rules=((".html", ".bib"),),
            ),
        ),
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_dataset():
    """Small venue ranking dataset"""
    return VenueDataset(
        full_url=dict(SAMPLE_DATASET["full_url"]),
        url_rank=dict(SAMPLE_DATASET["url_rank"]),
        abbr_full=dict(SAMPLE_DATASET["abbr_full"]),
    )


@pytest.fixture
def venue_index(sample_dataset):
    """Venue index over the small dataset"""
    return VenueIndex(sample_dataset)


@pytest.fixture
def matcher(venue_index):
    """Venue matcher over the small dataset"""
    return VenueMatcher(venue_index)


@pytest.fixture
def store():
    """Empty in-memory record store"""
    return InMemoryRecordStore()


@pytest.fixture
def fetcher():
    """Fetcher without any page"""
    return FakeFetcher()


@pytest.fixture
def mock_config():
    """Configuration with two fake sources"""
    return Config(sources=[make_source("alpha"), make_source("beta")])


@pytest.fixture
def journal_record():
    """Saved-less journal article"""
    return Record(
        type="journalArticle",
        fields={
            "title": "Deep Ranking Networks",
            "publicationTitle": "Journal of Ranking",
            "volume": "7",
        },
        creators=[Creator("Alice Smith", AUTHOR)],
    )


@pytest.fixture
def dataset_tables():
    """Raw tables of the small dataset, safe to modify"""
    return {name: dict(table) for name, table in SAMPLE_DATASET.items()}


@pytest.fixture
def sample_bibtex():
    """dblp style BibTeX entry"""
    return SAMPLE_BIBTEX


@pytest.fixture
def fake_fetcher():
    """Factory for fetchers serving canned pages"""
    return FakeFetcher


@pytest.fixture
def source_factory():
    """Factory for single step test sources"""
    return make_source


@pytest.fixture
def page_factory():
    """Factory for search result pages"""
    return search_page
