"""
Source lookup pipeline
Walks a source's search -> extract -> transform steps to a BibTeX link
"""

from dataclasses import dataclass
from urllib.parse import quote

from loguru import logger

from ..bibtex.fetcher import PageFetcher
from ..utils.config import KEYWORD_PLACEHOLDER, SourceConfig, SourceStep
from .errors import NetworkError, ReconciliationError, SelectorNotFound


@dataclass(frozen=True)
class Resolved:
    """Link resolved by the last step"""
    url: str


@dataclass(frozen=True)
class NotFound:
    """Link resolution failed"""
    reason: str
    error: ReconciliationError


def build_step_url(step: SourceStep, keyword: str) -> str:
    """Substitute the URL-encoded keyword into a step's URL template"""
    # Same escaping as JavaScript's encodeURIComponent
    encoded = quote(keyword, safe="-_.!~*'()")
    return step.url_template.replace(KEYWORD_PLACEHOLDER, encoded)


def apply_substring_rules(value: str, rules: tuple[tuple[str, str], ...]) -> str:
    """Apply literal replacements in order, first occurrence of each"""
    for old, new in rules:
        value = value.replace(old, new, 1)
    return value


class SourceLookupPipeline:
    """Resolve a record title to a BibTeX link on one source"""

    def __init__(self, source: SourceConfig, fetcher: PageFetcher, timeout: float = 5.0):
        self.source = source
        self.fetcher = fetcher
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.source.name

    def resolve(self, title: str) -> Resolved | NotFound:
        """
        Follow the source's steps starting from a title

        A step that yields no link ends the lookup; later steps are not tried.

        Args:
            title: Record title, the first step's keyword

        Returns:
            Resolved with the final link, or NotFound with the reason
        """
        keyword = title

        for position, step in enumerate(self.source.steps, start=1):
            url = build_step_url(step, keyword)
            logger.debug(f"[{self.name}] step {position}/{len(self.source.steps)}: {url}")

            try:
                html = self.fetcher.fetch_text(url, self.timeout)
            except NetworkError as e:
                msg = f"Search request failed: {e}"
                return NotFound(reason=msg, error=e)

            target = self.fetcher.select_first(html, step.selector, base_url=url)
            if not target:
                error = SelectorNotFound(step.selector, url)
                return NotFound(reason=str(error), error=error)

            keyword = apply_substring_rules(target, step.substring_rules)

        logger.debug(f"[{self.name}] resolved '{title}' to {keyword}")
        return Resolved(url=keyword)
