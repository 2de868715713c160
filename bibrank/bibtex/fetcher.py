"""
HTTP page fetcher
Fetches search and BibTeX pages and picks links out of them with CSS selectors
"""

import time
from typing import Protocol
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from loguru import logger

from ..core.errors import FetchTimeoutError, NetworkError

CHUNK_SIZE = 8192


class PageFetcher(Protocol):
    """Fetch facility used by the lookup pipeline"""

    def fetch_text(self, url: str, timeout: float) -> str: ...

    def select_first(self, html: str, selector: str, base_url: str | None = None) -> str | None: ...


class HttpFetcher:
    """requests + BeautifulSoup page fetcher"""

    def __init__(self, user_agent: str = "BibRank/0.1.0"):
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept": "text/html,application/x-bibtex,text/plain;q=0.9,*/*;q=0.8",
        })

    def fetch_text(self, url: str, timeout: float) -> str:
        """
        Fetch a page as text

        The timeout bounds the whole request. requests only bounds the
        connect and each socket read, so the body is streamed and the elapsed
        time checked between chunks.

        Args:
            url: Page URL
            timeout: Time bound in seconds

        Returns:
            Response body

        Raises:
            FetchTimeoutError: If the request exceeded the time bound
            NetworkError: If the request failed
        """
        logger.debug(f"Fetching {url}")
        deadline = time.monotonic() + timeout

        try:
            with self.session.get(url, timeout=timeout, stream=True) as response:
                response.raise_for_status()
                body = bytearray()
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        msg = f"Request timed out after {timeout}s: {url}"
                        raise FetchTimeoutError(msg, url=url)
                    body.extend(chunk)
                encoding = response.encoding or "utf-8"
        except requests.Timeout as e:
            msg = f"Request timed out after {timeout}s: {url}"
            raise FetchTimeoutError(msg, url=url) from e
        except requests.RequestException as e:
            msg = f"Request failed: {e}"
            raise NetworkError(msg, url=url) from e

        return body.decode(encoding, errors="replace")

    def select_first(self, html: str, selector: str, base_url: str | None = None) -> str | None:
        """
        Find the first element matching selector that carries a link

        Args:
            html: Page source
            selector: CSS selector
            base_url: URL the page was fetched from, to absolutize links

        Returns:
            Absolute href or None if no element qualifies
        """
        soup = BeautifulSoup(html, "html.parser")

        for element in soup.select(selector):
            href = element.get("href")
            if href and href.strip():
                return urljoin(base_url, href.strip()) if base_url else href.strip()

        return None
