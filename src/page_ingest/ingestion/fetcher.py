"""Page fetching — scrape one URL, then wrap it with the retry policy.

:class:`PageFetcher` is the scraping contract.  :class:`HttpPageFetcher` is
the default implementation (``requests`` + ``BeautifulSoup``), and
:class:`RetryingFetcher` adds bounded retries, text cleaning and the
minimum-length check on top of any fetcher.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

import requests
from bs4 import BeautifulSoup

from page_ingest.errors import FetchError, ScrapeError
from page_ingest.ingestion.models import MIN_CONTENT_CHARS, PageContent
from page_ingest.ingestion.retry import Backoff, linear_backoff, retry_call

logger = logging.getLogger(__name__)

# Regions that never hold article text.
BOILERPLATE_SELECTORS = (
    "nav, footer, header, script, style, iframe, noscript, "
    ".advertisement, .ads, .cookie-notice"
)
# Preferred content regions, tried before falling back to <body>.
CONTENT_SELECTORS = ("main", "article", ".content", "#mw-content-text")

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) page-ingest/0.1",
    "Accept": "text/html,application/xhtml+xml",
}


class PageFetcher(ABC):
    """Scraping contract: turn a URL into raw page text."""

    @abstractmethod
    def scrape(self, url: str) -> str:
        """Return the readable text of *url*.

        Implementations must bound their own execution time, strip
        non-content regions before extraction, and raise
        :class:`~page_ingest.errors.ScrapeError` instead of returning
        empty or whitespace-only text.
        """
        ...

    def close(self) -> None:
        """Release network resources.  Optional — a no-op by default."""

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def extract_main_text(html: str) -> str:
    """Strip boiler-plate from *html* and return the main content's text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.select(BOILERPLATE_SELECTORS):
        tag.decompose()

    for selector in CONTENT_SELECTORS:
        region = soup.select_one(selector)
        if region is not None:
            return region.get_text(separator=" ")

    root = soup.body or soup
    return root.get_text(separator=" ")


class HttpPageFetcher(PageFetcher):
    """Fetch pages over HTTP and extract their main text.

    ``requests`` applies *timeout* to the connect and to each socket read,
    so a server trickling bytes could keep a plain ``get`` alive forever.
    The body is therefore streamed and the download abandoned once
    *deadline* seconds have passed since the request started.  The deadline
    is checked between reads, so the worst case is *deadline* plus one
    read *timeout*.

    Parameters
    ----------
    timeout:
        Connect and per-read timeout in seconds.
    deadline:
        Wall-clock budget for one request, including the body download.
    headers:
        Extra HTTP headers merged over :data:`DEFAULT_HEADERS`.
    session:
        Optional ``requests.Session`` to reuse connections.  A session
        passed in is left open by :meth:`close`; one created here is closed.
    """

    def __init__(
        self,
        *,
        timeout: float = 60,
        deadline: float = 120,
        headers: dict[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._deadline = deadline
        self._headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._owns_session = session is None
        self._session = session or requests.Session()

    def _download(self, url: str) -> str:
        started = time.monotonic()
        resp = self._session.get(url, headers=self._headers, timeout=self._timeout, stream=True)
        try:
            resp.raise_for_status()
            body = bytearray()
            for block in resp.iter_content(chunk_size=64 * 1024):
                body.extend(block)
                if time.monotonic() - started > self._deadline:
                    raise ScrapeError(f"Download of {url} exceeded {self._deadline:.0f}s")
            return body.decode(resp.encoding or "utf-8", errors="replace")
        finally:
            resp.close()

    def scrape(self, url: str) -> str:
        logger.info("Starting to scrape %s", url)
        try:
            html = self._download(url)
        except requests.RequestException as exc:
            raise ScrapeError(f"Request for {url} failed: {exc}") from exc

        text = extract_main_text(html)
        if not text.strip():
            raise ScrapeError(f"No content retrieved from {url}")
        return text

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


class RetryingFetcher:
    """Wrap a :class:`PageFetcher` with bounded retries and a viability check.

    Each attempt scrapes, cleans the text and rejects results shorter than
    *min_chars*.  Failed attempts before the last wait ``backoff(attempt)``
    seconds; the final failure is raised as :class:`FetchError` straight away.

    Parameters
    ----------
    page_fetcher:
        The underlying scraper.
    max_attempts:
        Total scrape attempts per URL.
    backoff:
        Delay function; defaults to a 5 s linear backoff (5 s, then 10 s).
    min_chars:
        Minimum cleaned length for a page to count as fetched.
    sleep:
        Blocking delay function, injectable for tests.
    """

    def __init__(
        self,
        page_fetcher: PageFetcher,
        *,
        max_attempts: int = 3,
        backoff: Backoff | None = None,
        min_chars: int = MIN_CONTENT_CHARS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._page_fetcher = page_fetcher
        self.max_attempts = max_attempts
        self._backoff = backoff or linear_backoff(5.0)
        self.min_chars = min_chars
        self._sleep = sleep

    def _attempt(self, url: str) -> PageContent:
        content = PageContent(source_url=url, raw_text=self._page_fetcher.scrape(url))
        if not content.is_viable(self.min_chars):
            raise ScrapeError(
                f"Retrieved content from {url} is too short to be valid "
                f"({len(content.cleaned_text)} < {self.min_chars} characters)"
            )
        return content

    def fetch(self, url: str) -> PageContent:
        """Return cleaned, viable content for *url* or raise :class:`FetchError`."""

        def _log_retry(attempt: int, exc: BaseException, delay: float) -> None:
            logger.warning("Attempt %d failed for %s: %s; retrying in %.0fs",
                           attempt, url, exc, delay)

        try:
            content = retry_call(
                lambda: self._attempt(url),
                max_attempts=self.max_attempts,
                backoff=self._backoff,
                retry_on=(ScrapeError,),
                sleep=self._sleep,
                on_retry=_log_retry,
            )
        except ScrapeError as exc:
            raise FetchError(url, self.max_attempts, f"{exc} (after {self.max_attempts} attempts)") from exc

        logger.info("Successfully scraped %s - Content length: %d characters",
                    url, len(content.cleaned_text))
        return content

    def close(self) -> None:
        self._page_fetcher.close()
