"""Unit tests for page scraping and the retrying fetcher."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import FakePageFetcher
from page_ingest.errors import FetchError, ScrapeError
from page_ingest.ingestion.fetcher import HttpPageFetcher, RetryingFetcher, extract_main_text

LONG_TEXT = "Formula One is the highest class of single-seater racing. " * 5


# ──────────────────────────────────────────────────────────────────────
# extract_main_text
# ──────────────────────────────────────────────────────────────────────


class TestExtractMainText:
    def test_prefers_main_region(self) -> None:
        html = (
            "<html><body><nav>Menu</nav><main><p>Race report</p></main>"
            "<div>Sidebar</div><footer>Copyright</footer></body></html>"
        )
        text = extract_main_text(html)
        assert "Race report" in text
        assert "Sidebar" not in text
        assert "Menu" not in text

    def test_falls_back_to_body_without_boilerplate(self) -> None:
        html = (
            "<html><head><style>p{}</style></head><body><header>Logo</header>"
            "<p>Lap times</p><script>track()</script><div class='ads'>Buy</div>"
            "<div class='cookie-notice'>Cookies</div></body></html>"
        )
        text = extract_main_text(html)
        assert "Lap times" in text
        for noise in ("Logo", "track()", "Buy", "Cookies", "p{}"):
            assert noise not in text

    def test_wikipedia_content_region(self) -> None:
        html = "<body><div id='mw-content-text'>Champions</div><div>Tools</div></body>"
        assert extract_main_text(html).strip() == "Champions"


# ──────────────────────────────────────────────────────────────────────
# HttpPageFetcher
# ──────────────────────────────────────────────────────────────────────


class TestHttpPageFetcher:
    @staticmethod
    def _session(
        html: str = "",
        exc: Exception | None = None,
        blocks: list[bytes] | None = None,
    ) -> MagicMock:
        session = MagicMock(spec=requests.Session)
        resp = MagicMock(encoding="utf-8", raise_for_status=MagicMock())
        resp.iter_content.return_value = blocks if blocks is not None else [html.encode("utf-8")]
        if exc is not None:
            resp.raise_for_status.side_effect = exc
        session.get.return_value = resp
        return session

    def test_scrape_returns_main_text(self) -> None:
        session = self._session("<html><body><article>Pole position</article></body></html>")
        fetcher = HttpPageFetcher(timeout=5, session=session)

        assert "Pole position" in fetcher.scrape("https://example.com/a")
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["stream"] is True
        assert "User-Agent" in kwargs["headers"]
        session.get.return_value.close.assert_called_once()

    def test_body_split_across_blocks(self) -> None:
        session = self._session(blocks=[b"<html><body><main>Safety ", b"car period</main></body></html>"])
        text = HttpPageFetcher(session=session).scrape("https://example.com/a")
        assert "Safety car period" in text

    def test_http_error_becomes_scrape_error(self) -> None:
        session = self._session(exc=requests.HTTPError("503"))
        fetcher = HttpPageFetcher(session=session)

        with pytest.raises(ScrapeError, match="503"):
            fetcher.scrape("https://example.com/down")
        session.get.return_value.close.assert_called_once()

    def test_connection_error_becomes_scrape_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ScrapeError, match="refused"):
            HttpPageFetcher(session=session).scrape("https://example.com/down")

    def test_whitespace_only_page_is_a_scrape_error(self) -> None:
        session = self._session("<html><body><nav>Menu</nav>   \n </body></html>")
        fetcher = HttpPageFetcher(session=session)

        with pytest.raises(ScrapeError, match="No content"):
            fetcher.scrape("https://example.com/empty")

    def test_slow_download_is_abandoned_after_deadline(self) -> None:
        """A server trickling bytes cannot outlive the wall-clock deadline."""
        session = self._session(blocks=[b"<html>", b"<body>", b"never finished"])
        fetcher = HttpPageFetcher(timeout=5, deadline=30, session=session)

        with patch("page_ingest.ingestion.fetcher.time") as clock:
            clock.monotonic.side_effect = [0.0, 10.0, 31.0]
            with pytest.raises(ScrapeError, match="exceeded 30s"):
                fetcher.scrape("https://example.com/slow")
        session.get.return_value.close.assert_called_once()

    def test_close_releases_own_session_only(self) -> None:
        shared = MagicMock(spec=requests.Session)
        HttpPageFetcher(session=shared).close()
        shared.close.assert_not_called()

        with patch("page_ingest.ingestion.fetcher.requests.Session") as session_cls:
            with HttpPageFetcher() as fetcher:
                assert isinstance(fetcher, HttpPageFetcher)
        session_cls.return_value.close.assert_called_once()


# ──────────────────────────────────────────────────────────────────────
# RetryingFetcher
# ──────────────────────────────────────────────────────────────────────


class TestRetryingFetcher:
    def test_success_on_first_attempt_cleans_text(self) -> None:
        pages = FakePageFetcher({"A": ["  Formula\n\nOne \t" + LONG_TEXT]})
        sleeps: list[float] = []
        content = RetryingFetcher(pages, sleep=sleeps.append).fetch("A")

        assert content.source_url == "A"
        assert "\n" not in content.cleaned_text
        assert "  " not in content.cleaned_text
        assert content.cleaned_text.startswith("Formula One")
        assert pages.calls == ["A"]
        assert sleeps == []

    def test_retries_with_linear_backoff(self) -> None:
        pages = FakePageFetcher({"A": [ScrapeError("timeout"), ScrapeError("timeout"), LONG_TEXT]})
        sleeps: list[float] = []
        content = RetryingFetcher(pages, sleep=sleeps.append).fetch("A")

        assert content.cleaned_text == LONG_TEXT.strip()
        assert pages.calls == ["A", "A", "A"]
        assert sleeps == [5.0, 10.0]

    def test_gives_up_after_three_attempts(self) -> None:
        pages = FakePageFetcher({"B": [ScrapeError("navigation failed")]})
        sleeps: list[float] = []

        with pytest.raises(FetchError) as excinfo:
            RetryingFetcher(pages, sleep=sleeps.append).fetch("B")

        assert excinfo.value.url == "B"
        assert excinfo.value.attempts == 3
        assert isinstance(excinfo.value.__cause__, ScrapeError)
        assert len(pages.calls) == 3
        # No delay after the final attempt.
        assert sleeps == [5.0, 10.0]

    def test_short_content_is_a_fetch_error(self) -> None:
        pages = FakePageFetcher({"C": ["x" * 99]})

        with pytest.raises(FetchError, match="too short"):
            RetryingFetcher(pages, sleep=lambda _: None).fetch("C")
        assert len(pages.calls) == 3

    def test_exactly_minimum_length_is_accepted(self) -> None:
        pages = FakePageFetcher({"C": ["y" * 100]})
        content = RetryingFetcher(pages, sleep=lambda _: None).fetch("C")
        assert len(content.cleaned_text) == 100

    def test_whitespace_does_not_count_towards_minimum(self) -> None:
        pages = FakePageFetcher({"D": ["word \n\n\n " * 20]})  # 99 chars once collapsed

        with pytest.raises(FetchError):
            RetryingFetcher(pages, sleep=lambda _: None).fetch("D")

    def test_unexpected_errors_are_not_retried(self) -> None:
        pages = FakePageFetcher({"E": [RuntimeError("bug"), LONG_TEXT]})

        with pytest.raises(RuntimeError, match="bug"):
            RetryingFetcher(pages, sleep=lambda _: None).fetch("E")
        assert pages.calls == ["E"]

    def test_custom_policy(self) -> None:
        pages = FakePageFetcher({"F": [ScrapeError("x")]})
        sleeps: list[float] = []
        fetcher = RetryingFetcher(pages, max_attempts=2, backoff=lambda n: 0.1, sleep=sleeps.append)

        with pytest.raises(FetchError):
            fetcher.fetch("F")
        assert len(pages.calls) == 2
        assert sleeps == [0.1]

    def test_close_delegates_to_page_fetcher(self) -> None:
        inner = MagicMock(spec=HttpPageFetcher)
        RetryingFetcher(inner).close()
        inner.close.assert_called_once()
