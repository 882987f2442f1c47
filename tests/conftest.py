"""In-memory fakes for the pipeline collaborators, shared across the unit tests."""

from __future__ import annotations

from page_ingest.errors import EmbeddingError, InsertError, ScrapeError
from page_ingest.ingestion.embedder import Embedder
from page_ingest.ingestion.fetcher import PageFetcher
from page_ingest.ingestion.models import StoredRecord
from page_ingest.store.base import RecordStore


# ── In-memory fakes for the pipeline collaborators ──────────────────────


class FakePageFetcher(PageFetcher):
    """Scripted scraper.

    ``pages`` maps a URL to a list of outcomes consumed one per call: a
    ``str`` is returned, an exception is raised.  Once the list is down to
    its last entry that entry repeats.
    """

    def __init__(self, pages: dict[str, list[str | Exception]]) -> None:
        self._pages = {url: list(outcomes) for url, outcomes in pages.items()}
        self.calls: list[str] = []

    def scrape(self, url: str) -> str:
        self.calls.append(url)
        outcomes = self._pages.get(url) or [ScrapeError(f"no page scripted for {url}")]
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeEmbedder(Embedder):
    """Deterministic embedder; texts listed in ``fail_on`` raise ``EmbeddingError``."""

    def __init__(self, dimension: int = 8, fail_on: set[str] | None = None) -> None:
        super().__init__(dimension)
        self.fail_on = fail_on or set()
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.fail_on:
            raise EmbeddingError(f"refused to embed {text[:10]!r}")
        return [float(len(text))] * self.dimension


class FakeRecordStore(RecordStore):
    """Keeps inserted records in memory; texts in ``fail_on`` raise ``InsertError``."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.collections: dict[str, tuple[int, str]] = {}
        self.records: list[tuple[str, StoredRecord]] = []
        self.insert_calls = 0

    def provision_collection(self, name: str, dimension: int, metric: str) -> None:
        self.collections.setdefault(name, (dimension, metric))

    def insert(self, collection_name: str, record: StoredRecord) -> None:
        self.insert_calls += 1
        if record.text in self.fail_on:
            raise InsertError(f"refused to store {record.text[:10]!r}")
        self.records.append((collection_name, record))

