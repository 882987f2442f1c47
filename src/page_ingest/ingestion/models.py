"""Domain models flowing through an ingestion run."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from functools import cached_property

from pydantic import BaseModel, Field, computed_field

# Cleaned text shorter than this is treated as a failed scrape, not empty content.
MIN_CONTENT_CHARS = 100

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(raw: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and strip."""
    return _WHITESPACE_RE.sub(" ", raw).strip()


class PageContent(BaseModel):
    """Text extracted from one page during a single fetch attempt."""

    source_url: str
    raw_text: str

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def cleaned_text(self) -> str:
        # Computed on first access only; raw_text is never reassigned.
        return clean_text(self.raw_text)

    def is_viable(self, min_chars: int = MIN_CONTENT_CHARS) -> bool:
        return len(self.cleaned_text) >= min_chars


class Chunk(BaseModel):
    """A contiguous slice of a page's cleaned text.

    Attributes
    ----------
    text:
        The chunk body sent to the embedder.
    index:
        Ordinal position of the chunk within its page.
    source_url:
        Page the chunk was cut from; carried forward as record metadata.
    """

    text: str
    index: int
    source_url: str = ""


class StoredRecord(BaseModel):
    """Persisted unit: one embedded chunk plus provenance."""

    vector: list[float]
    text: str
    source_url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def metadata(self) -> dict[str, str]:
        """Flat metadata as written next to the vector."""
        return {"source_url": self.source_url, "timestamp": self.timestamp.isoformat()}


class UrlState(str, Enum):
    """Lifecycle of one URL within a run.  ``DONE`` and ``FAILED`` are terminal."""

    PENDING = "pending"
    FETCHING = "fetching"
    FETCHED = "fetched"
    CHUNKING = "chunking"
    STORING = "storing"
    DONE = "done"
    FAILED = "failed"


class UrlResult(BaseModel):
    """Outcome of processing a single URL."""

    url: str
    state: UrlState = UrlState.PENDING
    chunk_count: int = 0
    inserted_chunks: int = 0
    failed_chunks: int = 0
    error: str | None = None


class RunSummary(BaseModel):
    """Aggregate counters for one ingestion run.

    The pipeline owns a single instance per :meth:`ingest` call and records
    every URL outcome on it; nothing here is shared across runs.
    """

    total_urls: int = 0
    processed_urls: int = 0
    inserted_chunks: int = 0
    failed_urls: list[str] = Field(default_factory=list)
    results: list[UrlResult] = Field(default_factory=list)

    def record(self, result: UrlResult) -> None:
        """Fold a terminal :class:`UrlResult` into the counters."""
        if result.state is UrlState.DONE:
            self.processed_urls += 1
            self.inserted_chunks += result.inserted_chunks
        elif result.state is UrlState.FAILED:
            self.failed_urls.append(result.url)
        else:
            raise ValueError(f"Cannot record non-terminal state {result.state.value!r} for {result.url}")
        self.results.append(result)

    def merge(self, other: RunSummary) -> RunSummary:
        """Return a new summary combining this run with *other*, in order."""
        return RunSummary(
            total_urls=self.total_urls + other.total_urls,
            processed_urls=self.processed_urls + other.processed_urls,
            inserted_chunks=self.inserted_chunks + other.inserted_chunks,
            failed_urls=[*self.failed_urls, *other.failed_urls],
            results=[*self.results, *other.results],
        )

    def report_lines(self) -> list[str]:
        """Render the human-readable end-of-run summary block."""
        lines = [
            "=== Processing Summary ===",
            f"Total URLs processed successfully: {self.processed_urls}/{self.total_urls}",
            f"Total chunks inserted: {self.inserted_chunks}",
        ]
        if self.failed_urls:
            lines.append("Failed URLs:")
            lines.extend(f"- {url}" for url in self.failed_urls)
        return lines
