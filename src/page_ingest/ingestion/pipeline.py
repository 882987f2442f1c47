"""Ingestion pipeline — fetch → chunk → embed → store, one URL at a time.

Failures are isolated where they happen:

* a URL whose fetch or chunking fails, for any reason, is recorded in
  ``RunSummary.failed_urls`` and the run moves on;
* a chunk whose embedding or insert raises is logged and skipped, and its
  URL still counts as processed.

Usage::

    pipeline = IngestionPipeline(fetcher, chunker, embedder, store, "pages")
    summary = pipeline.ingest(urls)
    for line in summary.report_lines():
        print(line)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from page_ingest.errors import EmbeddingError, FetchError, InsertError
from page_ingest.ingestion.chunker import TextChunker
from page_ingest.ingestion.embedder import Embedder
from page_ingest.ingestion.fetcher import RetryingFetcher
from page_ingest.ingestion.models import Chunk, RunSummary, StoredRecord, UrlResult, UrlState
from page_ingest.store.base import RecordStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionPipeline:
    """Drive an ingestion run over a static list of URLs.

    Parameters
    ----------
    fetcher:
        Retrying page fetcher producing cleaned content.
    chunker:
        Splits cleaned text into chunks.
    embedder:
        Turns chunk text into vectors.
    store:
        Destination for the embedded records.
    collection_name:
        Collection every record is inserted into.
    clock:
        Source of record timestamps; defaults to the current UTC time.
    """

    def __init__(
        self,
        fetcher: RetryingFetcher,
        chunker: TextChunker,
        embedder: Embedder,
        store: RecordStore,
        collection_name: str,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._chunker = chunker
        self._embedder = embedder
        self._store = store
        self.collection_name = collection_name
        self._clock = clock

    # -- public API -----------------------------------------------------------

    def ingest(self, urls: Sequence[str]) -> RunSummary:
        """Process every URL once, in order, and return the run summary."""
        summary = RunSummary(total_urls=len(urls))
        for position, url in enumerate(urls, 1):
            logger.info("Processing %s (%d/%d)...", url, position, summary.total_urls)
            result = self.process_url(url)
            summary.record(result)
            if result.state is UrlState.DONE:
                logger.info(
                    "Successfully processed %s. Total progress: %d/%d URLs, %d chunks inserted",
                    url, summary.processed_urls, summary.total_urls, summary.inserted_chunks,
                )
        return summary

    def process_url(self, url: str) -> UrlResult:
        """Run one URL to a terminal state (``DONE`` or ``FAILED``).

        Every error raised while fetching or chunking fails this URL only;
        errors outside the taxonomy are logged with their traceback.
        """
        result = UrlResult(url=url, state=UrlState.FETCHING)
        try:
            content = self._fetcher.fetch(url)

            result.state = UrlState.FETCHED
            logger.debug("%s fetched (%d characters)", url, len(content.cleaned_text))

            result.state = UrlState.CHUNKING
            chunks = self._chunker.split(content.cleaned_text, url)
        except FetchError as exc:
            logger.error("Failed to process %s: %s", url, exc)
            return self._fail(result, exc)
        except Exception as exc:
            logger.exception("Failed to process %s", url)
            return self._fail(result, exc)

        result.chunk_count = len(chunks)
        logger.info("Split into %d chunks", len(chunks))

        result.state = UrlState.STORING
        for chunk in chunks:
            if self._embed_and_store(chunk):
                result.inserted_chunks += 1
            else:
                result.failed_chunks += 1

        result.state = UrlState.DONE
        return result

    def close(self) -> None:
        """Release the fetcher's network resources."""
        self._fetcher.close()

    # -- internals ------------------------------------------------------------

    @staticmethod
    def _fail(result: UrlResult, exc: BaseException) -> UrlResult:
        result.state = UrlState.FAILED
        result.error = str(exc) or type(exc).__name__
        return result

    def _embed_and_store(self, chunk: Chunk) -> bool:
        """Embed and insert one chunk; ``False`` when either step failed."""
        try:
            vector = self._embedder.embed(chunk.text)
        except EmbeddingError as exc:
            logger.error("Error creating embedding for chunk %d from %s: %s",
                         chunk.index, chunk.source_url, exc)
            return False
        except Exception:
            logger.exception("Unexpected error embedding chunk %d from %s",
                             chunk.index, chunk.source_url)
            return False

        try:
            record = StoredRecord(
                vector=vector,
                text=chunk.text,
                source_url=chunk.source_url,
                timestamp=self._clock(),
            )
            self._store.insert(self.collection_name, record)
        except InsertError as exc:
            logger.error("Error processing chunk %d from %s: %s",
                         chunk.index, chunk.source_url, exc)
            return False
        except Exception:
            logger.exception("Unexpected error storing chunk %d from %s",
                             chunk.index, chunk.source_url)
            return False
        return True


def log_summary(summary: RunSummary) -> None:
    """Write the end-of-run summary block to the log."""
    for line in summary.report_lines():
        logger.info(line)
