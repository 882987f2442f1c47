"""Command-line driver: provision the collection, then ingest every source URL.

Run
---
    page-ingest
    # or
    python -m page_ingest

Configuration comes entirely from the environment / ``.env`` file (see
:mod:`page_ingest.config`).  Per-URL and per-chunk failures are reported in
the summary and do not change the exit status; only a failure during setup
or provisioning, or an unexpected error, exits non-zero.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from page_ingest.config import Settings, load_settings
from page_ingest.ingestion.chunker import TextChunker
from page_ingest.ingestion.embedder import OpenAIEmbedder
from page_ingest.ingestion.fetcher import HttpPageFetcher, RetryingFetcher
from page_ingest.ingestion.models import RunSummary
from page_ingest.ingestion.pipeline import IngestionPipeline, log_summary
from page_ingest.ingestion.retry import linear_backoff
from page_ingest.store.base import RecordStore

logger = logging.getLogger(__name__)


def build_store(cfg: Settings) -> RecordStore:
    from page_ingest.store.chroma_store import ChromaRecordStore

    return ChromaRecordStore(
        host=cfg.chroma_host,
        port=cfg.chroma_port,
        ssl=cfg.chroma_ssl,
        auth_token=cfg.chroma_auth_token,
        tenant=cfg.chroma_tenant,
        database=cfg.chroma_database,
    )


def build_pipeline(cfg: Settings, store: RecordStore) -> IngestionPipeline:
    """Wire the default collaborators from *cfg* around *store*."""
    fetcher = RetryingFetcher(
        HttpPageFetcher(timeout=cfg.request_timeout, deadline=cfg.request_deadline),
        max_attempts=cfg.fetch_max_attempts,
        backoff=linear_backoff(cfg.fetch_backoff_seconds),
        min_chars=cfg.min_content_chars,
    )
    chunker = TextChunker(
        chunk_size=cfg.chunk_size,
        chunk_overlap=cfg.chunk_overlap,
        strategy=cfg.chunk_strategy,
    )
    embedder = OpenAIEmbedder(
        api_key=cfg.openai_api_key,
        model=cfg.embedding_model,
        dimension=cfg.embedding_dimension,
    )
    return IngestionPipeline(fetcher, chunker, embedder, store, cfg.chroma_collection)


def run(cfg: Settings, store: RecordStore | None = None) -> RunSummary:
    """Provision the collection and ingest ``cfg.source_urls``."""
    store = store or build_store(cfg)
    store.provision_collection(
        cfg.chroma_collection,
        dimension=cfg.embedding_dimension,
        metric=cfg.similarity_metric,
    )
    pipeline = build_pipeline(cfg, store)
    try:
        summary = pipeline.ingest(cfg.source_urls)
    finally:
        pipeline.close()
    log_summary(summary)
    return summary


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="page-ingest",
        description="Fetch the configured pages, chunk and embed them, and store the vectors.",
    )
    parser.parse_args(argv)

    try:
        cfg = load_settings()
        logging.basicConfig(
            level=cfg.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        run(cfg)
    except Exception:
        logging.basicConfig(level=logging.INFO)
        logger.exception("Error in main execution")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
