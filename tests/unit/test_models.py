"""Unit tests for the ingestion domain models."""

from datetime import datetime, timezone
from unittest.mock import patch

from page_ingest.ingestion.models import PageContent, RunSummary, StoredRecord, UrlResult, UrlState, clean_text


def test_clean_text_collapses_all_whitespace() -> None:
    assert clean_text("  Grand\r\n Prix\t\tof\n\nMonaco  ") == "Grand Prix of Monaco"


def test_page_content_viability() -> None:
    page = PageContent(source_url="u", raw_text="a " * 60)
    assert len(page.cleaned_text) == 119
    assert page.is_viable()
    assert not page.is_viable(min_chars=120)


def test_stored_record_defaults_to_utc_timestamp() -> None:
    record = StoredRecord(vector=[1.0], text="t", source_url="u")
    assert record.timestamp.tzinfo is not None
    assert record.metadata()["source_url"] == "u"
    assert datetime.fromisoformat(record.metadata()["timestamp"]) <= datetime.now(timezone.utc)


def test_run_summary_records_outcomes_in_order() -> None:
    summary = RunSummary(total_urls=2)
    summary.record(UrlResult(url="A", state=UrlState.DONE, chunk_count=2, inserted_chunks=2))
    summary.record(UrlResult(url="B", state=UrlState.FAILED, error="timeout"))

    assert summary.processed_urls == 1
    assert summary.inserted_chunks == 2
    assert summary.failed_urls == ["B"]
    assert summary.report_lines() == [
        "=== Processing Summary ===",
        "Total URLs processed successfully: 1/2",
        "Total chunks inserted: 2",
        "Failed URLs:",
        "- B",
    ]


def test_cleaned_text_is_computed_once() -> None:
    page = PageContent(source_url="u", raw_text="lap  \n time " * 20)

    with patch("page_ingest.ingestion.models.clean_text", wraps=clean_text) as cleaner:
        first = page.cleaned_text
        assert page.is_viable()
        assert page.cleaned_text is first

    cleaner.assert_called_once_with(page.raw_text)
    assert page.model_dump()["cleaned_text"] == first
