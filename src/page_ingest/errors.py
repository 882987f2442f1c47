"""Exception taxonomy for an ingestion run.

Fatal errors abort the run before any URL is touched; the rest are isolated
at the level where they occur and only reported.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for every error raised by page_ingest."""


class ConfigurationError(IngestError):
    """Raised when required settings are missing or invalid."""


class ProvisionError(IngestError):
    """Raised when the target collection cannot be created or is incompatible."""


class ScrapeError(IngestError):
    """Raised by a page fetcher when a single scrape attempt fails."""


class FetchError(IngestError):
    """Raised when a page could not be fetched within the retry budget.

    Attributes
    ----------
    url:
        The page that failed.
    attempts:
        How many scrape attempts were made before giving up.
    """

    def __init__(self, url: str, attempts: int, message: str | None = None) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(message or f"Failed to fetch {url} after {attempts} attempts")


class EmbeddingError(IngestError):
    """Raised when embedding generation fails."""


class InsertError(IngestError):
    """Raised when a record cannot be persisted."""
