"""Abstract base class for record-store backends.

Adding a new backend only requires subclassing :class:`RecordStore` and
implementing the two abstract methods.  The ingestion pipeline never needs
to know which database sits behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from page_ingest.config import SimilarityMetric
from page_ingest.ingestion.models import StoredRecord


class RecordStore(ABC):
    """Backend-agnostic persistence for embedded chunks."""

    @abstractmethod
    def provision_collection(
        self,
        name: str,
        dimension: int,
        metric: SimilarityMetric,
    ) -> None:
        """Create collection *name* unless it already exists.

        An existing collection with the same *dimension* and *metric* is
        accepted as-is.

        Raises
        ------
        ProvisionError
            When creation fails or the existing collection is incompatible.
        """
        ...

    @abstractmethod
    def insert(self, collection_name: str, record: StoredRecord) -> None:
        """Persist one record; raise ``InsertError`` on any failure."""
        ...
