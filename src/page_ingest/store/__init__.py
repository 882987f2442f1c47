"""
Store — persistence of embedded chunks into a vector-indexed collection.

Public surface
--------------
- :class:`RecordStore` — abstract backend (subclass for other databases).
- :class:`ChromaRecordStore` — default Chroma backend.
"""

from page_ingest.store.base import RecordStore

__all__ = [
    "ChromaRecordStore",
    "RecordStore",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaRecordStore to avoid pulling in chromadb at import time."""
    if name == "ChromaRecordStore":
        from page_ingest.store.chroma_store import ChromaRecordStore

        return ChromaRecordStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
