"""page_ingest — batch ingestion of web pages into a vector collection."""

__version__ = "0.1.0"
