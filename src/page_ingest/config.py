"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from page_ingest.errors import ConfigurationError
from page_ingest.sources import DEFAULT_SOURCE_URLS

SimilarityMetric = Literal["dot_product", "cosine", "euclidean"]

# Settings that have no usable default; a run cannot start without them.
REQUIRED_SETTINGS: tuple[str, ...] = (
    "chroma_host",
    "chroma_auth_token",
    "chroma_database",
    "chroma_collection",
    "openai_api_key",
)


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Vector store
    chroma_host: str = Field(default="", description="Chroma server hostname or endpoint")
    chroma_port: int = 8000
    chroma_ssl: bool = False
    chroma_auth_token: str = Field(default="", description="Bearer token sent to the Chroma server")
    chroma_tenant: str = "default_tenant"
    chroma_database: str = Field(default="", description="Chroma database used as the record namespace")
    chroma_collection: str = Field(default="", description="Collection receiving the chunk records")
    similarity_metric: SimilarityMetric = "dot_product"

    # Embedding
    openai_api_key: str = Field(default="", description="OpenAI API key used for embeddings")
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536

    # Chunking
    chunk_size: int = 512
    chunk_overlap: int = 100
    chunk_strategy: Literal["window", "recursive"] = "window"

    # Fetching
    fetch_max_attempts: int = 3
    fetch_backoff_seconds: float = 5.0
    min_content_chars: int = 100
    request_timeout: int = 60
    request_deadline: float = 120
    source_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_URLS),
        validation_alias="page_ingest_source_urls",
        description="JSON list of pages to ingest",
    )

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def missing_required(self) -> list[str]:
        """Return the environment variable names of unset required settings."""
        return [name.upper() for name in REQUIRED_SETTINGS if not getattr(self, name)]


def load_settings() -> Settings:
    """Build fresh settings and fail fast when any required value is missing.

    Raises
    ------
    ConfigurationError
        Listing every missing environment variable at once.
    """
    loaded = Settings()
    missing = loaded.missing_required()
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return loaded


# Singleton — import `settings` wherever defaults are needed.
settings = Settings()
