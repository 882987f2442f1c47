"""Chunk embedding — the contract plus the OpenAI-backed default."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from langchain_openai import OpenAIEmbeddings

from page_ingest.config import settings
from page_ingest.errors import EmbeddingError

logger = logging.getLogger(__name__)


class Embedder(ABC):
    """Map a chunk of text to a fixed-length vector."""

    def __init__(self, dimension: int) -> None:
        self.dimension = dimension

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*; raise ``EmbeddingError`` on failure."""
        ...

    def _check_dimension(self, vector: list[float]) -> list[float]:
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimension}"
            )
        return vector


class OpenAIEmbedder(Embedder):
    """Embed text with an OpenAI embedding model through LangChain.

    Parameters
    ----------
    api_key:
        OpenAI API key.
    model:
        Embedding model identifier.
    dimension:
        Expected vector length; must match the collection's dimension.
    """

    def __init__(
        self,
        *,
        api_key: str = settings.openai_api_key,
        model: str = settings.embedding_model,
        dimension: int = settings.embedding_dimension,
    ) -> None:
        super().__init__(dimension)
        self.model = model
        self._client = OpenAIEmbeddings(model=model, api_key=api_key)

    def embed(self, text: str) -> list[float]:
        try:
            vector = self._client.embed_query(text)
        except Exception as exc:
            raise EmbeddingError(f"Embedding request to {self.model} failed: {exc}") from exc
        return self._check_dimension(list(vector))
