"""Text chunking strategies."""

from __future__ import annotations

from typing import Literal

from langchain_text_splitters import RecursiveCharacterTextSplitter

from page_ingest.ingestion.models import Chunk

ChunkStrategy = Literal["window", "recursive"]


class TextChunker:
    """Split cleaned page text into ordered, overlapping chunks.

    Sizes are measured in characters.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.
    strategy:
        ``"window"`` cuts fixed windows with a stride of
        ``chunk_size - chunk_overlap``: every chunk but the last is exactly
        *chunk_size* long and neighbours share exactly *chunk_overlap*
        characters.  ``"recursive"`` delegates to LangChain's
        ``RecursiveCharacterTextSplitter``, which prefers sentence and word
        boundaries at the cost of an approximate overlap.
    """

    def __init__(
        self,
        chunk_size: int = 512,
        chunk_overlap: int = 100,
        strategy: ChunkStrategy = "window",
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
            )
        if strategy not in ("window", "recursive"):
            raise ValueError(f"Unsupported chunk strategy={strategy!r}. Choose from: window, recursive.")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.strategy = strategy
        self._splitter: RecursiveCharacterTextSplitter | None = None
        if strategy == "recursive":
            self._splitter = RecursiveCharacterTextSplitter(
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
                length_function=len,
                separators=["\n\n", "\n", ". ", " ", ""],
            )

    def _windows(self, text: str) -> list[str]:
        stride = self.chunk_size - self.chunk_overlap
        pieces: list[str] = []
        start = 0
        while True:
            end = start + self.chunk_size
            pieces.append(text[start:end])
            if end >= len(text):
                return pieces
            start += stride

    def split(self, text: str, source_url: str = "") -> list[Chunk]:
        """Return the chunks of *text* in order; empty text yields ``[]``."""
        if not text:
            return []
        if self._splitter is not None:
            pieces = self._splitter.split_text(text)
        else:
            pieces = self._windows(text)
        return [Chunk(text=piece, index=idx, source_url=source_url) for idx, piece in enumerate(pieces)]
