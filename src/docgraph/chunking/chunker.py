"""Chunker facade choosing between plain and structured chunking."""

import structlog

from docgraph.chunking.base import split_text
from docgraph.chunking.config import ChunkingConfig
from docgraph.chunking.structured import chunk_elements
from docgraph.core.models.extraction import StructuredElement

logger = structlog.get_logger(__name__)


class Chunker:
    """Splits extracted text into ordered chunk texts.

    Structured elements take precedence over the raw text when present.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self._config = config or ChunkingConfig()

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    def chunk(
        self,
        text: str,
        structured_elements: list[StructuredElement] | None = None,
        config: ChunkingConfig | None = None,
    ) -> list[str]:
        config = config or self._config
        chunks: list[str] = []
        strategy = "plain"
        if structured_elements:
            chunks = chunk_elements(structured_elements, config)
            strategy = "structured"
        if not chunks:
            chunks = split_text(text, config)
            strategy = "plain"

        logger.debug(
            "chunker.complete",
            strategy=strategy,
            text_length=len(text),
            chunks=len(chunks),
        )
        return chunks
