"""Embedding provider protocol."""

from typing import Protocol


class EmbeddingProvider(Protocol):
    """Maps text to a fixed-length vector."""

    @property
    def model_id(self) -> str: ...

    async def embed_text(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            EmbeddingGenerationError: If the provider returned no vector.
        """
        ...
