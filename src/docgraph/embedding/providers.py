"""Embedding providers."""

import asyncio
from typing import Any

import structlog
from openai import AsyncOpenAI, OpenAIError

from docgraph.core.exceptions import ConfigurationError, EmbeddingGenerationError

logger = structlog.get_logger(__name__)


class OpenAIEmbeddingProvider:
    """Embeddings from the OpenAI embeddings endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-ada-002",
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._client = client or AsyncOpenAI(api_key=api_key)

    @property
    def model_id(self) -> str:
        return self._model

    async def embed_text(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(model=self._model, input=text)
        except OpenAIError as exc:
            raise EmbeddingGenerationError(
                f"Embedding request failed: {exc}",
                details={"model": self._model},
            ) from exc
        except ValueError as exc:
            # Raised by the SDK response parser when ``data`` is empty
            raise EmbeddingGenerationError(
                "Failed to generate embedding",
                details={"model": self._model, "error": str(exc)},
            ) from exc

        if not response.data:
            raise EmbeddingGenerationError(
                "Failed to generate embedding",
                details={"model": self._model},
            )
        return list(response.data[0].embedding)


class LocalEmbeddingProvider:
    """Embeddings from a local sentence-transformers model.

    The model is loaded on first use; encoding runs in a worker thread.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2") -> None:
        self._model_name = model_name
        self._model: Any = None

    @property
    def model_id(self) -> str:
        return self._model_name

    def _load(self) -> Any:
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as exc:
                raise ConfigurationError(
                    "embedding_provider=local requires sentence-transformers "
                    "(pip install 'docgraph[local]')"
                ) from exc
            self._model = SentenceTransformer(self._model_name)
            logger.info("embedding.model_loaded", model=self._model_name)
        return self._model

    def _encode(self, text: str) -> list[float]:
        vector = self._load().encode(text)
        return [float(v) for v in vector]

    async def embed_text(self, text: str) -> list[float]:
        vector = await asyncio.to_thread(self._encode, text)
        if not vector:
            raise EmbeddingGenerationError(
                "Failed to generate embedding",
                details={"model": self._model_name},
            )
        return vector
