"""Embedding provider factory."""

from typing import TYPE_CHECKING

from docgraph.core.interfaces.embedding import EmbeddingProvider
from docgraph.embedding.providers import LocalEmbeddingProvider, OpenAIEmbeddingProvider

if TYPE_CHECKING:
    from docgraph.config.settings import Settings


def create_embedding_provider(settings: "Settings") -> EmbeddingProvider:
    """Create the provider selected by ``settings.embedding_provider``."""
    provider = settings.embedding_provider.lower()
    if provider == "openai":
        return OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_embedding_model,
        )
    if provider == "local":
        return LocalEmbeddingProvider(settings.local_embedding_model)
    raise ValueError(f"Unknown embedding provider: {provider}")
