"""Embedding providers."""

from docgraph.embedding.factory import create_embedding_provider
from docgraph.embedding.providers import LocalEmbeddingProvider, OpenAIEmbeddingProvider

__all__ = ["LocalEmbeddingProvider", "OpenAIEmbeddingProvider", "create_embedding_provider"]
