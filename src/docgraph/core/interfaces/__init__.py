"""Protocols implemented by infrastructure adapters."""

from docgraph.core.interfaces.embedding import EmbeddingProvider
from docgraph.core.interfaces.extractors import EntityMatcher, ExtractionStrategy
from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.interfaces.stores import GraphStore

__all__ = [
    "EmbeddingProvider",
    "EntityMatcher",
    "ExtractionStrategy",
    "GraphStore",
    "ProgressNotifier",
]
