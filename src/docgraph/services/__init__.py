"""Application services."""

from docgraph.services.knowledge import KnowledgeService

__all__ = ["KnowledgeService"]
