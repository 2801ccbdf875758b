"""Extraction strategy and entity matching protocols."""

from typing import Protocol

from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
)
from docgraph.core.models.graph import KnowledgeNode


class ExtractionStrategy(Protocol):
    """One link in the extraction fallback chain.

    Strategies never raise for extraction failures; they return an
    ``ExtractionResult`` whose ``error`` is set.
    """

    @property
    def name(self) -> str: ...

    def handles(self, document_type: DocumentType) -> bool:
        """Check if this strategy can process the given document type."""
        ...

    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult:
        """Extract text from the source.

        Args:
            source: The raw file and its inferred type.
            options: Language hints, page limits and feature switches.

        Returns:
            ExtractionResult, with ``error`` set on failure.
        """
        ...


class EntityMatcher(Protocol):
    """Decides whether a stored ENTITY node is the same entity as new text."""

    def is_same_entity(self, candidate: KnowledgeNode, text: str, category: str) -> bool: ...
