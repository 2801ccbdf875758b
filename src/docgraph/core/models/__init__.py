"""Domain models."""

from docgraph.core.models.extraction import (
    DocumentType,
    ElementType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
    PageText,
    StructuredElement,
)
from docgraph.core.models.graph import (
    ConnectedNode,
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
    utc_now_iso,
)
from docgraph.core.models.progress import ProgressStatus, ProgressUpdate

__all__ = [
    "ConnectedNode",
    "Direction",
    "DocumentType",
    "EdgeType",
    "ElementType",
    "ExtractionOptions",
    "ExtractionResult",
    "ExtractionSource",
    "KnowledgeEdge",
    "KnowledgeNode",
    "NodeQuery",
    "NodeType",
    "PageText",
    "ProgressStatus",
    "ProgressUpdate",
    "StructuredElement",
    "utc_now_iso",
]
