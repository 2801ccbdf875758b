"""Core domain models, protocols and exceptions."""

from docgraph.core.exceptions import (
    ConfigurationError,
    DocGraphError,
    EmbeddingGenerationError,
    ExtractionError,
    ExtractionFailedError,
    GraphStoreError,
    GraphStoreWriteError,
    NodeNotFoundError,
    StructuredExtractionRequiredError,
    UnsupportedDocumentTypeError,
    ValidationError,
    VectorSearchUnsupportedError,
)

__all__ = [
    "ConfigurationError",
    "DocGraphError",
    "EmbeddingGenerationError",
    "ExtractionError",
    "ExtractionFailedError",
    "GraphStoreError",
    "GraphStoreWriteError",
    "NodeNotFoundError",
    "StructuredExtractionRequiredError",
    "UnsupportedDocumentTypeError",
    "ValidationError",
    "VectorSearchUnsupportedError",
]
