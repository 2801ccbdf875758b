"""Exception hierarchy for docgraph."""

from typing import Any


class DocGraphError(Exception):
    """Base exception for all docgraph errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DocGraphError):
    """Invalid or missing configuration."""


class ValidationError(DocGraphError):
    """Input rejected before any processing started."""


class ExtractionError(DocGraphError):
    """Base class for text extraction failures."""


class UnsupportedDocumentTypeError(ExtractionError):
    """The file type cannot be processed by any extraction path."""


class StructuredExtractionRequiredError(ExtractionError):
    """The file type needs the structured-extraction service and it failed."""


class ExtractionFailedError(ExtractionError):
    """An extraction result carried an error (OCR, PDF or service failure)."""


class EmbeddingGenerationError(DocGraphError):
    """The embedding provider returned no vector."""


class GraphStoreError(DocGraphError):
    """Base class for graph store failures."""


class GraphStoreWriteError(GraphStoreError):
    """A node or edge write did not reach the store."""


class VectorSearchUnsupportedError(GraphStoreError):
    """The store cannot order nodes by vector distance."""


class NodeNotFoundError(GraphStoreError):
    """A referenced node does not exist."""
