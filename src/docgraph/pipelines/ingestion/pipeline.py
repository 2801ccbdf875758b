"""File ingestion pipeline: bytes -> extraction -> knowledge graph."""

import uuid
from pathlib import Path
from typing import Any

import structlog

from docgraph.core.exceptions import ExtractionFailedError, ValidationError
from docgraph.core.models.extraction import ExtractionOptions, ExtractionResult
from docgraph.extraction.extractor import TextExtractor
from docgraph.pipelines.ingestion.builder import (
    KnowledgeGraphBuilder,
    ProcessingOptions,
    ProcessingResult,
)

logger = structlog.get_logger(__name__)

_EXTRACTION_METADATA_KEYS = ("fileSize", "mimeType", "documentType", "category")


class IngestionPipeline:
    """Pipeline for ingesting uploaded files into the knowledge graph.

    Orchestrates:
    1. Reject empty or oversized uploads
    2. Extract text (structured service first, then type-specific)
    3. Chunk, embed and store through the builder
    """

    def __init__(
        self,
        extractor: TextExtractor,
        builder: KnowledgeGraphBuilder,
        max_upload_size_bytes: int = 50 * 1024 * 1024,
        extraction_defaults: ExtractionOptions | None = None,
    ) -> None:
        self._extractor = extractor
        self._builder = builder
        self._max_upload_size = max_upload_size_bytes
        self._extraction_defaults = extraction_defaults or ExtractionOptions()

    @property
    def builder(self) -> KnowledgeGraphBuilder:
        return self._builder

    @property
    def extraction_defaults(self) -> ExtractionOptions:
        """Options used when a call passes none; start from these to override one field."""
        return self._extraction_defaults

    async def ingest_bytes(
        self,
        content: bytes,
        filename: str,
        metadata: dict[str, Any] | None = None,
        options: ProcessingOptions | None = None,
        extraction_options: ExtractionOptions | None = None,
    ) -> ProcessingResult:
        """Ingest one file.

        Raises:
            ValidationError: If the file is empty or exceeds the size limit.
            UnsupportedDocumentTypeError: If the extension is not recognised.
            StructuredExtractionRequiredError: If the type needs the
                structured service and it did not succeed.
            ExtractionFailedError: If extraction reported an error.
            EmbeddingGenerationError: If embedding any node fails.
        """
        options = options or ProcessingOptions()
        document_id = uuid.uuid4().hex
        log = logger.bind(filename=filename, document_id=document_id, size=len(content))

        if not content:
            raise ValidationError("File is empty", details={"filename": filename})
        if len(content) > self._max_upload_size:
            raise ValidationError(
                f"File size exceeds the maximum limit of "
                f"{self._max_upload_size // (1024 * 1024)}MB",
                details={"filename": filename, "size": len(content)},
            )

        result = await self._extractor.extract(
            content,
            filename,
            extraction_options or self._extraction_defaults,
            document_id=document_id,
        )
        if not result.ok:
            log.warning("ingestion.extraction_failed", error=result.error)
            raise ExtractionFailedError(
                f"Failed to extract text from {filename}: {result.error}",
                details={"filename": filename, "document_id": document_id},
            )

        document_metadata = self._document_metadata(filename, result, metadata or {})
        if result.elements and options.structured_elements is None:
            options = options.model_copy(update={"structured_elements": result.elements})

        processed = await self._builder.process_document(
            result.text, filename, document_metadata, options
        )
        log.info(
            "ingestion.complete",
            document_key=processed.document_node.key,
            chunks=len(processed.chunk_nodes),
            structured=result.used_structured_extraction,
        )
        return processed

    async def ingest_file(
        self,
        path: str | Path,
        metadata: dict[str, Any] | None = None,
        options: ProcessingOptions | None = None,
        extraction_options: ExtractionOptions | None = None,
    ) -> ProcessingResult:
        path = Path(path)
        return await self.ingest_bytes(
            path.read_bytes(), path.name, metadata, options, extraction_options
        )

    @staticmethod
    def _document_metadata(
        filename: str,
        result: ExtractionResult,
        metadata: dict[str, Any],
    ) -> dict[str, Any]:
        document_metadata: dict[str, Any] = {
            key: result.metadata[key] for key in _EXTRACTION_METADATA_KEYS if key in result.metadata
        }
        document_metadata["filename"] = filename
        document_metadata["usedStructuredExtraction"] = result.used_structured_extraction
        if result.pages:
            document_metadata["pageCount"] = result.metadata.get("page_count", len(result.pages))
        # Caller metadata wins, e.g. an explicit category
        document_metadata.update(metadata)
        return document_metadata
