"""Text extraction with structured-service-first fallback."""

import uuid
from collections.abc import Sequence

import structlog

from docgraph.core.exceptions import (
    StructuredExtractionRequiredError,
    UnsupportedDocumentTypeError,
)
from docgraph.core.interfaces.extractors import ExtractionStrategy
from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
)
from docgraph.core.models.progress import ProgressStatus
from docgraph.extraction.detector import (
    categorize_by_filename,
    detect_document_type,
    guess_mime_type,
)
from docgraph.notifications import notify_safely

logger = structlog.get_logger(__name__)


class TextExtractor:
    """Turns file bytes into text and, when available, structured elements.

    The structured strategy (if configured) is tried first for every
    document type. When it is unavailable or fails, the first strategy in
    ``strategies`` that handles the type is used. Types with no such
    strategy require the structured service.
    """

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy],
        structured: ExtractionStrategy | None = None,
        notifier: ProgressNotifier | None = None,
    ) -> None:
        self._strategies = list(strategies)
        self._structured = structured
        self._notifier = notifier

    @property
    def has_structured(self) -> bool:
        return self._structured is not None

    def _strategy_for(self, document_type: DocumentType) -> ExtractionStrategy | None:
        for strategy in self._strategies:
            if strategy.handles(document_type):
                return strategy
        return None

    async def extract(
        self,
        content: bytes,
        filename: str,
        options: ExtractionOptions | None = None,
        document_id: str | None = None,
    ) -> ExtractionResult:
        """Extract text from a file.

        Args:
            content: Raw file bytes.
            filename: Original filename; its extension selects the document type.
            options: Extraction options.
            document_id: Id used on progress updates. Generated when omitted.

        Returns:
            ExtractionResult. Strategy failures are reported via ``error``.

        Raises:
            UnsupportedDocumentTypeError: If the extension is not recognised.
            StructuredExtractionRequiredError: If only the structured service
                can handle the type and it did not succeed.
        """
        options = options or ExtractionOptions()
        document_id = document_id or uuid.uuid4().hex
        document_type = detect_document_type(filename)
        log = logger.bind(
            document_id=document_id,
            filename=filename,
            document_type=document_type.value,
        )

        if document_type is DocumentType.UNKNOWN:
            raise UnsupportedDocumentTypeError(
                f"Unsupported document type: {filename}",
                details={"filename": filename},
            )

        base_metadata = {
            "fileSize": len(content),
            "mimeType": guess_mime_type(filename),
            "documentType": document_type.value,
            "category": categorize_by_filename(filename),
        }
        source = ExtractionSource(
            filename=filename,
            content=content,
            document_type=document_type,
            document_id=document_id,
        )

        await self._notify(document_id, "processing", 0, f"Processing {filename}...")

        if self._structured is not None and options.use_structured_extraction:
            result = await self._structured.try_extract(source, options)
            if result.ok:
                log.info("extractor.structured", elements=len(result.elements))
                return await self._finish(document_id, result, base_metadata)
            log.warning("extractor.fallback", reason=result.error)

        strategy = self._strategy_for(document_type)
        if strategy is None:
            await self._notify(
                document_id,
                "failed",
                0,
                f"{document_type.value} documents require structured extraction",
            )
            raise StructuredExtractionRequiredError(
                f"Structured extraction is required for {document_type.value} documents",
                details={"filename": filename, "document_type": document_type.value},
            )

        result = await strategy.try_extract(source, options)
        if result.ok:
            log.info("extractor.complete", strategy=strategy.name, text_length=len(result.text))
        else:
            log.warning("extractor.failed", strategy=strategy.name, error=result.error)
        return await self._finish(document_id, result, base_metadata)

    async def _finish(
        self,
        document_id: str,
        result: ExtractionResult,
        base_metadata: dict,
    ) -> ExtractionResult:
        result = result.model_copy(update={"metadata": {**result.metadata, **base_metadata}})
        if result.ok:
            await self._notify(document_id, "completed", 100, "Document processed successfully")
        else:
            await self._notify(
                document_id, "failed", 0, f"Error processing document: {result.error}"
            )
        return result

    async def _notify(
        self, document_id: str, status: ProgressStatus, progress: int, message: str
    ) -> None:
        await notify_safely(self._notifier, document_id, status, progress, message)
