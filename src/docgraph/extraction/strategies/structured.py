"""Extraction through the structured-extraction service."""

from typing import Any

import httpx
import structlog

from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.models.extraction import (
    DocumentType,
    ElementType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
    PageText,
    StructuredElement,
)
from docgraph.extraction.strategies.base import BaseExtractionStrategy
from docgraph.extraction.structured_client import StructuredExtractionClient

logger = structlog.get_logger(__name__)

_PER_ELEMENT_KEYS = frozenset({"page_number", "filename"})


def _pages(elements: list[StructuredElement]) -> list[PageText]:
    by_page: dict[int, list[str]] = {}
    for element in elements:
        page_number = element.metadata.get("page_number")
        if isinstance(page_number, int) and element.text:
            by_page.setdefault(page_number, []).append(element.text)
    return [
        PageText(page_number=number, text="\n\n".join(texts))
        for number, texts in sorted(by_page.items())
    ]


def _document_metadata(elements: list[StructuredElement]) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    for element in elements:
        for key, value in element.metadata.items():
            if key not in _PER_ELEMENT_KEYS:
                metadata[key] = value
    return metadata


class StructuredExtractionStrategy(BaseExtractionStrategy):
    """Partitions any document type into typed elements via the service."""

    name = "structured"

    def __init__(
        self,
        client: StructuredExtractionClient,
        notifier: ProgressNotifier | None = None,
    ) -> None:
        super().__init__(notifier)
        self._client = client

    def handles(self, document_type: DocumentType) -> bool:
        return document_type is not DocumentType.UNKNOWN

    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult:
        if not await self._client.is_available():
            return ExtractionResult.failure("Structured extraction service is unavailable")

        await self._progress(source, 20, "Sending document to structured extraction...")
        try:
            elements = await self._client.partition(source.filename, source.content, options)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "structured_extraction.failed",
                document_id=source.document_id,
                filename=source.filename,
                error=str(exc),
            )
            return ExtractionResult.failure(f"Structured extraction failed: {exc}")
        await self._progress(source, 80, "Structured extraction completed, finalizing...")

        text = "\n\n".join(
            e.text for e in elements if e.type is not ElementType.PAGE_BREAK and e.text
        )
        if not text.strip():
            logger.warning(
                "structured_extraction.empty",
                document_id=source.document_id,
                filename=source.filename,
                elements=len(elements),
            )
            return ExtractionResult.failure("Structured extraction returned no text")
        return ExtractionResult(
            text=text,
            elements=elements,
            pages=_pages(elements),
            metadata=_document_metadata(elements),
            used_structured_extraction=True,
        )
