"""PDF text extraction with pypdf."""

import asyncio
import io
from typing import Any

import structlog
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
    PageText,
)
from docgraph.extraction.strategies.base import BaseExtractionStrategy

logger = structlog.get_logger(__name__)

_INFO_FIELDS = {
    "title": "/Title",
    "author": "/Author",
    "creation_date": "/CreationDate",
    "modification_date": "/ModDate",
}


def _document_info(reader: PdfReader) -> dict[str, Any]:
    info = reader.metadata
    if info is None:
        return {}
    result: dict[str, Any] = {}
    for field, key in _INFO_FIELDS.items():
        value = info.get(key)
        if value is not None:
            result[field] = str(value)
    return result


class PdfStrategy(BaseExtractionStrategy):
    """Page-by-page text extraction, bounded by ``max_pages``."""

    name = "pdf"
    document_types = frozenset({DocumentType.PDF})

    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult:
        log = logger.bind(document_id=source.document_id, filename=source.filename)
        try:
            reader = await asyncio.to_thread(PdfReader, io.BytesIO(source.content))
        except (PyPdfError, ValueError, OSError) as exc:
            log.warning("pdf.read_failed", error=str(exc))
            return ExtractionResult.failure(f"Could not read PDF: {exc}")

        if reader.is_encrypted:
            return ExtractionResult.failure("PDF is encrypted")

        page_count = len(reader.pages)
        to_process = min(page_count, options.max_pages or page_count)

        pages: list[PageText] = []
        try:
            for index in range(to_process):
                await self._progress(
                    source,
                    round((index + 1) / to_process * 100),
                    f"Processing page {index + 1} of {to_process}...",
                )
                page_text = await asyncio.to_thread(reader.pages[index].extract_text)
                pages.append(PageText(page_number=index + 1, text=page_text or ""))
        except (PyPdfError, ValueError, KeyError) as exc:
            log.warning("pdf.page_failed", page=len(pages) + 1, error=str(exc))
            return ExtractionResult.failure(f"Could not extract PDF page {len(pages) + 1}: {exc}")

        metadata = _document_info(reader)
        metadata["page_count"] = page_count
        log.debug("pdf.extracted", pages=len(pages), page_count=page_count)

        return ExtractionResult(
            text="".join(f"{page.text}\n\n" for page in pages),
            pages=pages,
            metadata=metadata,
        )
