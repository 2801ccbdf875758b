"""Image OCR with pytesseract."""

import asyncio
import io

import pytesseract
import structlog
from PIL import Image, UnidentifiedImageError

from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
    PageText,
)
from docgraph.extraction.strategies.base import BaseExtractionStrategy

logger = structlog.get_logger(__name__)


def _recognize(content: bytes, lang: str) -> tuple[str, float | None]:
    with Image.open(io.BytesIO(content)) as image:
        text = pytesseract.image_to_string(image, lang=lang)
        data = pytesseract.image_to_data(image, lang=lang, output_type=pytesseract.Output.DICT)

    confidences = [float(c) for c in data.get("conf", []) if float(c) >= 0]
    confidence = sum(confidences) / len(confidences) if confidences else None
    return text, confidence


class OcrStrategy(BaseExtractionStrategy):
    """Recognises text in an image and reports mean word confidence."""

    name = "ocr"
    document_types = frozenset({DocumentType.IMAGE})

    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult:
        if not options.ocr_enabled:
            return ExtractionResult.failure("OCR is disabled")

        lang = "+".join(options.languages)
        await self._progress(source, 0, "Processing image document with OCR...")
        await self._progress(source, 20, "OCR engine initialized, recognizing text...")
        try:
            text, confidence = await asyncio.to_thread(_recognize, source.content, lang)
        except (UnidentifiedImageError, pytesseract.TesseractError, OSError) as exc:
            logger.warning(
                "ocr.failed",
                document_id=source.document_id,
                filename=source.filename,
                error=str(exc),
            )
            return ExtractionResult.failure(f"OCR failed: {exc}")
        await self._progress(source, 80, "Text recognition completed, finalizing...")

        return ExtractionResult(
            text=text,
            pages=[PageText(page_number=1, text=text)],
            metadata={"confidence": confidence, "languages": options.languages},
        )
