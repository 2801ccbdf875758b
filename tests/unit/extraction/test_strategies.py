"""Tests for the PDF and OCR strategies."""

import io
from unittest.mock import patch

import pytest
from PIL import Image
from pypdf import PdfWriter

from docgraph.core.models.extraction import DocumentType, ExtractionOptions, ExtractionSource
from docgraph.extraction import OcrStrategy, PdfStrategy
from docgraph.extraction.strategies import ocr as ocr_module


def _pdf_bytes(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Title": "Blank Pages", "/Author": "QA"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def _source(content: bytes, filename: str, document_type: DocumentType) -> ExtractionSource:
    return ExtractionSource(
        filename=filename,
        content=content,
        document_type=document_type,
        document_id="doc-1",
    )


@pytest.mark.unit
class TestPdfStrategy:
    async def test_extracts_pages_and_metadata(self) -> None:
        source = _source(_pdf_bytes(3), "blank.pdf", DocumentType.PDF)

        result = await PdfStrategy().try_extract(source, ExtractionOptions())

        assert result.ok
        assert [p.page_number for p in result.pages] == [1, 2, 3]
        assert result.metadata["page_count"] == 3
        assert result.metadata["title"] == "Blank Pages"
        assert result.metadata["author"] == "QA"

    async def test_max_pages_limits_extraction(self, notifier) -> None:
        source = _source(_pdf_bytes(3), "blank.pdf", DocumentType.PDF)

        result = await PdfStrategy(notifier).try_extract(source, ExtractionOptions(max_pages=2))

        assert len(result.pages) == 2
        assert result.metadata["page_count"] == 3
        assert [u.progress for u in notifier.updates] == [50, 100]

    async def test_unreadable_pdf_is_an_error_result(self) -> None:
        source = _source(b"this is not a pdf", "broken.pdf", DocumentType.PDF)

        result = await PdfStrategy().try_extract(source, ExtractionOptions())

        assert not result.ok
        assert "Could not read PDF" in result.error

    async def test_encrypted_pdf_is_an_error_result(self) -> None:
        writer = PdfWriter()
        writer.add_blank_page(width=200, height=200)
        writer.encrypt("secret")
        buffer = io.BytesIO()
        writer.write(buffer)
        source = _source(buffer.getvalue(), "locked.pdf", DocumentType.PDF)

        result = await PdfStrategy().try_extract(source, ExtractionOptions())

        assert result.error == "PDF is encrypted"


@pytest.mark.unit
class TestOcrStrategy:
    async def test_recognises_text_with_confidence(self, notifier) -> None:
        source = _source(_png_bytes(), "scan.png", DocumentType.IMAGE)

        with (
            patch.object(ocr_module.pytesseract, "image_to_string", return_value="Invoice 42"),
            patch.object(
                ocr_module.pytesseract,
                "image_to_data",
                return_value={"conf": ["90", "-1", "80"]},
            ),
        ):
            result = await OcrStrategy(notifier).try_extract(source, ExtractionOptions())

        assert result.text == "Invoice 42"
        assert result.metadata["confidence"] == 85.0
        assert result.pages[0].text == "Invoice 42"
        assert [u.progress for u in notifier.updates] == [0, 20, 80]

    async def test_ocr_disabled(self) -> None:
        source = _source(_png_bytes(), "scan.png", DocumentType.IMAGE)

        result = await OcrStrategy().try_extract(source, ExtractionOptions(ocr_enabled=False))

        assert result.error == "OCR is disabled"

    async def test_invalid_image_is_an_error_result(self) -> None:
        source = _source(b"not an image", "scan.png", DocumentType.IMAGE)

        result = await OcrStrategy().try_extract(source, ExtractionOptions())

        assert not result.ok
        assert result.error.startswith("OCR failed")
