"""Text extraction from uploaded files."""

from docgraph.extraction.detector import (
    categorize_by_filename,
    detect_document_type,
    guess_mime_type,
)
from docgraph.extraction.extractor import TextExtractor
from docgraph.extraction.strategies import (
    OcrStrategy,
    PdfStrategy,
    PlainTextStrategy,
    StructuredExtractionStrategy,
)
from docgraph.extraction.structured_client import StructuredExtractionClient

__all__ = [
    "OcrStrategy",
    "PdfStrategy",
    "PlainTextStrategy",
    "StructuredExtractionClient",
    "StructuredExtractionStrategy",
    "TextExtractor",
    "categorize_by_filename",
    "detect_document_type",
    "guess_mime_type",
]
