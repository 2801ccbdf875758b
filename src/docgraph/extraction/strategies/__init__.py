"""Extraction strategies, tried in order by ``TextExtractor``."""

from docgraph.extraction.strategies.base import BaseExtractionStrategy
from docgraph.extraction.strategies.ocr import OcrStrategy
from docgraph.extraction.strategies.pdf import PdfStrategy
from docgraph.extraction.strategies.structured import StructuredExtractionStrategy
from docgraph.extraction.strategies.text import PlainTextStrategy

__all__ = [
    "BaseExtractionStrategy",
    "OcrStrategy",
    "PdfStrategy",
    "PlainTextStrategy",
    "StructuredExtractionStrategy",
]
