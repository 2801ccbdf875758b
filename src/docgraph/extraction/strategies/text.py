"""Plain text, markdown and HTML extraction."""

from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
    PageText,
)
from docgraph.extraction.strategies.base import BaseExtractionStrategy


def decode_text(content: bytes) -> str:
    """Decode as UTF-8, falling back to latin-1 which accepts any byte."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


class PlainTextStrategy(BaseExtractionStrategy):
    """Returns the decoded file verbatim as a single page."""

    name = "text"
    document_types = frozenset({DocumentType.TEXT, DocumentType.MARKDOWN, DocumentType.HTML})

    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult:
        text = decode_text(source.content)
        return ExtractionResult(
            text=text,
            pages=[PageText(page_number=1, text=text)],
        )
