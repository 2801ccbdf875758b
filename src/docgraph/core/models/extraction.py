"""Models produced by text extraction."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Document types inferred from the file extension."""

    TEXT = "text"
    MARKDOWN = "markdown"
    HTML = "html"
    PDF = "pdf"
    IMAGE = "image"
    DOCX = "docx"
    PPTX = "pptx"
    XLSX = "xlsx"
    EMAIL = "email"
    UNKNOWN = "unknown"


class ElementType(str, Enum):
    """Kinds of structured elements returned by enhanced extraction."""

    TITLE = "Title"
    HEADER = "Header"
    NARRATIVE_TEXT = "NarrativeText"
    LIST = "List"
    LIST_ITEM = "ListItem"
    TABLE = "Table"
    IMAGE = "Image"
    FORMULA = "Formula"
    FOOTER = "Footer"
    PAGE_BREAK = "PageBreak"
    TABLE_OF_CONTENTS = "TableOfContents"
    ADDRESS = "Address"
    ENTITY = "Entity"
    UNCATEGORIZED = "UncategorizedText"

    @classmethod
    def from_label(cls, label: str | None) -> "ElementType":
        """Map a service label (``"Title"``) or enum name (``"TITLE"``) to a type."""
        if label:
            for member in cls:
                if label in (member.value, member.name):
                    return member
        return cls.UNCATEGORIZED


class StructuredElement(BaseModel):
    """A typed text fragment. Consumed by chunking and entity extraction only."""

    type: ElementType
    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    element_id: str | None = None


class PageText(BaseModel):
    """Text of a single page (or the single region of an image)."""

    page_number: int
    text: str


class ExtractionOptions(BaseModel):
    """Options passed to extraction strategies."""

    languages: list[str] = Field(default_factory=lambda: ["eng"])
    max_pages: int | None = None
    ocr_enabled: bool = True
    use_structured_extraction: bool = True
    extract_tables: bool = True
    strategy: Literal["auto", "hi_res", "fast"] = "auto"
    chunking_strategy: Literal["by_title", "by_paragraph", "none"] = "by_title"


class ExtractionSource(BaseModel):
    """Raw file handed to the extraction strategies."""

    filename: str
    content: bytes
    document_type: DocumentType
    document_id: str


class ExtractionResult(BaseModel):
    """Outcome of an extraction attempt.

    Failures are reported through ``error`` instead of raising so batch
    callers can continue with the next file.
    """

    text: str = ""
    elements: list[StructuredElement] = Field(default_factory=list)
    pages: list[PageText] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    used_structured_extraction: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str, **metadata: Any) -> "ExtractionResult":
        return cls(error=error, metadata=metadata)
