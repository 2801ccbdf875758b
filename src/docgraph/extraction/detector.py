"""Document type detection and filename categorisation."""

import mimetypes
from pathlib import PurePath

from docgraph.core.models.extraction import DocumentType

EXTENSION_TYPES: dict[str, DocumentType] = {
    "txt": DocumentType.TEXT,
    "csv": DocumentType.TEXT,
    "json": DocumentType.TEXT,
    "xml": DocumentType.TEXT,
    "md": DocumentType.MARKDOWN,
    "markdown": DocumentType.MARKDOWN,
    "html": DocumentType.HTML,
    "htm": DocumentType.HTML,
    "pdf": DocumentType.PDF,
    "png": DocumentType.IMAGE,
    "jpg": DocumentType.IMAGE,
    "jpeg": DocumentType.IMAGE,
    "gif": DocumentType.IMAGE,
    "bmp": DocumentType.IMAGE,
    "webp": DocumentType.IMAGE,
    "tiff": DocumentType.IMAGE,
    "tif": DocumentType.IMAGE,
    "doc": DocumentType.DOCX,
    "docx": DocumentType.DOCX,
    "ppt": DocumentType.PPTX,
    "pptx": DocumentType.PPTX,
    "xls": DocumentType.XLSX,
    "xlsx": DocumentType.XLSX,
    "eml": DocumentType.EMAIL,
    "msg": DocumentType.EMAIL,
}

CATEGORY_EXTENSIONS: dict[str, frozenset[str]] = {
    "Documents": frozenset({"pdf", "doc", "docx"}),
    "Financial": frozenset({"xls", "xlsx", "csv"}),
    "Media": frozenset({"jpg", "jpeg", "png", "gif", "mp4"}),
    "Archives": frozenset({"zip", "rar"}),
}


def file_extension(filename: str) -> str:
    """Lowercased extension without the dot, or ``""``."""
    return PurePath(filename).suffix.lstrip(".").lower()


def detect_document_type(filename: str) -> DocumentType:
    return EXTENSION_TYPES.get(file_extension(filename), DocumentType.UNKNOWN)


def categorize_by_filename(filename: str) -> str:
    """Coarse category used as default ``category`` metadata on upload."""
    extension = file_extension(filename)
    for category, extensions in CATEGORY_EXTENSIONS.items():
        if extension in extensions:
            return category
    return "Other"


def guess_mime_type(filename: str) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"
