"""Chunking over structured elements from the extraction service."""

from docgraph.chunking.base import split_text
from docgraph.chunking.config import ChunkingConfig
from docgraph.core.models.extraction import ElementType, StructuredElement

TITLE_TYPES = frozenset({ElementType.TITLE, ElementType.HEADER})
PARAGRAPH_TYPES = frozenset({ElementType.NARRATIVE_TEXT})
LIST_TYPES = frozenset({ElementType.LIST, ElementType.LIST_ITEM})
TABLE_TYPES = frozenset({ElementType.TABLE})


def _texts(elements: list[StructuredElement], types: frozenset[ElementType]) -> list[str]:
    return [e.text for e in elements if e.type in types]


def chunk_elements(
    elements: list[StructuredElement],
    config: ChunkingConfig | None = None,
) -> list[str]:
    """Group structured elements into section chunks.

    Each title starts a chunk holding the title and the paragraphs after it,
    up to the first paragraph that contains the next title's text. The last
    title takes every remaining paragraph. Lists, tables and paragraphs no
    title claimed form one trailing chunk. Without titles the paragraphs,
    lists and tables are joined and split as plain text.

    Sections longer than ``chunk_size`` are not split further.
    """
    config = config or ChunkingConfig()

    titles = _texts(elements, TITLE_TYPES)
    paragraphs = _texts(elements, PARAGRAPH_TYPES)
    lists = _texts(elements, LIST_TYPES)
    tables = _texts(elements, TABLE_TYPES)

    if not titles:
        text = "\n\n".join(paragraphs + lists + tables)
        return split_text(text, config)

    sections: list[str] = []
    cursor = 0
    for i, title in enumerate(titles):
        next_title = titles[i + 1] if i + 1 < len(titles) else None
        body: list[str] = []
        while cursor < len(paragraphs):
            paragraph = paragraphs[cursor]
            if next_title is not None and next_title in paragraph:
                break
            body.append(paragraph)
            cursor += 1
        sections.append("\n\n".join([title, *body]))

    remainder = paragraphs[cursor:] + lists + tables
    if remainder:
        sections.append("\n\n".join(remainder))

    return [s for s in sections if s.strip()][: config.max_chunks]
