"""Plain-text sliding-window splitting."""

import re

from docgraph.chunking.config import ChunkingConfig

_WHITESPACE = re.compile(r"\s")


def split_text(text: str, config: ChunkingConfig | None = None) -> list[str]:
    """Split text into overlapping windows.

    Each window is ``chunk_size`` characters, extended to the next
    whitespace within ``boundary_lookahead`` when the text continues. The
    next window starts ``chunk_overlap`` characters before the previous end.
    Chunks are raw slices, so the text can be rebuilt by dropping the first
    ``chunk_overlap`` characters of every chunk after the first.
    """
    config = config or ChunkingConfig()
    if not text:
        return []

    chunks: list[str] = []
    length = len(text)
    start = 0

    while start < length and len(chunks) < config.max_chunks:
        end = min(start + config.chunk_size, length)

        if end < length:
            match = _WHITESPACE.search(text, end, min(end + config.boundary_lookahead, length))
            if match is not None:
                end = match.start()

        chunks.append(text[start:end])

        if end >= length:
            break
        next_start = end - config.chunk_overlap
        if next_start <= start:
            break
        start = next_start

    return chunks
