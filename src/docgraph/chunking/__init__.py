"""Chunking of extracted text."""

from docgraph.chunking.base import split_text
from docgraph.chunking.chunker import Chunker
from docgraph.chunking.config import ChunkingConfig
from docgraph.chunking.structured import chunk_elements

__all__ = ["Chunker", "ChunkingConfig", "chunk_elements", "split_text"]
