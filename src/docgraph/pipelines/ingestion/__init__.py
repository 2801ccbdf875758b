"""Document ingestion into the knowledge graph."""

from docgraph.pipelines.ingestion.builder import (
    KnowledgeGraphBuilder,
    ProcessingOptions,
    ProcessingResult,
)
from docgraph.pipelines.ingestion.matching import NormalizedNameMatcher
from docgraph.pipelines.ingestion.pipeline import IngestionPipeline

__all__ = [
    "IngestionPipeline",
    "KnowledgeGraphBuilder",
    "NormalizedNameMatcher",
    "ProcessingOptions",
    "ProcessingResult",
]
