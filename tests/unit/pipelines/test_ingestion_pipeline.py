"""Tests for IngestionPipeline."""

from pathlib import Path

import httpx
import pytest

from docgraph.core.exceptions import (
    ExtractionFailedError,
    StructuredExtractionRequiredError,
    UnsupportedDocumentTypeError,
    ValidationError,
)
from docgraph.core.models.extraction import ExtractionOptions
from docgraph.core.models.graph import EdgeType, NodeType
from docgraph.extraction import (
    OcrStrategy,
    PlainTextStrategy,
    StructuredExtractionClient,
    StructuredExtractionStrategy,
    TextExtractor,
)
from docgraph.pipelines.ingestion import (
    IngestionPipeline,
    KnowledgeGraphBuilder,
    ProcessingOptions,
)
from docgraph.stores import NetworkXGraphStore

ENDPOINT = "http://extract.local/general/v0/general"

ELEMENTS = [
    {"type": "Title", "text": "Overview", "metadata": {"page_number": 1}},
    {"type": "NarrativeText", "text": "Acme Corp builds rockets.", "metadata": {}},
    {"type": "Entity", "text": "Acme Corp", "metadata": {"category": "Organization"}},
]


def _structured_service(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/health":
        return httpx.Response(200, json={"status": "ok"})
    return httpx.Response(200, json=ELEMENTS)


def _pipeline(
    builder: KnowledgeGraphBuilder, structured: bool = False, **kwargs
) -> IngestionPipeline:
    strategy = None
    if structured:
        client = StructuredExtractionClient(
            ENDPOINT, transport=httpx.MockTransport(_structured_service)
        )
        strategy = StructuredExtractionStrategy(client)
    extractor = TextExtractor([PlainTextStrategy(), OcrStrategy()], structured=strategy)
    return IngestionPipeline(extractor, builder, **kwargs)


@pytest.mark.unit
class TestValidation:
    async def test_rejects_empty_file(self, builder: KnowledgeGraphBuilder) -> None:
        with pytest.raises(ValidationError, match="empty"):
            await _pipeline(builder).ingest_bytes(b"", "empty.txt")

    async def test_rejects_oversized_file(
        self, builder: KnowledgeGraphBuilder, store: NetworkXGraphStore
    ) -> None:
        pipeline = _pipeline(builder, max_upload_size_bytes=2 * 1024 * 1024)

        with pytest.raises(ValidationError, match="maximum limit of 2MB"):
            await pipeline.ingest_bytes(b"x" * (2 * 1024 * 1024 + 1), "big.txt")

        assert await store.count_nodes() == 0

    async def test_unknown_extension(self, builder: KnowledgeGraphBuilder) -> None:
        with pytest.raises(UnsupportedDocumentTypeError):
            await _pipeline(builder).ingest_bytes(b"PK\x03\x04", "archive.zip")

    async def test_type_without_fallback_needs_structured_service(
        self, builder: KnowledgeGraphBuilder
    ) -> None:
        with pytest.raises(StructuredExtractionRequiredError):
            await _pipeline(builder).ingest_bytes(b"binary", "report.docx")

    async def test_failed_extraction_stores_nothing(
        self, builder: KnowledgeGraphBuilder, store: NetworkXGraphStore
    ) -> None:
        options = ExtractionOptions(ocr_enabled=False)

        with pytest.raises(ExtractionFailedError, match="OCR is disabled"):
            await _pipeline(builder).ingest_bytes(
                b"\x89PNG", "scan.png", extraction_options=options
            )

        assert await store.count_nodes() == 0


@pytest.mark.unit
class TestIngestion:
    async def test_plain_text_document(
        self, builder: KnowledgeGraphBuilder, store: NetworkXGraphStore
    ) -> None:
        result = await _pipeline(builder).ingest_bytes(b"Budget figures for 2024.", "budget.csv")

        document = result.document_node
        assert document.name == "budget.csv"
        assert document.content == "Budget figures for 2024."
        assert document.metadata == {
            "fileSize": 24,
            "mimeType": "text/csv",
            "documentType": "text",
            "category": "Financial",
            "filename": "budget.csv",
            "usedStructuredExtraction": False,
            "pageCount": 1,
        }
        assert len(result.chunk_nodes) == 1
        assert await store.count_nodes(NodeType.DOCUMENT_CHUNK) == 1

    async def test_caller_metadata_wins(self, builder: KnowledgeGraphBuilder) -> None:
        result = await _pipeline(builder).ingest_bytes(
            b"Notes", "notes.txt", metadata={"category": "Meetings", "author": "ops"}
        )

        assert result.document_node.metadata["category"] == "Meetings"
        assert result.document_node.metadata["author"] == "ops"

    async def test_structured_elements_reach_builder(
        self, builder: KnowledgeGraphBuilder, store: NetworkXGraphStore
    ) -> None:
        pipeline = _pipeline(builder, structured=True)

        result = await pipeline.ingest_bytes(
            b"%PDF-fake",
            "brief.pdf",
            options=ProcessingOptions(extract_entities=True),
        )

        assert result.document_node.metadata["usedStructuredExtraction"] is True
        assert result.document_node.metadata["category"] == "Documents"
        assert [c.content for c in result.chunk_nodes] == [
            "Overview\n\nAcme Corp builds rockets."
        ]
        assert [e.name for e in result.entity_nodes] == ["Acme Corp"]
        edges = await store.find_edges(edge_type=EdgeType.EXTRACTED_FROM)
        assert [e.to_key for e in edges] == [result.document_node.key]

    async def test_ingest_file(self, builder: KnowledgeGraphBuilder, tmp_path: Path) -> None:
        path = tmp_path / "readme.md"
        path.write_text("# Title\n\nSome words.", encoding="utf-8")

        result = await _pipeline(builder).ingest_file(path)

        assert result.document_node.name == "readme.md"
        assert result.document_node.metadata["documentType"] == "markdown"
        assert result.document_node.content == "# Title\n\nSome words."
