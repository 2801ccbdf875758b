"""Builds DOCUMENT, DOCUMENT_CHUNK and ENTITY nodes for one document."""

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import BaseModel, Field

from docgraph.chunking import Chunker, ChunkingConfig
from docgraph.core.exceptions import GraphStoreWriteError, NodeNotFoundError
from docgraph.core.interfaces.extractors import EntityMatcher
from docgraph.core.models.extraction import ElementType, StructuredElement
from docgraph.core.models.graph import EdgeType, KnowledgeNode, NodeQuery, NodeType
from docgraph.pipelines.ingestion.matching import NormalizedNameMatcher
from docgraph.services.knowledge import KnowledgeService

logger = structlog.get_logger(__name__)

DEFAULT_ENTITY_CATEGORY = "Unknown"


class ProcessingOptions(BaseModel):
    """Options for ``KnowledgeGraphBuilder.process_document``."""

    chunk_size: int | None = Field(default=None, gt=0)
    chunk_overlap: int | None = Field(default=None, ge=0)
    max_chunks: int | None = Field(default=None, ge=1)
    extract_entities: bool = False
    extract_concepts: bool = False
    structured_elements: list[StructuredElement] | None = None
    resume_document_key: str | None = None

    def chunking_config(self, base: ChunkingConfig) -> ChunkingConfig:
        """``base`` with the chunking fields set on these options applied."""
        overrides = {
            name: value
            for name in ("chunk_size", "chunk_overlap", "max_chunks")
            if (value := getattr(self, name)) is not None
        }
        if not overrides:
            return base
        return ChunkingConfig(**{**base.model_dump(), **overrides})


@dataclass
class ProcessingResult:
    """Nodes written (or reused) for one document."""

    document_node: KnowledgeNode
    chunk_nodes: list[KnowledgeNode] = field(default_factory=list)
    entity_nodes: list[KnowledgeNode] = field(default_factory=list)


class KnowledgeGraphBuilder:
    """Writes a document, its chunks and its entities into the graph.

    For each chunk, in order:
    1. Embed and create the DOCUMENT_CHUNK node
    2. Link document CONTAINS chunk
    3. Link chunk PART_OF document

    Writes are sequential and not transactional. Passing
    ``resume_document_key`` reuses everything already written for that
    document, so a failed run can be completed by running it again.
    """

    def __init__(
        self,
        service: KnowledgeService,
        chunker: Chunker | None = None,
        entity_matcher: EntityMatcher | None = None,
        content_preview_length: int = 1000,
    ) -> None:
        self._service = service
        self._chunker = chunker or Chunker()
        self._matcher = entity_matcher or NormalizedNameMatcher()
        self._preview_length = content_preview_length

    def _document_content(
        self, content: str, metadata: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        if len(content) <= self._preview_length:
            return content, metadata
        return (
            content[: self._preview_length] + "...",
            {**metadata, "fullContent": False, "contentLength": len(content)},
        )

    async def process_document(
        self,
        content: str,
        name: str,
        metadata: dict[str, Any] | None = None,
        options: ProcessingOptions | None = None,
    ) -> ProcessingResult:
        """Chunk, embed and store a document.

        Args:
            content: Full document text.
            name: Display name; chunk names derive from it.
            metadata: Metadata stored on the DOCUMENT node.
            options: Chunking, entity and resume options.

        Returns:
            ProcessingResult with the document, chunk and entity nodes.

        Raises:
            EmbeddingGenerationError: If any embedding fails. Nodes written
                before the failure remain.
            NodeNotFoundError: If ``resume_document_key`` does not exist.
        """
        options = options or ProcessingOptions()
        log = logger.bind(name=name, resume=options.resume_document_key is not None)

        document = await self._document_node(content, name, metadata or {}, options)
        log = log.bind(document_key=document.key)

        chunk_texts = self._chunker.chunk(
            content, options.structured_elements, options.chunking_config(self._chunker.config)
        )

        chunk_nodes: list[KnowledgeNode] = []
        for index, text in enumerate(chunk_texts):
            chunk = await self._chunk_node(document, name, index, text, options)
            await self._link(document, chunk, EdgeType.CONTAINS, {"chunkIndex": index})
            await self._link(chunk, document, EdgeType.PART_OF, {"chunkIndex": index})
            chunk_nodes.append(chunk)

        entity_nodes: list[KnowledgeNode] = []
        if options.extract_entities and options.structured_elements:
            entity_nodes = await self._entity_nodes(document, options.structured_elements)

        log.info(
            "builder.complete",
            chunks=len(chunk_nodes),
            entities=len(entity_nodes),
        )
        return ProcessingResult(
            document_node=document,
            chunk_nodes=chunk_nodes,
            entity_nodes=entity_nodes,
        )

    async def _document_node(
        self,
        content: str,
        name: str,
        metadata: dict[str, Any],
        options: ProcessingOptions,
    ) -> KnowledgeNode:
        if options.resume_document_key is not None:
            existing = await self._service.get_node(options.resume_document_key)
            if existing is None or existing.type != NodeType.DOCUMENT:
                raise NodeNotFoundError(
                    f"Document not found: {options.resume_document_key}",
                    details={"key": options.resume_document_key},
                )
            logger.info("builder.document.reused", document_key=existing.key)
            return existing

        if options.extract_concepts:
            metadata = {**metadata, "extractConcepts": True}
        stored_content, stored_metadata = self._document_content(content, metadata)
        document = await self._service.create_node(
            NodeType.DOCUMENT, name, stored_content, stored_metadata
        )
        logger.info(
            "builder.document.created",
            document_key=document.key,
            content_length=len(content),
        )
        return document

    async def _chunk_node(
        self,
        document: KnowledgeNode,
        name: str,
        index: int,
        text: str,
        options: ProcessingOptions,
    ) -> KnowledgeNode:
        if options.resume_document_key is not None:
            existing = await self._service.store.find_nodes(
                NodeQuery(
                    node_type=NodeType.DOCUMENT_CHUNK,
                    metadata={"documentId": document.key, "chunkIndex": index},
                    limit=1,
                )
            )
            if existing:
                logger.debug("builder.chunk.reused", chunk_key=existing[0].key, index=index)
                return existing[0]

        chunk = await self._service.create_node(
            NodeType.DOCUMENT_CHUNK,
            f"{name} - Chunk {index + 1}",
            text,
            {"chunkIndex": index, "documentId": document.key, "isChunk": True},
        )
        logger.debug("builder.chunk.created", chunk_key=chunk.key, index=index)
        return chunk

    async def _entity_nodes(
        self,
        document: KnowledgeNode,
        elements: list[StructuredElement],
    ) -> list[KnowledgeNode]:
        entities: dict[str, KnowledgeNode] = {}
        for element in elements:
            if element.type is not ElementType.ENTITY or not element.text.strip():
                continue
            text = element.text
            category = element.metadata.get("category") or DEFAULT_ENTITY_CATEGORY

            entity = await self._find_entity(text, category)
            if entity is None:
                entity = await self._service.create_node(
                    NodeType.ENTITY, text, text, {"category": category}
                )
                logger.debug("builder.entity.created", entity_key=entity.key, category=category)
            else:
                logger.debug("builder.entity.reused", entity_key=entity.key, category=category)

            await self._link(entity, document, EdgeType.EXTRACTED_FROM)
            entities.setdefault(entity.key, entity)
        return list(entities.values())

    async def _find_entity(self, text: str, category: str) -> KnowledgeNode | None:
        candidates = await self._service.search_nodes(text, limit=1, node_type=NodeType.ENTITY)
        if candidates and self._matcher.is_same_entity(candidates[0], text, category):
            return candidates[0]
        return None

    async def _link(
        self,
        source: KnowledgeNode,
        target: KnowledgeNode,
        edge_type: EdgeType,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Create the edge unless one of the same type already joins the nodes."""
        from_key, to_key = source.key, target.key
        if from_key is None or to_key is None:
            raise GraphStoreWriteError(
                "Cannot link a node that has no key",
                details={"from_key": from_key, "to_key": to_key, "type": edge_type.value},
            )
        existing = await self._service.store.find_edges(from_key, to_key, edge_type)
        if existing:
            return
        await self._service.create_edge(edge_type, from_key, to_key, metadata=metadata)
