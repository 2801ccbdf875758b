"""Document ingestion, search and traversal endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docgraph.api.dependencies import get_ingestion_pipeline, get_knowledge_service
from docgraph.core.models.graph import Direction, EdgeType, KnowledgeNode, NodeType
from docgraph.pipelines.ingestion import IngestionPipeline, ProcessingOptions, ProcessingResult
from docgraph.services import KnowledgeService

router = APIRouter()


class DocumentRequest(BaseModel):
    """Body of ``POST /knowledge/documents``. Accepts camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = Field(min_length=1)
    name: str = Field(min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    max_chunks: int = Field(default=20, ge=1)
    extract_entities: bool = False
    extract_concepts: bool = False


def node_payload(node: KnowledgeNode) -> dict[str, Any]:
    return node.model_dump(mode="json", exclude={"embedding"})


def result_payload(result: ProcessingResult) -> dict[str, Any]:
    return {
        "document": node_payload(result.document_node),
        "chunks": [node_payload(n) for n in result.chunk_nodes],
        "chunkCount": len(result.chunk_nodes),
        "entities": [node_payload(n) for n in result.entity_nodes],
    }


@router.post("/documents", status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> dict[str, Any]:
    """Chunk, embed and store a text document."""
    if body.chunk_overlap >= body.chunk_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="chunkOverlap must be smaller than chunkSize",
        )
    options = ProcessingOptions(
        chunk_size=body.chunk_size,
        chunk_overlap=body.chunk_overlap,
        max_chunks=body.max_chunks,
        extract_entities=body.extract_entities,
        extract_concepts=body.extract_concepts,
    )
    result = await pipeline.builder.process_document(
        body.content, body.name, body.metadata, options
    )
    return result_payload(result)


@router.post("/documents/upload", status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    category: str | None = Form(None),
    use_structured_extraction: bool = Form(True),
    extract_entities: bool = Form(False),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> dict[str, Any]:
    """Extract text from an uploaded file and add it to the graph."""
    content = await file.read()
    metadata = {"category": category} if category else {}
    result = await pipeline.ingest_bytes(
        content,
        file.filename or "upload",
        metadata,
        ProcessingOptions(extract_entities=extract_entities),
        pipeline.extraction_defaults.model_copy(
            update={"use_structured_extraction": use_structured_extraction}
        ),
    )
    return result_payload(result)


@router.get("/documents")
async def list_documents(
    query: str | None = None,
    limit: int = Query(5, ge=1, le=100),
    document_key: str | None = Query(None, alias="documentKey"),
    service: KnowledgeService = Depends(get_knowledge_service),
) -> dict[str, Any]:
    """Chunks of one document, documents matching a query, or recent documents."""
    if document_key:
        chunks = await service.get_document_chunks(document_key)
        return {"chunks": [node_payload(n) for n in chunks], "chunkCount": len(chunks)}

    if query:
        documents = await service.search_documents(query, limit=limit)
    else:
        documents = await service.get_nodes(node_type=NodeType.DOCUMENT, limit=limit)
    return {"documents": [node_payload(n) for n in documents], "count": len(documents)}


@router.get("/search")
async def search_nodes(
    query: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=100),
    node_type: NodeType | None = None,
    service: KnowledgeService = Depends(get_knowledge_service),
) -> dict[str, Any]:
    nodes = await service.search_nodes(query, limit=limit, node_type=node_type)
    return {"nodes": [node_payload(n) for n in nodes], "count": len(nodes)}


@router.get("/nodes/{key}")
async def get_node(
    key: str,
    service: KnowledgeService = Depends(get_knowledge_service),
) -> dict[str, Any]:
    node = await service.get_node(key)
    if node is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Node not found")
    return node_payload(node)


@router.get("/nodes/{key}/connections")
async def get_connections(
    key: str,
    edge_type: EdgeType | None = None,
    direction: Direction = Direction.BOTH,
    service: KnowledgeService = Depends(get_knowledge_service),
) -> dict[str, Any]:
    connected = await service.get_connected_nodes(key, edge_type, direction)
    return {
        "connections": [
            {"node": node_payload(c.node), "edge": c.edge.model_dump(mode="json")}
            for c in connected
        ],
        "count": len(connected),
    }


@router.delete("/nodes/{key}")
async def delete_node(
    key: str,
    service: KnowledgeService = Depends(get_knowledge_service),
) -> dict[str, Any]:
    if not await service.delete_node(key):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Node not found")
    return {"deleted": True, "key": key}
