"""Caller-facing knowledge graph operations."""

from typing import Any

import structlog

from docgraph.core.exceptions import GraphStoreError, NodeNotFoundError
from docgraph.core.interfaces.embedding import EmbeddingProvider
from docgraph.core.interfaces.stores import GraphStore
from docgraph.core.models.graph import (
    ConnectedNode,
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
)

logger = structlog.get_logger(__name__)


class KnowledgeService:
    """Node and edge CRUD with embedding on write, search and traversal.

    Every write that sets node content embeds it first, so a stored
    embedding always belongs to the stored content.
    """

    def __init__(self, store: GraphStore, embedder: EmbeddingProvider) -> None:
        self._store = store
        self._embedder = embedder

    @property
    def store(self) -> GraphStore:
        return self._store

    # === Nodes ===

    async def create_node(
        self,
        type: NodeType,
        name: str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> KnowledgeNode:
        """Embed ``content`` and persist a new node.

        Raises:
            EmbeddingGenerationError: If the embedding could not be produced.
        """
        embedding = await self._embedder.embed_text(content)
        node = await self._store.insert_node(
            KnowledgeNode(
                type=type,
                name=name,
                content=content,
                metadata=metadata or {},
                embedding=embedding,
            )
        )
        logger.debug("knowledge.node.created", key=node.key, type=node.type.value)
        return node

    async def get_node(self, key: str) -> KnowledgeNode | None:
        return await self._store.get_node(key)

    async def get_nodes(
        self,
        node_type: NodeType | None = None,
        limit: int | None = None,
    ) -> list[KnowledgeNode]:
        """Nodes, newest first, optionally filtered by type."""
        return await self._store.find_nodes(NodeQuery(node_type=node_type, limit=limit))

    async def update_node(
        self,
        key: str,
        *,
        name: str | None = None,
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
        type: NodeType | None = None,
    ) -> KnowledgeNode | None:
        """Update the given fields. A content change regenerates the embedding."""
        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = name
        if metadata is not None:
            fields["metadata"] = metadata
        if type is not None:
            fields["type"] = type
        if content is not None:
            fields["content"] = content
            fields["embedding"] = await self._embedder.embed_text(content)

        if not fields:
            return await self._store.get_node(key)
        return await self._store.update_node(key, fields)

    async def delete_node(self, key: str) -> bool:
        """Delete a node and every edge touching it."""
        deleted = await self._store.remove_node_cascade(key)
        logger.info("knowledge.node.deleted", key=key, deleted=deleted)
        return deleted

    # === Edges ===

    async def create_edge(
        self,
        type: EdgeType,
        from_key: str,
        to_key: str,
        weight: float = 1.0,
        metadata: dict[str, Any] | None = None,
    ) -> KnowledgeEdge:
        """Create a directed edge between two existing nodes.

        Raises:
            NodeNotFoundError: If either endpoint does not exist.
        """
        for endpoint in (from_key, to_key):
            if await self._store.get_node(endpoint) is None:
                raise NodeNotFoundError(f"Node not found: {endpoint}", details={"key": endpoint})

        return await self._store.insert_edge(
            KnowledgeEdge(
                from_key=from_key,
                to_key=to_key,
                type=type,
                weight=weight,
                metadata=metadata or {},
            )
        )

    async def get_edges(self, edge_type: EdgeType | None = None) -> list[KnowledgeEdge]:
        """Edges, newest first, optionally filtered by type."""
        edges = await self._store.find_edges(edge_type=edge_type)
        return sorted(edges, key=lambda edge: edge.created_at, reverse=True)

    # === Search and traversal ===

    async def search_nodes(
        self,
        query: str,
        limit: int = 5,
        node_type: NodeType | None = None,
    ) -> list[KnowledgeNode]:
        """Similarity search with a substring fallback.

        The query is embedded first; embedding failures propagate. When the
        store cannot do vector search, or it returns nothing, nodes whose
        content or name contains the query (case-insensitive) are returned,
        newest first.
        """
        vector = await self._embedder.embed_text(query)
        log = logger.bind(query=query, limit=limit)

        try:
            nodes = await self._store.similar_nodes(vector, limit, node_type)
        except GraphStoreError as exc:
            log.warning("knowledge.search.vector_failed", error=str(exc))
            nodes = []

        if nodes:
            log.debug("knowledge.search.vector", results=len(nodes))
            return nodes

        nodes = await self._store.find_nodes(
            NodeQuery(node_type=node_type, text=query, limit=limit)
        )
        log.debug("knowledge.search.text", results=len(nodes))
        return nodes

    async def search_documents(self, query: str, limit: int = 5) -> list[KnowledgeNode]:
        return await self.search_nodes(query, limit=limit, node_type=NodeType.DOCUMENT)

    async def get_connected_nodes(
        self,
        key: str,
        edge_type: EdgeType | None = None,
        direction: Direction | str = Direction.BOTH,
    ) -> list[ConnectedNode]:
        hops = await self._store.traverse_one_hop(key, edge_type, Direction(direction))
        return [ConnectedNode(node=node, edge=edge) for node, edge in hops]

    async def get_document_chunks(self, document_key: str) -> list[KnowledgeNode]:
        """Chunks reachable by CONTAINS from the document, ordered by ``chunkIndex``."""
        connected = await self.get_connected_nodes(
            document_key, EdgeType.CONTAINS, Direction.OUTGOING
        )
        chunks = [c.node for c in connected if c.node.type == NodeType.DOCUMENT_CHUNK]
        return sorted(chunks, key=lambda node: node.metadata.get("chunkIndex", 0))

    async def stats(self) -> dict[str, int]:
        """Node counts per type."""
        counts = {"total": await self._store.count_nodes()}
        for node_type in NodeType:
            counts[node_type.value] = await self._store.count_nodes(node_type)
        return counts
