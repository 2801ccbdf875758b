"""Graph store protocol."""

from typing import Any, Protocol

from docgraph.core.models.graph import (
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
)


class GraphStore(Protocol):
    """Protocol for knowledge graph stores.

    A store is a long-lived handle: it is opened once, shared by every
    ingestion request, and closed explicitly by its owner.
    """

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def insert_node(self, node: KnowledgeNode) -> KnowledgeNode:
        """Persist a node and return it with its assigned key."""
        ...

    async def insert_edge(self, edge: KnowledgeEdge) -> KnowledgeEdge:
        """Persist an edge and return it with its assigned key."""
        ...

    async def get_node(self, key: str) -> KnowledgeNode | None: ...

    async def get_edge(self, key: str) -> KnowledgeEdge | None: ...

    async def find_nodes(self, query: NodeQuery) -> list[KnowledgeNode]: ...

    async def similar_nodes(
        self,
        vector: list[float],
        limit: int,
        node_type: NodeType | None = None,
    ) -> list[KnowledgeNode]:
        """Nodes carrying embeddings, ascending by distance to ``vector``.

        Raises:
            VectorSearchUnsupportedError: If the store cannot order by distance.
        """
        ...

    async def find_edges(
        self,
        from_key: str | None = None,
        to_key: str | None = None,
        edge_type: EdgeType | None = None,
    ) -> list[KnowledgeEdge]: ...

    async def update_node(self, key: str, fields: dict[str, Any]) -> KnowledgeNode | None: ...

    async def remove_edge(self, key: str) -> bool: ...

    async def remove_node_cascade(self, key: str) -> bool:
        """Remove every edge touching ``key``, then the node itself."""
        ...

    async def traverse_one_hop(
        self,
        start_key: str,
        edge_type: EdgeType | None = None,
        direction: Direction = Direction.BOTH,
    ) -> list[tuple[KnowledgeNode, KnowledgeEdge]]: ...

    async def count_nodes(self, node_type: NodeType | None = None) -> int: ...
