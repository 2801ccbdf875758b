"""In-process graph store on a networkx MultiDiGraph."""

import itertools
import math
import uuid
from typing import Any

import networkx as nx
import structlog

from docgraph.core.exceptions import GraphStoreWriteError, VectorSearchUnsupportedError
from docgraph.core.models.graph import (
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
    utc_now_iso,
)

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"type", "name", "content", "metadata", "embedding"})


def matches_query(node: KnowledgeNode, query: NodeQuery) -> bool:
    """Apply the ``NodeQuery`` filter rules to a single node."""
    if query.node_type is not None and node.type != query.node_type:
        return False
    if query.text:
        needle = query.text.lower()
        if needle not in node.content.lower() and needle not in node.name.lower():
            return False
    for key, value in query.metadata.items():
        if node.metadata.get(key) != value:
            return False
    return True


class NetworkXGraphStore:
    """Graph store keeping nodes and edges in memory.

    Node records live on graph nodes under ``record``; edges are
    MultiDiGraph edges keyed by their edge key. ``vector_search=False``
    makes ``similar_nodes`` behave like a backend without vector support.
    """

    def __init__(self, vector_search: bool = True) -> None:
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._edge_index: dict[str, tuple[str, str]] = {}
        self._sequence = itertools.count()
        self._vector_search = vector_search

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    async def open(self) -> None:
        logger.debug("networkx.open")

    async def close(self) -> None:
        logger.debug("networkx.close", nodes=self._graph.number_of_nodes())

    # === Nodes ===

    async def insert_node(self, node: KnowledgeNode) -> KnowledgeNode:
        key = node.key or uuid.uuid4().hex
        if key in self._graph:
            raise GraphStoreWriteError(f"Node already exists: {key}", details={"key": key})
        stored = node.model_copy(update={"key": key}, deep=True)
        self._graph.add_node(key, record=stored, seq=next(self._sequence))
        return stored.model_copy(deep=True)

    async def get_node(self, key: str) -> KnowledgeNode | None:
        if key not in self._graph:
            return None
        return self._graph.nodes[key]["record"].model_copy(deep=True)

    async def find_nodes(self, query: NodeQuery) -> list[KnowledgeNode]:
        entries = [
            (data["record"], data["seq"])
            for _, data in self._graph.nodes(data=True)
            if matches_query(data["record"], query)
        ]
        entries.sort(key=lambda entry: (entry[0].created_at, entry[1]), reverse=True)
        nodes = [record.model_copy(deep=True) for record, _ in entries]
        return nodes[: query.limit] if query.limit is not None else nodes

    async def similar_nodes(
        self,
        vector: list[float],
        limit: int,
        node_type: NodeType | None = None,
    ) -> list[KnowledgeNode]:
        if not self._vector_search:
            raise VectorSearchUnsupportedError("Vector search is disabled for this store")

        scored: list[tuple[float, KnowledgeNode]] = []
        for _, data in self._graph.nodes(data=True):
            record: KnowledgeNode = data["record"]
            if record.embedding is None or len(record.embedding) != len(vector):
                continue
            if node_type is not None and record.type != node_type:
                continue
            scored.append((math.dist(record.embedding, vector), record))

        scored.sort(key=lambda item: item[0])
        return [record.model_copy(deep=True) for _, record in scored[:limit]]

    async def update_node(self, key: str, fields: dict[str, Any]) -> KnowledgeNode | None:
        if key not in self._graph:
            return None
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise GraphStoreWriteError(
                f"Fields cannot be updated: {sorted(unknown)}", details={"key": key}
            )
        record: KnowledgeNode = self._graph.nodes[key]["record"]
        updated = record.model_copy(update={**fields, "updated_at": utc_now_iso()}, deep=True)
        self._graph.nodes[key]["record"] = updated
        return updated.model_copy(deep=True)

    async def remove_node_cascade(self, key: str) -> bool:
        if key not in self._graph:
            return False
        touching = [
            edge_key
            for _, _, edge_key in itertools.chain(
                self._graph.out_edges(key, keys=True),
                self._graph.in_edges(key, keys=True),
            )
        ]
        for edge_key in set(touching):
            self._edge_index.pop(edge_key, None)
        self._graph.remove_node(key)
        logger.debug("networkx.node.removed", key=key, edges=len(set(touching)))
        return True

    async def count_nodes(self, node_type: NodeType | None = None) -> int:
        if node_type is None:
            return self._graph.number_of_nodes()
        return sum(
            1 for _, data in self._graph.nodes(data=True) if data["record"].type == node_type
        )

    # === Edges ===

    async def insert_edge(self, edge: KnowledgeEdge) -> KnowledgeEdge:
        for endpoint in (edge.from_key, edge.to_key):
            if endpoint not in self._graph:
                raise GraphStoreWriteError(
                    f"Edge endpoint does not exist: {endpoint}",
                    details={"from_key": edge.from_key, "to_key": edge.to_key},
                )
        key = edge.key or uuid.uuid4().hex
        stored = edge.model_copy(update={"key": key}, deep=True)
        self._graph.add_edge(edge.from_key, edge.to_key, key=key, record=stored)
        self._edge_index[key] = (edge.from_key, edge.to_key)
        return stored.model_copy(deep=True)

    async def get_edge(self, key: str) -> KnowledgeEdge | None:
        endpoints = self._edge_index.get(key)
        if endpoints is None:
            return None
        return self._graph.edges[endpoints[0], endpoints[1], key]["record"].model_copy(deep=True)

    async def find_edges(
        self,
        from_key: str | None = None,
        to_key: str | None = None,
        edge_type: EdgeType | None = None,
    ) -> list[KnowledgeEdge]:
        if from_key is not None:
            if from_key not in self._graph:
                return []
            candidates = self._graph.out_edges(from_key, data="record")
        elif to_key is not None:
            if to_key not in self._graph:
                return []
            candidates = self._graph.in_edges(to_key, data="record")
        else:
            candidates = self._graph.edges(data="record")

        return [
            record.model_copy(deep=True)
            for _, v, record in candidates
            if (to_key is None or v == to_key)
            and (edge_type is None or record.type == edge_type)
        ]

    async def remove_edge(self, key: str) -> bool:
        endpoints = self._edge_index.pop(key, None)
        if endpoints is None:
            return False
        self._graph.remove_edge(endpoints[0], endpoints[1], key=key)
        return True

    async def traverse_one_hop(
        self,
        start_key: str,
        edge_type: EdgeType | None = None,
        direction: Direction = Direction.BOTH,
    ) -> list[tuple[KnowledgeNode, KnowledgeEdge]]:
        if start_key not in self._graph:
            return []

        hops: list[tuple[str, KnowledgeEdge]] = []
        if direction in (Direction.OUTGOING, Direction.BOTH):
            hops.extend(
                (v, record) for _, v, record in self._graph.out_edges(start_key, data="record")
            )
        if direction in (Direction.INCOMING, Direction.BOTH):
            hops.extend(
                (u, record) for u, _, record in self._graph.in_edges(start_key, data="record")
            )

        return [
            (
                self._graph.nodes[neighbor]["record"].model_copy(deep=True),
                record.model_copy(deep=True),
            )
            for neighbor, record in hops
            if edge_type is None or record.type == edge_type
        ]
