"""Tests for the in-memory NetworkX graph store."""

import pytest

from docgraph.core.exceptions import GraphStoreWriteError, VectorSearchUnsupportedError
from docgraph.core.models.graph import (
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
)
from docgraph.stores import NetworkXGraphStore


def _node(name: str, node_type: NodeType = NodeType.CONCEPT, **kwargs) -> KnowledgeNode:
    return KnowledgeNode(type=node_type, name=name, **kwargs)


async def _edge(store, from_key, to_key, edge_type=EdgeType.RELATES_TO) -> KnowledgeEdge:
    return await store.insert_edge(KnowledgeEdge(from_key=from_key, to_key=to_key, type=edge_type))


@pytest.mark.unit
class TestNodes:
    async def test_insert_assigns_key(self, store: NetworkXGraphStore) -> None:
        node = await store.insert_node(_node("Alpha"))

        assert node.key
        assert await store.get_node(node.key) == node

    async def test_duplicate_key_is_rejected(self, store: NetworkXGraphStore) -> None:
        await store.insert_node(_node("Alpha", key="k1"))

        with pytest.raises(GraphStoreWriteError):
            await store.insert_node(_node("Beta", key="k1"))

    async def test_get_missing_node(self, store: NetworkXGraphStore) -> None:
        assert await store.get_node("missing") is None

    async def test_returned_nodes_are_copies(self, store: NetworkXGraphStore) -> None:
        node = await store.insert_node(_node("Alpha", metadata={"a": 1}))
        node.metadata["a"] = 2

        stored = await store.get_node(node.key)

        assert stored.metadata == {"a": 1}

    async def test_find_nodes_filters(self, store: NetworkXGraphStore) -> None:
        await store.insert_node(_node("Budget 2024", NodeType.DOCUMENT, content="Numbers"))
        await store.insert_node(_node("Chunk", NodeType.DOCUMENT_CHUNK, content="the BUDGET table"))
        await store.insert_node(_node("Other", NodeType.DOCUMENT, content="unrelated"))

        by_text = await store.find_nodes(NodeQuery(text="budget"))
        by_type = await store.find_nodes(NodeQuery(node_type=NodeType.DOCUMENT, text="budget"))

        assert {n.name for n in by_text} == {"Budget 2024", "Chunk"}
        assert [n.name for n in by_type] == ["Budget 2024"]

    async def test_find_nodes_by_metadata(self, store: NetworkXGraphStore) -> None:
        await store.insert_node(_node("c0", metadata={"documentId": "d1", "chunkIndex": 0}))
        await store.insert_node(_node("c1", metadata={"documentId": "d1", "chunkIndex": 1}))
        await store.insert_node(_node("x0", metadata={"documentId": "d2", "chunkIndex": 0}))

        nodes = await store.find_nodes(NodeQuery(metadata={"documentId": "d1", "chunkIndex": 1}))

        assert [n.name for n in nodes] == ["c1"]

    async def test_find_nodes_newest_first_with_limit(self, store: NetworkXGraphStore) -> None:
        for name in ("first", "second", "third"):
            await store.insert_node(_node(name))

        nodes = await store.find_nodes(NodeQuery(limit=2))

        assert [n.name for n in nodes] == ["third", "second"]

    async def test_update_node(self, store: NetworkXGraphStore) -> None:
        node = await store.insert_node(_node("Alpha", updated_at="2020-01-01T00:00:00+00:00"))

        updated = await store.update_node(node.key, {"name": "Beta"})

        assert updated.name == "Beta"
        assert updated.updated_at > node.updated_at
        assert updated.created_at == node.created_at
        assert await store.update_node("missing", {"name": "x"}) is None

    async def test_update_rejects_unknown_fields(self, store: NetworkXGraphStore) -> None:
        node = await store.insert_node(_node("Alpha"))

        with pytest.raises(GraphStoreWriteError):
            await store.update_node(node.key, {"key": "new-key"})

    async def test_count_nodes(self, store: NetworkXGraphStore) -> None:
        await store.insert_node(_node("a", NodeType.ENTITY))
        await store.insert_node(_node("b", NodeType.ENTITY))
        await store.insert_node(_node("c", NodeType.DOCUMENT))

        assert await store.count_nodes() == 3
        assert await store.count_nodes(NodeType.ENTITY) == 2


@pytest.mark.unit
class TestSimilarNodes:
    async def test_orders_by_euclidean_distance(self, store: NetworkXGraphStore) -> None:
        await store.insert_node(_node("far", embedding=[10.0, 10.0]))
        await store.insert_node(_node("near", embedding=[1.0, 1.0]))
        await store.insert_node(_node("none"))
        await store.insert_node(_node("mid", NodeType.ENTITY, embedding=[3.0, 3.0]))

        nodes = await store.similar_nodes([0.0, 0.0], limit=5)
        concepts = await store.similar_nodes([0.0, 0.0], limit=5, node_type=NodeType.CONCEPT)

        assert [n.name for n in nodes] == ["near", "mid", "far"]
        assert [n.name for n in concepts] == ["near", "far"]

    async def test_unsupported_when_disabled(self) -> None:
        store = NetworkXGraphStore(vector_search=False)

        with pytest.raises(VectorSearchUnsupportedError):
            await store.similar_nodes([0.0], limit=1)


@pytest.mark.unit
class TestEdges:
    async def test_insert_requires_existing_endpoints(self, store: NetworkXGraphStore) -> None:
        a = await store.insert_node(_node("a"))

        with pytest.raises(GraphStoreWriteError):
            await _edge(store, a.key, "missing")

    async def test_get_and_remove_edge(self, store: NetworkXGraphStore) -> None:
        a = await store.insert_node(_node("a"))
        b = await store.insert_node(_node("b"))
        edge = await _edge(store, a.key, b.key)

        assert await store.get_edge(edge.key) == edge
        assert await store.remove_edge(edge.key) is True
        assert await store.get_edge(edge.key) is None
        assert await store.remove_edge(edge.key) is False

    async def test_find_edges(self, store: NetworkXGraphStore) -> None:
        a = await store.insert_node(_node("a"))
        b = await store.insert_node(_node("b"))
        c = await store.insert_node(_node("c"))
        await _edge(store, a.key, b.key, EdgeType.CONTAINS)
        await _edge(store, b.key, a.key, EdgeType.PART_OF)
        await _edge(store, a.key, c.key, EdgeType.CONTAINS)

        assert len(await store.find_edges()) == 3
        assert len(await store.find_edges(from_key=a.key)) == 2
        assert len(await store.find_edges(from_key=a.key, to_key=b.key)) == 1
        assert len(await store.find_edges(to_key=a.key, edge_type=EdgeType.PART_OF)) == 1
        assert await store.find_edges(from_key=a.key, edge_type=EdgeType.PART_OF) == []
        assert await store.find_edges(from_key="missing") == []

    async def test_cascade_removes_touching_edges(self, store: NetworkXGraphStore) -> None:
        a = await store.insert_node(_node("a"))
        b = await store.insert_node(_node("b"))
        c = await store.insert_node(_node("c"))
        in_edge = await _edge(store, b.key, a.key)
        out_edge = await _edge(store, a.key, c.key)
        other = await _edge(store, b.key, c.key)

        assert await store.remove_node_cascade(a.key) is True

        assert await store.get_node(a.key) is None
        assert await store.get_edge(in_edge.key) is None
        assert await store.get_edge(out_edge.key) is None
        assert await store.get_edge(other.key) == other
        assert await store.remove_node_cascade(a.key) is False

    async def test_traverse_one_hop(self, store: NetworkXGraphStore) -> None:
        doc = await store.insert_node(_node("doc", NodeType.DOCUMENT))
        chunk = await store.insert_node(_node("chunk", NodeType.DOCUMENT_CHUNK))
        entity = await store.insert_node(_node("entity", NodeType.ENTITY))
        await _edge(store, doc.key, chunk.key, EdgeType.CONTAINS)
        await _edge(store, chunk.key, doc.key, EdgeType.PART_OF)
        await _edge(store, entity.key, doc.key, EdgeType.EXTRACTED_FROM)

        outgoing = await store.traverse_one_hop(doc.key, direction=Direction.OUTGOING)
        incoming = await store.traverse_one_hop(doc.key, direction=Direction.INCOMING)
        both = await store.traverse_one_hop(doc.key)
        extracted = await store.traverse_one_hop(doc.key, EdgeType.EXTRACTED_FROM)

        assert [(n.name, e.type) for n, e in outgoing] == [("chunk", EdgeType.CONTAINS)]
        assert {(n.name, e.type) for n, e in incoming} == {
            ("chunk", EdgeType.PART_OF),
            ("entity", EdgeType.EXTRACTED_FROM),
        }
        assert len(both) == 3
        assert [n.name for n, _ in extracted] == ["entity"]
        assert await store.traverse_one_hop("missing") == []
