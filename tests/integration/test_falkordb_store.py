"""Integration tests for the FalkorDB graph store."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from conftest import FakeEmbedder

pytest.importorskip("redislite.falkordb_client")

from docgraph.chunking import Chunker  # noqa: E402
from docgraph.core.exceptions import (  # noqa: E402
    GraphStoreWriteError,
    VectorSearchUnsupportedError,
)
from docgraph.core.models.graph import (  # noqa: E402
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
)
from docgraph.pipelines.ingestion import KnowledgeGraphBuilder  # noqa: E402
from docgraph.services import KnowledgeService  # noqa: E402
from docgraph.stores.falkordb_store import FalkorDBGraphStore  # noqa: E402


@pytest.fixture
async def falkor(tmp_path: Path) -> AsyncIterator[FalkorDBGraphStore]:
    store = FalkorDBGraphStore(tmp_path / "graph.db")
    await store.open(reset=True)
    yield store
    await store.close()


@pytest.mark.integration
class TestFalkorDBGraphStore:
    """Node, edge and traversal operations against an embedded database."""

    async def test_node_round_trip(self, falkor: FalkorDBGraphStore) -> None:
        node = await falkor.insert_node(
            KnowledgeNode(
                type=NodeType.DOCUMENT,
                name="Q3 report",
                content="Revenue grew",
                metadata={"category": "Financial", "fullContent": False},
                embedding=[1.0, 2.0, 3.0],
            )
        )

        stored = await falkor.get_node(node.key)

        assert stored == node
        assert await falkor.count_nodes(NodeType.DOCUMENT) == 1
        with pytest.raises(GraphStoreWriteError):
            await falkor.insert_node(KnowledgeNode(key=node.key, type=NodeType.FACT, name="x"))

    async def test_find_and_update(self, falkor: FalkorDBGraphStore) -> None:
        await falkor.insert_node(
            KnowledgeNode(
                type=NodeType.DOCUMENT_CHUNK,
                name="c0",
                content="Budget table",
                metadata={"documentId": "d1", "chunkIndex": 0},
            )
        )
        other = await falkor.insert_node(KnowledgeNode(type=NodeType.CONCEPT, name="other"))

        by_metadata = await falkor.find_nodes(NodeQuery(metadata={"documentId": "d1"}))
        by_text = await falkor.find_nodes(NodeQuery(text="BUDGET"))
        updated = await falkor.update_node(other.key, {"content": "new content"})

        assert [n.name for n in by_metadata] == ["c0"]
        assert [n.name for n in by_text] == ["c0"]
        assert updated.content == "new content"
        assert (await falkor.get_node(other.key)).content == "new content"

    async def test_edges_and_cascade(self, falkor: FalkorDBGraphStore) -> None:
        doc = await falkor.insert_node(KnowledgeNode(type=NodeType.DOCUMENT, name="doc"))
        chunk = await falkor.insert_node(KnowledgeNode(type=NodeType.DOCUMENT_CHUNK, name="c"))
        contains = await falkor.insert_edge(
            KnowledgeEdge(
                from_key=doc.key,
                to_key=chunk.key,
                type=EdgeType.CONTAINS,
                metadata={"chunkIndex": 0},
            )
        )
        await falkor.insert_edge(
            KnowledgeEdge(from_key=chunk.key, to_key=doc.key, type=EdgeType.PART_OF)
        )

        assert await falkor.get_edge(contains.key) == contains
        assert len(await falkor.find_edges(from_key=doc.key, edge_type=EdgeType.CONTAINS)) == 1
        outgoing = await falkor.traverse_one_hop(doc.key, direction=Direction.OUTGOING)
        assert [(n.key, e.type) for n, e in outgoing] == [(chunk.key, EdgeType.CONTAINS)]
        assert len(await falkor.traverse_one_hop(doc.key)) == 2

        with pytest.raises(GraphStoreWriteError):
            await falkor.insert_edge(
                KnowledgeEdge(from_key=doc.key, to_key="missing", type=EdgeType.RELATES_TO)
            )

        assert await falkor.remove_node_cascade(doc.key) is True
        assert await falkor.find_edges() == []
        assert await falkor.get_node(chunk.key) is not None

    async def test_similar_nodes(self, falkor: FalkorDBGraphStore) -> None:
        await falkor.insert_node(
            KnowledgeNode(type=NodeType.CONCEPT, name="far", embedding=[10.0, 10.0])
        )
        await falkor.insert_node(
            KnowledgeNode(type=NodeType.CONCEPT, name="near", embedding=[1.0, 1.0])
        )

        try:
            nodes = await falkor.similar_nodes([0.0, 0.0], limit=2)
        except VectorSearchUnsupportedError:
            pytest.skip("FalkorDB build without vector functions")

        assert [n.name for n in nodes] == ["near", "far"]

    async def test_builder_on_falkordb(self, falkor: FalkorDBGraphStore) -> None:
        builder = KnowledgeGraphBuilder(KnowledgeService(falkor, FakeEmbedder()), Chunker())

        result = await builder.process_document("a" * 2500, "Report")

        chunks = await KnowledgeService(falkor, FakeEmbedder()).get_document_chunks(
            result.document_node.key
        )
        assert [c.metadata["chunkIndex"] for c in chunks] == [0, 1, 2]
        assert len(await falkor.find_edges(edge_type=EdgeType.PART_OF)) == 3
