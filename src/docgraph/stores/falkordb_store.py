"""FalkorDB graph store for knowledge nodes and edges."""

import json
import uuid
from pathlib import Path
from typing import Any

import structlog
from redislite.falkordb_client import FalkorDB

from docgraph.core.exceptions import (
    GraphStoreError,
    GraphStoreWriteError,
    VectorSearchUnsupportedError,
)
from docgraph.core.models.graph import (
    Direction,
    EdgeType,
    KnowledgeEdge,
    KnowledgeNode,
    NodeQuery,
    NodeType,
    utc_now_iso,
)
from docgraph.stores.networkx_store import UPDATABLE_FIELDS, matches_query

logger = structlog.get_logger(__name__)

NODE_LABEL = "Knowledge"

_NODE_RETURN = """
    n.key AS key, n.type AS type, n.name AS name, n.content AS content,
    n.metadata AS metadata, n.embedding_json AS embedding_json,
    n.created_at AS created_at, n.updated_at AS updated_at
"""

_EDGE_RETURN = """
    r.key AS edge_key, a.key AS from_key, b.key AS to_key, type(r) AS rel_type,
    r.weight AS weight, r.metadata AS edge_metadata, r.created_at AS edge_created_at
"""


def _rel_type(edge_type: EdgeType) -> str:
    return edge_type.value.upper()


class FalkorDBGraphStore:
    """Graph store backed by FalkorDB (FalkorDBLite) embedded database.

    Every node carries the ``Knowledge`` label and a unique ``key``
    property. Edge types map to relationship types (``CONTAINS``,
    ``PART_OF``, ...). Metadata is stored as a JSON string. Embeddings are
    stored twice: as ``vecf32`` for distance ordering and as JSON for
    reading back.

    Usage:
        store = FalkorDBGraphStore("./graph.db")
        await store.open()
        node = await store.insert_node(KnowledgeNode(type=NodeType.DOCUMENT, name="Q3"))
    """

    def __init__(self, db_path: str | Path, graph_name: str = "knowledge") -> None:
        """Initialize FalkorDB graph store.

        Args:
            db_path: Path to the FalkorDB database file.
            graph_name: Name of the graph inside the database.
        """
        self.db_path = Path(db_path).expanduser()
        self.graph_name = graph_name
        self._db: FalkorDB | None = None
        self._graph: Any = None

    async def open(self, reset: bool = False) -> None:
        """Open the database.

        Args:
            reset: If True, delete existing database and start fresh.
        """
        log = logger.bind(db_path=str(self.db_path))

        if reset and self.db_path.exists():
            log.info("falkordb.reset", action="deleting existing database")
            self.db_path.unlink()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = FalkorDB(str(self.db_path))
        self._graph = self._db.select_graph(self.graph_name)
        self._create_indexes()
        log.info("falkordb.open.complete")

    def _create_indexes(self) -> None:
        for prop in ("key", "type"):
            try:
                self._graph.query(f"CREATE INDEX FOR (n:{NODE_LABEL}) ON (n.{prop})")
            except Exception as exc:
                # Raised when the index already exists
                logger.debug("falkordb.index.skipped", property=prop, error=str(exc))

    async def close(self) -> None:
        # FalkorDBLite has no explicit close; release the references
        self._graph = None
        self._db = None

    @property
    def graph(self) -> Any:
        if self._graph is None:
            raise GraphStoreError("FalkorDB store is not open")
        return self._graph

    def execute_cypher(self, query: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Execute a Cypher query and return results as list of dicts."""
        result = self.graph.query(query, params=params or {})
        if not result.result_set:
            return []
        headers = [col[1] if isinstance(col, (list, tuple)) else str(col) for col in result.header]
        return [dict(zip(headers, row)) for row in result.result_set]

    def _write(self, query: str, params: dict[str, Any], event: str) -> list[dict]:
        try:
            return self.execute_cypher(query, params)
        except GraphStoreError:
            raise
        except Exception as exc:
            logger.warning(f"falkordb.{event}.failed", error=str(exc))
            raise GraphStoreWriteError(f"FalkorDB {event} failed: {exc}") from exc

    def _read(self, query: str, params: dict[str, Any] | None = None) -> list[dict]:
        try:
            return self.execute_cypher(query, params)
        except GraphStoreError:
            raise
        except Exception as exc:
            raise GraphStoreError(f"FalkorDB query failed: {exc}") from exc

    # === Row mapping ===

    @staticmethod
    def _node_from_row(row: dict) -> KnowledgeNode:
        embedding_json = row.get("embedding_json")
        return KnowledgeNode(
            key=row["key"],
            type=NodeType(row["type"]),
            name=row.get("name") or "",
            content=row.get("content") or "",
            metadata=json.loads(row.get("metadata") or "{}"),
            embedding=json.loads(embedding_json) if embedding_json else None,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _edge_from_row(row: dict) -> KnowledgeEdge:
        return KnowledgeEdge(
            key=row["edge_key"],
            from_key=row["from_key"],
            to_key=row["to_key"],
            type=EdgeType(row["rel_type"].lower()),
            weight=row.get("weight") if row.get("weight") is not None else 1.0,
            metadata=json.loads(row.get("edge_metadata") or "{}"),
            created_at=row["edge_created_at"],
        )

    @staticmethod
    def _node_params(node: KnowledgeNode) -> dict[str, Any]:
        return {
            "key": node.key,
            "type": node.type.value,
            "name": node.name,
            "content": node.content,
            "metadata": json.dumps(node.metadata),
            "embedding": node.embedding,
            "embedding_json": json.dumps(node.embedding) if node.embedding else None,
            "created_at": node.created_at,
            "updated_at": node.updated_at,
        }

    # === Nodes ===

    async def insert_node(self, node: KnowledgeNode) -> KnowledgeNode:
        if node.key is not None and await self.get_node(node.key) is not None:
            raise GraphStoreWriteError(
                f"Node already exists: {node.key}", details={"key": node.key}
            )
        stored = node.model_copy(update={"key": node.key or uuid.uuid4().hex})
        params = self._node_params(stored)
        embedding_clause = ", embedding: vecf32($embedding)" if stored.embedding else ""
        self._write(
            f"""
            CREATE (n:{NODE_LABEL} {{
                key: $key, type: $type, name: $name, content: $content,
                metadata: $metadata, embedding_json: $embedding_json,
                created_at: $created_at, updated_at: $updated_at{embedding_clause}
            }})
            """,
            params,
            "node.insert",
        )
        logger.debug("falkordb.node.inserted", key=stored.key, type=stored.type.value)
        return stored

    async def get_node(self, key: str) -> KnowledgeNode | None:
        rows = self._read(
            f"MATCH (n:{NODE_LABEL} {{key: $key}}) RETURN {_NODE_RETURN}", {"key": key}
        )
        return self._node_from_row(rows[0]) if rows else None

    async def find_nodes(self, query: NodeQuery) -> list[KnowledgeNode]:
        conditions = []
        params: dict[str, Any] = {}
        if query.node_type is not None:
            conditions.append("n.type = $type")
            params["type"] = query.node_type.value
        if query.text:
            conditions.append(
                "(toLower(n.content) CONTAINS $text OR toLower(n.name) CONTAINS $text)"
            )
            params["text"] = query.text.lower()
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self._read(
            f"""
            MATCH (n:{NODE_LABEL}) {where}
            RETURN {_NODE_RETURN}
            ORDER BY n.created_at DESC
            """,
            params,
        )
        # Metadata is a JSON string in the graph, so it is matched here
        nodes = [node for node in map(self._node_from_row, rows) if matches_query(node, query)]
        return nodes[: query.limit] if query.limit is not None else nodes

    async def similar_nodes(
        self,
        vector: list[float],
        limit: int,
        node_type: NodeType | None = None,
    ) -> list[KnowledgeNode]:
        type_filter = "AND n.type = $type" if node_type is not None else ""
        params: dict[str, Any] = {"vector": vector, "limit": limit}
        if node_type is not None:
            params["type"] = node_type.value
        try:
            rows = self.execute_cypher(
                f"""
                MATCH (n:{NODE_LABEL})
                WHERE n.embedding IS NOT NULL {type_filter}
                WITH n, vec.euclideanDistance(n.embedding, vecf32($vector)) AS distance
                RETURN {_NODE_RETURN}
                ORDER BY distance ASC
                LIMIT $limit
                """,
                params,
            )
        except GraphStoreError:
            raise
        except Exception as exc:
            raise VectorSearchUnsupportedError(
                f"FalkorDB vector search failed: {exc}"
            ) from exc
        return [self._node_from_row(row) for row in rows]

    async def update_node(self, key: str, fields: dict[str, Any]) -> KnowledgeNode | None:
        current = await self.get_node(key)
        if current is None:
            return None
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise GraphStoreWriteError(
                f"Fields cannot be updated: {sorted(unknown)}", details={"key": key}
            )

        updated = current.model_copy(update={**fields, "updated_at": utc_now_iso()})
        params = self._node_params(updated)
        embedding_clause = (
            "n.embedding = vecf32($embedding)" if updated.embedding else "n.embedding = NULL"
        )
        self._write(
            f"""
            MATCH (n:{NODE_LABEL} {{key: $key}})
            SET n.type = $type, n.name = $name, n.content = $content,
                n.metadata = $metadata, n.embedding_json = $embedding_json,
                n.updated_at = $updated_at, {embedding_clause}
            """,
            params,
            "node.update",
        )
        return updated

    async def remove_node_cascade(self, key: str) -> bool:
        if await self.get_node(key) is None:
            return False
        self._write(
            f"MATCH (n:{NODE_LABEL} {{key: $key}}) DETACH DELETE n",
            {"key": key},
            "node.delete",
        )
        logger.debug("falkordb.node.removed", key=key)
        return True

    async def count_nodes(self, node_type: NodeType | None = None) -> int:
        if node_type is None:
            rows = self._read(f"MATCH (n:{NODE_LABEL}) RETURN count(n) AS cnt")
        else:
            rows = self._read(
                f"MATCH (n:{NODE_LABEL} {{type: $type}}) RETURN count(n) AS cnt",
                {"type": node_type.value},
            )
        return rows[0]["cnt"] if rows else 0

    # === Edges ===

    async def insert_edge(self, edge: KnowledgeEdge) -> KnowledgeEdge:
        stored = edge.model_copy(update={"key": edge.key or uuid.uuid4().hex})
        rows = self._write(
            f"""
            MATCH (a:{NODE_LABEL} {{key: $from_key}}), (b:{NODE_LABEL} {{key: $to_key}})
            CREATE (a)-[r:{_rel_type(stored.type)} {{
                key: $key, weight: $weight, metadata: $metadata, created_at: $created_at
            }}]->(b)
            RETURN r.key AS key
            """,
            {
                "from_key": stored.from_key,
                "to_key": stored.to_key,
                "key": stored.key,
                "weight": stored.weight,
                "metadata": json.dumps(stored.metadata),
                "created_at": stored.created_at,
            },
            "edge.insert",
        )
        if not rows:
            raise GraphStoreWriteError(
                "Edge endpoint does not exist",
                details={"from_key": edge.from_key, "to_key": edge.to_key},
            )
        return stored

    async def get_edge(self, key: str) -> KnowledgeEdge | None:
        rows = self._read(
            f"MATCH (a)-[r {{key: $key}}]->(b) RETURN {_EDGE_RETURN}", {"key": key}
        )
        return self._edge_from_row(rows[0]) if rows else None

    async def find_edges(
        self,
        from_key: str | None = None,
        to_key: str | None = None,
        edge_type: EdgeType | None = None,
    ) -> list[KnowledgeEdge]:
        rel = f":{_rel_type(edge_type)}" if edge_type is not None else ""
        conditions = []
        params: dict[str, Any] = {}
        if from_key is not None:
            conditions.append("a.key = $from_key")
            params["from_key"] = from_key
        if to_key is not None:
            conditions.append("b.key = $to_key")
            params["to_key"] = to_key
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self._read(
            f"MATCH (a:{NODE_LABEL})-[r{rel}]->(b:{NODE_LABEL}) {where} RETURN {_EDGE_RETURN}",
            params,
        )
        return [self._edge_from_row(row) for row in rows]

    async def remove_edge(self, key: str) -> bool:
        if await self.get_edge(key) is None:
            return False
        self._write("MATCH ()-[r {key: $key}]->() DELETE r", {"key": key}, "edge.delete")
        return True

    async def traverse_one_hop(
        self,
        start_key: str,
        edge_type: EdgeType | None = None,
        direction: Direction = Direction.BOTH,
    ) -> list[tuple[KnowledgeNode, KnowledgeEdge]]:
        rel = f":{_rel_type(edge_type)}" if edge_type is not None else ""
        patterns = []
        if direction in (Direction.OUTGOING, Direction.BOTH):
            patterns.append(f"(a:{NODE_LABEL} {{key: $key}})-[r{rel}]->(b:{NODE_LABEL})")
        if direction in (Direction.INCOMING, Direction.BOTH):
            patterns.append(f"(a:{NODE_LABEL})-[r{rel}]->(b:{NODE_LABEL} {{key: $key}})")

        hops: list[tuple[KnowledgeNode, KnowledgeEdge]] = []
        for pattern in patterns:
            rows = self._read(
                f"""
                MATCH {pattern}
                WITH a, r, b, CASE WHEN a.key = $key THEN b ELSE a END AS n
                RETURN {_NODE_RETURN}, {_EDGE_RETURN}
                """,
                {"key": start_key},
            )
            hops.extend((self._node_from_row(row), self._edge_from_row(row)) for row in rows)
        return hops
