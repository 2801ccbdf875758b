"""Knowledge graph node and edge models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class NodeType(str, Enum):
    """Types of knowledge nodes."""

    CONCEPT = "concept"
    ENTITY = "entity"
    DOCUMENT = "document"
    DOCUMENT_CHUNK = "document_chunk"
    FACT = "fact"
    QUESTION = "question"
    ANSWER = "answer"


class EdgeType(str, Enum):
    """Types of directed relations between nodes."""

    RELATES_TO = "relates_to"
    CONTAINS = "contains"
    ANSWERS = "answers"
    REFERENCES = "references"
    IS_A = "is_a"
    HAS_PROPERTY = "has_property"
    EXTRACTED_FROM = "extracted_from"
    PART_OF = "part_of"


class Direction(str, Enum):
    """Traversal direction relative to the start node."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"


class KnowledgeNode(BaseModel):
    """A typed unit of knowledge.

    ``key`` is assigned by the graph store on insert. ``embedding`` is
    always derived from the current ``content``.
    """

    key: str | None = None
    type: NodeType
    name: str
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class KnowledgeEdge(BaseModel):
    """A typed, directed, weighted relation between two nodes."""

    key: str | None = None
    from_key: str
    to_key: str
    type: EdgeType
    weight: float = 1.0
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now_iso)


class NodeQuery(BaseModel):
    """Filter for ``GraphStore.find_nodes``.

    ``text`` matches case-insensitively as a substring of ``content`` or
    ``name``. ``metadata`` entries must match exactly. Results are ordered
    newest first.
    """

    node_type: NodeType | None = None
    text: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    limit: int | None = None


class ConnectedNode(BaseModel):
    """A neighbor reached in one hop together with the connecting edge."""

    node: KnowledgeNode
    edge: KnowledgeEdge
