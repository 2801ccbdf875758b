"""Graph store factory."""

from typing import TYPE_CHECKING

import structlog

from docgraph.core.interfaces.stores import GraphStore

if TYPE_CHECKING:
    from docgraph.config.settings import Settings

logger = structlog.get_logger(__name__)


def create_graph_store(settings: "Settings") -> GraphStore:
    """Create the (unopened) store selected by ``settings.graph_store``."""
    graph_store = settings.graph_store.lower()

    if graph_store == "memory":
        from docgraph.stores.networkx_store import NetworkXGraphStore

        store: GraphStore = NetworkXGraphStore()
    elif graph_store == "falkordb":
        from docgraph.stores.falkordb_store import FalkorDBGraphStore

        store = FalkorDBGraphStore(
            db_path=settings.falkordb_path,
            graph_name=settings.falkordb_graph_name,
        )
    else:
        raise ValueError(f"Unknown graph store: {graph_store}")

    logger.info("Graph store created", store=graph_store)
    return store
