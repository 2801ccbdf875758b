"""Graph store adapters."""

from docgraph.stores.factory import create_graph_store
from docgraph.stores.networkx_store import NetworkXGraphStore

__all__ = ["NetworkXGraphStore", "create_graph_store"]
