"""docgraph - document ingestion into a searchable knowledge graph."""

__version__ = "0.1.0"
