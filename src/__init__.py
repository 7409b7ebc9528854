"""postgraph — search index, backlinks and knowledge graph for a static blog."""

__version__ = "0.1.0"
