"""Post graph domain — similarity, graph building, backlinks, artifacts.

Public API re-exports for the graph domain.
"""

from postgraph.graph.backlinks import build_backlinks, build_post_meta
from postgraph.graph.builder import (
    MAX_AI_SUGGESTIONS,
    MAX_EDGES_PER_NODE,
    SIMILARITY_THRESHOLD,
    EdgeSet,
    GraphParams,
    LinksGraph,
    ScoredPair,
    SimilarityIndex,
    build_links_data,
    build_links_graph,
    build_nodes,
    build_similarity_graph,
    count_connections,
    select_capped_edges,
    suggest_related,
)
from postgraph.graph.groups import TagGroups
from postgraph.graph.models import (
    BacklinksEntry,
    EdgeType,
    GraphData,
    GraphEdge,
    GraphNode,
    LinkEntry,
    LinksData,
    PostMeta,
)
from postgraph.graph.similarity import SimilarityMode, cosine_similarity
from postgraph.graph.store import (
    GRAPH_FILENAME,
    LINKS_FILENAME,
    dump_graph,
    dump_links,
    graph_stats,
    load_graph,
    load_links,
    save_graph,
    save_links,
)

__all__ = [
    # models
    "BacklinksEntry",
    "EdgeType",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "LinkEntry",
    "LinksData",
    "PostMeta",
    # similarity
    "SimilarityMode",
    "cosine_similarity",
    # builder
    "MAX_AI_SUGGESTIONS",
    "MAX_EDGES_PER_NODE",
    "SIMILARITY_THRESHOLD",
    "EdgeSet",
    "GraphParams",
    "LinksGraph",
    "ScoredPair",
    "SimilarityIndex",
    "TagGroups",
    "build_links_data",
    "build_links_graph",
    "build_nodes",
    "build_similarity_graph",
    "count_connections",
    "select_capped_edges",
    "suggest_related",
    # backlinks
    "build_backlinks",
    "build_post_meta",
    # store
    "GRAPH_FILENAME",
    "LINKS_FILENAME",
    "dump_graph",
    "dump_links",
    "graph_stats",
    "load_graph",
    "load_links",
    "save_graph",
    "save_links",
]
