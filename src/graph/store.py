"""JSON persistence for the graph artifacts.

Artifacts are written pretty-printed with camelCase keys and ``None``
fields omitted, always through ``_atomic_write`` so a reader never sees
a half-written file.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path

from postgraph.core import _atomic_write
from postgraph.graph.models import GraphData, GraphEdge, GraphNode, LinksData

logger = logging.getLogger(__name__)

GRAPH_FILENAME = "graph-data.json"
LINKS_FILENAME = "links-data.json"


def dump_graph(data: GraphData) -> str:
    """Serialize the similarity graph; its edges carry no ``type`` field."""
    return data.model_dump_json(
        by_alias=True,
        exclude_none=True,
        exclude={"edges": {"__all__": {"type"}}},
        indent=2,
    )


def dump_links(data: LinksData) -> str:
    return data.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def save_graph(data: GraphData, path: Path) -> None:
    """Write ``graph-data.json``."""
    _atomic_write(path, dump_graph(data))
    logger.info("Saved graph (%d nodes, %d edges) to %s", len(data.nodes), len(data.edges), path)


def save_links(data: LinksData, path: Path) -> None:
    """Write ``links-data.json``."""
    _atomic_write(path, dump_links(data))
    logger.info("Saved links (%d nodes, %d edges) to %s", len(data.nodes), len(data.edges), path)


def load_graph(path: Path) -> GraphData:
    """Parse a previously written ``graph-data.json``."""
    return GraphData.model_validate(json.loads(path.read_text(encoding="utf-8")))


def load_links(path: Path) -> LinksData:
    """Parse a previously written ``links-data.json``."""
    return LinksData.model_validate(json.loads(path.read_text(encoding="utf-8")))


def graph_stats(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    tag_groups: dict[str, int] | None = None,
) -> dict[str, object]:
    """Return summary statistics about a built graph.

    Returns a dict with keys:
    ``total_nodes``, ``total_edges``, ``edges_by_type``, ``isolated_nodes``,
    ``tag_groups``, ``average_weight``.
    """
    edges_by_type: dict[str, int] = defaultdict(int)
    for edge in edges:
        edges_by_type[edge.type.value if edge.type else "similarity"] += 1

    average = sum(e.weight for e in edges) / len(edges) if edges else 0.0

    return {
        "total_nodes": len(nodes),
        "total_edges": len(edges),
        "edges_by_type": dict(edges_by_type),
        "isolated_nodes": sum(1 for n in nodes if n.connections == 0),
        "tag_groups": len(tag_groups) if tag_groups is not None else 0,
        "average_weight": round(average, 4),
    }
