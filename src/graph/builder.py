"""Graph construction from explicit wiki-links and embedding similarity.

Two graphs come out of the same inputs:

* ``build_similarity_graph`` — similarity edges only, degree-capped,
  used by the standalone graph view.
* ``build_links_graph`` — explicit edges plus per-post AI suggestions,
  used for backlinks and the explorer.

Both read thresholds and caps from a single ``GraphParams`` and score
pairs through a shared ``SimilarityIndex``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from postgraph.errors import DimensionMismatchError
from postgraph.graph.backlinks import build_backlinks, build_post_meta
from postgraph.graph.groups import TagGroups
from postgraph.graph.models import EdgeType, GraphData, GraphEdge, GraphNode, LinkEntry, LinksData
from postgraph.graph.similarity import SimilarityMode, cosine_similarity

if TYPE_CHECKING:
    from postgraph.content.models import Document
    from postgraph.embeddings.models import EmbeddingRecord
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.65
MAX_EDGES_PER_NODE = 5
MAX_AI_SUGGESTIONS = 5
EXPLICIT_WEIGHT = 1.0


class GraphParams(BaseModel):
    """Thresholds and caps shared by both graph algorithms."""

    model_config = ConfigDict(frozen=True)

    similarity_threshold: float = SIMILARITY_THRESHOLD
    max_edges_per_node: int = Field(default=MAX_EDGES_PER_NODE, ge=0)
    max_ai_suggestions: int = Field(default=MAX_AI_SUGGESTIONS, ge=0)


class ScoredPair(NamedTuple):
    source: str
    target: str
    score: float


def round_weight(score: float) -> float:
    return round(score, 2)


# -- Similarity index ---------------------------------------------------------


class SimilarityIndex:
    """All pairwise similarities between posts that have an embedding.

    Pairs are scored once each, in document order (``i < j``).  Embeddings
    for slugs that are not among *documents* are ignored.  In STRICT mode a
    pair with mismatched dimensions is logged and left out; in LENIENT mode
    it scores 0.0.
    """

    def __init__(
        self,
        documents: Iterable[Document],
        embeddings: Mapping[str, EmbeddingRecord],
        *,
        mode: SimilarityMode = SimilarityMode.STRICT,
        report: PipelineReport | None = None,
    ) -> None:
        self.mode = mode
        self._slugs = [d.slug for d in documents if d.slug in embeddings]
        self._slug_set = set(self._slugs)
        self._pairs: list[ScoredPair] = []
        self._scores: dict[str, dict[str, float]] = defaultdict(dict)
        self.mismatched: list[tuple[str, str]] = []

        vectors = [embeddings[slug].embedding for slug in self._slugs]
        for i, slug_i in enumerate(self._slugs):
            for j in range(i + 1, len(self._slugs)):
                slug_j = self._slugs[j]
                try:
                    score = cosine_similarity(vectors[i], vectors[j], mode=mode)
                except DimensionMismatchError as exc:
                    logger.warning("Skipping pair %s / %s: %s", slug_i, slug_j, exc)
                    self.mismatched.append((slug_i, slug_j))
                    if report:
                        report.add_error(
                            "graph",
                            str(exc),
                            source=f"{slug_i}:{slug_j}",
                            error_type="dimension_mismatch",
                        )
                    continue
                self._pairs.append(ScoredPair(slug_i, slug_j, score))
                self._scores[slug_i][slug_j] = score
                self._scores[slug_j][slug_i] = score

    @property
    def slugs(self) -> list[str]:
        """Slugs with an embedding, in document order."""
        return list(self._slugs)

    def has_embedding(self, slug: str) -> bool:
        return slug in self._slug_set

    def pairs(self) -> list[ScoredPair]:
        """Every scored pair in enumeration order."""
        return list(self._pairs)

    def score(self, a: str, b: str) -> float | None:
        return self._scores.get(a, {}).get(b)

    def neighbours(self, slug: str) -> list[tuple[str, float]]:
        """Scores from *slug* to every other embedded post, in document order."""
        row = self._scores.get(slug, {})
        return [(other, row[other]) for other in self._slugs if other in row]


# -- Edge bookkeeping ---------------------------------------------------------


class EdgeSet:
    """Ordered edges with at most one edge per unordered pair."""

    def __init__(self) -> None:
        self._edges: list[GraphEdge] = []
        self._pairs: set[frozenset[str]] = set()

    def connects(self, a: str, b: str) -> bool:
        return frozenset((a, b)) in self._pairs

    def add(self, edge: GraphEdge) -> bool:
        """Append *edge* unless its pair is already connected (first write wins)."""
        key = edge.pair_key
        if key in self._pairs:
            return False
        self._pairs.add(key)
        self._edges.append(edge)
        return True

    def edges(self) -> list[GraphEdge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._edges)


def count_connections(edges: Iterable[GraphEdge]) -> dict[str, int]:
    """Number of edges touching each slug."""
    counts: dict[str, int] = defaultdict(int)
    for edge in edges:
        counts[edge.source] += 1
        counts[edge.target] += 1
    return dict(counts)


def build_nodes(
    documents: Iterable[Document],
    edges: list[GraphEdge],
    groups: TagGroups | None = None,
) -> tuple[list[GraphNode], TagGroups]:
    """Create one node per document once the edge set is final.

    Returns the nodes and the tag-group accumulator used to colour them.
    """
    groups = groups if groups is not None else TagGroups()
    connections = count_connections(edges)
    nodes = [
        GraphNode(
            id=doc.slug,
            title=doc.title,
            tags=list(doc.tags),
            group=groups.assign(doc.tags),
            connections=connections.get(doc.slug, 0),
        )
        for doc in documents
    ]
    return nodes, groups


# -- Similarity graph ---------------------------------------------------------


def select_capped_edges(
    pairs: list[ScoredPair],
    params: GraphParams,
) -> list[GraphEdge]:
    """Greedy degree-capped edge selection.

    Pairs below the threshold are dropped, the rest are stable-sorted by
    score (ties keep enumeration order) and accepted while both endpoints
    are under ``max_edges_per_node``.
    """
    qualifying = [p for p in pairs if p.score >= params.similarity_threshold]
    qualifying.sort(key=lambda p: p.score, reverse=True)

    degree: dict[str, int] = defaultdict(int)
    edges: list[GraphEdge] = []
    for pair in qualifying:
        if degree[pair.source] >= params.max_edges_per_node:
            continue
        if degree[pair.target] >= params.max_edges_per_node:
            continue
        edges.append(
            GraphEdge(
                source=pair.source,
                target=pair.target,
                weight=round_weight(pair.score),
                type=EdgeType.AI,
            )
        )
        degree[pair.source] += 1
        degree[pair.target] += 1
    return edges


def build_similarity_graph(
    documents: list[Document],
    embeddings: Mapping[str, EmbeddingRecord],
    params: GraphParams | None = None,
    *,
    now: datetime | None = None,
    report: PipelineReport | None = None,
) -> GraphData:
    """Build the degree-capped similarity graph.

    Every document becomes a node, with or without an embedding.
    """
    params = params or GraphParams()
    index = SimilarityIndex(documents, embeddings, mode=SimilarityMode.STRICT, report=report)
    logger.info("Scored %d pairs across %d embedded posts", len(index.pairs()), len(index.slugs))

    edges = select_capped_edges(index.pairs(), params)
    nodes, _groups = build_nodes(documents, edges)

    generated = now or datetime.now(tz=UTC)
    return GraphData(nodes=nodes, edges=edges, generated_at=generated.isoformat())


# -- Unified links graph ------------------------------------------------------


class LinksGraph(BaseModel):
    """Edges, nodes and per-post suggestions of the unified graph."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    suggestions: dict[str, list[LinkEntry]] = Field(default_factory=dict)
    tag_groups: dict[str, int] = Field(default_factory=dict)
    dangling_links: int = 0

    def edges_of_type(self, edge_type: EdgeType) -> list[GraphEdge]:
        return [e for e in self.edges if e.type == edge_type]


def suggest_related(
    index: SimilarityIndex,
    slug: str,
    *,
    exclude: Iterable[str] = (),
    titles: Mapping[str, str],
    params: GraphParams,
) -> list[LinkEntry]:
    """Top similar posts for *slug* that it does not already link to.

    Scores are rounded to two decimals before ranking; equal scores keep
    document order.
    """
    excluded = set(exclude)
    candidates: list[LinkEntry] = []
    for other, score in index.neighbours(slug):
        if other in excluded:
            continue
        if score < params.similarity_threshold:
            continue
        candidates.append(LinkEntry(slug=other, title=titles[other], score=round_weight(score)))

    candidates.sort(key=lambda e: e.score or 0.0, reverse=True)
    return candidates[: params.max_ai_suggestions]


def build_links_graph(
    documents: list[Document],
    embeddings: Mapping[str, EmbeddingRecord],
    params: GraphParams | None = None,
    *,
    report: PipelineReport | None = None,
) -> LinksGraph:
    """Build the unified explicit + AI graph.

    The explicit pass runs to completion before the AI pass starts:

    1. Each resolvable ``[[link]]`` becomes an ``explicit`` edge.  Links to
       unknown slugs and self-links are dropped.
    2. Each post's ranked suggestions become ``ai`` edges unless the pair
       is already connected by any edge.

    Suggestions are returned in full even when their edge was suppressed.
    """
    params = params or GraphParams()
    known = {doc.slug for doc in documents}
    titles = {doc.slug: doc.title for doc in documents}
    edge_set = EdgeSet()
    dangling = 0

    for doc in documents:
        for target in doc.explicit_links:
            if target not in known:
                logger.debug("Dangling link %s -> %s", doc.slug, target)
                dangling += 1
                continue
            if target == doc.slug:
                continue
            edge_set.add(
                GraphEdge(
                    source=doc.slug,
                    target=target,
                    weight=EXPLICIT_WEIGHT,
                    type=EdgeType.EXPLICIT,
                )
            )
    explicit_count = len(edge_set)
    logger.info("Explicit links: %d edges, %d dangling", explicit_count, dangling)

    index = SimilarityIndex(documents, embeddings, mode=SimilarityMode.LENIENT, report=report)
    suggestions: dict[str, list[LinkEntry]] = {}
    for doc in documents:
        ranked = suggest_related(
            index, doc.slug, exclude=doc.explicit_links, titles=titles, params=params
        )
        suggestions[doc.slug] = ranked
        for entry in ranked:
            edge_set.add(
                GraphEdge(
                    source=doc.slug,
                    target=entry.slug,
                    weight=entry.score if entry.score is not None else 0.0,
                    type=EdgeType.AI,
                )
            )
    logger.info("AI suggestions: %d edges", len(edge_set) - explicit_count)

    edges = edge_set.edges()
    nodes, groups = build_nodes(documents, edges)
    return LinksGraph(
        nodes=nodes,
        edges=edges,
        suggestions=suggestions,
        tag_groups=groups.as_dict(),
        dangling_links=dangling,
    )


def build_links_data(
    documents: list[Document],
    embeddings: Mapping[str, EmbeddingRecord],
    params: GraphParams | None = None,
    *,
    now: datetime | None = None,
    report: PipelineReport | None = None,
) -> tuple[LinksData, LinksGraph]:
    """Build the full ``links-data.json`` structure."""
    graph = build_links_graph(documents, embeddings, params, report=report)
    generated = now or datetime.now(tz=UTC)
    data = LinksData(
        nodes=graph.nodes,
        edges=graph.edges,
        backlinks=build_backlinks(documents, graph.suggestions),
        post_meta=build_post_meta(documents),
        generated_at=generated.isoformat(),
    )
    return data, graph
