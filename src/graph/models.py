"""Core Pydantic models for the post graph and its JSON artifacts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class EdgeType(StrEnum):
    """Provenance of an edge."""

    EXPLICIT = "explicit"
    AI = "ai"


class GraphNode(BaseModel):
    """One post in the graph."""

    id: str
    title: str
    tags: list[str] = Field(default_factory=list)
    group: int = 0
    connections: int = 0


class GraphEdge(BaseModel):
    """A relation between two posts.

    Stored directed (source is the linking post, or the earlier post of a
    similarity pair) but deduplicated on the unordered pair.
    """

    source: str
    target: str
    weight: float
    type: EdgeType | None = None

    @property
    def pair_key(self) -> frozenset[str]:
        """Direction-free identity of the edge."""
        return frozenset((self.source, self.target))

    def touches(self, slug: str) -> bool:
        return slug in (self.source, self.target)


class LinkEntry(BaseModel):
    """A post referenced from a backlinks list."""

    slug: str
    title: str
    score: float | None = None


class BacklinksEntry(BaseModel):
    """Inbound links for one post, split by provenance."""

    model_config = ConfigDict(populate_by_name=True)

    explicit: list[LinkEntry] = Field(default_factory=list)
    ai_suggested: list[LinkEntry] = Field(default_factory=list, alias="aiSuggested")


class PostMeta(BaseModel):
    """Display metadata for one post."""

    title: str
    tags: list[str] = Field(default_factory=list)
    excerpt: str | None = None


class GraphData(BaseModel):
    """The ``graph-data.json`` artifact: similarity graph only."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    generated_at: str = Field(alias="generatedAt")


class LinksData(BaseModel):
    """The ``links-data.json`` artifact: explicit + AI graph with backlinks."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    backlinks: dict[str, BacklinksEntry] = Field(default_factory=dict)
    post_meta: dict[str, PostMeta] = Field(default_factory=dict, alias="postMeta")
    generated_at: str = Field(alias="generatedAt")
