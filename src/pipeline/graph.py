"""Graph stage — posts + cached embeddings → graph-data.json, links-data.json."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from postgraph.content import read_posts
from postgraph.embeddings import EmbeddingRecord, EmbeddingStore
from postgraph.graph import (
    GraphData,
    LinksData,
    LinksGraph,
    build_links_data,
    build_similarity_graph,
    save_graph,
    save_links,
)

if TYPE_CHECKING:
    from postgraph.config import PostgraphConfig
    from postgraph.content import Document
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)


def _load_inputs(
    config: PostgraphConfig,
    documents: list[Document] | None,
    embeddings: dict[str, EmbeddingRecord] | None,
    report: PipelineReport | None,
) -> tuple[list[Document], dict[str, EmbeddingRecord]]:
    if documents is None:
        documents = read_posts(
            config.posts_dir,
            extensions=config.content.extensions,
            skip_drafts=config.content.skip_drafts,
            report=report,
        )
    if embeddings is None:
        embeddings = EmbeddingStore(config.cache_path).load()
        if not embeddings:
            logger.warning("No embeddings at %s; graph will have no similarity edges",
                           config.cache_path)
    known = {d.slug for d in documents}
    stale = [slug for slug in embeddings if slug not in known]
    if stale:
        logger.info("Ignoring %d cached embeddings for posts that no longer exist", len(stale))
    return documents, embeddings


def run_graph(
    config: PostgraphConfig,
    *,
    documents: list[Document] | None = None,
    embeddings: dict[str, EmbeddingRecord] | None = None,
    now: datetime | None = None,
    report: PipelineReport | None = None,
) -> GraphData:
    """Build and save the similarity graph."""
    documents, embeddings = _load_inputs(config, documents, embeddings, report)
    data = build_similarity_graph(
        documents,
        embeddings,
        config.to_graph_params(),
        now=now or datetime.now(tz=UTC),
        report=report,
    )
    save_graph(data, config.graph_path)
    return data


def run_links(
    config: PostgraphConfig,
    *,
    documents: list[Document] | None = None,
    embeddings: dict[str, EmbeddingRecord] | None = None,
    now: datetime | None = None,
    report: PipelineReport | None = None,
) -> tuple[LinksData, LinksGraph]:
    """Build and save the unified links data with backlinks."""
    documents, embeddings = _load_inputs(config, documents, embeddings, report)
    data, graph = build_links_data(
        documents,
        embeddings,
        config.to_graph_params(),
        now=now or datetime.now(tz=UTC),
        report=report,
    )
    save_links(data, config.links_path)
    return data, graph
