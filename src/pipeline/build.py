"""Full build — every stage over a single read of the posts directory."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from postgraph.content import SearchIndex, read_posts
from postgraph.embeddings import EmbeddingProvider, EmbeddingRunResult, EmbeddingStore
from postgraph.errors import PipelineReport
from postgraph.graph import GraphData, LinksData, LinksGraph
from postgraph.pipeline.embeddings import run_embeddings
from postgraph.pipeline.graph import run_graph, run_links
from postgraph.pipeline.search import run_search

if TYPE_CHECKING:
    from postgraph.config import PostgraphConfig

logger = logging.getLogger(__name__)


class BuildResult(BaseModel):
    """Everything one full build produced."""

    post_count: int
    embeddings: EmbeddingRunResult | None = None
    graph: GraphData
    links: LinksData
    links_graph: LinksGraph
    search: SearchIndex
    report: PipelineReport


def run_build(
    config: PostgraphConfig,
    *,
    provider: EmbeddingProvider | None = None,
    skip_embeddings: bool = False,
    full: bool = False,
    report: PipelineReport | None = None,
) -> BuildResult:
    """Run embeddings (when possible), graph, links and search stages.

    The embeddings stage runs when a provider is passed in or an API key is
    configured; otherwise it is skipped with a warning and the existing
    cache is used as-is.
    """
    report = report if report is not None else PipelineReport()
    now = datetime.now(tz=UTC)

    documents = read_posts(
        config.posts_dir,
        extensions=config.content.extensions,
        skip_drafts=config.content.skip_drafts,
        report=report,
    )

    embedding_result: EmbeddingRunResult | None = None
    if skip_embeddings:
        logger.info("Skipping embeddings stage")
    elif provider is None and not config.embeddings.is_configured:
        logger.warning("OPENAI_API_KEY not set, reusing cached embeddings only")
    else:
        embedding_result = run_embeddings(
            config, documents=documents, provider=provider, full=full, report=report
        )

    embeddings = EmbeddingStore(config.cache_path).load()
    graph = run_graph(config, documents=documents, embeddings=embeddings, now=now, report=report)
    links, links_graph = run_links(
        config, documents=documents, embeddings=embeddings, now=now, report=report
    )
    search = run_search(config, documents=documents, now=now, report=report)

    return BuildResult(
        post_count=len(documents),
        embeddings=embedding_result,
        graph=graph,
        links=links,
        links_graph=links_graph,
        search=search,
        report=report,
    )
