"""Embeddings stage — posts → embeddings.json."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from postgraph.content import read_posts
from postgraph.embeddings import (
    EmbeddingProvider,
    EmbeddingRunResult,
    EmbeddingStore,
    OpenAIEmbeddings,
    generate_embeddings,
)
from postgraph.errors import SetupError

if TYPE_CHECKING:
    from postgraph.config import PostgraphConfig
    from postgraph.content import Document
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)


def create_provider(config: PostgraphConfig) -> EmbeddingProvider:
    """Build the configured embedding provider.

    Raises:
        SetupError: If no API key is configured.
    """
    if not config.embeddings.is_configured:
        raise SetupError(
            "OPENAI_API_KEY is not set. Export it or add api_key under [embeddings]."
        )
    return OpenAIEmbeddings(model=config.embeddings.model, api_key=config.embeddings.api_key)


def run_embeddings(
    config: PostgraphConfig,
    *,
    documents: list[Document] | None = None,
    provider: EmbeddingProvider | None = None,
    full: bool = False,
    report: PipelineReport | None = None,
) -> EmbeddingRunResult:
    """Embed every uncached post and save the cache.

    The provider is resolved before any post is read, so a missing
    credential fails the stage without touching the cache.

    Raises:
        SetupError: If no provider is given and none is configured.
    """
    if provider is None:
        provider = create_provider(config)

    if documents is None:
        documents = read_posts(
            config.posts_dir,
            extensions=config.content.extensions,
            skip_drafts=config.content.skip_drafts,
            report=report,
        )
    logger.info("Embedding stage: %d posts", len(documents))

    return generate_embeddings(
        documents,
        EmbeddingStore(config.cache_path),
        provider,
        policy=config.staleness_policy(),
        delay=config.embeddings.request_delay,
        full=full,
        report=report,
    )
