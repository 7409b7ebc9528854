"""Search stage — posts → search-index.json."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from postgraph.content import SearchIndex, build_search_index, read_posts, save_search_index

if TYPE_CHECKING:
    from postgraph.config import PostgraphConfig
    from postgraph.content import Document
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)


def run_search(
    config: PostgraphConfig,
    *,
    documents: list[Document] | None = None,
    now: datetime | None = None,
    report: PipelineReport | None = None,
) -> SearchIndex:
    """Build and save the client-side search index."""
    if documents is None:
        documents = read_posts(
            config.posts_dir,
            extensions=config.content.extensions,
            skip_drafts=config.content.skip_drafts,
            report=report,
        )
    index = build_search_index(
        documents,
        preview_length=config.search.preview_length,
        excerpt_length=config.search.excerpt_length,
        now=now,
    )
    save_search_index(index, config.search_index_path)
    return index
