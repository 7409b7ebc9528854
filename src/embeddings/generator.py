"""Embedding generation with cache reuse.

Each post is embedded at most once: a cached record that passes the
staleness policy is reused, everything else goes to the provider one
post at a time with a fixed pause between calls.  A failed call skips
that post and the run carries on.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from postgraph.embeddings.models import EmbeddingRecord, StalenessPolicy
from postgraph.embeddings.provider import EmbeddingProvider, prepare_embedding_text
from postgraph.embeddings.store import EmbeddingStore, content_hash, is_fresh
from postgraph.errors import ExternalCallError

if TYPE_CHECKING:
    from postgraph.content.models import Document
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY = 0.1


class EmbeddingRunResult(BaseModel):
    """Outcome of one generation run."""

    new_count: int = 0
    cached_count: int = 0
    failed_count: int = 0
    failed_slugs: list[str] = Field(default_factory=list)
    records: dict[str, EmbeddingRecord] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.records)


def _dominant_dimensions(records: dict[str, EmbeddingRecord]) -> int | None:
    counts = Counter(r.dimensions for r in records.values())
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def generate_embeddings(
    documents: list[Document],
    store: EmbeddingStore,
    provider: EmbeddingProvider,
    *,
    policy: StalenessPolicy = StalenessPolicy.NONE,
    delay: float = DEFAULT_REQUEST_DELAY,
    full: bool = False,
    report: PipelineReport | None = None,
) -> EmbeddingRunResult:
    """Embed every post that has no fresh cached vector, then save the cache.

    Args:
        documents: Posts in read order.
        store: Cache to read from and write back to.
        provider: Embedding capability.
        policy: Staleness policy for cached records.
        delay: Seconds to sleep after each provider call.
        full: Ignore the existing cache and rebuild it from this run only.
        report: Optional report for per-post failures.

    Returns:
        Counts plus the records that belong to this run's posts.
    """
    cached = {} if full else store.load()
    if cached:
        logger.info("Loaded %d cached embeddings", len(cached))

    result = EmbeddingRunResult()
    expected_dims = _dominant_dimensions(cached)

    for doc in documents:
        text = prepare_embedding_text(doc)
        record = cached.get(doc.slug)

        if is_fresh(record, text, policy):
            logger.debug("Using cached embedding for %s", doc.slug)
            result.records[doc.slug] = record
            result.cached_count += 1
            continue

        logger.info("Generating embedding for %s", doc.slug)
        try:
            vector = provider.embed(text)
        except ExternalCallError as exc:
            logger.warning("Failed to embed %s: %s", doc.slug, exc)
            result.failed_count += 1
            result.failed_slugs.append(doc.slug)
            if report:
                report.add_error(
                    "embeddings",
                    str(exc),
                    source=doc.slug,
                    error_type="external_call_error",
                )
            continue

        if expected_dims is None:
            expected_dims = len(vector)
        elif len(vector) != expected_dims:
            logger.warning(
                "Embedding for %s has %d dimensions, cache has %d",
                doc.slug, len(vector), expected_dims,
            )

        result.records[doc.slug] = EmbeddingRecord(
            slug=doc.slug,
            title=doc.title,
            tags=list(doc.tags),
            embedding=vector,
            updated_at=datetime.now(tz=UTC).isoformat(),
            content_hash=content_hash(text),
        )
        result.new_count += 1

        if delay > 0:
            time.sleep(delay)

    merged = dict(result.records) if full else {**cached, **result.records}
    store.save(merged)

    logger.info(
        "Embeddings: %d new, %d cached, %d failed",
        result.new_count, result.cached_count, result.failed_count,
    )
    return result
