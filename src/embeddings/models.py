"""Embedding cache models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

CACHE_VERSION = "1.0"


class StalenessPolicy(StrEnum):
    """When a cached embedding counts as fresh."""

    NONE = "none"  # any cached record is fresh, edits never trigger regeneration
    CONTENT_HASH = "content-hash"


class EmbeddingRecord(BaseModel):
    """Cached embedding vector for one post."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    title: str
    tags: list[str] = Field(default_factory=list)
    embedding: list[float]
    updated_at: str = Field(alias="updatedAt")
    content_hash: str | None = Field(default=None, alias="contentHash")

    @property
    def dimensions(self) -> int:
        return len(self.embedding)


class EmbeddingsCache(BaseModel):
    """The ``embeddings.json`` file."""

    version: str = CACHE_VERSION
    posts: list[EmbeddingRecord] = Field(default_factory=list)
