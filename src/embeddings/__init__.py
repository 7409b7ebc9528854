"""Embeddings domain — vector cache, provider, and cache-aware generation."""

from postgraph.embeddings.generator import EmbeddingRunResult, generate_embeddings
from postgraph.embeddings.models import (
    CACHE_VERSION,
    EmbeddingRecord,
    EmbeddingsCache,
    StalenessPolicy,
)
from postgraph.embeddings.provider import (
    EmbeddingProvider,
    OpenAIEmbeddings,
    prepare_embedding_text,
)
from postgraph.embeddings.store import CACHE_FILENAME, EmbeddingStore, content_hash, is_fresh

__all__ = [
    # models
    "CACHE_VERSION",
    "EmbeddingRecord",
    "EmbeddingsCache",
    "StalenessPolicy",
    # store
    "CACHE_FILENAME",
    "EmbeddingStore",
    "content_hash",
    "is_fresh",
    # provider
    "EmbeddingProvider",
    "OpenAIEmbeddings",
    "prepare_embedding_text",
    # generator
    "EmbeddingRunResult",
    "generate_embeddings",
]
