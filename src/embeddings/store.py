"""JSON-backed embeddings cache.

The whole cache is one ``embeddings.json`` file holding every record.
It is read once at the start of a run and rewritten atomically at the
end, so a run that dies halfway leaves the previous cache as it was.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from postgraph.core import _atomic_write
from postgraph.embeddings.models import (
    CACHE_VERSION,
    EmbeddingRecord,
    EmbeddingsCache,
    StalenessPolicy,
)
from postgraph.errors import CacheCorruptionError

logger = logging.getLogger(__name__)

CACHE_FILENAME = "embeddings.json"


def content_hash(text: str) -> str:
    """Stable fingerprint of the text an embedding was computed from."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def is_fresh(
    record: EmbeddingRecord | None,
    text: str,
    policy: StalenessPolicy = StalenessPolicy.NONE,
) -> bool:
    """Decide whether *record* can be reused for an input of *text*."""
    if record is None:
        return False
    if policy is StalenessPolicy.NONE:
        return True
    return record.content_hash == content_hash(text)


class EmbeddingStore:
    """Load and save the slug → ``EmbeddingRecord`` cache."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> EmbeddingsCache:
        """Parse the cache file.

        Raises:
            CacheCorruptionError: If the file exists but is not a valid cache.
        """
        if not self._path.exists():
            return EmbeddingsCache()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return EmbeddingsCache.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError, ValueError) as exc:
            raise CacheCorruptionError(f"Unreadable embeddings cache at {self._path}") from exc

    def load(self) -> dict[str, EmbeddingRecord]:
        """Return cached records keyed by slug.

        A missing or corrupt cache yields an empty mapping, which makes the
        next generation run embed every post again.
        """
        try:
            cache = self.read()
        except CacheCorruptionError as exc:
            logger.warning("%s, starting fresh", exc)
            return {}
        if cache.version != CACHE_VERSION:
            logger.info("Embeddings cache version %s (expected %s)", cache.version, CACHE_VERSION)
        records: dict[str, EmbeddingRecord] = {}
        for record in cache.posts:
            records[record.slug] = record
        return records

    def save(self, records: dict[str, EmbeddingRecord]) -> None:
        """Replace the cache file with *records* in one atomic write."""
        cache = EmbeddingsCache(posts=list(records.values()))
        _atomic_write(
            self._path,
            cache.model_dump_json(by_alias=True, exclude_none=True, indent=2),
        )
        logger.debug("Saved %d embeddings to %s", len(records), self._path)
