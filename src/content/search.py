"""Client-side search index built from post documents."""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from postgraph.content.models import Document, SearchEntry, SearchIndex
from postgraph.core import _atomic_write

logger = logging.getLogger(__name__)

SEARCH_INDEX_FILENAME = "search-index.json"

CONTENT_PREVIEW_LENGTH = 500
EXCERPT_LENGTH = 150

# Applied in order; each pattern strips one kind of Markdown/MDX syntax.
_STRIP_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"```.*?```", re.DOTALL), ""),
    (re.compile(r"`[^`]+`"), ""),
    (re.compile(r"!\[[^\]]*\]\([^)]*\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"<[^>]+>"), ""),
    (re.compile(r"^#+\s+", re.MULTILINE), ""),
    (re.compile(r"[*_]{1,3}([^*_]+)[*_]{1,3}"), r"\1"),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"^[-*_]{3,}\s*$", re.MULTILINE), ""),
]
_WIKI_LINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_markdown(text: str) -> str:
    """Reduce Markdown/MDX to plain searchable text.

    Code is dropped entirely; links and wiki-links keep their visible
    label; tags, heading markers, emphasis and rules are removed.
    """
    # Wiki links go first so the [text](url) rule never sees "[[...]]".
    text = _WIKI_LINK_RE.sub(lambda m: m.group(2) or m.group(1), text)
    for pattern, replacement in _STRIP_RULES:
        text = pattern.sub(replacement, text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def build_search_entry(
    doc: Document,
    *,
    preview_length: int = CONTENT_PREVIEW_LENGTH,
    excerpt_length: int = EXCERPT_LENGTH,
) -> SearchEntry:
    preview = strip_markdown(doc.body)[:preview_length]
    return SearchEntry(
        slug=doc.slug,
        title=doc.title,
        excerpt=doc.excerpt or preview[:excerpt_length],
        tags=list(doc.tags),
        content=preview,
        date=doc.date.isoformat(),
    )


def build_search_index(
    documents: list[Document],
    *,
    preview_length: int = CONTENT_PREVIEW_LENGTH,
    excerpt_length: int = EXCERPT_LENGTH,
    now: datetime | None = None,
) -> SearchIndex:
    """Build the search index, newest post first.

    Posts sharing a date keep their read order.
    """
    ordered = sorted(documents, key=lambda d: d.date, reverse=True)
    entries = [
        build_search_entry(d, preview_length=preview_length, excerpt_length=excerpt_length)
        for d in ordered
    ]
    generated = now or datetime.now(tz=UTC)
    return SearchIndex(entries=entries, generated_at=generated.isoformat())


def save_search_index(index: SearchIndex, path: Path) -> None:
    """Write ``search-index.json``."""
    _atomic_write(path, index.model_dump_json(by_alias=True, indent=2))
    logger.info("Saved search index (%d entries) to %s", len(index.entries), path)


def load_search_index(path: Path) -> SearchIndex:
    return SearchIndex.model_validate(json.loads(path.read_text(encoding="utf-8")))
