"""Content domain models — pure Pydantic v2 data types.

A ``Document`` is one blog post as read from disk for a single pipeline
run.  Search index entries are derived from documents and written to a
static JSON file for client-side search.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

UNCATEGORIZED = "uncategorized"


class Document(BaseModel):
    """One blog post, immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    slug: str
    title: str
    tags: list[str] = Field(default_factory=list)
    date: datetime
    excerpt: str | None = None
    draft: bool = False
    body: str = ""
    explicit_links: list[str] = Field(default_factory=list)
    source_path: Path | None = None

    @property
    def primary_tag(self) -> str:
        """First tag, or the ``uncategorized`` sentinel for untagged posts."""
        return self.tags[0] if self.tags else UNCATEGORIZED


class SearchEntry(BaseModel):
    """One row of the client-side search index."""

    slug: str
    title: str
    excerpt: str
    tags: list[str] = Field(default_factory=list)
    content: str
    date: str


class SearchIndex(BaseModel):
    """The ``search-index.json`` artifact."""

    model_config = ConfigDict(populate_by_name=True)

    entries: list[SearchEntry] = Field(default_factory=list)
    generated_at: str = Field(alias="generatedAt")
