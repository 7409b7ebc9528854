"""Post discovery, frontmatter parsing, and wiki-link extraction.

Reads a flat directory of Markdown/MDX posts into ``Document`` records.
Nothing in here raises past ``read_posts``: unreadable files are skipped
and malformed frontmatter is treated as empty metadata.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import UTC, date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from postgraph.content.models import Document
from postgraph.errors import SourceReadError

if TYPE_CHECKING:
    from postgraph.errors import PipelineReport

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".mdx",)

# [[target]] or [[target|display text]]
WIKI_LINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]+)?\]\]")

# An empty block ("---\n---") closes at the first delimiter.
_FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?:(.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_slug(target: str) -> str:
    """Lower-case a link target and collapse whitespace runs to hyphens."""
    return _WHITESPACE_RE.sub("-", target.strip().lower())


def extract_wiki_links(body: str) -> list[str]:
    """Return normalized ``[[wiki-link]]`` targets in first-occurrence order."""
    links: list[str] = []
    for match in WIKI_LINK_RE.finditer(body):
        target = normalize_slug(match.group(1))
        if target and target not in links:
            links.append(target)
    return links


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split raw file text into (frontmatter block, body).

    Returns ``(None, text)`` when the file has no ``---`` delimited block
    and ``("", body)`` when the block is empty.  A leading BOM is allowed.
    """
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    return match.group(1) or "", text[match.end():]


def parse_frontmatter(raw: str | None) -> dict[str, Any]:
    """Parse a YAML frontmatter block into a dict.

    Raises:
        SourceReadError: If the block is not valid YAML or not a mapping.
    """
    if raw is None or not raw.strip():
        return {}
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise SourceReadError(f"Invalid frontmatter: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SourceReadError(f"Frontmatter is a {type(data).__name__}, expected a mapping")
    return data


def _coerce_tags(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, Iterable):
        return [str(t) for t in value if t is not None and str(t).strip()]
    return [str(value)]


def _coerce_date(value: object, now: datetime) -> datetime:
    """Turn a YAML date/datetime/string into an aware datetime."""
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparsable date %r, using current time", value)
    if parsed is None:
        return now
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class PostReader:
    """Reads every post file in one directory into ``Document`` records."""

    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        *,
        skip_drafts: bool = False,
        now: datetime | None = None,
    ) -> None:
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.skip_drafts = skip_drafts
        self._now = now

    def discover(self, posts_dir: Path) -> list[Path]:
        """List post files (non-recursive) in sorted filename order."""
        if not posts_dir.is_dir():
            return []
        return sorted(
            p for p in posts_dir.iterdir()
            if p.is_file() and p.suffix.lower() in self.extensions
        )

    def read_all(self, posts_dir: Path, report: PipelineReport | None = None) -> list[Document]:
        """Read every post in *posts_dir*.

        A missing directory yields an empty list.  Files that cannot be read
        are skipped and recorded on *report*.
        """
        if not posts_dir.is_dir():
            logger.info("No posts directory at %s", posts_dir)
            return []

        documents: list[Document] = []
        seen: set[str] = set()
        for path in self.discover(posts_dir):
            try:
                doc = self.read_file(path, report=report)
            except SourceReadError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                if report:
                    report.add_error(
                        "read",
                        str(exc),
                        source=path.name,
                        error_type="source_read_error",
                    )
                continue
            if self.skip_drafts and doc.draft:
                logger.debug("Skipping draft %s", doc.slug)
                continue
            if doc.slug in seen:
                logger.warning("Duplicate slug %r in %s, keeping the first", doc.slug, path)
                continue
            seen.add(doc.slug)
            documents.append(doc)

        logger.info("Read %d posts from %s", len(documents), posts_dir)
        return documents

    def read_file(self, path: Path, report: PipelineReport | None = None) -> Document:
        """Parse a single post file.

        Raises:
            SourceReadError: If the file cannot be read at all.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"Could not read {path}: {exc}") from exc

        raw_fm, body = split_frontmatter(text)
        try:
            fm = parse_frontmatter(raw_fm)
        except SourceReadError as exc:
            logger.warning("Malformed frontmatter in %s, using defaults: %s", path, exc)
            if report:
                report.add_error(
                    "read",
                    str(exc),
                    source=path.name,
                    error_type="frontmatter_error",
                )
            fm = {}

        now = self._now or datetime.now(tz=UTC)
        slug = normalize_slug(str(fm["slug"])) if _optional_str(fm.get("slug")) else path.stem

        return Document(
            slug=slug,
            title=_optional_str(fm.get("title")) or slug,
            tags=_coerce_tags(fm.get("tags")),
            date=_coerce_date(fm.get("date"), now),
            excerpt=_optional_str(fm.get("excerpt")),
            draft=fm.get("draft") is True,
            body=body,
            explicit_links=extract_wiki_links(body),
            source_path=path,
        )


def read_posts(
    posts_dir: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    skip_drafts: bool = False,
    report: PipelineReport | None = None,
) -> list[Document]:
    """Convenience wrapper around ``PostReader.read_all``."""
    reader = PostReader(extensions, skip_drafts=skip_drafts)
    return reader.read_all(posts_dir, report=report)
