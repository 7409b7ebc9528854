"""Content domain — post documents, the post reader, and the search index.

Posts are read fresh from disk on every run; nothing here persists
state beyond the search-index artifact.
"""

from postgraph.content.models import UNCATEGORIZED, Document, SearchEntry, SearchIndex
from postgraph.content.reader import (
    PostReader,
    extract_wiki_links,
    normalize_slug,
    parse_frontmatter,
    read_posts,
    split_frontmatter,
)
from postgraph.content.search import (
    SEARCH_INDEX_FILENAME,
    build_search_index,
    load_search_index,
    save_search_index,
    strip_markdown,
)

__all__ = [
    "Document",
    "SEARCH_INDEX_FILENAME",
    "PostReader",
    "SearchEntry",
    "SearchIndex",
    "UNCATEGORIZED",
    "build_search_index",
    "extract_wiki_links",
    "load_search_index",
    "normalize_slug",
    "parse_frontmatter",
    "read_posts",
    "save_search_index",
    "split_frontmatter",
    "strip_markdown",
]
