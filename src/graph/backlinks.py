"""Per-post inbound link view and display metadata."""

from __future__ import annotations

from collections.abc import Mapping

from postgraph.content.models import Document
from postgraph.graph.models import BacklinksEntry, LinkEntry, PostMeta


def build_backlinks(
    documents: list[Document],
    suggestions: Mapping[str, list[LinkEntry]],
) -> dict[str, BacklinksEntry]:
    """Invert explicit links into backlinks and attach AI suggestions.

    ``explicit`` lists every post whose ``[[links]]`` name this post, in
    read order.  ``ai_suggested`` is the post's own suggestion ranking,
    copied as-is (it is not re-derived from the edge set, so it can list
    posts whose AI edge was suppressed by an explicit one).
    Self-links are dropped, so a post never appears in its own
    ``explicit`` list.
    """
    backlinks: dict[str, BacklinksEntry] = {
        doc.slug: BacklinksEntry(
            explicit=[],
            ai_suggested=[e.model_copy() for e in suggestions.get(doc.slug, [])],
        )
        for doc in documents
    }

    for doc in documents:
        for target in doc.explicit_links:
            entry = backlinks.get(target)
            if entry is None or target == doc.slug:
                continue
            entry.explicit.append(LinkEntry(slug=doc.slug, title=doc.title))

    return backlinks


def build_post_meta(documents: list[Document]) -> dict[str, PostMeta]:
    return {
        doc.slug: PostMeta(title=doc.title, tags=list(doc.tags), excerpt=doc.excerpt)
        for doc in documents
    }
