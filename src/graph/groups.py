"""Primary-tag → group index assignment for graph colouring."""

from __future__ import annotations

from collections.abc import Iterable

from postgraph.content.models import UNCATEGORIZED, Document


class TagGroups:
    """Accumulates a primary tag → zero-based group index mapping.

    Indices are handed out in first-seen order, so the same documents in
    the same order always produce the same groups.  Untagged documents
    share the ``uncategorized`` group.
    """

    def __init__(self) -> None:
        self._groups: dict[str, int] = {}

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> TagGroups:
        groups = cls()
        for doc in documents:
            groups.assign(doc.tags)
        return groups

    def assign(self, tags: list[str]) -> int:
        """Return the group for *tags*, registering a new primary tag if needed."""
        primary = tags[0] if tags else UNCATEGORIZED
        if primary not in self._groups:
            self._groups[primary] = len(self._groups)
        return self._groups[primary]

    def get(self, tag: str) -> int | None:
        return self._groups.get(tag)

    def as_dict(self) -> dict[str, int]:
        return dict(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self):
        return iter(self._groups.items())
