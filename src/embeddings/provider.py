"""Embedding providers — turn a short text into a fixed-length vector.

The pipeline only ever needs ``embed(text)``; the OpenAI client is the
one real implementation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import openai
from openai import OpenAI

from postgraph.errors import ExternalCallError, SetupError

if TYPE_CHECKING:
    from postgraph.content.models import Document

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"

MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class EmbeddingProvider(Protocol):
    """Anything that can embed a single text."""

    def embed(self, text: str) -> list[float]:
        ...


def prepare_embedding_text(doc: Document) -> str:
    """Build the embedding input: title, tags, and excerpt.

    The post body is left out to keep API cost per post small.
    """
    parts = [doc.title, " ".join(doc.tags)]
    if doc.excerpt:
        parts.append(doc.excerpt)
    return " | ".join(parts)


class OpenAIEmbeddings:
    """OpenAI embeddings API provider."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        *,
        client: Any | None = None,
    ) -> None:
        self.model = model
        if client is not None:
            self._client = client
            return
        if not api_key:
            raise SetupError("OPENAI_API_KEY is not set; cannot generate embeddings")
        self._client = OpenAI(api_key=api_key)

    @property
    def dimensions(self) -> int:
        """Expected vector length for the configured model."""
        return MODEL_DIMENSIONS.get(self.model, 1536)

    def embed(self, text: str) -> list[float]:
        """Embed one text.

        Raises:
            ExternalCallError: On any API or transport failure.
        """
        try:
            response = self._client.embeddings.create(input=text, model=self.model)
        except openai.OpenAIError as exc:
            raise ExternalCallError(f"Embedding request failed ({self.model}): {exc}") from exc
        if not response.data:
            raise ExternalCallError(f"Embedding response had no data ({self.model})")
        return list(response.data[0].embedding)
