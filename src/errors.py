"""Error taxonomy and per-run error collection.

Only ``SetupError`` is meant to abort a run.  Everything else is raised
at the point of failure and handled by the caller one level up, which
logs it, records it on a ``PipelineReport`` and moves on to the next
document or pair.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PostgraphError(Exception):
    """Base error for the postgraph pipeline."""


class SetupError(PostgraphError):
    """Missing credential or configuration required before any work starts."""


class SourceReadError(PostgraphError):
    """A single post file could not be read or its metadata parsed."""


class CacheCorruptionError(PostgraphError):
    """The embeddings cache file exists but cannot be parsed."""


class ExternalCallError(PostgraphError):
    """The embedding capability failed for one input."""


class DimensionMismatchError(PostgraphError):
    """Two vectors handed to the similarity engine have different lengths."""

    def __init__(self, left: int, right: int) -> None:
        self.left = left
        self.right = right
        super().__init__(f"Vector dimensions differ: {left} != {right}")


class PipelineError(BaseModel):
    """One recorded, non-fatal failure."""

    stage: str
    message: str
    source: str = ""
    error_type: str = "error"


class PipelineReport(BaseModel):
    """Collects non-fatal errors across the stages of one run."""

    errors: list[PipelineError] = Field(default_factory=list)

    def add_error(
        self,
        stage: str,
        message: str,
        *,
        source: str = "",
        error_type: str = "error",
    ) -> None:
        self.errors.append(
            PipelineError(
                stage=stage,
                message=message,
                source=source,
                error_type=error_type,
            )
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def errors_for(self, stage: str) -> list[PipelineError]:
        """Return errors recorded by a single stage."""
        return [e for e in self.errors if e.stage == stage]

    def summary(self) -> str:
        """One line per stage: ``stage: N error(s)``."""
        if not self.errors:
            return "No errors"
        counts: dict[str, int] = {}
        for err in self.errors:
            counts[err.stage] = counts.get(err.stage, 0) + 1
        return "\n".join(f"{stage}: {n} error(s)" for stage, n in counts.items())
