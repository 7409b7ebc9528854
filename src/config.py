"""Unified configuration loaded from .postgraph.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from postgraph.embeddings.models import StalenessPolicy
from postgraph.errors import SetupError

if TYPE_CHECKING:
    from postgraph.graph.builder import GraphParams

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".postgraph.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "postgraph" / "config.toml"


class ContentSectionConfig(BaseModel):
    """[content] section."""

    posts_dir: str = "src/content/posts"
    extensions: list[str] = Field(default_factory=lambda: [".mdx"])
    skip_drafts: bool = False


class EmbeddingsSectionConfig(BaseModel):
    """[embeddings] section."""

    model: str = "text-embedding-3-small"
    api_key: str = ""
    request_delay: float = 0.1
    cache_file: str = "embeddings.json"
    staleness: StalenessPolicy = StalenessPolicy.NONE

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class GraphSectionConfig(BaseModel):
    """[graph] section."""

    similarity_threshold: float = 0.65
    max_edges_per_node: int = Field(default=5, ge=0)
    max_ai_suggestions: int = Field(default=5, ge=0)


class SearchSectionConfig(BaseModel):
    """[search] section."""

    preview_length: int = 500
    excerpt_length: int = 150


class OutputConfig(BaseModel):
    """[output] section."""

    directory: str = "public"
    graph_file: str = "graph-data.json"
    links_file: str = "links-data.json"
    search_index_file: str = "search-index.json"


class PostgraphConfig(BaseModel):
    """Top-level configuration model for the whole pipeline."""

    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)
    embeddings: EmbeddingsSectionConfig = Field(default_factory=EmbeddingsSectionConfig)
    graph: GraphSectionConfig = Field(default_factory=GraphSectionConfig)
    search: SearchSectionConfig = Field(default_factory=SearchSectionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # -- Resolved paths ------------------------------------------------------

    @property
    def posts_dir(self) -> Path:
        return Path(self.content.posts_dir)

    @property
    def output_dir(self) -> Path:
        return Path(self.output.directory)

    @property
    def cache_path(self) -> Path:
        return self.output_dir / self.embeddings.cache_file

    @property
    def graph_path(self) -> Path:
        return self.output_dir / self.output.graph_file

    @property
    def links_path(self) -> Path:
        return self.output_dir / self.output.links_file

    @property
    def search_index_path(self) -> Path:
        return self.output_dir / self.output.search_index_file

    # -- Conversions ---------------------------------------------------------

    def to_graph_params(self) -> GraphParams:
        """Convert the [graph] section to builder parameters."""
        from postgraph.graph.builder import GraphParams

        return GraphParams(
            similarity_threshold=self.graph.similarity_threshold,
            max_edges_per_node=self.graph.max_edges_per_node,
            max_ai_suggestions=self.graph.max_ai_suggestions,
        )

    def staleness_policy(self) -> StalenessPolicy:
        """Resolve the configured cache staleness policy."""
        return self.embeddings.staleness


def load_config(path: str | Path | None = None) -> PostgraphConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .postgraph.toml in CWD
    3. ~/.config/postgraph/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged PostgraphConfig.

    Raises:
        SetupError: If a configured value is invalid.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = _validate(data) if data else PostgraphConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: PostgraphConfig, **cli_kwargs: object) -> PostgraphConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``posts_dir``, ``output_directory``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "posts_dir": ("content", "posts_dir"),
        "skip_drafts": ("content", "skip_drafts"),
        "output_directory": ("output", "directory"),
        "embedding_model": ("embeddings", "model"),
        "staleness": ("embeddings", "staleness"),
        "request_delay": ("embeddings", "request_delay"),
        "similarity_threshold": ("graph", "similarity_threshold"),
        "max_edges_per_node": ("graph", "max_edges_per_node"),
        "max_ai_suggestions": ("graph", "max_ai_suggestions"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = str(value) if isinstance(value, Path) else value
        else:
            logger.debug("Ignoring unknown CLI override %s", key)

    return _validate(data)


def _validate(data: dict[str, object]) -> PostgraphConfig:
    """Build a config from raw section data.

    Raises:
        SetupError: If any value has the wrong type or is not allowed.
    """
    try:
        return PostgraphConfig.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise SetupError(f"Invalid configuration: {problems}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: PostgraphConfig) -> PostgraphConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "OPENAI_API_KEY": ("embeddings", "api_key"),
        "POSTGRAPH_EMBEDDING_MODEL": ("embeddings", "model"),
        "POSTGRAPH_POSTS_DIR": ("content", "posts_dir"),
        "POSTGRAPH_OUTPUT_DIR": ("output", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    delay_raw = os.environ.get("POSTGRAPH_REQUEST_DELAY")
    if delay_raw is not None:
        try:
            data["embeddings"]["request_delay"] = float(delay_raw)
        except ValueError:
            logger.warning("Ignoring non-numeric POSTGRAPH_REQUEST_DELAY=%r", delay_raw)

    return _validate(data)
