"""CLI interface for postgraph."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from postgraph.config import PostgraphConfig, load_config, merge_cli_overrides
from postgraph.content import Document, read_posts
from postgraph.embeddings import StalenessPolicy
from postgraph.errors import PipelineReport, SetupError
from postgraph.graph import EdgeType, TagGroups, graph_stats

app = typer.Typer(
    name="postgraph",
    help="Build search, backlink and knowledge-graph JSON for a static blog.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a .postgraph.toml config file."),
]
PostsDirOption = Annotated[
    Optional[Path],
    typer.Option("--posts-dir", "-p", help="Directory of post files. Defaults to src/content/posts."),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Directory for JSON artifacts. Defaults to ./public."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from postgraph import __version__

        console.print(f"postgraph {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log debug detail.")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Only print warnings and errors.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """postgraph - static search, backlinks and knowledge graph for a blog."""
    _setup_logging(verbose, quiet)
    ctx.obj = {"quiet": quiet}


def _is_quiet(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("quiet"))


def _resolve_config(
    config_path: Path | None,
    posts_dir: Path | None,
    output: Path | None,
    **overrides: object,
) -> PostgraphConfig:
    try:
        config = load_config(config_path)
        return merge_cli_overrides(
            config,
            posts_dir=posts_dir,
            output_directory=output,
            **overrides,
        )
    except SetupError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _read(config: PostgraphConfig, report: PipelineReport, quiet: bool) -> list[Document]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=quiet,
    ) as progress:
        progress.add_task("Reading posts...", total=None)
        documents = read_posts(
            config.posts_dir,
            extensions=config.content.extensions,
            skip_drafts=config.content.skip_drafts,
            report=report,
        )
    if not quiet:
        console.print(f"[green]Found {len(documents)} post(s)[/green] in {config.posts_dir}")
    return documents


def _print_report(report: PipelineReport) -> None:
    if not report.has_errors:
        return
    console.print()
    console.print(f"[yellow]{report.error_count} item(s) skipped:[/yellow]")
    for err in report.errors:
        label = f"{err.stage}/{err.source}" if err.source else err.stage
        console.print(f"  - {escape(label)}: {escape(err.message)}")


def _print_tag_groups(groups: dict[str, int]) -> None:
    if not groups:
        return
    console.print()
    console.print("[bold]Tag groups:[/bold]")
    for tag, group in groups.items():
        console.print(f"  {group}: {tag}")


@app.command()
def embed(
    ctx: typer.Context,
    config_path: ConfigOption = None,
    posts_dir: PostsDirOption = None,
    output: OutputOption = None,
    full: Annotated[
        bool,
        typer.Option("--full", help="Ignore the cache and embed every post again."),
    ] = False,
    staleness: Annotated[
        Optional[StalenessPolicy],
        typer.Option("--staleness", help="When a cached embedding counts as fresh."),
    ] = None,
) -> None:
    """Generate embeddings for posts that are not cached yet."""
    from postgraph.pipeline.embeddings import create_provider, run_embeddings

    quiet = _is_quiet(ctx)
    config = _resolve_config(
        config_path, posts_dir, output,
        staleness=staleness.value if staleness else None,
    )

    try:
        provider = create_provider(config)
    except SetupError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    report = PipelineReport()
    documents = _read(config, report, quiet)
    result = run_embeddings(
        config, documents=documents, provider=provider, full=full, report=report
    )

    if not quiet:
        console.print()
        console.print("[bold green]Embeddings done![/bold green]")
        console.print(f"  New: {result.new_count}")
        console.print(f"  Cached: {result.cached_count}")
        console.print(f"  Failed: {result.failed_count}")
        console.print(f"  Total: {result.total}")
        console.print(f"  Saved to: {config.cache_path}")
        _print_report(report)


@app.command()
def graph(
    ctx: typer.Context,
    config_path: ConfigOption = None,
    posts_dir: PostsDirOption = None,
    output: OutputOption = None,
) -> None:
    """Build graph-data.json from cached embeddings."""
    from postgraph.pipeline.graph import run_graph

    quiet = _is_quiet(ctx)
    config = _resolve_config(config_path, posts_dir, output)
    report = PipelineReport()
    documents = _read(config, report, quiet)
    data = run_graph(config, documents=documents, report=report)

    if not quiet:
        groups = TagGroups.from_documents(documents).as_dict()
        stats = graph_stats(data.nodes, data.edges, groups)
        console.print()
        console.print("[bold green]Graph built![/bold green]")
        console.print(f"  Nodes: {stats['total_nodes']}")
        console.print(f"  Edges: {stats['total_edges']}")
        console.print(f"  Tag groups: {stats['tag_groups']}")
        if data.edges:
            console.print(f"  Average similarity: {float(stats['average_weight']) * 100:.1f}%")
        console.print(f"  Saved to: {config.graph_path}")
        _print_tag_groups(groups)
        _print_report(report)


@app.command()
def links(
    ctx: typer.Context,
    config_path: ConfigOption = None,
    posts_dir: PostsDirOption = None,
    output: OutputOption = None,
) -> None:
    """Build links-data.json: wiki-links, AI suggestions and backlinks."""
    from postgraph.pipeline.graph import run_links

    quiet = _is_quiet(ctx)
    config = _resolve_config(config_path, posts_dir, output)
    report = PipelineReport()
    documents = _read(config, report, quiet)
    data, built = run_links(config, documents=documents, report=report)

    if not quiet:
        console.print()
        console.print("[bold green]Links data built![/bold green]")
        console.print(f"  Nodes: {len(data.nodes)}")
        console.print(f"  Total edges: {len(data.edges)}")
        console.print(f"  - Explicit: {len(built.edges_of_type(EdgeType.EXPLICIT))}")
        console.print(f"  - AI-suggested: {len(built.edges_of_type(EdgeType.AI))}")
        console.print(f"  Dangling links: {built.dangling_links}")
        console.print(f"  Tag groups: {len(built.tag_groups)}")
        console.print(f"  Saved to: {config.links_path}")
        _print_tag_groups(built.tag_groups)
        _print_report(report)


@app.command()
def search(
    ctx: typer.Context,
    config_path: ConfigOption = None,
    posts_dir: PostsDirOption = None,
    output: OutputOption = None,
) -> None:
    """Build search-index.json."""
    from postgraph.pipeline.search import run_search

    quiet = _is_quiet(ctx)
    config = _resolve_config(config_path, posts_dir, output)
    report = PipelineReport()
    documents = _read(config, report, quiet)
    index = run_search(config, documents=documents, report=report)

    if not quiet:
        console.print()
        console.print("[bold green]Search index built![/bold green]")
        console.print(f"  Entries: {len(index.entries)}")
        console.print(f"  Saved to: {config.search_index_path}")
        for entry in index.entries[:3]:
            console.print(f"  - {escape(entry.title)} ({escape(', '.join(entry.tags))})")
        _print_report(report)


@app.command()
def build(
    ctx: typer.Context,
    config_path: ConfigOption = None,
    posts_dir: PostsDirOption = None,
    output: OutputOption = None,
    skip_embeddings: Annotated[
        bool,
        typer.Option("--skip-embeddings", help="Use the embeddings cache without calling the API."),
    ] = False,
    full: Annotated[
        bool,
        typer.Option("--full", help="Ignore the cache and embed every post again."),
    ] = False,
) -> None:
    """Run every stage: embeddings, graph, links and search."""
    from postgraph.pipeline.build import run_build

    quiet = _is_quiet(ctx)
    config = _resolve_config(config_path, posts_dir, output)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=quiet,
    ) as progress:
        progress.add_task("Building...", total=None)
        result = run_build(config, skip_embeddings=skip_embeddings, full=full)

    if not quiet:
        console.print()
        console.print("[bold green]Build complete![/bold green]")
        console.print(f"  Posts: {result.post_count}")
        if result.embeddings is not None:
            console.print(
                f"  Embeddings: {result.embeddings.new_count} new, "
                f"{result.embeddings.cached_count} cached, "
                f"{result.embeddings.failed_count} failed"
            )
        console.print(f"  Graph edges: {len(result.graph.edges)}")
        console.print(f"  Link edges: {len(result.links.edges)}")
        console.print(f"  Search entries: {len(result.search.entries)}")
        console.print(f"  Output: {config.output_dir}")
        _print_report(result.report)


if __name__ == "__main__":
    app()
