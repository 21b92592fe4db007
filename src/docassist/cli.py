"""Command line interface for docassist."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from docassist.config import AppConfig
from docassist.index.indexer import SnapshotBuilder
from docassist.index.search import KeywordSearcher
from docassist.index.storage import ContentStore, StorageError
from docassist.ingestion.mdx_loader import DEFAULT_SECTION
from docassist.query import split_complex_query
from docassist.retrieval import build_retriever

console = Console()
app = typer.Typer(help="docassist - documentation retrieval for the chat assistant")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _config(snapshot: Path | None) -> AppConfig:
    config = AppConfig.from_env()
    if snapshot is not None:
        config.snapshot_path = snapshot
    return config


@app.command()
def build(
    docs_dir: Path = typer.Argument(..., help="Directory with MDX pages.", resolve_path=True),
    output: Path = typer.Option(None, "--output", "-o", help="Snapshot JSON path"),
    section: str = typer.Option(DEFAULT_SECTION, help="Path prefix recorded for each page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Generate the content snapshot from a directory of MDX pages."""
    _setup_logging(verbose)
    if not docs_dir.is_dir():
        raise typer.BadParameter(f"Not a directory: {docs_dir}")

    target = _config(output).resolve_snapshot_path(Path.cwd())
    console.print(f"Building snapshot [bold]{target}[/bold]...")
    try:
        stats = SnapshotBuilder(docs_dir, section=section).build(target)
    except StorageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if not stats.built:
        console.print("[yellow]No MDX pages found.[/yellow]")
    console.print(f"Built: {stats.built}, skipped: {stats.skipped}, failed: {stats.failed}")


@app.command()
def split(query: str = typer.Argument(..., help="Question to decompose")) -> None:
    """Show how a question is split into sub-queries."""
    for index, part in enumerate(split_complex_query(query), start=1):
        console.print(f"{index}. {part}")


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    snapshot: Path = typer.Option(None, "--snapshot", help="Snapshot JSON path"),
    top_k: int = typer.Option(5, help="Number of results per sub-query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run the keyword search for each sub-query of a question."""
    _setup_logging(verbose)
    resolved = _config(snapshot).resolve_snapshot_path(Path.cwd())
    if not resolved.exists():
        raise typer.BadParameter(f"Snapshot not found: {resolved}")

    searcher = KeywordSearcher(ContentStore(resolved))
    for sub_query in split_complex_query(query):
        matches = searcher.search(sub_query, top_k=top_k)
        if not matches:
            console.print(f"[yellow]No matches for {sub_query!r}.[/yellow]")
            continue

        table = Table(title=sub_query, show_header=True, header_style="bold magenta")
        table.add_column("Score")
        table.add_column("Document")
        table.add_column("Link")
        table.add_column("Snippet")
        for match in matches:
            snippet = match.record.content.replace("\n", " ")
            table.add_row(str(match.score), match.title, match.link or "-", snippet[:120])
        console.print(table)


@app.command()
def context(
    query: str = typer.Argument(..., help="Question text"),
    snapshot: Path = typer.Option(None, "--snapshot", help="Snapshot JSON path"),
    limit: int = typer.Option(AppConfig().result_limit, help="Result limit"),
    single: bool = typer.Option(False, "--single", help="Disable query decomposition"),
) -> None:
    """Print the context block that would be injected into the prompt."""
    retriever = build_retriever(_config(snapshot), Path.cwd())
    text = asyncio.run(retriever.search_and_format(query, limit, multi=not single))
    console.print(text, markup=False, highlight=False)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the chat API server."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from docassist.web.app import app as web_app

    resolved = AppConfig.from_env().resolve_snapshot_path(Path.cwd())
    if not resolved.exists():
        console.print("[yellow]Warning: snapshot not found, answers will have no context.[/yellow]")

    console.print(f"Starting docassist on http://{host}:{port} (snapshot: {resolved})")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
