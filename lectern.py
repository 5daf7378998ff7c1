"""Lectern CLI: build and upload a multilingual verse search index.

Three commands: validate, index, upload.
Uses typer for argument parsing and rich for formatted terminal output.
"""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lectern_core.config import RunConfig, load_config
from lectern_core.errors import LecternError, LoadError
from lectern_core.log import configure_logging
from lectern_core.pipeline import run_index, run_upload
from lectern_core.stopwords import load_stopword_table
from lectern_core.store import SqliteDocumentStore

app = typer.Typer(help="Lectern: build a multilingual verse index and store it in batches.")
console = Console()


def _load(config_path: str | None, **overrides) -> RunConfig:
    try:
        config = load_config(config_path).with_overrides(**overrides)
    except LoadError as e:
        _fail(e)
    configure_logging(config.log_level)
    return config


def _fail(error: LecternError) -> NoReturn:
    console.print(Panel(f"[bold red]✗ {escape(error.describe())}[/bold red]", border_style="red"))
    raise typer.Exit(code=1)


def _summary_table(title: str, rows: dict) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key, value in rows.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    return table


# ── validate ────────────────────────────────────────────────────────


@app.command()
def validate(
    config_path: str = typer.Option(None, "--config", help="Path to run config JSON"),
):
    """Check the run config and the stopword table without indexing anything."""
    config = _load(config_path)
    try:
        table = load_stopword_table(config.stopwords_path)
    except LoadError as e:
        _fail(e)

    console.print(
        Panel("[bold green]✓ Validation passed[/bold green]", border_style="green")
    )
    console.print(f"  Stopword locales: {', '.join(sorted(table)) or '(none)'}")
    console.print(f"  Batch size: {config.batch_size}  |  Pacing: {config.pacing_seconds}s")


# ── index ───────────────────────────────────────────────────────────


@app.command()
def index(
    config_path: str = typer.Option(None, "--config", help="Path to run config JSON"),
    corpus_dir: str = typer.Option(None, "--corpus-dir", help="Directory of document set JSON files"),
    stopwords_path: str = typer.Option(None, "--stopwords", help="Path to stopword table JSON"),
    database: str = typer.Option(None, "--db", help="Path to the document store"),
    batch_size: int = typer.Option(None, "--batch-size", min=1, help="Records per write batch"),
    pacing_seconds: float = typer.Option(None, "--pacing", min=0, help="Seconds to wait after each batch"),
    workers: int = typer.Option(None, "--workers", min=1, help="Processes used to index document sets"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build the index but do not write it"),
):
    """Build the search index from the corpus and write it to the store."""
    config = _load(
        config_path,
        corpus_dir=corpus_dir,
        stopwords_path=stopwords_path,
        database=database,
        batch_size=batch_size,
        pacing_seconds=pacing_seconds,
        workers=workers,
    )

    store = None
    try:
        if not dry_run:
            store = SqliteDocumentStore(config.database)
        with console.status("[bold blue]Indexing corpus..."):
            summary = run_index(config, store)
    except LecternError as e:
        _fail(e)
    finally:
        if store is not None:
            store.close()

    console.print(_summary_table("Indexing Summary", summary))
    if dry_run:
        console.print("[yellow]Dry run: nothing was written.[/yellow]")
    else:
        console.print(
            Panel(
                f"[bold green]✓ Search index written[/bold green] to "
                f"'{config.index_collection}' in {config.database}",
                border_style="green",
            )
        )


# ── upload ──────────────────────────────────────────────────────────


@app.command()
def upload(
    config_path: str = typer.Option(None, "--config", help="Path to run config JSON"),
    corpus_dir: str = typer.Option(None, "--corpus-dir", help="Directory of document set JSON files"),
    database: str = typer.Option(None, "--db", help="Path to the document store"),
    batch_size: int = typer.Option(None, "--batch-size", min=1, help="Records per write batch"),
):
    """Upload the version catalog and the raw text of every translation."""
    config = _load(config_path, corpus_dir=corpus_dir, database=database, batch_size=batch_size)

    store = None
    try:
        store = SqliteDocumentStore(config.database)
        with console.status("[bold blue]Uploading corpus..."):
            summary = run_upload(config, store)
    except LecternError as e:
        _fail(e)
    finally:
        if store is not None:
            store.close()

    console.print(_summary_table("Upload Summary", summary))


if __name__ == "__main__":
    app()
