"""Sieve CLI — ranked retrieval over a pre-built TF-IDF index.

Four commands: validate, load, stats, query.
Uses typer for argument parsing and rich for formatted terminal output.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from engine.config import build_processor, load_config, open_index, validate_config
from engine.errors import SieveError
from engine.index import InMemoryIndex
from engine.models import search
from engine.store import DEFAULT_DB_PATH, IndexStore

app = typer.Typer(help="Sieve: cosine-ranked retrieval over a TF-IDF index.")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> None:
    console.print(Panel(f"[bold red]✗[/bold red] {escape(message)}", border_style="red"))
    raise typer.Exit(code=1)


# ── validate ────────────────────────────────────────────────────────


@app.command()
def validate(config_path: str = typer.Argument(..., help="Path to config JSON")):
    """Check a run config for errors."""
    passed, errors = validate_config(config_path)

    if passed:
        console.print(
            Panel("[bold green]✓ Validation passed[/bold green]", border_style="green")
        )
    else:
        console.print(
            Panel("[bold red]✗ Validation failed[/bold red]", border_style="red")
        )
        for err in errors:
            console.print(f"  [red]✗[/red] {err}")
        raise typer.Exit(code=1)


# ── load ────────────────────────────────────────────────────────────


@app.command()
def load(
    dump_path: str = typer.Argument(..., help="Path to JSON index dump"),
    db: str = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite file to write"),
    force: bool = typer.Option(False, "--force", help="Replace an existing index"),
):
    """Import a pre-built JSON index dump into SQLite."""
    try:
        index = InMemoryIndex.from_json(dump_path)
    except (SieveError, OSError) as e:
        _fail(str(e))

    problems = index.check_consistency()
    if problems:
        console.print(
            Panel("[bold red]✗ Index dump is inconsistent[/bold red]", border_style="red")
        )
        for p in problems:
            console.print(f"  [red]✗[/red] {escape(p)}")
        raise typer.Exit(code=1)

    try:
        store = IndexStore(db, read_only=False)
    except SieveError as e:
        _fail(str(e))

    with store:
        if store.get_stats()["terms"] and not force:
            _fail(f"{db} already holds an index; use --force to replace it.")
        if force:
            store.delete_all()
        with console.status("[bold blue]Loading index..."):
            store.write_index(index, source=str(Path(dump_path).resolve()))
        stats = store.get_stats()

    _print_stats(stats, title=f"Loaded {db}")


# ── stats ───────────────────────────────────────────────────────────


def _print_stats(stats: dict, title: str) -> None:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Terms", str(stats["terms"]))
    table.add_row("Postings", str(stats["postings"]))
    table.add_row("Documents", str(stats["documents"]))
    if stats.get("source"):
        table.add_row("Source", stats["source"])
        table.add_row("Loaded at", str(stats["loaded_at"]))
    console.print(table)


@app.command()
def stats(index_path: str = typer.Argument(..., help="JSON dump or SQLite index")):
    """Show the size of an index."""
    try:
        index = open_index(index_path)
    except (SieveError, OSError) as e:
        _fail(str(e))

    try:
        _print_stats(index.get_stats(), title=f"Index: {index_path}")
    finally:
        if isinstance(index, IndexStore):
            index.close()


# ── query ───────────────────────────────────────────────────────────


@app.command()
def query(
    config_path: str = typer.Argument(..., help="Path to config JSON"),
    q: str = typer.Option("", "--q", help="Search query string"),
    top: int = typer.Option(0, "--top", help="Override the config's top_k"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run a query and display ranked results."""
    _setup_logging(verbose)
    if not q:
        console.print("[red]Error: --q is required[/red]")
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path)
        processor = build_processor(config)
        index = open_index(config["index"])
    except (SieveError, OSError) as e:
        _fail(str(e))

    top_k = top if top > 0 else config["top_k"]
    try:
        result = search(q, index, processor, model=config["model"], top_k=top_k)
    except SieveError as e:
        _fail(f"Index error: {e}")
    finally:
        if isinstance(index, IndexStore):
            index.close()

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    console.print(f'\n[bold]Query:[/bold] "{escape(q)}"')
    console.print(
        f"[bold]Config:[/bold] {config['name']} | Model: {config['model']} | Top-k: {top_k}"
    )
    console.print(f"[bold]Terms:[/bold] {escape(' '.join(result.terms)) or '(none)'}")
    console.print()

    table = Table()
    table.add_column("#", style="dim", width=3)
    table.add_column("Document", style="cyan", justify="right")
    table.add_column("Cosine", justify="right", width=10)

    for i, (doc_id, score) in enumerate(result.results, 1):
        table.add_row(str(i), str(doc_id), f"{score:.4f}")

    console.print(table)
    console.print(f"\n{len(result.results)} results returned")
    if result.unknown_terms:
        console.print(
            f"[yellow]{len(result.unknown_terms)} term(s) not in the index: "
            f"{escape(', '.join(result.unknown_terms))}[/yellow]"
        )


if __name__ == "__main__":
    app()
