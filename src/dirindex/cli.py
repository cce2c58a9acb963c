"""Command line interface for dirindex."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from dirindex.config import DEFAULT_EXCLUDES, AppConfig
from dirindex.errors import DirIndexError
from dirindex.index.catalog import FileCatalog
from dirindex.models import FileRecord
from dirindex.web.app import app as web_app


console = Console()
app = typer.Typer(help="dirindex - indexed directory listings, search and sizes")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(
    db: Optional[Path],
    exclude: Optional[List[str]] = None,
    separator: Optional[str] = None,
) -> AppConfig:
    try:
        return AppConfig(
            db_path=db if db is not None else AppConfig().db_path,
            exclude=tuple(exclude) if exclude else DEFAULT_EXCLUDES,
            separator=separator or os.sep,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@contextmanager
def _catalog(config: AppConfig) -> Iterator[FileCatalog]:
    try:
        catalog = FileCatalog.open(config, Path.cwd())
    except DirIndexError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    try:
        yield catalog
    except DirIndexError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        catalog.close()


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} TB"


def _print_records(records: Sequence[FileRecord], empty_message: str) -> None:
    if not records:
        console.print(f"[yellow]{empty_message}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Ext")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Path")

    for record in records:
        table.add_row(
            record.name,
            record.extension or "",
            _format_size(record.size),
            datetime.fromtimestamp(record.modified).strftime("%Y-%m-%d %H:%M"),
            record.path,
        )
    console.print(table)


DbOption = typer.Option(None, "--db", help="SQLite database path")


@app.command()
def crawl(
    root: Path = typer.Argument(..., help="Directory to index.", resolve_path=True),
    db: Path = DbOption,
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-x", help="Skip paths containing this text (repeatable)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Crawl a directory tree into the index."""
    _setup_logging(verbose)
    config = _build_config(db, exclude)

    with _catalog(config) as catalog:
        console.print(f"Indexing [bold]{root}[/bold] into [bold]{catalog.store.db_path}[/bold]...")
        stats = catalog.crawl(str(root))
    console.print(
        f"Indexed: {stats.indexed}, skipped: {stats.skipped}, "
        f"failed: {stats.failed}, excluded: {stats.excluded}"
    )


@app.command()
def children(
    directory: str = typer.Argument(..., help="Directory whose direct children to list."),
    db: Path = DbOption,
    separator: Optional[str] = typer.Option(None, "--separator", help="Path separator"),
) -> None:
    """List the indexed direct children of a directory."""
    with _catalog(_build_config(db, separator=separator)) as catalog:
        records = catalog.list_children(directory)
    _print_records(records, "No indexed children.")


@app.command()
def search(
    name: str = typer.Argument(..., help="Name fragment to look for"),
    ext: str = typer.Option("", "--ext", "-e", help="Only match this exact extension"),
    db: Path = DbOption,
) -> None:
    """Search indexed names by substring."""
    with _catalog(_build_config(db)) as catalog:
        records = catalog.search(name, ext)
    _print_records(records, "No matches found.")


@app.command()
def size(
    path: str = typer.Argument(..., help="Subtree root"),
    db: Path = DbOption,
) -> None:
    """Print the total indexed size below a path."""
    with _catalog(_build_config(db)) as catalog:
        total = catalog.directory_size(path)
    console.print(f"{total} bytes ({_format_size(total)})")


@app.command()
def status(db: Path = DbOption) -> None:
    """Show whether the index holds any records."""
    with _catalog(_build_config(db)) as catalog:
        has_records = catalog.has_records()
        count = catalog.count()
        db_path = catalog.store.db_path
    if has_records:
        console.print(f"{count} records in [bold]{db_path}[/bold]")
    else:
        console.print("[yellow]Index is empty, run 'dirindex crawl' first.[/yellow]")


@app.command()
def meta(path: str = typer.Argument(..., help="Path to stat")) -> None:
    """Show live metadata for a single path."""
    try:
        record = FileCatalog.get_metadata(path)
    except DirIndexError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _print_records([record], "")


@app.command("ls")
def list_directory(path: str = typer.Argument(..., help="Directory to read from disk")) -> None:
    """List a directory straight from disk, bypassing the index."""
    try:
        records = FileCatalog.list_directory(path)
    except DirIndexError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _print_records(records, "Directory is empty.")


@app.command("open")
def open_file(path: str = typer.Argument(..., help="Path to open")) -> None:
    """Open a path with its default application."""
    try:
        FileCatalog.open_path(path)
    except DirIndexError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


@app.command()
def prune(db: Path = DbOption) -> None:
    """Remove records whose files no longer exist on disk."""
    config = _build_config(db)
    resolved_db = config.resolve_db_path(Path.cwd())

    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing to prune.[/yellow]")
        return

    with _catalog(config) as catalog:
        removed = catalog.prune()
    console.print(f"Removed {removed} stale records.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = DbOption,
) -> None:
    """Serve the index over HTTP."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    with _catalog(_build_config(db)) as catalog:
        if not catalog.has_records():
            console.print("[yellow]Index is empty, run 'dirindex crawl' first.[/yellow]")
        console.print(f"Serving [bold]{catalog.store.db_path}[/bold] on http://{host}:{port}")

        web_app.state.catalog = catalog
        try:
            uvicorn.run(web_app, host=host, port=port, log_level="info")
        finally:
            web_app.state.catalog = None


def main() -> None:
    app()
