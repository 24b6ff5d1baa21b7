# src/pedsage/cli/app.py
"""Command-line interface for pedsage.

This module provides a thin Typer wrapper around the commands layer.
Each command:
1. Parses args (via Typer)
2. Calls commands module functions
3. Renders results with Rich
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from pedsage import __version__
from pedsage.commands import ask, ingest, sessions, status
from pedsage.commands.base import FileIngestResult, IngestResult, ProgressUpdate, SourceHit
from pedsage.config import load_env_file

app = typer.Typer(
    name="pedsage",
    help="pedsage - cited answers from a pediatric reference corpus.",
    no_args_is_help=True,
)
sessions_app = typer.Typer(help="Manage chat sessions", no_args_is_help=True)
app.add_typer(sessions_app, name="sessions")
console = Console()

DataDirOption = typer.Option(
    None,
    "--data-dir",
    "-d",
    help="Data directory (default: from settings)",
)
ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file",
)
PlainOption = typer.Option(
    False,
    "--plain",
    help="Plain output (no colors/formatting)",
)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"pedsage {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route pedsage's log records to the console."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("pedsage")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log pipeline stages and store activity.",
    ),
) -> None:
    """pedsage - cited answers from a pediatric reference corpus."""
    load_env_file()
    configure_logging(verbose)


def _fail(error: str | None, plain: bool = False) -> None:
    if plain:
        console.print(f"Error: {error}", markup=False)
    else:
        console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


@app.command(name="ingest")
def ingest_cmd(
    path: str = typer.Argument(..., help="Corpus file (.json/.jsonl) or directory"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    no_embed: bool = typer.Option(
        False,
        "--no-embed",
        help="Store entries without computing embeddings",
    ),
    plain: bool = PlainOption,
) -> None:
    """Load textbook chunks and reference resources into the corpus."""
    embed = False if no_embed else None

    if plain or not console.is_terminal:

        def on_file_complete(file_result: FileIngestResult) -> None:
            if not plain:
                console.print(f"[green]Ingested {file_result.filepath}[/green]")

        result = ingest.ingest(
            path=path,
            data_dir=data_dir,
            config_path=config_file,
            embed=embed,
            on_file_complete=on_file_complete,
        )
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.fields[stage]:>12}", justify="right"),
            TextColumn("{task.description}", style="dim"),
            console=console,
        ) as progress:
            task = progress.add_task("", total=None, stage="Files")

            def on_file_start(filepath: str, index: int, total: int) -> None:
                progress.update(task, stage="Files", description=f"{index + 1}/{total} {filepath}")

            def on_progress(update: ProgressUpdate) -> None:
                progress.update(task, stage=update.stage.value, description=update.message or "")

            result = ingest.ingest(
                path=path,
                data_dir=data_dir,
                config_path=config_file,
                embed=embed,
                on_progress=on_progress,
                on_file_start=on_file_start,
            )

    _render_ingest_result(result, plain)


def _render_ingest_result(result: IngestResult, plain: bool) -> None:
    """Render ingest result to console."""
    if not result.success:
        _fail(result.error, plain)

    summary = (
        f"Ingested {result.files_processed} files "
        f"({result.total_chunks} chunks, {result.total_resources} resources, "
        f"{result.total_embedded} embedded)"
    )
    console.print(summary if plain else f"[green]{summary}[/green]")
    if result.error and not result.files_processed:
        console.print(result.error if plain else f"[dim]{result.error}[/dim]")
    for filepath, error in result.errors:
        message = f"Failed {filepath}: {error}"
        console.print(message if plain else f"[red]{message}[/red]")


def _render_sources(sources: list[SourceHit], plain: bool) -> None:
    for i, s in enumerate(sources, 1):
        preview = s.content[:100].replace("\n", " ")
        if len(s.content) > 100:
            preview += "..."
        if plain:
            console.print(f"  [{i}] {s.kind}: {s.label} (score: {s.score:.3f})", markup=False)
            console.print(f"      {preview}", markup=False)
        else:
            console.print(
                f"  [{i}] [magenta]{s.kind}[/magenta] [cyan]{s.label}[/cyan] "
                f"[dim](score: {s.score:.3f})[/dim]"
            )
            console.print(f"      [dim]{preview}[/dim]")


@app.command(name="ask")
def ask_cmd(
    message: str = typer.Argument(..., help="Message to send"),
    session_id: str = typer.Option(
        None,
        "--session",
        "-s",
        help="Session to continue (default: start a new one)",
    ),
    user_id: str = typer.Option(None, "--user", "-u", help="Owner of a new session"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    show_sources: bool = typer.Option(
        False,
        "--sources",
        help="Also list every ranked source with its score",
    ),
    plain: bool = PlainOption,
) -> None:
    """Ask a question in a chat session and store the cited answer."""
    result = ask.ask(
        message=message,
        session_id=session_id,
        user_id=user_id,
        data_dir=data_dir,
        config_path=config_file,
    )

    if not result.success:
        _fail(result.error, plain)

    if plain:
        console.print(result.answer, markup=False)
        console.print()
        console.print(f"Session: {result.session_id}")
    else:
        console.print(Panel(Text(result.answer or ""), title="Answer", border_style="green"))
        console.print(f"[dim]Session: {result.session_id}[/dim]")

    if show_sources and result.sources:
        console.print()
        console.print("Sources:" if plain else "[bold]Sources:[/bold]")
        _render_sources(result.sources, plain)


@app.command(name="search")
def search_cmd(
    query: str = typer.Argument(..., help="Search query"),
    threshold: float = typer.Option(None, "--threshold", "-t", help="Minimum similarity"),
    limit: int = typer.Option(None, "--limit", "-k", help="Maximum number of results"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Rank corpus entries for a query without storing anything."""
    result = ask.search(
        query=query,
        threshold=threshold,
        limit=limit,
        data_dir=data_dir,
        config_path=config_file,
    )

    if not result.success:
        _fail(result.error, plain)

    if not result.results:
        console.print("No results found." if plain else "[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    _render_sources(result.results, plain)


@sessions_app.command(name="list")
def sessions_list_cmd(
    user_id: str = typer.Option(None, "--user", "-u", help="Session owner"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """List chat sessions, most recently updated first."""
    result = sessions.list_sessions(user_id=user_id, data_dir=data_dir, config_path=config_file)

    if not result.success:
        _fail(result.error, plain)

    if not result.sessions:
        console.print("No sessions." if plain else "[dim]No sessions.[/dim]")
        raise typer.Exit(0)

    if plain:
        for s in result.sessions:
            console.print(f"{s.session_id}  {s.updated_at}  {s.title}")
        return

    table = Table(title=f"Sessions ({len(result.sessions)})")
    table.add_column("Id", style="cyan")
    table.add_column("Updated", style="dim")
    table.add_column("Title")
    for s in result.sessions:
        table.add_row(s.session_id, s.updated_at, s.title)
    console.print(table)


@sessions_app.command(name="new")
def sessions_new_cmd(
    title: str = typer.Argument("New Chat", help="Session title"),
    user_id: str = typer.Option(None, "--user", "-u", help="Session owner"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
) -> None:
    """Create an empty chat session."""
    result = sessions.create_session(
        title=title, user_id=user_id, data_dir=data_dir, config_path=config_file
    )
    if not result.success:
        _fail(result.error)
    console.print(result.sessions[0].session_id)


@sessions_app.command(name="rename")
def sessions_rename_cmd(
    session_id: str = typer.Argument(..., help="Session id"),
    title: str = typer.Argument(..., help="New title"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
) -> None:
    """Rename a chat session."""
    result = sessions.rename_session(
        session_id=session_id, title=title, data_dir=data_dir, config_path=config_file
    )
    if not result.success:
        _fail(result.error)
    console.print(f"[green]Renamed {session_id} to {title!r}[/green]")


@sessions_app.command(name="delete")
def sessions_delete_cmd(
    session_id: str = typer.Argument(..., help="Session id"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete a chat session and all its messages."""
    if not force and not typer.confirm(f"Delete session {session_id} and its messages?"):
        console.print("Cancelled.")
        raise typer.Exit(0)

    result = sessions.delete_session(
        session_id=session_id, data_dir=data_dir, config_path=config_file
    )
    if not result.success:
        _fail(result.error)
    console.print(f"[green]Deleted session {session_id}[/green]")


@app.command(name="history")
def history_cmd(
    session_id: str = typer.Argument(..., help="Session id"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Show the messages of a chat session, oldest first."""
    result = sessions.history(session_id=session_id, data_dir=data_dir, config_path=config_file)

    if not result.success:
        _fail(result.error, plain)

    if not result.messages:
        console.print("No messages." if plain else "[dim]No messages.[/dim]")
        raise typer.Exit(0)

    for m in result.messages:
        if plain:
            console.print(f"[{m.created_at}] {m.role}: {m.content}", markup=False)
        else:
            style = "cyan" if m.role == "user" else "green"
            console.print(f"[dim]{m.created_at}[/dim] [{style}]{m.role}[/{style}]")
            console.print(m.content, markup=False)
        for c in m.citations:
            page = f", page {c.page_number}" if c.page_number is not None else ""
            console.print(f"    cites {c.source}{page}", markup=False)
        console.print()


@app.command(name="status")
def status_cmd(
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Show corpus statistics."""
    result = status.status(data_dir=data_dir, config_path=config_file)

    if not result.success:
        _fail(result.error, plain)

    dims = ", ".join(str(d) for d in result.embedding_dimensions) or "none"
    rows = [
        ("Data directory", result.data_dir),
        ("Provider", result.provider),
        ("Textbook chunks", str(result.total_chunks)),
        ("Reference resources", str(result.total_resources)),
        ("Without embedding", str(result.without_embedding)),
        ("Embedding dimensions", dims),
    ]

    if plain:
        console.print("Corpus Status:")
        for name, value in rows:
            console.print(f"  {name}: {value}")
        return

    table = Table(title="Corpus Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)
