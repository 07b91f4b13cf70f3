"""Medialib CLI entry point."""

from __future__ import annotations

import importlib.metadata
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from medialib.cli.commands import COMMANDS
from medialib.cli.errors import format_error
from medialib.cli.session import Session
from medialib.config import ConfigError, MedialibConfig, load_config
from medialib.errors import MediaLibError
from medialib.library.collection import MediaCollection

console = Console()


def _version() -> str:
    try:
        return importlib.metadata.version("medialib")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"medialib {_version()}")
        raise typer.Exit()


def _load_config_or_exit(config_dir: Path | None) -> MedialibConfig:
    try:
        return load_config(project_dir=config_dir)
    except ConfigError as exc:
        console.print(f"[red]Error:[/] {escape(str(exc))}")
        raise typer.Exit(1) from None


app = typer.Typer(
    name="medialib",
    help=(
        "Medialib — personal media collection manager.\n\n"
        "  medialib shell    Interactive session: load, search, tag and save records.\n"
        "  medialib list     One-shot search over collection files."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Medialib — personal media collection manager."""


@app.command("shell")
def shell_cmd(
    files: Annotated[
        list[Path] | None,
        typer.Argument(help="Collection files to load before the first prompt."),
    ] = None,
    config_dir: Annotated[
        Path | None,
        typer.Option("--config-dir", help="Directory holding medialib.yaml (default: CWD)."),
    ] = None,
) -> None:
    """Start an interactive session. Type 'help' at the prompt for commands."""
    cfg = _load_config_or_exit(config_dir)
    session = Session.from_config(cfg, console)

    if files:
        try:
            session.dispatch("load", [str(f) for f in files])
        except MediaLibError as exc:
            console.print(format_error(exc))

    session.run()


@app.command("list")
def list_cmd(
    files: Annotated[
        list[Path],
        typer.Argument(help="Collection files to search."),
    ],
    term: Annotated[
        list[str] | None,
        typer.Option("--term", "-t", help="Metadata value to match (repeatable)."),
    ] = None,
    config_dir: Annotated[
        Path | None,
        typer.Option("--config-dir", help="Directory holding medialib.yaml (default: CWD)."),
    ] = None,
) -> None:
    """Print the records in FILES, optionally only those carrying a --term value."""
    cfg = _load_config_or_exit(config_dir)
    session = Session.from_config(cfg, console)
    collection: MediaCollection = session.collection

    try:
        for f in files:
            for record in session.loader.read(f):
                collection.add(record)
        results = COMMANDS["list"].handler(session, term or [])
    except MediaLibError as exc:
        console.print(format_error(exc))
        raise typer.Exit(1) from None

    if results.is_empty():
        console.print("[yellow]No matching records.[/]")
        raise typer.Exit(0)

    console.print(results.render())
    console.print(f"[dim]{len(results)} of {collection.count()} record(s)[/]")


@app.command("version")
def version_cmd() -> None:
    """Show the installed medialib version."""
    typer.echo(f"medialib {_version()}")


if __name__ == "__main__":
    app()
