"""Interactive medialib session: prompt loop over one collection.

One line is read, dispatched, executed and rendered before the next is
read. The result set returned by each successful command replaces
``Session.last`` and is the numbering the next command refers to. A failed
command prints its error and leaves ``last`` unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import typer
from rich.console import Console

from medialib.cli.commands import COMMANDS
from medialib.cli.errors import format_error
from medialib.config import MedialibConfig, SessionCfg
from medialib.errors import MediaLibError, NoCommand, UnknownCommand
from medialib.io.exporter import Exporter
from medialib.io.loader import Loader
from medialib.library.collection import MediaCollection
from medialib.library.results import ResultSet


def _confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


@dataclass
class Session:
    """State carried between commands.

    Attributes:
        collection: The record store all commands operate on.
        loader: Reads collection files for ``load``.
        exporter: Writes collection files for ``save`` / ``save-search``.
        console: Output destination.
        config: Prompt and quit behaviour.
        confirm: Yes/no question callback used by ``quit``.
        last: Result set of the most recent successful command.
    """

    collection: MediaCollection
    loader: Loader
    exporter: Exporter
    console: Console
    config: SessionCfg = field(default_factory=SessionCfg)
    confirm: Callable[[str], bool] = _confirm
    last: ResultSet = field(default_factory=ResultSet)
    running: bool = False

    @classmethod
    def from_config(cls, cfg: MedialibConfig, console: Console) -> Session:
        return cls(
            collection=MediaCollection(),
            loader=Loader(required_keys=cfg.required_keys),
            exporter=Exporter(indent=cfg.export.indent),
            console=console,
            config=cfg.session,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(self, line: str) -> ResultSet:
        """Run one command line and return the new result set.

        Raises:
            MediaLibError: The command failed; ``last`` is unchanged.
        """
        parts = line.split()
        if not parts:
            raise NoCommand()
        return self.dispatch(parts[0], parts[1:])

    def dispatch(self, name: str, params: list[str]) -> ResultSet:
        """Run command *name* with already-split *params*."""
        command = COMMANDS.get(name)
        if command is None:
            raise UnknownCommand(name)

        self.last = command.handler(self, params)
        if command.shows_results:
            self.show(self.last)
        return self.last

    def handle_line(self, line: str) -> bool:
        """Execute *line*, printing any error. Returns True on success."""
        try:
            self.execute(line)
        except MediaLibError as exc:
            self.console.print(format_error(exc))
            return False
        return True

    def show(self, results: ResultSet) -> None:
        for line in results.lines():
            self.console.print(line, markup=False, highlight=False)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def stop(self) -> None:
        self.running = False

    def run(self) -> None:
        """Read and execute lines until ``quit`` or end of input."""
        self.running = True
        while self.running:
            try:
                line = self.console.input(self.config.prompt, markup=False)
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                break
            self.handle_line(line)
        self.running = False
