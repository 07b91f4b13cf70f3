"""Interactive command handlers.

Each handler takes the running session and the whitespace-split arguments
that followed the command name, and returns the new result set. Argument
shape is validated here, before any collection operation runs. Handlers
raise ``MediaLibError`` subclasses; mutations already applied by a failing
command are not rolled back.

Examples:
  load foo.json bar.json   load both files into the collection
  list foo bar baz         records with a metadata value foo OR bar OR baz
  add 3 foo bar            add foo=bar to record 3 of the previous results
  add 3 foo bar baz qux    add foo=bar and baz=qux to that record
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.markup import escape

from medialib.cli.errors import warn_unsaved_results
from medialib.errors import (
    CommandFormatError,
    KeyNotFound,
    LibraryEmpty,
    MediaLibError,
    MissingResultSet,
    MultipleErrors,
    PartialFailure,
    RecordNotFound,
)
from medialib.library.models import Metadata, Record
from medialib.library.results import ResultSet

if TYPE_CHECKING:
    from medialib.cli.session import Session

Handler = Callable[..., ResultSet]


@dataclass(frozen=True)
class Command:
    name: str
    usage: str
    summary: str
    handler: Handler
    shows_results: bool = True

    def format_error(self) -> CommandFormatError:
        return CommandFormatError(self.name, self.usage)


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _pairs(params: list[str]) -> list[Metadata]:
    """Group ``k1 v1 k2 v2 ...`` into Metadata; caller checks the length is even."""
    return [
        Metadata(key=params[i].strip(), value=params[i + 1].strip())
        for i in range(0, len(params), 2)
    ]


def _is_pair_list(params: list[str]) -> bool:
    return len(params) >= 2 and len(params) % 2 == 0


def _parse_index(command: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise COMMANDS[command].format_error() from None


def _record_at(session: Session, command: str, raw_index: str) -> Record:
    """Resolve a record number against the previous result set."""
    index = _parse_index(command, raw_index)
    if session.last.is_empty():
        raise MissingResultSet()
    record = session.last.get(index)
    if record is None:
        raise RecordNotFound(index)
    return record


def _unique_by_path(groups: Iterable[list[Record]]) -> list[Record]:
    """Flatten *groups*, keeping the first record seen for each path."""
    seen: set[str] = set()
    merged: list[Record] = []
    for group in groups:
        for record in group:
            if record.path not in seen:
                seen.add(record.path)
                merged.append(record)
    return merged


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def handle_help(session: Session, params: list[str]) -> ResultSet:
    width = max(len(c.usage) for c in COMMANDS.values())
    for command in COMMANDS.values():
        session.console.print(
            f"    {command.usage.ljust(width)}  - {command.summary}",
            markup=False,
            highlight=False,
        )
    return session.last


def handle_clear(session: Session, params: list[str]) -> ResultSet:
    session.console.clear()
    return session.last


def handle_quit(session: Session, params: list[str]) -> ResultSet:
    """Stop the session, confirming first if results are still on screen."""
    if session.config.confirm_quit and not session.last.is_empty():
        session.console.print(warn_unsaved_results())
        if not session.confirm("Do you still wish to exit?"):
            return session.last
    session.stop()
    return session.last


def handle_load(session: Session, params: list[str]) -> ResultSet:
    if not params:
        raise COMMANDS["load"].format_error()
    for raw in params:
        records = session.loader.read(raw)
        for record in records:
            session.collection.add(record)
        session.console.print(f"[green]✓[/] Loaded {len(records)} record(s) from {escape(str(raw))}")
    return ResultSet()


def handle_list(session: Session, params: list[str]) -> ResultSet:
    if session.collection.is_empty():
        raise LibraryEmpty()
    if not params:
        return ResultSet(session.collection.all())
    return ResultSet(_unique_by_path(session.collection.search(term) for term in params))


def handle_list_meta(session: Session, params: list[str]) -> ResultSet:
    if session.collection.is_empty():
        raise LibraryEmpty()
    if not _is_pair_list(params):
        raise COMMANDS["list-meta"].format_error()
    return ResultSet(
        _unique_by_path(session.collection.search_metadata(m) for m in _pairs(params))
    )


def handle_add(session: Session, params: list[str]) -> ResultSet:
    if len(params) < 3 or not _is_pair_list(params[1:]):
        raise COMMANDS["add"].format_error()
    record = _record_at(session, "add", params[0])
    for meta in _pairs(params[1:]):
        session.collection.add_metadata(meta, record)
    return ResultSet(session.collection.all())


def handle_set(session: Session, params: list[str]) -> ResultSet:
    """Rewrite each key in turn; pairs before a missing key stay applied."""
    if len(params) < 3 or not _is_pair_list(params[1:]):
        raise COMMANDS["set"].format_error()
    record = _record_at(session, "set", params[0])
    for meta in _pairs(params[1:]):
        if not session.collection.rewrite_metadata_to_file(meta, record):
            raise KeyNotFound(meta.key)
    return ResultSet(session.collection.all())


def handle_del(session: Session, params: list[str]) -> ResultSet:
    """Delete every entry under each key, one validated removal at a time.

    Best-effort: a rejected removal is recorded and the remaining ones are
    still attempted. All rejections are reported together afterwards.
    """
    if len(params) < 2:
        raise COMMANDS["del"].format_error()
    record = _record_at(session, "del", params[0])
    failures: list[MediaLibError] = []
    for key in params[1:]:
        entries = record.get_metadata_for_key(key)
        if not entries:
            failures.append(KeyNotFound(key))
            continue
        for meta in entries:
            if not session.collection.remove_metadata_from_file(meta, record):
                failures.append(record.deletion_error(meta) or KeyNotFound(key))
    if len(failures) == 1:
        raise failures[0]
    if failures:
        raise MultipleErrors(failures)
    return ResultSet(session.collection.all())


def handle_del_all(session: Session, params: list[str]) -> ResultSet:
    if not _is_pair_list(params):
        raise COMMANDS["del-all"].format_error()
    rejected: list[Record] = []
    applied = 0
    for meta in _pairs(params):
        report = session.collection.remove(meta)
        if not report.removed and not report.rejected:
            session.console.print(f"[dim]No records hold {escape(str(meta))}.[/]")
        applied += len(report.removed)
        if not report.ok:
            rejected.extend(report.rejected)
    if rejected:
        raise PartialFailure(rejected, applied)
    return ResultSet(session.collection.all())


def handle_save(session: Session, params: list[str]) -> ResultSet:
    if len(params) != 1:
        raise COMMANDS["save"].format_error()
    target = session.exporter.write(params[0], session.collection.all())
    session.console.print(f"[green]✓[/] Saved {session.collection.count()} record(s) to {escape(str(target))}")
    return ResultSet()


def handle_save_search(session: Session, params: list[str]) -> ResultSet:
    if len(params) != 1:
        raise COMMANDS["save-search"].format_error()
    target = session.exporter.write(params[0], session.last.all())
    session.console.print(f"[green]✓[/] Saved {len(session.last)} record(s) to {escape(str(target))}")
    return ResultSet()


COMMANDS: dict[str, Command] = {
    c.name: c
    for c in [
        Command("help", "help", "this text", handle_help),
        Command("load", "load <filename> ...", "load files into the collection", handle_load),
        Command(
            "list",
            "list [<item> ...]",
            "list files with any of the metadata values, or every file",
            handle_list,
        ),
        Command(
            "list-meta",
            "list-meta <key> <value> ...",
            "list files that have the metadata specified",
            handle_list_meta,
        ),
        Command("add", "add <number> <key> <value> ...", "add some metadata to a file", handle_add),
        Command(
            "set",
            "set <number> <key> <value> ...",
            "change the value of existing keys on a file",
            handle_set,
        ),
        Command("del", "del <number> <key> ...", "remove every entry under each key from a file", handle_del),
        Command(
            "del-all",
            "del-all <key> <value> ...",
            "remove a metadata pair from every file in the collection",
            handle_del_all,
        ),
        Command("save-search", "save-search <filename>", "save the last results to a file", handle_save_search),
        Command("save", "save <filename>", "save the whole collection to a file", handle_save),
        Command("clear", "clear", "clear the screen", handle_clear),
        Command("quit", "quit", "quit the program", handle_quit, shows_results=False),
    ]
}
