"""Medialib rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from medialib.cli.errors import format_error
    console.print(format_error(exc))
"""

from __future__ import annotations

from rich.markup import escape

from medialib.errors import (
    CommandFormatError,
    DecodeError,
    InvalidFileError,
    KeyNotFound,
    LibraryEmpty,
    MediaLibError,
    MissingResultSet,
    MultipleErrors,
    NoCommand,
    ParseError,
    PartialFailure,
    RecordNotFound,
    RequiredMetadataError,
    SaveError,
    UnknownCommand,
)
from medialib.io.loader import EXPECTED_FORMAT


def err_no_command() -> str:
    return "[red]Error:[/] No command given.\n  Run:  help"


def err_unknown_command(command: str) -> str:
    return f"[red]Error:[/] Command '{escape(command)}' not found.\n  Run:  help"


def err_invalid_parameters(command: str, usage: str) -> str:
    """Wrong argument count or shape for *command*."""
    return (
        f"[red]Error:[/] Invalid parameters for '{escape(command)}'.\n"
        f"  Use:  {escape(usage)}"
    )


def err_missing_result_set() -> str:
    return (
        "[red]Error:[/] No previous results to work from.\n"
        "  Run:  list  to choose records by number."
    )


def err_library_empty() -> str:
    return "[red]Error:[/] The collection is empty.\n  Run:  load <filename> ..."


def err_record_not_found(index: int) -> str:
    return (
        f"[red]Error:[/] No record at index {index} in the last results.\n"
        "  Run:  list  and use a number from its output."
    )


def err_key_not_found(key: str) -> str:
    return (
        f"[red]Error:[/] Key '{escape(key)}' does not exist on this record.\n"
        "  Use:  add <number> <key> <value>  to create it first."
    )


def err_required_metadata(key: str, media_type: str) -> str:
    return (
        f"[red]Error:[/] '{escape(key)}' is required for {media_type} records and cannot be removed.\n"
        f"  Use:  set <number> {escape(key)} <value>  to change it instead."
    )


def err_partial_failure(paths: list[str], applied: int) -> str:
    """Bulk operation rejected on some records; others were updated."""
    listing = "\n".join(f"    - {escape(p)}" for p in paths)
    return (
        f"[yellow]Warning:[/] {len(paths)} record(s) could not be modified "
        f"({applied} updated, not rolled back):\n"
        f"{listing}\n"
        "  Remove: the required field is protected; use set to change its value."
    )


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File '{escape(path)}' not found.\n"
        "  Check the path and run:  load <filename>"
    )


def err_could_not_parse(path: str, detail: str) -> str:
    return (
        f"[red]Error:[/] Could not parse '{escape(path)}': {escape(detail)}\n"
        "  Fix the JSON syntax and load it again."
    )


def err_could_not_decode(path: str, detail: str) -> str:
    return (
        f"[red]Error:[/] Could not decode '{escape(path)}': {escape(detail)}\n"
        "  Use the expected format:\n"
        f"{escape(EXPECTED_FORMAT)}"
    )


def err_save_failed(path: str, detail: str) -> str:
    return (
        f"[red]Error:[/] Could not save to '{escape(path)}': {escape(detail)}\n"
        "  Use:  save <filename>  with a path in an existing directory."
    )


def warn_unsaved_results() -> str:
    """Shown by quit while the last result set still holds records."""
    return "[yellow]⚠[/] You may have unsaved changes in the collection."


def format_error(exc: MediaLibError) -> str:
    """Return the rich message for *exc*."""
    if isinstance(exc, MultipleErrors):
        return "\n".join(format_error(e) for e in exc.errors)
    if isinstance(exc, NoCommand):
        return err_no_command()
    if isinstance(exc, UnknownCommand):
        return err_unknown_command(exc.command)
    if isinstance(exc, CommandFormatError):
        return err_invalid_parameters(exc.command, exc.usage)
    if isinstance(exc, MissingResultSet):
        return err_missing_result_set()
    if isinstance(exc, LibraryEmpty):
        return err_library_empty()
    if isinstance(exc, RecordNotFound):
        return err_record_not_found(exc.index)
    if isinstance(exc, KeyNotFound):
        return err_key_not_found(exc.key)
    if isinstance(exc, RequiredMetadataError):
        return err_required_metadata(exc.key, exc.media_type.value)
    if isinstance(exc, PartialFailure):
        return err_partial_failure([r.path for r in exc.rejected], exc.applied)
    if isinstance(exc, InvalidFileError):
        return err_file_not_found(exc.path)
    if isinstance(exc, ParseError):
        return err_could_not_parse(exc.path, exc.detail or "invalid JSON")
    if isinstance(exc, DecodeError):
        return err_could_not_decode(exc.path, exc.detail)
    if isinstance(exc, SaveError):
        return err_save_failed(exc.path, exc.detail)
    return f"[red]Error:[/] {escape(str(exc))}"
