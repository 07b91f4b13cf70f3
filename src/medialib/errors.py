"""Exception taxonomy for medialib.

Core collection operations report failure through return values
(``bool`` / ``RemovalReport``). These exceptions are raised by the command
layer, the loader and the persister, and are caught by the interactive
session, which prints them and carries on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from medialib.library.models import MediaType, Record


class MediaLibError(Exception):
    """Base class for all recoverable medialib errors."""


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------


class RecordNotFound(MediaLibError):
    """No record at *index* in the last result set."""

    def __init__(self, index: int) -> None:
        super().__init__(f"No record at index {index}.")
        self.index = index


class KeyNotFound(MediaLibError):
    """Record carries no metadata under *key*."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key '{key}' does not exist on this record.")
        self.key = key


# ---------------------------------------------------------------------------
# InvariantViolation / PartialFailure
# ---------------------------------------------------------------------------


class RequiredMetadataError(MediaLibError):
    """Deleting *key* would leave a record without a required field."""

    def __init__(self, key: str, media_type: MediaType) -> None:
        super().__init__(f"'{key}' is required for {media_type.value} records.")
        self.key = key
        self.media_type = media_type


class PartialFailure(MediaLibError):
    """A bulk operation was rejected for some records; the rest stay applied."""

    def __init__(self, rejected: list[Record], applied: int = 0) -> None:
        super().__init__(
            f"{len(rejected)} record(s) could not be modified ({applied} updated)."
        )
        self.rejected = rejected
        self.applied = applied


# ---------------------------------------------------------------------------
# Command layer (InputShapeError and session state)
# ---------------------------------------------------------------------------


class NoCommand(MediaLibError):
    """Empty input line."""


class UnknownCommand(MediaLibError):
    def __init__(self, command: str) -> None:
        super().__init__(f"Command '{command}' not found.")
        self.command = command


class CommandFormatError(MediaLibError):
    """Wrong argument count or shape for *command*."""

    def __init__(self, command: str, usage: str) -> None:
        super().__init__(f"Invalid parameters for '{command}'. Usage: {usage}")
        self.command = command
        self.usage = usage


class MultipleErrors(MediaLibError):
    """Several independent sub-operations of one command failed."""

    def __init__(self, errors: list[MediaLibError]) -> None:
        super().__init__("; ".join(str(e) for e in errors))
        self.errors = errors


class MissingResultSet(MediaLibError):
    """Command needs a previous result set and there is none."""


class LibraryEmpty(MediaLibError):
    """Collection holds no records yet."""


# ---------------------------------------------------------------------------
# Loader / Persister
# ---------------------------------------------------------------------------


class LoadError(MediaLibError):
    """Base for failures reading a collection file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class InvalidFileError(LoadError):
    def __init__(self, path: str) -> None:
        super().__init__(path, f"File '{path}' not found.")


class ParseError(LoadError):
    """File is not valid JSON."""

    def __init__(self, path: str, detail: str = "") -> None:
        super().__init__(path, f"Could not parse '{path}' as JSON. {detail}".strip())
        self.detail = detail


class DecodeError(LoadError):
    """Valid JSON, but not the expected record shape."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(path, f"Could not decode '{path}': {detail}")
        self.detail = detail


class SaveError(MediaLibError):
    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Could not save to '{path}': {detail}")
        self.path = path
        self.detail = detail
