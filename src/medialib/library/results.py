"""Numbered snapshot of the records produced by the last command."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from rich.table import Table
from rich.text import Text

from medialib.library.models import Record


class ResultSet:
    """Immutable, 0-indexed view over a list of records.

    Commands that act "on record N" resolve N against the previous
    command's result set, never against the collection itself.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: tuple[Record, ...] = tuple(records)

    def get(self, index: int) -> Record | None:
        """Return the record at *index*, or None when out of range."""
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    def all(self) -> list[Record]:
        return list(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"ResultSet({len(self._records)} records)"

    def lines(self) -> list[str]:
        """Plain ``N: record`` lines, the numbering later commands refer to."""
        return [f"{i}: {record}" for i, record in enumerate(self._records)]

    def render(self) -> Table:
        """Build a rich table of the snapshot."""
        table = Table(show_header=True, header_style="bold", expand=False)
        table.add_column("#", justify="right", style="dim", no_wrap=True)
        table.add_column("Path", no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("Metadata")
        for i, record in enumerate(self._records):
            table.add_row(
                str(i),
                Text(record.path),
                record.type.value,
                Text(", ".join(str(m) for m in record.metadata)),
            )
        return table
