"""In-memory media collection: authoritative record list plus value index.

Every mutation goes through ``MediaCollection`` so that the record list and
the ``MetadataIndex`` stay consistent. Deletions funnel through
``Record.delete_metadata``, the single validity gate.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from medialib.library.index import MetadataIndex
from medialib.library.models import Metadata, Record


@dataclass
class RemovalReport:
    """Outcome of a collection-wide ``remove``.

    Nothing is rolled back: records in ``removed`` stay modified even when
    ``rejected`` is non-empty.
    """

    metadata: Metadata
    removed: list[Record] = field(default_factory=list)
    rejected: list[Record] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


class MediaCollection:
    """Ordered record store with a metadata-value index.

    Records are never removed, only their metadata. Duplicate paths are
    accepted and kept as separate records.
    """

    def __init__(self) -> None:
        self._records: list[Record] = []
        self._index = MetadataIndex()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add(self, record: Record) -> None:
        self._records.append(record)
        self._index.insert(record)

    def all(self) -> list[Record]:
        """Return every record in insertion order."""
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def contains_path(self, path: str) -> bool:
        return any(r.path == path for r in self._records)

    def get_by_path(self, path: str) -> Record | None:
        """Return the first record stored under *path*, or None."""
        for record in self._records:
            if record.path == path:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._records))

    # ------------------------------------------------------------------
    # Metadata mutation
    # ------------------------------------------------------------------

    def add_metadata(self, meta: Metadata, record: Record) -> bool:
        """Append *meta* to *record* and index its value."""
        if not record.add_metadata(meta):
            return False
        self._index.add_value(meta.value, record)
        return True

    def remove_metadata_from_file(self, meta: Metadata, record: Record) -> bool:
        """Remove the first *meta* pair from *record*.

        Returns:
            False with no mutation if the key is absent or the pair is the
            last entry under a key the record's type requires.
        """
        if not record.delete_metadata(meta):
            return False
        self._index.discard_value(meta.value, record)
        return True

    def rewrite_metadata_to_file(self, meta: Metadata, record: Record) -> bool:
        """Give the first entry under ``meta.key`` the value ``meta.value``.

        Returns:
            False if *record* has no entry under ``meta.key``.
        """
        existing = record.get_metadata_for_key(meta.key)
        if not existing:
            return False
        old = existing[0]
        record.replace_metadata(old, meta)
        self._index.add_value(meta.value, record)
        self._index.discard_value(old.value, record)
        return True

    def remove(self, meta: Metadata) -> RemovalReport:
        """Remove *meta* from every record holding that exact pair.

        Each record is validated on its own; rejections are collected in
        the report and do not undo removals already applied.
        """
        report = RemovalReport(metadata=meta)
        for record in self.search_metadata(meta):
            if self.remove_metadata_from_file(meta, record):
                report.removed.append(record)
            else:
                report.rejected.append(record)
        return report

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, term: str) -> list[Record]:
        """Return records carrying *term* as a metadata value, in bucket order."""
        return self._index.lookup(term)

    def search_metadata(self, meta: Metadata) -> list[Record]:
        """Return records holding the exact (key, value) pair, once each."""
        return [r for r in self._index.lookup(meta.value) if meta in r.metadata]

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    @property
    def index(self) -> MetadataIndex:
        return self._index

    def rebuild_index(self) -> MetadataIndex:
        """Return a new index built from a full scan of the records."""
        return MetadataIndex.build(self._records)
