"""Value → records index over a media collection.

The index is a derived cache: ``MetadataIndex.build()`` recreates it from the
records alone, and the incremental methods must always leave it equal to
that rebuild. Buckets hold records by object identity in first-insert order
so that two loaded records sharing a path stay distinct members.
"""

from __future__ import annotations

from collections.abc import Iterable

from medialib.library.models import Record


class MetadataIndex:
    """Mapping from metadata value to the records currently carrying it."""

    def __init__(self) -> None:
        self._buckets: dict[str, list[Record]] = {}

    @classmethod
    def build(cls, records: Iterable[Record]) -> MetadataIndex:
        """Return a fresh index from a full scan of *records*."""
        index = cls()
        for record in records:
            index.insert(record)
        return index

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def insert(self, record: Record) -> None:
        """Register *record* under every value it currently holds."""
        for meta in record.metadata:
            self.add_value(meta.value, record)

    def add_value(self, value: str, record: Record) -> None:
        bucket = self._buckets.setdefault(value, [])
        if not any(r is record for r in bucket):
            bucket.append(record)

    def discard_value(self, value: str, record: Record) -> None:
        """Drop *record* from *value*'s bucket unless it still carries *value*."""
        if record.has_value(value):
            return
        bucket = self._buckets.get(value)
        if bucket is None:
            return
        bucket[:] = [r for r in bucket if r is not record]
        if not bucket:
            del self._buckets[value]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, value: str) -> list[Record]:
        """Return a copy of *value*'s bucket (empty list if none)."""
        return list(self._buckets.get(value, ()))

    def values(self) -> list[str]:
        return list(self._buckets)

    def snapshot(self) -> dict[str, list[int]]:
        """Bucket membership as record ids; used to compare two indexes."""
        return {v: sorted(id(r) for r in bucket) for v, bucket in self._buckets.items()}

    def __contains__(self, value: object) -> bool:
        return value in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)
