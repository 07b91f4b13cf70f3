"""Domain models for the media collection: Metadata, Record, MediaType.

A single concrete ``Record`` serves every media type. What varies per type
is only which metadata keys are mandatory, looked up in a
``RequiredKeys`` mapping rather than expressed through subclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from medialib.errors import KeyNotFound, MediaLibError, RequiredMetadataError


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"

    @classmethod
    def parse(cls, value: str) -> MediaType:
        """Return the member for *value* (case-insensitive).

        Raises:
            ValueError: If *value* is not a recognised media type.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown media type '{value}' (expected one of: {choices})") from None


RequiredKeys = Mapping[MediaType, frozenset[str]]

DEFAULT_REQUIRED_KEYS: RequiredKeys = {
    MediaType.IMAGE: frozenset({"creator", "resolution"}),
    MediaType.VIDEO: frozenset({"creator", "resolution", "runtime"}),
    MediaType.AUDIO: frozenset({"creator", "runtime"}),
    MediaType.DOCUMENT: frozenset({"creator"}),
}


@dataclass(frozen=True)
class Metadata:
    """Immutable key/value annotation. Equal when both key and value match."""

    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


@dataclass(eq=False)
class Record:
    """A media file entry.

    ``path`` is the record's identity for equality; it is never reassigned.
    ``metadata`` keeps insertion order and may hold duplicate pairs.

    Attributes:
        path: Full path of the media file.
        type: Media type tag, selects the required-key policy.
        metadata: Ordered metadata entries owned by this record.
        required_keys: Per-type mandatory keys consulted on deletion.
    """

    path: str
    type: MediaType
    metadata: list[Metadata] = field(default_factory=list)
    required_keys: RequiredKeys = field(default_factory=lambda: DEFAULT_REQUIRED_KEYS, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __str__(self) -> str:
        pairs = ", ".join(str(m) for m in self.metadata)
        return f"{self.path} ({self.type.value}) [{pairs}]"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def required(self) -> frozenset[str]:
        return self.required_keys.get(self.type, frozenset())

    def get_metadata_for_key(self, key: str) -> list[Metadata]:
        """Return every entry under *key*, in record order."""
        return [m for m in self.metadata if m.key == key]

    def has_value(self, value: str) -> bool:
        return any(m.value == value for m in self.metadata)

    def values(self) -> set[str]:
        return {m.value for m in self.metadata}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_metadata(self, meta: Metadata) -> bool:
        self.metadata.append(meta)
        return True

    def deletion_error(self, meta: Metadata) -> MediaLibError | None:
        """Return why deleting *meta* would fail, or None if it is allowed.

        Fails when the key is absent or the exact pair is not present, or
        when *meta* is the last entry under a key this record's type requires.
        """
        under_key = self.get_metadata_for_key(meta.key)
        if not under_key or meta not in under_key:
            return KeyNotFound(meta.key)
        if meta.key in self.required and len(under_key) == 1:
            return RequiredMetadataError(meta.key, self.type)
        return None

    def delete_metadata(self, meta: Metadata) -> bool:
        """Remove the first entry equal to *meta*.

        Returns:
            True if removed; False (record unchanged) when the deletion is
            not allowed, see ``deletion_error``.
        """
        if self.deletion_error(meta) is not None:
            return False
        self.metadata.remove(meta)
        return True

    def replace_metadata(self, old: Metadata, new: Metadata) -> None:
        """Swap *old* for *new* in place, keeping its position."""
        self.metadata[self.metadata.index(old)] = new
