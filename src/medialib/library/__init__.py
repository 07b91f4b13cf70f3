"""Medialib collection engine: records, metadata index, result sets."""

from medialib.library.collection import MediaCollection, RemovalReport
from medialib.library.index import MetadataIndex
from medialib.library.models import (
    DEFAULT_REQUIRED_KEYS,
    MediaType,
    Metadata,
    Record,
    RequiredKeys,
)
from medialib.library.results import ResultSet

__all__ = [
    "DEFAULT_REQUIRED_KEYS",
    "MediaCollection",
    "MediaType",
    "Metadata",
    "MetadataIndex",
    "Record",
    "RemovalReport",
    "RequiredKeys",
    "ResultSet",
]
