"""Medialib persistence: JSON loader and exporter."""

from medialib.io.exporter import Exporter
from medialib.io.loader import EXPECTED_FORMAT, Loader

__all__ = ["EXPECTED_FORMAT", "Exporter", "Loader"]
