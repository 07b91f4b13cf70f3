"""JSON collection persister — writes the format ``Loader`` reads."""

from __future__ import annotations

import json
import warnings
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from medialib.errors import SaveError
from medialib.io.loader import resolve_path
from medialib.library.models import Record


def record_to_dict(record: Record) -> dict[str, Any]:
    """Serialise *record*; repeated keys collapse to their last value."""
    metadata: dict[str, str] = {}
    for meta in record.metadata:
        metadata[meta.key] = meta.value
    return {"fullpath": record.path, "type": record.type.value, "metadata": metadata}


class Exporter:
    """Write records to a JSON collection file.

    Args:
        indent: JSON indentation width.
    """

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def dumps(self, records: Iterable[Record]) -> str:
        items: list[dict[str, Any]] = []
        for record in records:
            item = record_to_dict(record)
            if len(item["metadata"]) < len(record.metadata):
                warnings.warn(
                    f"'{record.path}' has repeated metadata keys; "
                    "only the last value per key is saved.",
                    UserWarning,
                    stacklevel=3,
                )
            items.append(item)
        return json.dumps(items, ensure_ascii=False, indent=self.indent) + "\n"

    def write(self, path: Path | str, records: Iterable[Record]) -> Path:
        """Serialise *records* to *path* and return the resolved path.

        Raises:
            SaveError: Parent directory is missing or the file cannot be written.
        """
        target = resolve_path(str(path))
        if not target.parent.is_dir():
            raise SaveError(str(target), f"directory '{target.parent}' does not exist")
        if target.is_dir():
            raise SaveError(str(target), "path is a directory")

        content = self.dumps(records)
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SaveError(str(target), exc.strerror or str(exc)) from exc
        return target
