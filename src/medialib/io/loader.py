"""JSON collection loader.

Expected file shape — an array of objects::

    [
      {
        "fullpath": "/path/to/foobar.ext",
        "type": "image|video|document|audio",
        "metadata": {"key1": "value1", "key2": "value2"}
      }
    ]

Metadata pairs keep the order they appear in the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from medialib.errors import DecodeError, InvalidFileError, ParseError
from medialib.library.models import DEFAULT_REQUIRED_KEYS, MediaType, Metadata, Record, RequiredKeys

EXPECTED_FORMAT = """[
  {
    "fullpath": "/path/to/foobar.ext",
    "type": "image|video|document|audio",
    "metadata": {
      "key1": "value1",
      "key2": "value2",
      "...": "..."
    }
  },
  ...
]"""


def resolve_path(raw: str | Path) -> Path:
    """Expand a leading ``~`` in a user-supplied path."""
    return Path(raw).expanduser()


class Loader:
    """Read media records from JSON collection files.

    Args:
        required_keys: Per-type mandatory keys attached to every loaded record.
    """

    def __init__(self, required_keys: RequiredKeys = DEFAULT_REQUIRED_KEYS) -> None:
        self.required_keys = required_keys

    def read(self, path: Path | str) -> list[Record]:
        """Parse *path* into records.

        Raises:
            InvalidFileError: *path* does not exist or is not a file.
            ParseError: Content is not valid JSON.
            DecodeError: JSON does not match the expected record shape.
        """
        file_path = resolve_path(str(path))
        if not file_path.is_file():
            raise InvalidFileError(str(file_path))

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(str(file_path), str(exc)) from exc

        return self.parse(content, source=str(file_path))

    def parse(self, content: str, source: str = "<string>") -> list[Record]:
        """Parse JSON *content*; *source* names the origin in error messages."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ParseError(source, f"Line {exc.lineno}, column {exc.colno}: {exc.msg}.") from exc

        if not isinstance(data, list):
            raise DecodeError(source, "top level must be an array of records")

        return [self._decode_item(item, i, source) for i, item in enumerate(data)]

    def _decode_item(self, item: Any, position: int, source: str) -> Record:
        where = f"record {position}"
        if not isinstance(item, dict):
            raise DecodeError(source, f"{where} is not an object")

        path = item.get("fullpath")
        if not isinstance(path, str) or not path.strip():
            raise DecodeError(source, f"{where} has no 'fullpath'")

        type_name = item.get("type")
        if not isinstance(type_name, str):
            raise DecodeError(source, f"{where} ({path}) has no 'type'")
        try:
            media_type = MediaType.parse(type_name)
        except ValueError as exc:
            raise DecodeError(source, f"{where} ({path}): {exc}") from None

        raw_meta = item.get("metadata", {})
        if raw_meta is None:
            raw_meta = {}
        if not isinstance(raw_meta, dict):
            raise DecodeError(source, f"{where} ({path}): 'metadata' must be an object")

        metadata: list[Metadata] = []
        for key, value in raw_meta.items():
            if not isinstance(value, str):
                raise DecodeError(
                    source, f"{where} ({path}): metadata '{key}' must be a string, got {value!r}"
                )
            metadata.append(Metadata(key=key, value=value))

        return Record(
            path=path,
            type=media_type,
            metadata=metadata,
            required_keys=self.required_keys,
        )
