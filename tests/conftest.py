"""Shared pytest fixtures."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from medialib.cli.session import Session
from medialib.config import MedialibConfig
from medialib.library.collection import MediaCollection
from medialib.library.models import MediaType, Metadata, Record

NO_REQUIRED_KEYS = {t: frozenset() for t in MediaType}


def make_record(
    path: str = "a.jpg",
    media_type: MediaType = MediaType.IMAGE,
    pairs: list[tuple[str, str]] | None = None,
    required_keys=None,
) -> Record:
    record = Record(
        path=path,
        type=media_type,
        metadata=[Metadata(k, v) for k, v in (pairs or [])],
    )
    if required_keys is not None:
        record.required_keys = required_keys
    return record


def write_collection(path: Path, items: list[dict]) -> Path:
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


@pytest.fixture
def collection() -> MediaCollection:
    return MediaCollection()


@pytest.fixture
def sample_items() -> list[dict]:
    return [
        {
            "fullpath": "/media/beach.jpg",
            "type": "image",
            "metadata": {"creator": "ann", "resolution": "1024x768", "tag": "sunset"},
        },
        {
            "fullpath": "/media/holiday.mp4",
            "type": "video",
            "metadata": {"creator": "bob", "resolution": "1920x1080", "runtime": "90", "tag": "sunset"},
        },
        {
            "fullpath": "/media/notes.pdf",
            "type": "document",
            "metadata": {"creator": "ann", "title": "notes"},
        },
    ]


@pytest.fixture
def sample_file(tmp_path: Path, sample_items: list[dict]) -> Path:
    return write_collection(tmp_path / "library.json", sample_items)


@pytest.fixture
def session() -> Session:
    """Session writing to an in-memory console; quit confirms with 'yes'."""
    console = Console(file=io.StringIO(), width=200, color_system=None)
    s = Session.from_config(MedialibConfig(), console)
    s.confirm = lambda message: True
    return s


def output_of(session: Session) -> str:
    return session.console.file.getvalue()
