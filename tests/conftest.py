"""Shared test fixtures for filemanifest."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from filemanifest.config import Settings
from filemanifest.filesystem.storage import MemoryStorage

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, hash_chunk_size=4)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    storage = MemoryStorage()
    storage.add_file("/data/a.txt", "hello")
    storage.add_file("/data/b.txt", "world")
    return storage


@pytest.fixture
def sample_files(tmp_path: Path) -> list[str]:
    """Two files on disk: a.txt ("hello") and b.txt ("world"), as absolute paths."""
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("hello")
    b.write_text("world")
    return [str(a), str(b)]
