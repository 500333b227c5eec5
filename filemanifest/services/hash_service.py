"""Hash service: SHA-256 digests of file contents and manifest entry formatting."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from filemanifest.config import get_settings
from filemanifest.filesystem.storage import LocalStorage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from filemanifest.config import Settings
    from filemanifest.filesystem.storage import Storage

logger = logging.getLogger(__name__)

ENTRY_DELIMITER = ": "


@dataclass(frozen=True)
class FileDigest:
    """Outcome of hashing one file: a hex digest, or unavailable (``value is None``)."""

    value: str | None

    @classmethod
    def unavailable(cls) -> FileDigest:
        return cls(value=None)

    @property
    def available(self) -> bool:
        return self.value is not None

    def matches(self, recorded: str) -> bool:
        """Return True if this digest equals a recorded hash.

        An unavailable digest never matches, not even an empty recorded hash.
        """
        return self.value is not None and self.value == recorded

    def __str__(self) -> str:
        return self.value or ""


@dataclass(frozen=True)
class FileRecord:
    """A single manifest entry."""

    path: str
    hash: str

    def format(self) -> str:
        return f"{self.path}{ENTRY_DELIMITER}{self.hash}"

    @classmethod
    def parse(cls, line: str) -> FileRecord | None:
        """Parse a ``path: hash`` line, returning None unless it has exactly one delimiter."""
        tokens = line.split(ENTRY_DELIMITER)
        if len(tokens) != 2:
            return None
        return cls(path=tokens[0], hash=tokens[1])


def hash_file(
    path: str,
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> FileDigest:
    """Compute the SHA-256 digest of a file.

    Any failure to open or read the file, including a path the OS rejects
    outright such as one with an embedded NUL, yields ``FileDigest.unavailable()``
    instead of raising, so the problem surfaces as a comparison failure.
    """
    storage = storage or LocalStorage()
    chunk_size = (settings or get_settings()).hash_chunk_size
    sha = hashlib.sha256()
    try:
        with storage.open_read(path) as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                sha.update(chunk)
    except (OSError, ValueError) as exc:
        logger.warning("Cannot hash %s: %s", path, exc)
        return FileDigest.unavailable()
    return FileDigest(sha.hexdigest())


def hash_records(
    paths: Iterable[str],
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> list[FileRecord]:
    """Hash each path in order; unavailable digests are recorded as empty hashes."""
    storage = storage or LocalStorage()
    return [FileRecord(path=p, hash=str(hash_file(p, storage, settings))) for p in paths]


def hash_files(
    paths: Iterable[str],
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> list[str]:
    """Return one ``path: hash`` entry per input path, preserving order."""
    return [record.format() for record in hash_records(paths, storage, settings)]
