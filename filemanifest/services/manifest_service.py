"""Manifest service: write-once manifest files and their ``path: hash`` format.

A manifest is plain text, one ``<path>: <sha256-hex>`` record per line,
joined with ``\\n`` and no trailing newline.  The ``": "`` delimiter is not
escaped, so a path containing it cannot be represented; such lines fail to
parse and are skipped.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import TYPE_CHECKING, NamedTuple

from filemanifest.config import get_settings
from filemanifest.exceptions import ManifestMissingError, ManifestReadError, ManifestWriteError
from filemanifest.filesystem.storage import LocalStorage
from filemanifest.services.hash_service import FileRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from filemanifest.config import Settings
    from filemanifest.filesystem.storage import Storage

logger = logging.getLogger(__name__)


class LoadedManifest(NamedTuple):
    """Lookup indices parsed from a manifest.

    ``by_hash`` keeps only the last path seen for each digest; use
    ``paths_for_hash`` when content-identical files must all be found.
    """

    by_path: dict[str, str]
    by_hash: dict[str, str]

    def paths_for_hash(self, digest: str) -> list[str]:
        return [path for path, recorded in self.by_path.items() if recorded == digest]


def format_manifest(entries: Iterable[str]) -> str:
    """Join pre-formatted entries into manifest text."""
    return "\n".join(entries)


def parse_manifest(text: str) -> LoadedManifest:
    """Parse manifest text into path and hash indices.

    Lines that do not split into exactly one path and one hash are skipped.
    Later duplicates overwrite earlier ones in both indices.
    """
    by_path: dict[str, str] = {}
    by_hash: dict[str, str] = {}
    for lineno, line in enumerate(text.split("\n"), start=1):
        record = FileRecord.parse(line)
        if record is None:
            if line:
                logger.debug("Skipping malformed manifest line %d", lineno)
            continue
        by_path[record.path] = record.hash
        by_hash[record.hash] = record.path
    return LoadedManifest(by_path=by_path, by_hash=by_hash)


def load_manifest(
    path: str,
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> LoadedManifest:
    """Read and parse a manifest file.

    Raises ManifestMissingError if the file does not exist and
    ManifestReadError if it exists but cannot be read or decoded.
    """
    storage = storage or LocalStorage()
    settings = settings or get_settings()
    if not storage.exists(path):
        raise ManifestMissingError(path)
    try:
        content = storage.read_text(path, settings.manifest_encoding)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("failed to read manifest %s", path)
        raise ManifestReadError(f"failed to read manifest {path}: {exc}", path) from exc
    return parse_manifest(content)


def create_manifest(
    filepath: str,
    entries: Iterable[str],
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> None:
    """Write entries to a new manifest and make it read-only.

    No rollback: if writing or chmod fails, the partially written file
    is left in place.
    """
    storage = storage or LocalStorage()
    settings = settings or get_settings()
    try:
        f = storage.create(filepath, settings.manifest_encoding)
    except OSError as exc:
        raise ManifestWriteError(f"failed to create {filepath}: {exc}", filepath, "create") from exc

    try:
        with f:
            f.write(format_manifest(entries))
    except (OSError, UnicodeEncodeError) as exc:
        raise ManifestWriteError(
            f"failed to write to {filepath}: {exc}", filepath, "write"
        ) from exc

    try:
        storage.chmod(filepath, settings.manifest_mode)
    except OSError as exc:
        raise ManifestWriteError(
            f"failed to set manifest to read only: {exc}", filepath, "chmod"
        ) from exc
    logger.info("Created manifest %s", filepath)


def replace_manifest(
    filepath: str,
    entries: Iterable[str],
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> None:
    """Build a new manifest beside ``filepath`` and atomically swap it in.

    The existing manifest is left untouched if any step fails.
    """
    storage = storage or LocalStorage()
    directory, name = os.path.split(filepath)
    tmp_path = os.path.join(directory, f".{name}.{uuid.uuid4().hex}.tmp")
    try:
        create_manifest(tmp_path, entries, storage, settings)
        storage.replace(tmp_path, filepath)
    except (ManifestWriteError, OSError) as exc:
        if storage.exists(tmp_path):
            try:
                storage.remove(tmp_path)
            except OSError as cleanup_exc:
                logger.warning("Failed to remove temporary manifest %s: %s", tmp_path, cleanup_exc)
        if isinstance(exc, ManifestWriteError):
            raise
        raise ManifestWriteError(
            f"failed to replace {filepath}: {exc}", filepath, "replace"
        ) from exc
    logger.info("Replaced manifest %s", filepath)
