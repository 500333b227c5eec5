"""Integrity check: re-hash the files named in a manifest and compare.

Each file's fresh digest is compared to its recorded hash, bare hash against
bare hash.  This differs from the legacy checker, which compared the whole
``path: hash`` entry against the recorded hash and so reported a mismatch for
every manifest.  A file that can no longer be read never matches.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from filemanifest.exceptions import IntegrityMismatchError
from filemanifest.filesystem.storage import LocalStorage
from filemanifest.services.hash_service import hash_file
from filemanifest.services.manifest_service import load_manifest

if TYPE_CHECKING:
    from filemanifest.config import Settings
    from filemanifest.filesystem.storage import Storage

logger = logging.getLogger(__name__)


def check_manifest(
    path: str,
    storage: Storage | None = None,
    settings: Settings | None = None,
) -> None:
    """Verify every file recorded in the manifest at ``path``.

    Load errors propagate unchanged.  Raises IntegrityMismatchError for the
    first differing file; iteration follows manifest order.
    """
    storage = storage or LocalStorage()
    manifest = load_manifest(path, storage, settings)
    for file_path, recorded in manifest.by_path.items():
        current = hash_file(file_path, storage, settings)
        if not current.matches(recorded):
            logger.warning("Integrity mismatch for %s in %s", file_path, path)
            raise IntegrityMismatchError(path, file_path, recorded, str(current))
    logger.debug("Verified %d file(s) against %s", len(manifest.by_path), path)
