"""Manifest exception types.

Convention:
- ``ManifestMissingError`` is a soft condition: callers usually treat a
  missing manifest as "nothing recorded yet" rather than a failure.
- All other ``ManifestError`` subclasses are fatal to the operation that
  raised them.  None of them are retried.
- A file that cannot be hashed is *not* an exception; see
  ``filemanifest.services.hash_service.FileDigest``.
"""

from __future__ import annotations


class ManifestError(Exception):
    """Base class for manifest failures, carrying the manifest path."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class ManifestMissingError(ManifestError, FileNotFoundError):
    """Raised when loading a manifest that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"{path} does not exist", path)


class ManifestReadError(ManifestError):
    """Raised when an existing manifest cannot be read or decoded."""


class ManifestWriteError(ManifestError):
    """Raised when creating a manifest fails.

    ``stage`` is one of ``"create"``, ``"write"``, ``"chmod"`` or ``"replace"``.
    A failure after the create stage may leave a partially written file behind.
    """

    def __init__(self, message: str, path: str, stage: str) -> None:
        super().__init__(message, path)
        self.stage = stage


class IntegrityMismatchError(ManifestError):
    """Raised on the first file whose current hash differs from the recorded one."""

    def __init__(self, path: str, file_path: str, recorded: str, actual: str) -> None:
        super().__init__(f"hashes differ (record: {recorded}; actual: {actual})", path)
        self.file_path = file_path
        self.recorded = recorded
        self.actual = actual
