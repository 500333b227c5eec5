"""Hashing, manifest and integrity-check operations."""

from filemanifest.services.check_service import check_manifest
from filemanifest.services.hash_service import (
    FileDigest,
    FileRecord,
    hash_file,
    hash_files,
    hash_records,
)
from filemanifest.services.manifest_service import (
    LoadedManifest,
    create_manifest,
    format_manifest,
    load_manifest,
    parse_manifest,
    replace_manifest,
)

__all__ = [
    "FileDigest",
    "FileRecord",
    "LoadedManifest",
    "check_manifest",
    "create_manifest",
    "format_manifest",
    "hash_file",
    "hash_files",
    "hash_records",
    "load_manifest",
    "parse_manifest",
    "replace_manifest",
]
