"""Tests for integrity checking against a manifest."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import pytest

from filemanifest.exceptions import IntegrityMismatchError, ManifestMissingError
from filemanifest.filesystem.storage import MemoryStorage
from filemanifest.services.check_service import check_manifest
from filemanifest.services.hash_service import hash_file, hash_files
from filemanifest.services.manifest_service import create_manifest

if TYPE_CHECKING:
    from pathlib import Path

    from filemanifest.config import Settings


@pytest.fixture
def manifest_on_disk(tmp_path: Path, sample_files: list[str], test_settings: Settings) -> str:
    path = str(tmp_path / "manifest.txt")
    create_manifest(path, hash_files(sample_files, settings=test_settings), settings=test_settings)
    return path


class TestCheckManifest:
    def test_unmodified_files_pass(self, manifest_on_disk: str, test_settings: Settings) -> None:
        assert check_manifest(manifest_on_disk, settings=test_settings) is None

    def test_repeated_checks_agree(self, manifest_on_disk: str, test_settings: Settings) -> None:
        for _ in range(3):
            check_manifest(manifest_on_disk, settings=test_settings)

    def test_modified_file_reports_both_hashes(
        self, manifest_on_disk: str, sample_files: list[str], test_settings: Settings
    ) -> None:
        recorded = hash_file(sample_files[1], settings=test_settings).value
        with open(sample_files[1], "w") as f:
            f.write("tampered")
        actual = hash_file(sample_files[1], settings=test_settings).value

        with pytest.raises(IntegrityMismatchError) as exc_info:
            check_manifest(manifest_on_disk, settings=test_settings)

        err = exc_info.value
        assert str(err) == f"hashes differ (record: {recorded}; actual: {actual})"
        assert err.path == manifest_on_disk
        assert err.file_path == sample_files[1]
        assert err.recorded == recorded
        assert err.actual == actual

    def test_modified_file_fails_consistently(
        self, manifest_on_disk: str, sample_files: list[str], test_settings: Settings
    ) -> None:
        with open(sample_files[0], "a") as f:
            f.write("!")
        messages = set()
        for _ in range(3):
            with pytest.raises(IntegrityMismatchError) as exc_info:
                check_manifest(manifest_on_disk, settings=test_settings)
            messages.add(str(exc_info.value))
        assert len(messages) == 1

    def test_deleted_file_is_mismatch_with_empty_actual(
        self, manifest_on_disk: str, sample_files: list[str], test_settings: Settings
    ) -> None:
        os.remove(sample_files[0])
        with pytest.raises(IntegrityMismatchError) as exc_info:
            check_manifest(manifest_on_disk, settings=test_settings)
        assert exc_info.value.file_path == sample_files[0]
        assert exc_info.value.actual == ""

    def test_path_with_embedded_nul_is_mismatch(
        self, tmp_path: Path, test_settings: Settings
    ) -> None:
        bad_path = f"{tmp_path}/a\x00b"
        manifest = str(tmp_path / "manifest.txt")
        create_manifest(manifest, [f"{bad_path}: abc"], settings=test_settings)

        with pytest.raises(IntegrityMismatchError) as exc_info:
            check_manifest(manifest, settings=test_settings)
        assert exc_info.value.file_path == bad_path
        assert exc_info.value.recorded == "abc"
        assert exc_info.value.actual == ""

    def test_missing_manifest_propagates(self, tmp_path: Path, test_settings: Settings) -> None:
        with pytest.raises(ManifestMissingError):
            check_manifest(str(tmp_path / "absent"), settings=test_settings)

    def test_empty_manifest_passes(self, test_settings: Settings) -> None:
        storage = MemoryStorage()
        create_manifest("/m", [], storage, test_settings)
        check_manifest("/m", storage, test_settings)

    def test_stops_at_first_mismatch(
        self, memory_storage: MemoryStorage, test_settings: Settings
    ) -> None:
        entries = hash_files(["/data/a.txt", "/data/b.txt"], memory_storage, test_settings)
        create_manifest("/m", entries, memory_storage, test_settings)
        memory_storage.add_file("/data/a.txt", "changed")
        memory_storage.add_file("/data/b.txt", "changed too")

        with pytest.raises(IntegrityMismatchError) as exc_info:
            check_manifest("/m", memory_storage, test_settings)
        assert exc_info.value.file_path == "/data/a.txt"

    def test_recorded_empty_hash_never_matches(
        self, memory_storage: MemoryStorage, test_settings: Settings
    ) -> None:
        """A file unreadable at creation stays a mismatch even if still unreadable."""
        entries = hash_files(["/data/missing"], memory_storage, test_settings)
        assert entries == ["/data/missing: "]
        create_manifest("/m", entries, memory_storage, test_settings)

        with pytest.raises(IntegrityMismatchError) as exc_info:
            check_manifest("/m", memory_storage, test_settings)
        assert exc_info.value.recorded == ""
        assert exc_info.value.actual == ""

    def test_malformed_lines_are_ignored(
        self, memory_storage: MemoryStorage, test_settings: Settings
    ) -> None:
        entries = hash_files(["/data/a.txt"], memory_storage, test_settings)
        memory_storage.add_file("/m", "\n".join([*entries, "", "junk", "/x: y: z"]), mode=0o444)
        check_manifest("/m", memory_storage, test_settings)

    def test_logs_mismatch(
        self,
        memory_storage: MemoryStorage,
        test_settings: Settings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        memory_storage.add_file("/m", "/data/a.txt: 00")
        with (
            caplog.at_level(logging.WARNING, logger="filemanifest.services.check_service"),
            pytest.raises(IntegrityMismatchError),
        ):
            check_manifest("/m", memory_storage, test_settings)
        assert "Integrity mismatch for /data/a.txt" in caplog.text
