"""Storage access used by the hashing and manifest services.

Services never touch ``open``/``os`` directly; they go through a ``Storage``
so they can run against the real disk or against ``MemoryStorage`` in tests.
Text is read and written with ``surrogateescape`` so paths that are not
valid in the manifest encoding survive a write/read round trip byte for byte.
"""

from __future__ import annotations

import io
import os
import stat
from dataclasses import dataclass, field
from typing import IO, Protocol

TEXT_ERRORS = "surrogateescape"


class Storage(Protocol):
    """Minimal file access needed to hash files and read/write manifests."""

    def exists(self, path: str) -> bool: ...

    def open_read(self, path: str) -> IO[bytes]: ...

    def read_text(self, path: str, encoding: str) -> str: ...

    def create(self, path: str, encoding: str) -> IO[str]: ...

    def chmod(self, path: str, mode: int) -> None: ...

    def replace(self, src: str, dst: str) -> None: ...

    def remove(self, path: str) -> None: ...


class LocalStorage:
    """Storage backed by the local filesystem."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def open_read(self, path: str) -> IO[bytes]:
        return open(path, "rb")

    def read_text(self, path: str, encoding: str) -> str:
        with open(path, encoding=encoding, errors=TEXT_ERRORS, newline="") as f:
            return f.read()

    def create(self, path: str, encoding: str) -> IO[str]:
        return open(path, "w", encoding=encoding, errors=TEXT_ERRORS, newline="")

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def replace(self, src: str, dst: str) -> None:
        os.replace(src, dst)

    def remove(self, path: str) -> None:
        os.remove(path)


@dataclass
class _MemoryFile:
    data: bytes = b""
    mode: int = 0o644


class _MemoryWriter(io.StringIO):
    """Text buffer that commits its content to a ``MemoryStorage`` on flush."""

    def __init__(self, storage: MemoryStorage, path: str, encoding: str) -> None:
        super().__init__()
        self._storage = storage
        self._path = path
        self._encoding = encoding

    def flush(self) -> None:
        if self.closed:
            return
        super().flush()
        entry = self._storage.files.get(self._path)
        if entry is not None:
            entry.data = self.getvalue().encode(self._encoding, TEXT_ERRORS)

    def close(self) -> None:
        if not self.closed:
            self.flush()
        super().close()


@dataclass
class MemoryStorage:
    """In-memory storage honouring file modes.

    Creating over an existing file without the owner write bit raises
    ``PermissionError``; touching a missing file raises ``FileNotFoundError``.
    """

    files: dict[str, _MemoryFile] = field(default_factory=dict)

    def add_file(self, path: str, data: bytes | str, mode: int = 0o644) -> None:
        """Seed a file, bypassing permission checks."""
        if isinstance(data, str):
            data = data.encode("utf-8", TEXT_ERRORS)
        self.files[path] = _MemoryFile(data=data, mode=mode)

    def mode(self, path: str) -> int:
        return self._get(path).mode

    def data(self, path: str) -> bytes:
        return self._get(path).data

    def _get(self, path: str) -> _MemoryFile:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    def exists(self, path: str) -> bool:
        return path in self.files

    def open_read(self, path: str) -> IO[bytes]:
        entry = self._get(path)
        if not entry.mode & stat.S_IRUSR:
            raise PermissionError(f"Permission denied: {path}")
        return io.BytesIO(entry.data)

    def read_text(self, path: str, encoding: str) -> str:
        with self.open_read(path) as f:
            return f.read().decode(encoding, TEXT_ERRORS)

    def create(self, path: str, encoding: str) -> IO[str]:
        existing = self.files.get(path)
        if existing is not None and not existing.mode & stat.S_IWUSR:
            raise PermissionError(f"Permission denied: {path}")
        if existing is None:
            self.files[path] = _MemoryFile()
        else:
            existing.data = b""
        return _MemoryWriter(self, path, encoding)

    def chmod(self, path: str, mode: int) -> None:
        self._get(path).mode = mode

    def replace(self, src: str, dst: str) -> None:
        if src == dst:
            self._get(src)
            return
        self.files[dst] = self._get(src)
        del self.files[src]

    def remove(self, path: str) -> None:
        self._get(path)
        del self.files[path]
