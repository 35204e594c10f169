"""Filesystem-backed storage port implementation."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterator

from batesmerge.app.ports import StoragePort

HASH_CHUNK_SIZE = 1 << 20


class FileSystemStorageAdapter(StoragePort):
    """Adapter that performs direct filesystem operations."""

    def mtime(self, path: Path) -> float | None:
        try:
            return Path(path).stat().st_mtime
        except FileNotFoundError:
            return None

    def list_files(self, directory: Path, pattern: str = "*") -> Iterator[Path]:
        root = Path(directory)
        if not root.is_dir():
            return iter(())
        return iter(sorted(path for path in root.glob(pattern) if path.is_file()))

    def remove(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)

    def compute_hash(self, path: Path) -> str:
        # United PDFs run to hundreds of MB; hash them in chunks.
        digest = hashlib.sha256()
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()
