"""Storage port interface for filesystem operations."""

from pathlib import Path
from typing import Iterator, Protocol


class StoragePort(Protocol):
    """Port interface for storage operations.

    Abstracts filesystem I/O to enable testing and alternative backends.

    Side effects: Reads/removes files (offline).
    """

    def mtime(self, path: Path) -> float | None:
        """Return the modification time of ``path``.

        Args:
            path: File path

        Returns:
            POSIX timestamp, or None when the file does not exist
        """
        ...

    def list_files(self, directory: Path, pattern: str = "*") -> Iterator[Path]:
        """List files in directory.

        Args:
            directory: Directory path
            pattern: Glob pattern (default: all files)

        Yields:
            File paths
        """
        ...

    def remove(self, path: Path) -> None:
        """Delete a file.

        Args:
            path: File path
        """
        ...

    def compute_hash(self, path: Path) -> str:
        """Compute SHA-256 hash of file.

        Args:
            path: File path

        Returns:
            Hex-encoded SHA-256 hash
        """
        ...
