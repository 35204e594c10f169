"""PDF port interface for page counting and concatenation."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol


class PDFPort(Protocol):
    """Port interface for the two PDF operations united files need.

    Side effects: ``unite`` writes a PDF (offline).
    """

    def get_page_count(self, path: Path) -> int:
        """Get total number of pages contained in ``path``."""
        ...

    def unite(self, output_path: Path, sources: Sequence[Path]) -> int:
        """Concatenate ``sources`` in order into ``output_path``.

        Returns:
            Number of pages written
        """
        ...
