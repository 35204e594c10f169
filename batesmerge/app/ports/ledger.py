"""Ledger port: chain-of-custody records for united PDFs."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from batesmerge.app.unite_service import UniteResult


class UniteRecord(BaseModel):
    """What the ledger remembers about one united PDF."""

    timestamp: str = Field(..., description="ISO-8601 time the united file was written")
    prefix: str = Field(..., description="Bates series prefix")
    first_number: int = Field(..., ge=0)
    last_number: int = Field(..., ge=0)
    pages: int = Field(..., ge=0, description="Pages actually written")
    output_path: Path
    sha256: str = Field(..., min_length=64, max_length=64)
    sources: list[Path] = Field(default_factory=list, description="Source PDFs in page order")
    removed: list[Path] = Field(
        default_factory=list, description="Superseded united files deleted afterwards"
    )

    @property
    def label(self) -> str:
        """Series and range, e.g. ``OCA 1-894``."""
        return f"{self.prefix} {self.first_number}-{self.last_number}"


class LedgerPort(Protocol):
    """Append-only record of every united PDF written.

    Side effects: appends to the ledger file (offline).
    """

    def log_unite(self, result: UniteResult) -> UniteRecord:
        """Record a united file that has just been written."""
        ...

    def history(self, prefix: str | None = None) -> list[UniteRecord]:
        """Return recorded united files, oldest first.

        Args:
            prefix: Only return records for this bates series
        """
        ...

    def verify(self) -> tuple[bool, str | None]:
        """Check the ledger has not been edited.

        Returns:
            Tuple of (is_valid, first problem found or None)
        """
        ...
