"""Hash-chained JSONL record of united PDFs.

Each line describes one united file: its series and range, the sources it was
built from and the SHA-256 of the bytes written. Lines are chained by hash,
so a record edited or dropped after the fact fails :meth:`AuditLedger.verify`.
"""

from __future__ import annotations

import hashlib
import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field

from batesmerge import __version__
from batesmerge.app.ports.ledger import UniteRecord

if TYPE_CHECKING:
    from batesmerge.app.unite_service import UniteResult

GENESIS_HASH = "0" * 64


class LedgerEntry(UniteRecord):
    """A :class:`UniteRecord` as stored on disk, with its chain fields."""

    tool_version: str = Field(default=__version__)
    sequence: int = Field(..., ge=1)
    previous_hash: str = Field(default=GENESIS_HASH)
    entry_hash: str | None = None

    def compute_hash(self) -> str:
        """SHA-256 over the canonical JSON of every field but ``entry_hash``."""
        payload = self.model_dump(mode="json", exclude={"entry_hash"})
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def model_post_init(self, __context: Any) -> None:
        if self.entry_hash is None:
            self.entry_hash = self.compute_hash()


class AuditLedger:
    """File-backed :class:`~batesmerge.app.ports.LedgerPort`."""

    def __init__(self, ledger_path: Path) -> None:
        self.ledger_path = ledger_path
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)

        entries = self._load()
        self._tail_hash = entries[-1].entry_hash if entries else GENESIS_HASH
        self._tail_sequence = entries[-1].sequence if entries else 0

    def _load(self) -> list[LedgerEntry]:
        if not self.ledger_path.exists():
            return []

        entries: list[LedgerEntry] = []
        with open(self.ledger_path, encoding="utf-8") as fh:
            for line_num, raw_line in enumerate(fh, 1):
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    entries.append(LedgerEntry.model_validate_json(line))
                except ValueError as exc:
                    raise ValueError(
                        f"Unreadable ledger line {line_num} in {self.ledger_path}: {exc}"
                    ) from exc
        return entries

    def log_unite(self, result: UniteResult) -> LedgerEntry:
        """Append ``result`` and fsync the ledger before returning."""
        entry = LedgerEntry(
            timestamp=datetime.now(UTC).isoformat(),
            prefix=result.prefix,
            first_number=result.first_number,
            last_number=result.last_number,
            pages=result.pages,
            output_path=result.output_path,
            sha256=result.sha256,
            sources=list(result.sources),
            removed=list(result.removed),
            sequence=self._tail_sequence + 1,
            previous_hash=self._tail_hash or GENESIS_HASH,
        )

        with open(self.ledger_path, "a", encoding="utf-8") as fh:
            fh.write(entry.model_dump_json() + "\n")
            fh.flush()
            os.fsync(fh.fileno())

        self._tail_sequence = entry.sequence
        self._tail_hash = entry.entry_hash
        return entry

    def history(self, prefix: str | None = None) -> list[LedgerEntry]:
        """Recorded united files, oldest first, optionally for one series."""
        entries = self._load()
        if prefix is None:
            return entries
        return [entry for entry in entries if entry.prefix == prefix]

    def verify(self) -> tuple[bool, str | None]:
        """Walk the chain and report the first broken record."""
        try:
            entries = self._load()
        except ValueError as exc:
            return False, str(exc)

        expected_previous = GENESIS_HASH
        for position, entry in enumerate(entries, 1):
            if entry.sequence != position:
                return False, f"Record {position} has sequence {entry.sequence}"
            if entry.previous_hash != expected_previous:
                return False, f"Record {position} ({entry.label}) breaks the hash chain"
            if entry.entry_hash != entry.compute_hash():
                return False, f"Record {position} ({entry.label}) was modified after writing"
            expected_previous = entry.entry_hash

        return True, None
