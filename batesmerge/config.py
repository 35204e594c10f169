"""batesmerge settings.

Values come from ``BATESMERGE_*`` environment variables or a ``.env`` file;
the CLI overrides ``data_dir`` with ``--data-dir``. Only the audit ledger
lives in the data directory; productions and united files stay under the
discovery root the user passes on the command line.
"""

import logging
import os
from pathlib import Path

from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOCAL_DATA_DIR = ".batesmerge-data"


def default_data_dir() -> Path:
    """``$XDG_DATA_HOME/batesmerge``, or ``~/.local/share/batesmerge``."""
    base = os.getenv("XDG_DATA_HOME")
    return (Path(base) if base else Path.home() / ".local" / "share") / "batesmerge"


class Settings(BaseSettings):
    """batesmerge configuration settings.

    Precedence: CLI flag > environment variable > ``.env`` > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="BATESMERGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path | None = Field(
        default=None,
        description="Where the audit ledger is kept (defaults to XDG_DATA_HOME/batesmerge)",
    )
    audit_enabled: bool = Field(
        default=True,
        description="Record united file generation in the append-only audit ledger",
    )

    # Discovery layout
    united_dir_name: str = Field(
        default="united",
        description="Folder under the discovery root that holds united PDFs",
    )
    produced_dir_name: str = Field(
        default="produced",
        description="Child folder scanned instead of its parent when present",
    )
    ignored_dirs: list[str] = Field(
        default_factory=lambda: ["united", "what is this"],
        description="Discovery folders skipped during scans (case-insensitive)",
    )
    scan_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Thread pool size used to list production folders",
    )

    # Unite behaviour
    verify_page_counts: bool = Field(
        default=True,
        description="Check each source PDF's page count against its bates range before uniting",
    )
    prune_superseded: bool = Field(
        default=False,
        description="Delete older united files for a series once a new one is written",
    )

    _resolved_data_dir: Path | None = PrivateAttr(default=None)

    def get_data_dir(self) -> Path:
        """Resolve and create the data directory.

        An unwritable XDG location falls back to ``.batesmerge-data`` in the
        working directory, so a read-only home does not block uniting.
        """
        if self._resolved_data_dir is not None:
            return self._resolved_data_dir

        if self.data_dir is not None:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = self.data_dir
            return self.data_dir

        preferred = default_data_dir()
        try:
            preferred.mkdir(parents=True, exist_ok=True)
            resolved = preferred
        except PermissionError as exc:
            resolved = Path.cwd() / LOCAL_DATA_DIR
            resolved.mkdir(parents=True, exist_ok=True)
            logger.warning(
                "Cannot create %s (%s); keeping the audit ledger in %s. "
                "Pass --data-dir to choose another location.",
                preferred,
                exc,
                resolved,
            )
        self._resolved_data_dir = resolved
        return resolved

    def get_audit_path(self) -> Path:
        """Path of the JSONL audit ledger."""
        return self.get_data_dir() / "audit.jsonl"

    def get_united_dir(self, root: Path) -> Path:
        """Return the united output folder for discovery ``root``."""
        return root / self.united_dir_name


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Replace the global settings instance (the CLI callback and tests do this)."""
    global _settings
    _settings = settings
