"""Pytest configuration and fixtures."""

import gc
import shutil
import tempfile
import time
from collections.abc import Callable, Generator
from pathlib import Path

import fitz  # type: ignore[import]
import pytest

from batesmerge.config import Settings


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any PDF handles
        gc.collect()
        time.sleep(0.05)
        shutil.rmtree(tmpdir, ignore_errors=True)


def create_pdf(path: Path, pages: int) -> Path:
    """Write a PDF with ``pages`` blank-but-labelled pages."""
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = fitz.open()
    try:
        for index in range(pages):
            page = doc.new_page()
            page.insert_text((72, 72), f"{path.stem} page {index + 1}")
        doc.save(str(path))
    finally:
        doc.close()
    return path


@pytest.fixture
def make_pdf() -> Callable[[Path, int], Path]:
    """Factory fixture for sample production PDFs."""
    return create_pdf


@pytest.fixture
def production_root(temp_dir: Path) -> Path:
    """Discovery root with two productions, one nested under 'produced'.

    OCA 1-50 and OCA 563-894 arrive in the first production; OCA 51-562 and
    the PITCHESS series arrive in the second. Page counts match the names.
    """
    root = temp_dir / "discovery"
    first = root / "2024-01 County production"
    second = root / "2024-03 Supplemental" / "Produced"

    create_pdf(first / "OCA 1-50.pdf", 50)
    create_pdf(first / "OCA 563-894.pdf", 332)
    (first / "cover letter.docx").write_text("not a production file")

    create_pdf(second / "OCA 51-562.pdf", 512)
    create_pdf(second / "PITCHESS 1-50.pdf", 50)
    create_pdf(second / "PITCHESS 51-51.pdf", 1)
    # Files beside 'Produced' are correspondence, never scanned.
    create_pdf(root / "2024-03 Supplemental" / "OCA 900-901.pdf", 2)

    create_pdf(root / "united" / "united OCA 1-50.pdf", 50)
    (root / "What Is This").mkdir()
    create_pdf(root / "What Is This" / "ZZZ 1-2.pdf", 2)
    return root


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated batesmerge settings scoped to tests."""

    import batesmerge.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    data_dir = temp_dir / "appdata"
    data_dir.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(
        data_dir=data_dir,
        audit_enabled=True,
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
