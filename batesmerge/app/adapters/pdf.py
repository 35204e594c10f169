"""PDF adapter using PyMuPDF for page counts and united file generation."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

import fitz  # type: ignore[import]

from batesmerge.app.ports.pdf import PDFPort


class PyMuPDFAdapter(PDFPort):
    """Concatenate production PDFs and report page counts with PyMuPDF."""

    _LOG = logging.getLogger(__name__)

    def get_page_count(self, path: Path) -> int:
        doc = fitz.open(str(path))
        try:
            return doc.page_count
        finally:
            doc.close()

    def unite(self, output_path: Path, sources: Sequence[Path]) -> int:
        if not sources:
            raise ValueError(f"No source PDFs supplied for {output_path.name}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        united = fitz.open()
        tmp_path: str | None = None
        try:
            for source in sources:
                doc = fitz.open(str(source))
                try:
                    united.insert_pdf(doc)
                finally:
                    doc.close()

            page_count = united.page_count

            # Write beside the destination so the final rename stays on one filesystem.
            fd, tmp_path = tempfile.mkstemp(
                dir=str(output_path.parent),
                prefix=output_path.stem,
                suffix=".tmp",
            )
            os.close(fd)
            united.save(tmp_path, garbage=3, deflate=True)
            os.replace(tmp_path, output_path)
            tmp_path = None
        finally:
            united.close()
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except FileNotFoundError:
                    pass

        self._LOG.info("Wrote %s (%d pages from %d files)", output_path, page_count, len(sources))
        return page_count
