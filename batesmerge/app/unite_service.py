"""United file planning and regeneration.

A united file concatenates every PDF of one bates series, in page order,
into ``<root>/united/united <PREFIX> <first>-<last>.pdf``. Planning decides
which of those files are missing or older than their sources; execution hands
the chosen sources to the PDF port.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, Field

from batesmerge.app.ports import LedgerPort, PDFPort, StoragePort
from batesmerge.bates.errors import BatesError, GapError, PageCountMismatchError
from batesmerge.bates.numbers import BatesRange, parse_range
from batesmerge.config import Settings
from batesmerge.ingest.discover import SeriesFile, SeriesMap, discover

logger = logging.getLogger(__name__)

UNITED_PREFIX = "united"


class RegenerationTarget(BaseModel):
    """A united file that needs to be (re)built."""

    prefix: str = Field(..., description="Bates series prefix")
    output_path: Path = Field(..., description="Destination united PDF")
    sources: list[Path] = Field(default_factory=list, description="Source PDFs in page order")
    source_mtimes: list[float] = Field(
        default_factory=list, description="Modification times matching ``sources``"
    )
    output_mtime: float | None = Field(
        default=None, description="Modification time of the existing output, if any"
    )
    superseded: list[Path] = Field(
        default_factory=list,
        description="Older united files for the same series under different names",
    )
    first_number: int = Field(..., ge=0)
    last_number: int = Field(..., ge=0)

    @property
    def page_count(self) -> int:
        return self.last_number - self.first_number + 1


class UniteResult(BaseModel):
    """Outcome of writing one united file."""

    prefix: str
    first_number: int = Field(..., ge=0)
    last_number: int = Field(..., ge=0)
    output_path: Path
    pages: int = Field(..., ge=0)
    sources: list[Path] = Field(default_factory=list)
    sha256: str
    removed: list[Path] = Field(default_factory=list)


def validate_coverage(prefix: str, files: Sequence[SeriesFile]) -> None:
    """Ensure ``files`` cover one contiguous run of pages.

    Raises:
        GapError: A file does not start right after its predecessor ends.
    """
    for previous, following in zip(files, files[1:]):
        expected = previous.bates_range.end.number + 1
        if following.bates_range.start.number != expected:
            raise GapError(prefix, expected, previous.path, following.path)


def united_filename(prefix: str, files: Sequence[SeriesFile]) -> str:
    """Canonical united name, e.g. ``united OCA 1-894.pdf`` (never padded)."""
    if not files:
        raise ValueError(f"Series {prefix} has no files to unite")
    first = files[0].bates_range.start.number
    last = files[-1].bates_range.end.number
    return f"{UNITED_PREFIX} {prefix} {first}-{last}.pdf"


def is_stale(output_mtime: float | None, source_mtimes: Sequence[float]) -> bool:
    """True when any source is strictly newer than the output.

    A missing output (``None``) counts as infinitely old.
    """
    reference = float("-inf") if output_mtime is None else output_mtime
    return any(mtime > reference for mtime in source_mtimes)


def check_page_count(path: Path, bates_range: BatesRange, pdf: PDFPort) -> None:
    """Confirm the PDF at ``path`` has as many pages as its bates range.

    Raises:
        PageCountMismatchError: The counts differ.
    """
    actual = pdf.get_page_count(path)
    if actual != bates_range.page_count:
        raise PageCountMismatchError(path, bates_range.page_count, actual)


def check_target_pages(target: RegenerationTarget, pdf: PDFPort) -> None:
    """Check every source of ``target`` against the range in its file name.

    Raises:
        PageCountMismatchError: The first source whose counts differ.
    """
    for source in target.sources:
        check_page_count(source, parse_range(source.stem), pdf)


def _superseded(prefix: str, output_path: Path, storage: StoragePort) -> list[Path]:
    pattern = f"{UNITED_PREFIX} {prefix} *.pdf"
    return [
        path
        for path in storage.list_files(output_path.parent, pattern)
        if path.name != output_path.name
    ]


def plan(
    series_map: Mapping[str, Sequence[SeriesFile]],
    united_dir: Path,
    storage: StoragePort,
    *,
    force: bool = False,
) -> list[RegenerationTarget]:
    """Decide which united files must be regenerated.

    Args:
        series_map: Sorted per-series files, as returned by ``discover``
        united_dir: Folder that holds united files
        storage: Filesystem port used for timestamps and listings
        force: Emit a target for every series regardless of timestamps

    Returns:
        One target per stale series, ordered by prefix

    Raises:
        GapError: A series is not contiguous.
    """
    targets: list[RegenerationTarget] = []
    for prefix in sorted(series_map):
        files = list(series_map[prefix])
        if not files:
            continue
        validate_coverage(prefix, files)

        output_path = united_dir / united_filename(prefix, files)
        sources = [entry.path for entry in files]
        source_mtimes: list[float] = []
        for source in sources:
            mtime = storage.mtime(source)
            if mtime is None:
                raise FileNotFoundError(f"Source PDF disappeared during planning: {source}")
            source_mtimes.append(mtime)
        output_mtime = storage.mtime(output_path)

        if not force and not is_stale(output_mtime, source_mtimes):
            logger.debug("%s is current", output_path.name)
            continue

        targets.append(
            RegenerationTarget(
                prefix=prefix,
                output_path=output_path,
                sources=sources,
                source_mtimes=source_mtimes,
                output_mtime=output_mtime,
                superseded=_superseded(prefix, output_path, storage),
                first_number=files[0].bates_range.start.number,
                last_number=files[-1].bates_range.end.number,
            )
        )
    return targets


class UniteService:
    """Discover productions under a root and keep their united files current.

    All I/O goes through the PDF, storage and ledger ports.
    """

    def __init__(
        self,
        pdf_port: PDFPort,
        storage_port: StoragePort,
        ledger_port: LedgerPort | None,
        settings: Settings,
    ) -> None:
        self.pdf = pdf_port
        self.storage = storage_port
        self.ledger = ledger_port
        self.settings = settings

    def scan(self, root: Path) -> SeriesMap:
        """Discover every series under ``root`` using configured folder names.

        The united folder is skipped even when it is missing from
        ``ignored_dirs`` or was renamed after the settings were built.
        """
        ignore = [*self.settings.ignored_dirs, self.settings.united_dir_name]
        return discover(
            root,
            ignore=ignore,
            produced_name=self.settings.produced_dir_name,
            max_workers=self.settings.scan_workers,
        )

    def plan(self, root: Path, *, force: bool = False) -> list[RegenerationTarget]:
        """Return the united files under ``root`` that need regenerating."""
        series = self.scan(root)
        return plan(series, self.settings.get_united_dir(root), self.storage, force=force)

    def execute(
        self,
        target: RegenerationTarget,
        *,
        verify_pages: bool | None = None,
        prune_superseded: bool | None = None,
    ) -> UniteResult:
        """Write the united file described by ``target``.

        Page counts are checked before anything is written; a mismatch leaves
        the existing united file untouched.

        Args:
            target: Planned regeneration
            verify_pages: Override ``settings.verify_page_counts``
            prune_superseded: Override ``settings.prune_superseded``

        Raises:
            PageCountMismatchError: A source PDF disagrees with its file name.
        """
        if self._verify_pages(verify_pages):
            check_target_pages(target, self.pdf)
        return self._write(target, self._prune(prune_superseded))

    def run(
        self,
        root: Path,
        *,
        force: bool = False,
        verify_pages: bool | None = None,
        prune_superseded: bool | None = None,
    ) -> list[UniteResult]:
        """Plan and regenerate every stale united file under ``root``.

        Every series is validated (coverage during planning, then page
        counts) before the first united file is written, so a failure in one
        series leaves all of them untouched.
        """
        series = self.scan(root)
        targets = plan(series, self.settings.get_united_dir(root), self.storage, force=force)

        if self._verify_pages(verify_pages):
            for target in targets:
                check_target_pages(target, self.pdf)

        prune = self._prune(prune_superseded)
        results = [self._write(target, prune) for target in targets]
        logger.info("United %d of %d series under %s", len(results), len(series), root)
        return results

    def verify(self, root: Path) -> list[str]:
        """Report coverage and page-count problems for every series under ``root``.

        Unlike :meth:`run`, problems are collected rather than raised.
        """
        problems: list[str] = []
        for prefix, files in self.scan(root).items():
            try:
                validate_coverage(prefix, files)
            except GapError as exc:
                problems.append(str(exc))
            for entry in files:
                try:
                    check_page_count(entry.path, entry.bates_range, self.pdf)
                except BatesError as exc:
                    problems.append(str(exc))
                except RuntimeError as exc:
                    problems.append(f"{entry.name}: unreadable PDF ({exc})")
        return problems

    def _verify_pages(self, override: bool | None) -> bool:
        return self.settings.verify_page_counts if override is None else override

    def _prune(self, override: bool | None) -> bool:
        return self.settings.prune_superseded if override is None else override

    def _write(self, target: RegenerationTarget, prune: bool) -> UniteResult:
        pages = self.pdf.unite(target.output_path, target.sources)
        if pages != target.page_count:
            logger.warning(
                "%s has %d pages, expected %d",
                target.output_path.name,
                pages,
                target.page_count,
            )

        removed: list[Path] = []
        if prune:
            for stale_path in target.superseded:
                self.storage.remove(stale_path)
                logger.warning("Removed superseded united file %s", stale_path)
                removed.append(stale_path)

        result = UniteResult(
            prefix=target.prefix,
            first_number=target.first_number,
            last_number=target.last_number,
            output_path=target.output_path,
            pages=pages,
            sources=list(target.sources),
            sha256=self.storage.compute_hash(target.output_path),
            removed=removed,
        )
        if self.ledger is not None:
            self.ledger.log_unite(result)
        return result
