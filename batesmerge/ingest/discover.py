"""Production discovery: grouping numbered PDFs into per-series sequences."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from batesmerge.bates.errors import BatesError, DiscoveryRootNotFoundError
from batesmerge.bates.numbers import BatesRange, parse_range

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS = frozenset({".", "..", "united", "what is this"})
DEFAULT_PRODUCED_DIR = "produced"


@dataclass(frozen=True, slots=True)
class SeriesFile:
    """A production PDF and the bates range encoded in its name."""

    path: Path
    bates_range: BatesRange

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def prefix(self) -> str:
        return self.bates_range.prefix


SeriesMap = dict[str, list[SeriesFile]]


def _sort_key(entry: SeriesFile) -> tuple[int, str, str]:
    # Names break ties so merge(a, b) == merge(b, a) even for clashing starts.
    return (entry.bates_range.start.number, entry.path.name, str(entry.path))


def group(filenames: Iterable[str | Path]) -> SeriesMap:
    """Bucket production PDFs by series prefix.

    Files that are not PDFs, or whose names do not parse as a bates range,
    are not part of any production and are skipped.

    Args:
        filenames: File names or paths; only the final component is parsed.

    Returns:
        Mapping of prefix to the files in that series (unordered).
    """
    buckets: SeriesMap = {}
    for filename in filenames:
        path = Path(filename)
        if path.suffix.lower() != ".pdf":
            continue
        try:
            bates_range = parse_range(path.stem)
        except BatesError as exc:
            logger.debug("Skipping %s: %s", path.name, exc)
            continue
        buckets.setdefault(bates_range.prefix, []).append(SeriesFile(path, bates_range))
    return buckets


def merge(first: SeriesMap, second: SeriesMap) -> SeriesMap:
    """Combine two series maps, sorting every series by starting page.

    Gaps are not checked here: a fold over several folders is allowed to be
    incomplete until the last folder has been merged.
    """
    merged: SeriesMap = {}
    for prefix in sorted(first.keys() | second.keys()):
        combined = [*first.get(prefix, []), *second.get(prefix, [])]
        merged[prefix] = sorted(combined, key=_sort_key)
    return merged


def merge_all(maps: Iterable[SeriesMap]) -> SeriesMap:
    """Fold any number of series maps with :func:`merge`."""
    merged: SeriesMap = {}
    for series_map in maps:
        merged = merge(merged, series_map)
    return merged


def production_folders(root: Path, ignore: Iterable[str] | None = None) -> list[Path]:
    """List the discovery folders directly under ``root``.

    Args:
        root: Discovery root directory
        ignore: Folder names to skip, compared case-insensitively

    Returns:
        Sorted list of folder paths
    """
    ignored = {name.lower() for name in (DEFAULT_IGNORED_DIRS if ignore is None else ignore)}
    return [
        child
        for child in sorted(root.iterdir())
        if child.is_dir() and child.name.lower() not in ignored
    ]


def resolve_production_dir(folder: Path, produced_name: str = DEFAULT_PRODUCED_DIR) -> Path:
    """Return the directory holding ``folder``'s produced PDFs.

    A discovery folder may keep its production in a ``produced`` child
    alongside correspondence and other material; when that child exists it
    is scanned instead of the folder itself.
    """
    wanted = produced_name.lower()
    for child in sorted(folder.iterdir()):
        if child.is_dir() and child.name.lower() == wanted:
            return child
    return folder


def scan_directory(directory: Path) -> SeriesMap:
    """Group the PDFs directly inside ``directory`` (not recursive)."""
    return group(entry for entry in sorted(directory.iterdir()) if entry.is_file())


def discover(
    root: Path,
    *,
    ignore: Iterable[str] | None = None,
    produced_name: str = DEFAULT_PRODUCED_DIR,
    max_workers: int = 4,
) -> SeriesMap:
    """Build the authoritative per-series file list for a discovery root.

    Each folder under ``root`` is resolved to its production directory and
    listed on a worker thread; the per-folder maps are then merged in folder
    order, so the result does not depend on thread scheduling.

    Args:
        root: Discovery root directory
        ignore: Folder names to skip (defaults to ``united`` and ``what is this``)
        produced_name: Name of the child folder preferred over its parent
        max_workers: Thread pool size for folder listings

    Returns:
        Mapping of prefix to files sorted by starting page

    Raises:
        DiscoveryRootNotFoundError: If ``root`` is not a directory
    """
    if not root.is_dir():
        raise DiscoveryRootNotFoundError(root)

    directories = [
        resolve_production_dir(folder, produced_name)
        for folder in production_folders(root, ignore)
    ]

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        scanned = list(executor.map(scan_directory, directories))

    series = merge_all(scanned)
    logger.info(
        "Discovered %d series across %d folders under %s",
        len(series),
        len(directories),
        root,
    )
    return series
