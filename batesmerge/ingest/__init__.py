"""Production discovery and series grouping."""

from batesmerge.ingest.discover import (
    SeriesFile,
    SeriesMap,
    discover,
    group,
    merge,
    merge_all,
    production_folders,
    resolve_production_dir,
    scan_directory,
)

__all__ = [
    "SeriesFile",
    "SeriesMap",
    "discover",
    "group",
    "merge",
    "merge_all",
    "production_folders",
    "resolve_production_dir",
    "scan_directory",
]
