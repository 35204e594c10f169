"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .pdf import PyMuPDFAdapter
from .storage import FileSystemStorageAdapter

__all__ = [
    "FileSystemStorageAdapter",
    "PyMuPDFAdapter",
]
