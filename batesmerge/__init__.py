"""batesmerge - bates-numbered production toolkit.

Discovers numbered PDF productions, checks each series for gaps, and keeps the
united per-series PDFs current.
"""

__version__ = "0.1.0"
__author__ = "batesmerge Contributors"

from batesmerge.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
