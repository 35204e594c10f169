"""Bates identifiers, ranges, errors, and the reference ring."""

from batesmerge.bates.errors import (
    BatesError,
    BatesRangeOrderError,
    DiscoveryRootNotFoundError,
    FormatError,
    GapError,
    InsufficientHistoryError,
    PageCountMismatchError,
    PrefixMismatchError,
    WidthMismatchError,
)
from batesmerge.bates.numbers import BatesPage, BatesRange, parse_page, parse_range
from batesmerge.bates.ring import ReferenceRing

__all__ = [
    "BatesError",
    "BatesPage",
    "BatesRange",
    "BatesRangeOrderError",
    "DiscoveryRootNotFoundError",
    "FormatError",
    "GapError",
    "InsufficientHistoryError",
    "PageCountMismatchError",
    "PrefixMismatchError",
    "ReferenceRing",
    "WidthMismatchError",
    "parse_page",
    "parse_range",
]
