"""Error types raised by bates parsing, merging and ring operations."""

from __future__ import annotations

from pathlib import Path


class BatesError(ValueError):
    """Base class for bates validation failures."""


class FormatError(BatesError):
    """Raised when text does not look like a bates identifier or range."""

    def __init__(self, value: str, expected: str = "bates range") -> None:
        self.value = value
        super().__init__(f"Not a valid {expected}: {value!r}")


class PrefixMismatchError(BatesError):
    """Raised when two identifiers that must share a series prefix do not."""

    def __init__(self, first: str, second: str) -> None:
        self.first = first
        self.second = second
        super().__init__(f"Bates prefixes differ: {first!r} vs {second!r}")


class WidthMismatchError(BatesError):
    """Raised when zero-padded numbers have unequal digit counts."""

    def __init__(self, start: str, end: str) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f"Zero-padded bates numbers must share a width: {start!r} ({len(start)} digits) "
            f"vs {end!r} ({len(end)} digits)"
        )


class BatesRangeOrderError(BatesError):
    """Raised when a range ends before it starts."""

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Bates range ends before it starts: {start} > {end}")


class GapError(BatesError):
    """Raised when a merged series does not cover a contiguous run of pages."""

    def __init__(self, prefix: str, expected: int, previous: Path, following: Path) -> None:
        self.prefix = prefix
        self.expected = expected
        self.previous = previous
        self.following = following
        super().__init__(
            f"Series {prefix} is not contiguous: expected {following.name!r} to start at "
            f"{expected} after {previous.name!r}"
        )


class DiscoveryRootNotFoundError(BatesError):
    """Raised when the discovery root directory is missing."""

    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(f"Discovery directory not found: {root}")


class InsufficientHistoryError(BatesError):
    """Raised when a ring paste or advance needs two entries but has fewer."""

    def __init__(self, available: int) -> None:
        self.available = available
        super().__init__(
            f"Need two copied bates positions, ring holds {available}. Copy another page first."
        )


class PageCountMismatchError(BatesError):
    """Raised when a PDF's page count disagrees with the bates range in its name."""

    def __init__(self, path: Path, expected: int, actual: int) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{path.name}: bates range covers {expected} pages but the PDF has {actual}"
        )
