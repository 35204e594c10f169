"""Bates page identifiers, ranges, and the parsers that produce them.

A bates identifier is an uppercase series prefix followed by a page number,
optionally zero-padded to a fixed width (``COB0002421``). Production files
carry a range in their name, either with the prefix repeated
(``COB0002421-COB0003964``) or stated once (``OCA 51-562``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from batesmerge.bates.errors import (
    BatesRangeOrderError,
    FormatError,
    PrefixMismatchError,
    WidthMismatchError,
)

_PREFIX_RE = re.compile(r"[A-Z]+")

_PAGE_RE = re.compile(r"(?P<prefix>[A-Z]+) ?(?P<number>\d+)")

_RANGE_RE = re.compile(
    r"(?P<prefix>[A-Z]+) ?(?P<start>\d+)"
    r"[^A-Za-z0-9]+"
    r"(?:(?P<end_prefix>[A-Z]+) ?)?(?P<end>\d+)"
)


@dataclass(frozen=True, slots=True)
class BatesPage:
    """A single page's bates identity."""

    prefix: str
    number: int
    width: int | None = None

    def __post_init__(self) -> None:
        if not _PREFIX_RE.fullmatch(self.prefix):
            raise FormatError(self.prefix, expected="bates prefix")
        if self.number < 0:
            raise FormatError(str(self.number), expected="bates number")
        if self.width is not None and self.width < 1:
            raise FormatError(str(self.width), expected="bates width")

    def format(self, short: bool = False) -> str:
        """Render the page as ``COB0002421`` (padded) or ``COB 2421`` (short)."""
        if not short and self.width is not None:
            return f"{self.prefix}{self.number:0{self.width}d}"
        return f"{self.prefix} {self.number}"

    def increment(self, delta: int = 1) -> BatesPage:
        """Return the page ``delta`` positions away in the same series."""
        return BatesPage(self.prefix, self.number + delta, self.width)

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, slots=True)
class BatesRange:
    """Inclusive span of pages covered by one production file."""

    start: BatesPage
    end: BatesPage

    def __post_init__(self) -> None:
        if self.start.prefix != self.end.prefix:
            raise PrefixMismatchError(self.start.prefix, self.end.prefix)
        if self.start.width != self.end.width:
            raise WidthMismatchError(self.start.format(), self.end.format())
        if self.start.number > self.end.number:
            raise BatesRangeOrderError(self.start.number, self.end.number)

    @property
    def prefix(self) -> str:
        return self.start.prefix

    @property
    def width(self) -> int | None:
        return self.start.width

    @property
    def page_count(self) -> int:
        return self.end.number - self.start.number + 1

    def contains(self, page: BatesPage) -> bool:
        return (
            page.prefix == self.prefix
            and self.start.number <= page.number <= self.end.number
        )

    def page_at(self, index: int) -> BatesPage:
        """Return the bates page printed on the 1-based ``index`` page of the file."""
        if not 1 <= index <= self.page_count:
            raise IndexError(
                f"Page {index} is outside {self.format(short=True)} "
                f"({self.page_count} pages)"
            )
        return self.start.increment(index - 1)

    def format(self, short: bool = False, separator: str = "-") -> str:
        if short:
            return f"{self.start.format(short=True)} {separator} {self.end.format(short=True)}"
        return f"{self.start.format()}{separator}{self.end.format()}"

    def filename(self) -> str:
        """Canonical production filename, e.g. ``OCA 51-562.pdf``."""
        if self.width is None:
            return f"{self.prefix} {self.start.number}-{self.end.number}.pdf"
        digits = self.width
        return f"{self.prefix} {self.start.number:0{digits}d}-{self.end.number:0{digits}d}.pdf"

    def __str__(self) -> str:
        return self.format()


def _resolve_width(start_digits: str, end_digits: str) -> int | None:
    # Only a zero-padded start fixes the width; the end is held to it.
    if not start_digits.startswith("0"):
        return None
    if len(start_digits) != len(end_digits):
        raise WidthMismatchError(start_digits, end_digits)
    return len(start_digits)


def parse_range(name: str) -> BatesRange:
    """Decode a bates range from a filename stem or user input.

    Accepts ``COB0002421-COB0003964``, ``COB0002421 - COB0003964``,
    ``COB2421-COB3964`` and the series shorthand ``OCA 51-562``. Callers strip
    any directory and extension first.

    Raises:
        FormatError: ``name`` is not shaped like a bates range.
        PrefixMismatchError: the two ends name different series.
        WidthMismatchError: a zero-padded start and the end differ in length.
    """
    match = _RANGE_RE.fullmatch(name.strip())
    if match is None:
        raise FormatError(name)

    prefix = match.group("prefix")
    end_prefix = match.group("end_prefix") or prefix
    if end_prefix != prefix:
        raise PrefixMismatchError(prefix, end_prefix)

    start_digits = match.group("start")
    end_digits = match.group("end")
    width = _resolve_width(start_digits, end_digits)

    return BatesRange(
        BatesPage(prefix, int(start_digits), width),
        BatesPage(prefix, int(end_digits), width),
    )


def parse_page(text: str) -> BatesPage:
    """Decode a single bates identifier such as ``COB0002421`` or ``COB 2421``."""
    match = _PAGE_RE.fullmatch(text.strip())
    if match is None:
        raise FormatError(text, expected="bates identifier")

    digits = match.group("number")
    width = len(digits) if digits.startswith("0") else None
    return BatesPage(match.group("prefix"), int(digits), width)
