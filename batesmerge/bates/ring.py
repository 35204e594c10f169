"""Bounded history of recently referenced bates positions.

A ring belongs to one viewing session of one source document: the viewer
integration creates it (or calls :meth:`ReferenceRing.reset`) when a document
is opened, feeds it "copy" events, and asks it for paste text. Pasting and
then calling :meth:`ReferenceRing.advance` walks forward one page at a time.
"""

from __future__ import annotations

import logging
import threading
from collections import deque

from batesmerge.bates.errors import InsufficientHistoryError, PrefixMismatchError
from batesmerge.bates.numbers import BatesPage, BatesRange

logger = logging.getLogger(__name__)

RING_SIZE = 2


class ReferenceRing:
    """Two-entry copy/paste history with a ceiling on forward movement."""

    def __init__(self) -> None:
        self._entries: deque[BatesPage] = deque(maxlen=RING_SIZE)
        self._max_number: int | None = None
        self._lock = threading.Lock()

    @property
    def entries(self) -> tuple[BatesPage, ...]:
        """Snapshot of the ring, oldest first."""
        with self._lock:
            return tuple(self._entries)

    @property
    def max_number(self) -> int | None:
        """Last page number of the file behind the most recent copy."""
        with self._lock:
            return self._max_number

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def reset(self) -> None:
        """Forget all history; called when another source document is opened."""
        with self._lock:
            self._entries.clear()
            self._max_number = None

    def push(self, page: BatesPage) -> None:
        """Record ``page``, evicting the oldest entry beyond two."""
        with self._lock:
            self._entries.append(page)

    def copy(self, source: BatesRange, page_index: int) -> BatesPage:
        """Handle a copy event on the 1-based ``page_index`` of ``source``.

        The copied page is pushed and the ceiling moves to the end of
        ``source``.
        """
        page = source.page_at(page_index)
        with self._lock:
            self._max_number = source.end.number
            self._entries.append(page)
        logger.debug("Copied %s (ceiling %d)", page, source.end.number)
        return page

    def ordered_pair(self) -> tuple[BatesPage, BatesPage]:
        """Return the two entries as ``(smaller, larger)``."""
        with self._lock:
            return self._ordered_pair()

    def paste_text(self) -> str:
        """Text to insert for the current pair: one label, or a short range."""
        low, high = self.ordered_pair()
        low_text = low.format(short=True)
        high_text = high.format(short=True)
        if low_text == high_text:
            return low_text
        return f"{low_text} - {high_text}"

    def advance(self) -> BatesPage | None:
        """Step past the current pair.

        The page after the larger entry is pushed twice so the next paste
        starts from it. Returns that page, or ``None`` when it would run past
        the ceiling, in which case the ring is left untouched.
        """
        with self._lock:
            _, high = self._ordered_pair()
            candidate = high.increment()
            if self._max_number is not None and candidate.number > self._max_number:
                logger.debug("Not advancing past %d", self._max_number)
                return None
            self._entries.append(candidate)
            self._entries.append(candidate)
            return candidate

    def _ordered_pair(self) -> tuple[BatesPage, BatesPage]:
        if len(self._entries) < RING_SIZE:
            raise InsufficientHistoryError(len(self._entries))
        first, second = self._entries
        if first.prefix != second.prefix:
            raise PrefixMismatchError(first.prefix, second.prefix)
        if second.number < first.number:
            return second, first
        return first, second
