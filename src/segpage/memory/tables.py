"""Two-level page tables: directory entries and second-level tables.

A segment's page number is split into two indices::

    directory index = page_number // fanout
    page index      = page_number %  fanout

The directory index selects a **DirectoryEntry**; the page index selects
a **Page** inside that entry's **SecondLevelTable**.

Second-level tables are created lazily, the first time any page in
their range is touched.  Allocating every table up front would cost
``segments × fanout × fanout`` page records, most of which a typical
run never visits.

New tables start with a random mix of protections and presence flags
so a run sees both hits and faults.  A page that *claims* to be present
but has no frame is not really mapped; ``Page.is_mapped`` is the test
translation relies on.
"""

import random
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum


class Protection(StrEnum):
    """Access rights of a segment or page."""

    READ_ONLY = "RO"
    READ_WRITE = "RW"


@dataclass
class Page:
    """Translation state of one page."""

    present: bool = False
    frame: int | None = None
    protection: Protection = Protection.READ_WRITE
    last_access: int = 0

    @property
    def is_mapped(self) -> bool:
        """Return True only if the page is present *and* holds a frame."""
        return self.present and self.frame is not None

    def link(self, frame: int, now: int) -> None:
        """Mark the page present in *frame* as of logical time *now*."""
        self.present = True
        self.frame = frame
        self.last_access = now

    def unlink(self) -> None:
        """Drop the page's frame (called when the frame is evicted)."""
        self.present = False
        self.frame = None


class SecondLevelTable:
    """A fixed-size array of pages for one directory slot."""

    def __init__(self, size: int, rng: random.Random) -> None:
        """Create *size* pages with randomized presence and protection.

        Args:
            size: Entry count (the directory fan-out).
            rng: The engine's seeded generator.

        """
        self._pages: list[Page] = []
        for _ in range(size):
            present = rng.randrange(2) == 1
            protection = Protection.READ_ONLY if rng.randrange(2) else Protection.READ_WRITE
            self._pages.append(Page(present=present, protection=protection))

    def __getitem__(self, index: int) -> Page:
        """Return the page at *index*."""
        return self._pages[index]

    def __setitem__(self, index: int, page: Page) -> None:
        """Replace the page at *index*."""
        self._pages[index] = page

    def __len__(self) -> int:
        """Return the entry count."""
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        """Iterate over the pages in index order."""
        return iter(self._pages)


class DirectoryEntry:
    """Top-level index node that owns at most one second-level table."""

    def __init__(self) -> None:
        """Create an absent entry."""
        self._table: SecondLevelTable | None = None

    @property
    def present(self) -> bool:
        """Return True once the second-level table exists."""
        return self._table is not None

    @property
    def table(self) -> SecondLevelTable:
        """Return the owned table.

        Raises:
            LookupError: If the entry has not been materialized yet.

        """
        if self._table is None:
            msg = "Directory entry has no second-level table"
            raise LookupError(msg)
        return self._table

    def ensure(self, fanout: int, rng: random.Random) -> SecondLevelTable:
        """Create the table on first use and return it (idempotent)."""
        if self._table is None:
            self._table = SecondLevelTable(fanout, rng)
        return self._table
