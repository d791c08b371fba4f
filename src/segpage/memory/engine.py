"""Segment table and translation engine: the simulated MMU.

A virtual address here is a tuple ``(segment, page_number, offset)``
plus the kind of access (read or write).  ``SegmentTable.translate``
walks it through an ordered list of checks; the first one that fails
ends the call::

    1. segment id in range                 → else SEGMENT_FAULT
    2. write to a read-only segment?       → PROTECTION_VIOLATION
    3. page number below segment limit     → else SEGMENT_FAULT
    4. offset within the page              → else OFFSET_FAULT
    5. split page number into (dir, page)
    6. materialize the second-level table
    7. write to a read-only page?          → PROTECTION_VIOLATION
    8. page mapped?  touch it.  Otherwise page fault:
           free frame → else victim → else NO_FRAME_AVAILABLE
    9. physical = base + page_number * page_size + offset

Failures never raise and never leave a partial mapping.  They bump
their counter (and ``logs``) and return a ``Translation`` whose
``fault`` says what went wrong.  Callers that prefer exceptions can
call ``Translation.raise_for_fault()``.

Determinism:
    The engine owns its random generator and logical clock.  Two
    engines built with the same seed and fed the same requests end in
    identical states.  The clock ticks and the synthetic latency is
    drawn at the top of every call, failed or not, so the random stream
    never depends on which checks passed.
"""

from __future__ import annotations

import dataclasses
import random
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from segpage.logging import LogLevel
from segpage.memory.frames import FrameOwner
from segpage.memory.tables import DirectoryEntry, Page, Protection

if TYPE_CHECKING:
    from collections.abc import Sequence

    from segpage.logging import Logger
    from segpage.memory.frames import FramePool

_LOG_SOURCE = "mmu"
_DEFAULT_BASE = 1000
_BASE_STRIDE = 5000
_MIN_LIMIT_PAGES = 3
_MAX_LIMIT_PAGES = 7
_MIN_LATENCY = 1
_MAX_LATENCY = 5


class Access(StrEnum):
    """Kind of memory access."""

    READ = "R"
    WRITE = "W"


class Fault(StrEnum):
    """Why a translation failed."""

    SEGMENT_FAULT = "segment_fault"
    OFFSET_FAULT = "offset_fault"
    PROTECTION_VIOLATION = "protection_violation"
    NO_FRAME_AVAILABLE = "no_frame_available"


class TranslationError(Exception):
    """Base class for translation failures raised by ``raise_for_fault``."""


class SegmentFaultError(TranslationError):
    """Bad segment id, or page number beyond the segment limit."""


class OffsetFaultError(TranslationError):
    """Offset outside the page."""


class ProtectionViolationError(TranslationError):
    """Write to a read-only segment or page."""


class NoFrameAvailableError(TranslationError):
    """Page fault with no frame to allocate or evict."""


_FAULT_ERRORS: dict[Fault, type[TranslationError]] = {
    Fault.SEGMENT_FAULT: SegmentFaultError,
    Fault.OFFSET_FAULT: OffsetFaultError,
    Fault.PROTECTION_VIOLATION: ProtectionViolationError,
    Fault.NO_FRAME_AVAILABLE: NoFrameAvailableError,
}


@dataclass(frozen=True)
class Segment:
    """A logical region: physical base, page limit, and protection."""

    base: int
    limit_pages: int
    protection: Protection = Protection.READ_WRITE


@dataclass
class Metrics:
    """Counters updated by the engine; they only ever grow."""

    translations: int = 0
    page_faults: int = 0
    replacements: int = 0
    protection_violations: int = 0
    segment_faults: int = 0
    offset_faults: int = 0
    writes_denied: int = 0
    logs: int = 0
    total_latency: int = 0

    @property
    def average_latency(self) -> float:
        """Return mean latency per successful translation (0.0 if none)."""
        if not self.translations:
            return 0.0
        return self.total_latency / self.translations


@dataclass(frozen=True)
class Translation:
    """Outcome of one ``translate`` call."""

    address: int | None = None
    latency: int = 0
    fault: Fault | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        """Return True if the translation produced an address."""
        return self.fault is None

    def raise_for_fault(self) -> None:
        """Raise the ``TranslationError`` matching the fault, if any."""
        if self.fault is not None:
            raise _FAULT_ERRORS[self.fault](self.reason)


class SegmentTable:
    """The translation engine: segments, directories, and page faults.

    The engine owns every segment and directory entry.  The frame pool
    is shared by reference and is only mutated through ``translate``.
    """

    def __init__(
        self,
        *,
        pool: FramePool,
        page_size: int,
        dir_size: int,
        segments: int | Sequence[Segment] = 3,
        seed: int | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create the engine.

        Args:
            pool: The physical frame pool.
            page_size: Bytes per page; offsets must be below this.
            dir_size: Directory fan-out (also the second-level table size).
            segments: Either a count of randomly laid out segments, or
                explicit segment descriptors.
            seed: Seed for the engine's private random generator.
            logger: Optional log that receives one entry per failure.

        Raises:
            ValueError: If a size is not positive, or a segment's limit
                does not fit the two-level layout.

        """
        if page_size <= 0 or dir_size <= 0:
            msg = f"page_size and dir_size must be positive, got {page_size} and {dir_size}"
            raise ValueError(msg)
        self._pool = pool
        self._page_size = page_size
        self._dir_size = dir_size
        self._rng = random.Random(seed)
        self._logger = logger
        self._metrics = Metrics()
        self._time = 0

        if isinstance(segments, int):
            self._segments = [self._random_segment(s) for s in range(segments)]
        else:
            self._segments = list(segments)
        max_pages = dir_size * dir_size
        for index, seg in enumerate(self._segments):
            if not 0 <= seg.limit_pages <= max_pages:
                msg = f"Segment {index} limit {seg.limit_pages} outside 0..{max_pages}"
                raise ValueError(msg)
        self._dirs = [[DirectoryEntry() for _ in range(dir_size)] for _ in self._segments]

    def _random_segment(self, index: int) -> Segment:
        # Clamped so small fan-outs still address every page in the limit.
        limit = min(self._rng.randint(_MIN_LIMIT_PAGES, _MAX_LIMIT_PAGES), self._dir_size**2)
        protection = Protection.READ_ONLY if self._rng.randrange(2) else Protection.READ_WRITE
        return Segment(
            base=_DEFAULT_BASE + index * _BASE_STRIDE,
            limit_pages=limit,
            protection=protection,
        )

    @property
    def pool(self) -> FramePool:
        """Return the shared frame pool."""
        return self._pool

    @property
    def page_size(self) -> int:
        """Return the page size in bytes."""
        return self._page_size

    @property
    def dir_size(self) -> int:
        """Return the directory fan-out."""
        return self._dir_size

    @property
    def segments(self) -> list[Segment]:
        """Return the segment descriptors."""
        return list(self._segments)

    @property
    def metrics(self) -> Metrics:
        """Return a snapshot of the counters."""
        return dataclasses.replace(self._metrics)

    @property
    def clock(self) -> int:
        """Return the logical time (number of translate calls so far)."""
        return self._time

    def directory(self, segment: int, index: int) -> DirectoryEntry:
        """Return the directory entry at (segment, index)."""
        return self._dirs[segment][index]

    def page_at(self, owner: FrameOwner) -> Page | None:
        """Resolve a frame's owner triple to its page, if it still exists."""
        if not 0 <= owner.segment < len(self._dirs):
            return None
        if not 0 <= owner.directory < self._dir_size:
            return None
        entry = self._dirs[owner.segment][owner.directory]
        if not entry.present or not 0 <= owner.page < len(entry.table):
            return None
        return entry.table[owner.page]

    def translate(self, segment: int, page_number: int, offset: int, access: Access) -> Translation:
        """Translate one virtual access into a physical address.

        Args:
            segment: Segment id.
            page_number: Page number within the segment.
            offset: Byte offset within the page.
            access: Read or write.

        Returns:
            A ``Translation`` carrying either the address and latency or
            the fault and its reason.

        """
        self._time += 1
        now = self._time
        latency = self._rng.randint(_MIN_LATENCY, _MAX_LATENCY)

        if not 0 <= segment < len(self._segments):
            self._metrics.segment_faults += 1
            return self._fail(Fault.SEGMENT_FAULT, "Segmentation fault: bad segment")
        seg = self._segments[segment]
        if access == Access.WRITE and seg.protection is Protection.READ_ONLY:
            return self._deny_write("Write to read-only segment")
        if not 0 <= page_number < seg.limit_pages:
            self._metrics.segment_faults += 1
            return self._fail(Fault.SEGMENT_FAULT, "Page exceeds segment limit")
        if not 0 <= offset < self._page_size:
            self._metrics.offset_faults += 1
            return self._fail(Fault.OFFSET_FAULT, "Offset out of range")

        directory, index = divmod(page_number, self._dir_size)
        table = self._dirs[segment][directory].ensure(self._dir_size, self._rng)
        page = table[index]

        if access == Access.WRITE and page.protection is Protection.READ_ONLY:
            return self._deny_write("Write to read-only page")

        mapped_frame = page.frame if page.is_mapped else None
        if mapped_frame is not None:
            self._pool.touch(mapped_frame, now)
            page.last_access = now
        else:
            self._metrics.page_faults += 1
            frame = self._obtain_frame(now)
            if frame is None:
                return self._fail(Fault.NO_FRAME_AVAILABLE, "No victim frame available")
            page.link(frame, now)
            self._pool.map(frame, FrameOwner(segment, directory, index), now)

        self._metrics.translations += 1
        self._metrics.total_latency += latency
        address = seg.base + page_number * self._page_size + offset
        return Translation(address=address, latency=latency)

    def _obtain_frame(self, now: int) -> int | None:
        """Return a free frame, evicting a victim if none is free."""
        frame = self._pool.allocate_free()
        if frame is not None:
            return frame
        victim = self._pool.choose_victim(now)
        if victim is None:
            return None
        if self._evict(victim):
            self._metrics.replacements += 1
        return victim

    def _evict(self, frame: int) -> bool:
        """Unlink the victim's owning page and free the frame.

        Returns:
            True if an owning page was found and unlinked.

        """
        owner = self._pool.info(frame).owner
        if owner is None:
            return False
        page = self.page_at(owner)
        if page is None:
            return False
        page.unlink()
        self._pool.free(frame)
        if self._logger is not None:
            self._logger.log(
                LogLevel.DEBUG,
                f"Evicted seg {owner.segment} dir {owner.directory} page {owner.page} "
                f"from frame {frame}",
                source=_LOG_SOURCE,
            )
        return True

    def _deny_write(self, reason: str) -> Translation:
        self._metrics.protection_violations += 1
        self._metrics.writes_denied += 1
        return self._fail(Fault.PROTECTION_VIOLATION, reason)

    def _fail(self, fault: Fault, reason: str) -> Translation:
        self._metrics.logs += 1
        if self._logger is not None:
            self._logger.log(LogLevel.WARNING, reason, source=_LOG_SOURCE)
        return Translation(fault=fault, reason=reason)

    def snapshot(self) -> dict[str, Any]:
        """Return the full memory map as plain data (read-only)."""
        segments: list[dict[str, Any]] = []
        for seg, dirs in zip(self._segments, self._dirs, strict=True):
            directories: list[dict[str, Any]] = []
            for entry in dirs:
                pages = None
                if entry.present:
                    pages = [
                        {
                            "present": page.present,
                            "frame": page.frame,
                            "protection": str(page.protection),
                        }
                        for page in entry.table
                    ]
                directories.append({"present": entry.present, "pages": pages})
            segments.append(
                {
                    "base": seg.base,
                    "limit_pages": seg.limit_pages,
                    "protection": str(seg.protection),
                    "directories": directories,
                }
            )
        return {
            "page_size": self._page_size,
            "dir_size": self._dir_size,
            "segments": segments,
        }
