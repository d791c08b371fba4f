"""Frame pool: physical frame bookkeeping and victim selection.

Physical memory is a fixed array of **frames**.  The simulator never
stores real bytes; each frame only carries metadata:

- whether it is free,
- which (segment, directory, page) currently owns it,
- when it was loaded and when it was last touched.

When every frame is in use and a page fault needs room, the pool picks
a **victim** according to its replacement policy:

    - **FIFO**: a queue of frame ids.  Heads that are already free are
      stale and get discarded.  The surviving head is proposed as the
      victim *and* rotated to the tail, so a frame that keeps being
      proposed cycles round-robin through the survivors rather than
      strict oldest-first.
    - **LRU**: a linear scan for the smallest last-access timestamp;
      ties go to the lowest frame id.

Both ``allocate_free()`` and ``map()`` append to the FIFO queue, whatever
the active policy, so the queue may hold the same frame more than once.
Victim order depends on those duplicates; keep them.
"""

from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple


class ReplacementPolicy(StrEnum):
    """Victim selection strategies understood by the pool."""

    FIFO = "fifo"
    LRU = "lru"


class FrameOwner(NamedTuple):
    """Back-reference from a frame to the page that maps it."""

    segment: int
    directory: int
    page: int


@dataclass
class FrameMeta:
    """Metadata for one physical frame slot."""

    free: bool = True
    owner: FrameOwner | None = None
    loaded_time: int = 0
    last_access: int = 0


class FramePool:
    """A fixed number of physical frames under a replacement policy."""

    def __init__(self, *, total_frames: int, policy: ReplacementPolicy) -> None:
        """Create a pool with every frame free.

        Args:
            total_frames: Number of physical frames (may be zero).
            policy: The victim selection strategy.

        """
        if total_frames < 0:
            msg = f"Frame count must be non-negative, got {total_frames}"
            raise ValueError(msg)
        self._frames = [FrameMeta() for _ in range(total_frames)]
        self._fifo: deque[int] = deque()
        self.policy = policy

    @property
    def total_frames(self) -> int:
        """Return the pool capacity."""
        return len(self._frames)

    @property
    def free_count(self) -> int:
        """Return the number of free frames."""
        return sum(1 for meta in self._frames if meta.free)

    @property
    def used_count(self) -> int:
        """Return the number of frames in use."""
        return self.total_frames - self.free_count

    def info(self, frame: int) -> FrameMeta:
        """Return the metadata record for a frame.

        Raises:
            IndexError: If the frame id is out of range.

        """
        if not self._in_range(frame):
            msg = f"Frame {frame} out of range (0..{self.total_frames - 1})"
            raise IndexError(msg)
        return self._frames[frame]

    def allocate_free(self) -> int | None:
        """Claim the lowest-numbered free frame.

        The frame is marked used and queued for FIFO ordering, but has
        no owner until the caller maps it.

        Returns:
            The frame id, or None if every frame is in use.

        """
        for frame, meta in enumerate(self._frames):
            if meta.free:
                meta.free = False
                self._fifo.append(frame)
                return frame
        return None

    def choose_victim(self, now: int) -> int | None:
        """Pick an in-use frame to evict under the active policy.

        Args:
            now: The current logical time (unused by FIFO and LRU, kept
                so every policy shares one signature).

        Returns:
            The victim frame id, or None if no frame is in use.

        """
        if self.policy == ReplacementPolicy.FIFO:
            return self._fifo_victim()
        return self._lru_victim()

    def _fifo_victim(self) -> int | None:
        while self._fifo and self._frames[self._fifo[0]].free:
            self._fifo.popleft()
        if not self._fifo:
            return None
        frame = self._fifo.popleft()
        self._fifo.append(frame)
        return frame

    def _lru_victim(self) -> int | None:
        best: int | None = None
        for frame, meta in enumerate(self._frames):
            if meta.free:
                continue
            if best is None or meta.last_access < self._frames[best].last_access:
                best = frame
        return best

    def map(self, frame: int, owner: FrameOwner, now: int) -> None:
        """Record that *owner* now maps *frame*.

        Args:
            frame: The frame being mapped.
            owner: The (segment, directory, page) claiming it.
            now: The current logical time (load and access timestamp).

        """
        meta = self.info(frame)
        meta.free = False
        meta.owner = owner
        meta.loaded_time = now
        meta.last_access = now
        self._fifo.append(frame)

    def touch(self, frame: int, now: int) -> None:
        """Refresh the last-access time of a mapped frame (no-op otherwise)."""
        if self._in_range(frame) and not self._frames[frame].free:
            self._frames[frame].last_access = now

    def free(self, frame: int) -> None:
        """Return a frame to the free state and drop its owner.

        Idempotent; out-of-range ids are ignored.
        """
        if self._in_range(frame):
            self._frames[frame] = FrameMeta()

    def utilization(self) -> float:
        """Return the percentage of frames in use (0.0 for an empty pool)."""
        if not self._frames:
            return 0.0
        return self.used_count / self.total_frames * 100.0

    def fifo_order(self) -> list[int]:
        """Return a copy of the FIFO queue, head first."""
        return list(self._fifo)

    def _in_range(self, frame: int) -> bool:
        return 0 <= frame < len(self._frames)
