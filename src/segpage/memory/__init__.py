"""Memory subsystem: frame pool, two-level page tables, and the MMU.

Re-exports public symbols so callers can write::

    from segpage.memory import FramePool, SegmentTable
"""

from segpage.memory.engine import (
    Access,
    Fault,
    Metrics,
    NoFrameAvailableError,
    OffsetFaultError,
    ProtectionViolationError,
    Segment,
    SegmentFaultError,
    SegmentTable,
    Translation,
    TranslationError,
)
from segpage.memory.frames import FrameMeta, FrameOwner, FramePool, ReplacementPolicy
from segpage.memory.tables import DirectoryEntry, Page, Protection, SecondLevelTable

__all__ = [
    "Access",
    "DirectoryEntry",
    "Fault",
    "FrameMeta",
    "FrameOwner",
    "FramePool",
    "Metrics",
    "NoFrameAvailableError",
    "OffsetFaultError",
    "Page",
    "Protection",
    "ProtectionViolationError",
    "ReplacementPolicy",
    "SecondLevelTable",
    "Segment",
    "SegmentFaultError",
    "SegmentTable",
    "Translation",
    "TranslationError",
]
