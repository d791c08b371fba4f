"""Simulator configuration.

One frozen record gathers every knob a run needs: physical layout
(frames, page size, segments, directory fan-out), the replacement
policy, the random seed, and which driver feeds the engine.
``build_engine`` turns a configuration into a ready engine.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from segpage.memory.engine import SegmentTable
from segpage.memory.frames import FramePool, ReplacementPolicy

if TYPE_CHECKING:
    from segpage.logging import Logger


@dataclass(frozen=True)
class SimulatorConfig:
    """Settings for one simulator run.

    Attributes:
        frames: Number of physical frames.
        page_size: Bytes per page.
        segments: Number of randomly laid out segments.
        dir_size: Directory fan-out (entries per second-level table).
        policy: Victim selection strategy.
        seed: Random seed; None means "use the current time".
        stress: Number of synthetic requests for stress mode, or None.
        valid_ratio: Fraction of stress requests that are in range.
        batch_file: Request file for batch mode, or None.
        log_path: File that receives one line per failed translation.

    """

    frames: int = 16
    page_size: int = 1000
    segments: int = 3
    dir_size: int = 4
    policy: ReplacementPolicy = ReplacementPolicy.FIFO
    seed: int | None = None
    stress: int | None = None
    valid_ratio: float = 0.7
    batch_file: str | None = None
    log_path: str = "results.txt"

    def __post_init__(self) -> None:
        """Validate the settings.

        Raises:
            ValueError: If a setting is out of range or two modes clash.

        """
        for name in ("frames", "page_size", "segments", "dir_size"):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise ValueError(msg)
        if not 0.0 <= self.valid_ratio <= 1.0:
            msg = f"valid_ratio must be within [0, 1], got {self.valid_ratio}"
            raise ValueError(msg)
        if self.stress is not None and self.stress < 0:
            msg = f"stress count must be non-negative, got {self.stress}"
            raise ValueError(msg)
        if self.stress is not None and self.batch_file is not None:
            msg = "stress and batch modes are mutually exclusive"
            raise ValueError(msg)

    def resolved_seed(self) -> int:
        """Return the seed, falling back to the current time."""
        return self.seed if self.seed is not None else int(time.time())


def build_engine(
    config: SimulatorConfig,
    *,
    seed: int | None = None,
    logger: Logger | None = None,
) -> SegmentTable:
    """Create a frame pool and engine from *config*.

    Args:
        config: The run settings.
        seed: Overrides ``config.resolved_seed()`` when given.
        logger: Optional failure log.

    """
    pool = FramePool(total_frames=config.frames, policy=config.policy)
    return SegmentTable(
        pool=pool,
        page_size=config.page_size,
        dir_size=config.dir_size,
        segments=config.segments,
        seed=seed if seed is not None else config.resolved_seed(),
        logger=logger,
    )
