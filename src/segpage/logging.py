"""Translation log: structured records of faults and violations.

Every failed translation leaves a trace: the MMU refuses the access and
the simulator writes down *why*.  This mirrors a kernel log buffer
(``dmesg`` on Linux) where the page-fault handler reports bad accesses.

- **LogLevel**: severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry**: a single structured record (level, message, source).
- **Logger**: an append-only log with filtering, clearing, and an
  optional text sink (e.g. ``results.txt``) that receives one line per
  entry at or above its sink level as it is recorded.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TextIO


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The subsystem that generated the event (e.g. "mmu").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering.

    When a *sink* stream is given, each entry at or above *sink_level*
    is also written to it as a single line the moment it is logged.
    Lower entries stay in the buffer only.
    """

    def __init__(
        self,
        sink: TextIO | None = None,
        *,
        sink_level: LogLevel = LogLevel.DEBUG,
    ) -> None:
        """Create an empty logger, optionally mirrored to a text stream."""
        self._entries: list[LogEntry] = []
        self._sink = sink
        self._sink_level = sink_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        self._entries.append(entry)
        if self._sink is not None and level >= self._sink_level:
            self._sink.write(f"{entry}\n")

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries (the sink keeps what it already received)."""
        self._entries.clear()
