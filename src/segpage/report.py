"""Human-readable reports of engine state.

Both helpers are pure: they read the engine (or a metrics snapshot)
and return a string.  Printing is the caller's business.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from segpage.memory.engine import Metrics, SegmentTable

_RULE = "=" * 22


def format_memory_map(engine: SegmentTable) -> str:
    """Render every segment, directory entry, and materialized page."""
    snap = engine.snapshot()
    lines = [
        "===== Memory Map =====",
        f"Segments={len(snap['segments'])} Dir={snap['dir_size']} PageSize={snap['page_size']}",
    ]
    for s, seg in enumerate(snap["segments"]):
        lines.append(
            f"Seg {s} Base={seg['base']} Limit={seg['limit_pages']} Prot={seg['protection']}"
        )
        for d, entry in enumerate(seg["directories"]):
            lines.append(f"  Dir {d} present={'Y' if entry['present'] else 'N'}")
            for p, page in enumerate(entry["pages"] or []):
                frame = "-" if page["frame"] is None else page["frame"]
                lines.append(
                    f"    Page {p} present={'Y' if page['present'] else 'N'}"
                    f" frame={frame} prot={page['protection']}"
                )
    lines.append(_RULE)
    return "\n".join(lines)


def format_metrics(metrics: Metrics, utilization: float) -> str:
    """Render the counters, frame utilization, and average latency."""
    return "\n".join(
        [
            "--- Metrics ---",
            f"Translations: {metrics.translations}",
            f"Page Faults:  {metrics.page_faults}",
            f"Replacements: {metrics.replacements}",
            f"Prot Viol:    {metrics.protection_violations}"
            f" (writes denied {metrics.writes_denied})",
            f"Seg Faults:   {metrics.segment_faults}  Offset Faults: {metrics.offset_faults}",
            f"Utilization:  {utilization:.2f}%",
            f"Avg Latency:  {metrics.average_latency:.2f}",
            "--------------",
        ]
    )
