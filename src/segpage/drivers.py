"""Request drivers: the three ways a run feeds the engine.

- **Batch**: replay a file of ``segment page offset access`` records.
- **Stress**: translate a stream of synthetic requests, a chosen
  fraction of them deliberately out of range.
- **Interactive**: read records from a terminal until ``-1``.

Input is parsed the way a C++ ``>>`` loop would read it: a flat stream
of whitespace-separated integers, four per record, so a record may span
lines.  Parsing stops quietly at end of input or at the first token
that is not an integer.

The drivers take their streams as arguments, so tests can pass
``io.StringIO`` instead of real files and terminals.
"""

from __future__ import annotations

import random
from itertools import islice
from typing import TYPE_CHECKING, NamedTuple, TextIO

from segpage.memory.engine import Access
from segpage.memory.frames import ReplacementPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from segpage.memory.engine import Segment, SegmentTable

_FIELDS_PER_RECORD = 4
_INVALID_PAGE_MIN = 20
_INVALID_PAGE_SPAN = 20
_INVALID_OFFSET_SPAN = 500
_END_OF_SESSION = -1


class Request(NamedTuple):
    """One translation request."""

    segment: int
    page: int
    offset: int
    access: Access


def parse_policy(name: str) -> ReplacementPolicy:
    """Return LRU for "lru" (any case), FIFO for anything else."""
    return ReplacementPolicy.LRU if name.lower() == "lru" else ReplacementPolicy.FIFO


def access_from_flag(flag: int) -> Access:
    """Map the record's access flag (0 = read, non-zero = write)."""
    return Access.WRITE if flag else Access.READ


def _int_tokens(stream: TextIO) -> Iterator[int]:
    """Yield integers from *stream* until end of input or a bad token."""
    for line in stream:
        for token in line.split():
            try:
                yield int(token)
            except ValueError:
                return


def read_requests(stream: TextIO) -> Iterator[Request]:
    """Yield complete records from a batch stream."""
    tokens = _int_tokens(stream)
    while True:
        fields = list(islice(tokens, _FIELDS_PER_RECORD))
        if len(fields) < _FIELDS_PER_RECORD:
            return
        segment, page, offset, flag = fields
        yield Request(segment, page, offset, access_from_flag(flag))


def run_batch(engine: SegmentTable, stream: TextIO, out: TextIO) -> int:
    """Translate every record in *stream*, reporting each outcome.

    Returns:
        The number of records processed.

    """
    processed = 0
    for request in read_requests(stream):
        result = engine.translate(*request)
        if result.ok:
            out.write(f"OK  -> Phys={result.address}  Lat={result.latency}\n")
        else:
            out.write(
                f"FAIL ({request.segment},{request.page},{request.offset},{request.access})\n"
            )
        processed += 1
    return processed


def generate_stress(
    count: int,
    *,
    segments: Sequence[Segment],
    page_size: int,
    valid_ratio: float,
    seed: int,
) -> Iterator[Request]:
    """Yield *count* synthetic requests from a private seeded generator.

    With probability *valid_ratio* a request's page lies within its
    segment's limit and its offset within the page.  Otherwise both are
    pushed out of range so the fault paths get exercised.  Access is
    read or write with equal odds.
    """
    rng = random.Random(seed)
    for _ in range(count):
        segment = rng.randrange(len(segments))
        if rng.random() < valid_ratio:
            page = rng.randrange(max(1, segments[segment].limit_pages))
            offset = rng.randrange(page_size)
        else:
            page = _INVALID_PAGE_MIN + rng.randrange(_INVALID_PAGE_SPAN)
            offset = page_size + rng.randrange(_INVALID_OFFSET_SPAN)
        access = Access.READ if rng.randrange(2) else Access.WRITE
        yield Request(segment, page, offset, access)


def run_stress(engine: SegmentTable, requests: Iterable[Request]) -> int:
    """Translate *requests*, keeping only the engine's counters.

    Returns:
        The number of requests issued.

    """
    issued = 0
    for request in requests:
        engine.translate(*request)
        issued += 1
    return issued


def run_interactive(engine: SegmentTable, stdin: TextIO, out: TextIO) -> int:
    """Prompt for records until ``-1``, end of input, or a bad token.

    A segment of ``-1`` ends the session before the remaining three
    fields are read.

    Returns:
        The number of requests translated.

    """
    out.write("Interactive. Enter: seg page offset access(0=R,1=W), or -1 to quit.\n")
    tokens = _int_tokens(stdin)
    handled = 0
    while True:
        out.write("> ")
        out.flush()
        segment = next(tokens, _END_OF_SESSION)
        if segment == _END_OF_SESSION:
            break
        rest = list(islice(tokens, _FIELDS_PER_RECORD - 1))
        if len(rest) < _FIELDS_PER_RECORD - 1:
            break
        page, offset, flag = rest
        result = engine.translate(segment, page, offset, access_from_flag(flag))
        if result.ok:
            out.write(f"Physical: {result.address} | Latency: {result.latency}\n")
        else:
            out.write(f"Error: {result.reason}\n")
        handled += 1
    out.write("\n")
    return handled
