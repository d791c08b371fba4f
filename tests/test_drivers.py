"""Tests for the batch, stress, and interactive drivers.

Drivers read whitespace-separated integer records (four per request)
from any text stream, so tests feed them ``io.StringIO`` objects.
"""

import io

import pytest

from segpage.drivers import (
    Request,
    access_from_flag,
    generate_stress,
    parse_policy,
    read_requests,
    run_batch,
    run_interactive,
    run_stress,
)
from segpage.memory.engine import Access, Segment, SegmentTable
from segpage.memory.frames import FramePool, ReplacementPolicy

PAGE_SIZE = 1000
BASE = 1000
LIMIT = 4
STRESS_COUNT = 50
SEED = 5
INVALID_PAGE_MIN = 20
INVALID_PAGE_MAX = 40


def _engine() -> SegmentTable:
    pool = FramePool(total_frames=2, policy=ReplacementPolicy.FIFO)
    return SegmentTable(
        pool=pool,
        page_size=PAGE_SIZE,
        dir_size=4,
        segments=[Segment(base=BASE, limit_pages=LIMIT)],
        seed=SEED,
    )


class TestParsing:
    """Verify policy names, access flags, and record parsing."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("lru", ReplacementPolicy.LRU),
            ("LRU", ReplacementPolicy.LRU),
            ("fifo", ReplacementPolicy.FIFO),
            ("clock", ReplacementPolicy.FIFO),
        ],
    )
    def test_parse_policy(self, name: str, expected: ReplacementPolicy) -> None:
        """Only "lru" selects LRU; everything else is FIFO."""
        assert parse_policy(name) is expected

    def test_access_flag(self) -> None:
        """0 reads; any other value writes."""
        assert access_from_flag(0) is Access.READ
        assert access_from_flag(1) is Access.WRITE
        assert access_from_flag(7) is Access.WRITE

    def test_records_may_span_lines(self) -> None:
        """Tokens are read as a flat stream; a trailing partial record is dropped."""
        stream = io.StringIO("0 1 2 0\n3\n4 5 1\n7 8\n")
        assert list(read_requests(stream)) == [
            Request(0, 1, 2, Access.READ),
            Request(3, 4, 5, Access.WRITE),
        ]

    def test_bad_token_stops_reading(self) -> None:
        """The first non-integer token ends the input."""
        stream = io.StringIO("0 0 0 0\n1 x 0 0\n2 0 0 0\n")
        assert list(read_requests(stream)) == [Request(0, 0, 0, Access.READ)]

    def test_empty_input(self) -> None:
        """No tokens, no requests."""
        assert list(read_requests(io.StringIO(""))) == []


class TestBatch:
    """Verify batch replay output."""

    def test_reports_each_outcome(self) -> None:
        """Successes show the address; failures echo the request."""
        out = io.StringIO()
        processed = run_batch(_engine(), io.StringIO("0 0 5 0\n3 0 0 1\n"), out)
        expected_processed = 2
        assert processed == expected_processed
        lines = out.getvalue().splitlines()
        assert lines[0].startswith("OK  -> Phys=1005  Lat=")
        assert lines[1] == "FAIL (3,0,0,W)"


class TestStress:
    """Verify synthetic request generation."""

    def test_all_valid(self) -> None:
        """A ratio of 1 keeps every page and offset in range."""
        segments = [Segment(base=BASE, limit_pages=LIMIT), Segment(base=6000, limit_pages=3)]
        requests = list(
            generate_stress(
                STRESS_COUNT, segments=segments, page_size=PAGE_SIZE, valid_ratio=1.0, seed=SEED
            )
        )
        assert len(requests) == STRESS_COUNT
        for request in requests:
            assert 0 <= request.segment < len(segments)
            assert 0 <= request.page < segments[request.segment].limit_pages
            assert 0 <= request.offset < PAGE_SIZE

    def test_all_invalid(self) -> None:
        """A ratio of 0 pushes page and offset out of range."""
        segments = [Segment(base=BASE, limit_pages=LIMIT)]
        for request in generate_stress(
            STRESS_COUNT, segments=segments, page_size=PAGE_SIZE, valid_ratio=0.0, seed=SEED
        ):
            assert INVALID_PAGE_MIN <= request.page < INVALID_PAGE_MAX
            assert PAGE_SIZE <= request.offset < PAGE_SIZE + 500

    def test_seeded_generation_repeats(self) -> None:
        """Equal seeds give equal request streams."""
        segments = [Segment(base=BASE, limit_pages=LIMIT)]

        def make() -> list[Request]:
            return list(
                generate_stress(
                    STRESS_COUNT, segments=segments, page_size=PAGE_SIZE, valid_ratio=0.5, seed=SEED
                )
            )

        assert make() == make()

    def test_every_request_is_accounted_for(self) -> None:
        """Each request is either a translation or a logged failure."""
        engine = _engine()
        requests = generate_stress(
            STRESS_COUNT,
            segments=engine.segments,
            page_size=PAGE_SIZE,
            valid_ratio=0.5,
            seed=SEED,
        )
        issued = run_stress(engine, requests)
        metrics = engine.metrics
        assert issued == STRESS_COUNT
        assert metrics.translations + metrics.logs == STRESS_COUNT


class TestInteractive:
    """Verify the interactive session protocol."""

    def test_translates_until_sentinel(self) -> None:
        """-1 ends the session without reading the rest of the line."""
        out = io.StringIO()
        handled = run_interactive(_engine(), io.StringIO("0 0 0 0\n-1\n0 1 0 0\n"), out)
        assert handled == 1
        text = out.getvalue()
        assert "Physical: 1000 | Latency: " in text
        expected_prompts = 2
        assert text.count("> ") == expected_prompts

    def test_failure_shows_reason(self) -> None:
        """Failed translations print the fault reason."""
        out = io.StringIO()
        run_interactive(_engine(), io.StringIO("9 0 0 0\n"), out)
        assert "Error: Segmentation fault: bad segment" in out.getvalue()

    def test_end_of_input_ends_session(self) -> None:
        """Running out of input behaves like -1."""
        out = io.StringIO()
        assert run_interactive(_engine(), io.StringIO("0 0"), out) == 0
