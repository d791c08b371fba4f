"""Tests for simulator configuration."""

import pytest

from segpage.config import SimulatorConfig, build_engine
from segpage.logging import Logger
from segpage.memory.engine import Access
from segpage.memory.frames import ReplacementPolicy

SEED = 11


class TestDefaults:
    """Verify the default settings."""

    def test_defaults(self) -> None:
        """Defaults describe a small FIFO machine."""
        config = SimulatorConfig()
        expected_frames = 16
        expected_page_size = 1000
        assert config.frames == expected_frames
        assert config.page_size == expected_page_size
        assert config.policy is ReplacementPolicy.FIFO
        assert config.log_path == "results.txt"

    def test_explicit_seed_is_kept(self) -> None:
        """resolved_seed returns an explicit seed unchanged."""
        assert SimulatorConfig(seed=SEED).resolved_seed() == SEED

    def test_missing_seed_uses_clock(self) -> None:
        """Without a seed, a time-based integer is used."""
        assert isinstance(SimulatorConfig().resolved_seed(), int)


class TestValidation:
    """Verify invalid settings are rejected."""

    @pytest.mark.parametrize("field", ["frames", "page_size", "segments", "dir_size"])
    def test_non_positive_sizes(self, field: str) -> None:
        """Sizes must be positive."""
        with pytest.raises(ValueError, match=field):
            SimulatorConfig(**{field: 0})

    @pytest.mark.parametrize("ratio", [-0.1, 1.5])
    def test_valid_ratio_range(self, ratio: float) -> None:
        """The stress valid ratio is a probability."""
        with pytest.raises(ValueError, match="valid_ratio"):
            SimulatorConfig(valid_ratio=ratio)

    def test_negative_stress_count(self) -> None:
        """A negative request count is rejected."""
        with pytest.raises(ValueError, match="stress"):
            SimulatorConfig(stress=-5)

    def test_modes_are_exclusive(self) -> None:
        """Batch and stress cannot both be selected."""
        with pytest.raises(ValueError, match="mutually exclusive"):
            SimulatorConfig(stress=10, batch_file="addrs.txt")


class TestBuildEngine:
    """Verify engine construction from a configuration."""

    def test_engine_matches_config(self) -> None:
        """The engine reflects the configured layout and policy."""
        config = SimulatorConfig(
            frames=5,
            page_size=512,
            segments=2,
            dir_size=3,
            seed=SEED,
            policy=ReplacementPolicy.LRU,
        )
        engine = build_engine(config)
        expected_frames = 5
        expected_segments = 2
        assert engine.pool.total_frames == expected_frames
        assert engine.pool.policy is ReplacementPolicy.LRU
        assert len(engine.segments) == expected_segments
        assert engine.page_size == config.page_size
        assert engine.dir_size == config.dir_size

    def test_same_seed_same_layout(self) -> None:
        """Two engines from one seeded config have the same segments."""
        config = SimulatorConfig(seed=SEED)
        assert build_engine(config).segments == build_engine(config).segments

    def test_seed_override_and_logger(self) -> None:
        """An explicit seed and logger are passed through."""
        logger = Logger()
        engine = build_engine(SimulatorConfig(seed=1), seed=SEED, logger=logger)
        reference = build_engine(SimulatorConfig(seed=SEED))
        assert engine.segments == reference.segments
        engine.translate(99, 0, 0, Access.READ)
        assert len(logger.entries) == 1
