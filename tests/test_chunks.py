"""Tests for chunk patterns."""
import numpy as np
import pytest

from nodegrid.core.chunks import (
    CHUNK_SIZE,
    chunk_pattern_value,
    enabled_chunk_count,
    generate_chunk_pattern,
    generate_cube_chunk_pattern,
)
from nodegrid.core.errors import ConfigError


def _chunks_uniform(pattern):
    h, w = pattern.shape[-2:]
    for r in range(0, h, CHUNK_SIZE):
        for c in range(0, w, CHUNK_SIZE):
            block = pattern[..., r:r + CHUNK_SIZE, c:c + CHUNK_SIZE]
            flat = block.reshape(block.shape[:-2] + (-1,))
            if not ((flat == flat[..., :1]).all()):
                return False
    return True


class TestChunkPattern:
    def test_full_fill_small_grid(self):
        pattern = generate_chunk_pattern(5, 5, 100)
        assert pattern.shape == (5, 5)
        assert pattern.all()

    def test_zero_fill(self):
        assert not generate_chunk_pattern(12, 7, 0).any()

    def test_half_fill_counts_chunks(self):
        rng = np.random.default_rng(7)
        pattern = generate_chunk_pattern(25, 25, 50, rng)
        # 25 chunks, round(12.5) == 13
        assert pattern.sum() == 13 * CHUNK_SIZE * CHUNK_SIZE
        assert _chunks_uniform(pattern)

    def test_truncated_edge_chunks(self):
        rng = np.random.default_rng(3)
        pattern = generate_chunk_pattern(7, 7, 50, rng)
        assert pattern.shape == (7, 7)
        assert _chunks_uniform(pattern)
        flags = {bool(pattern[r, c]) for r in (0, 5) for c in (0, 5)}
        assert flags == {True, False}

    def test_seeded_is_reproducible(self):
        a = generate_chunk_pattern(20, 20, 40, np.random.default_rng(11))
        b = generate_chunk_pattern(20, 20, 40, np.random.default_rng(11))
        assert np.array_equal(a, b)

    def test_enabled_chunk_count_rounds_half_up(self):
        assert enabled_chunk_count(50, 5) == 3
        assert enabled_chunk_count(10, 4) == 0
        assert enabled_chunk_count(100, 9) == 9

    @pytest.mark.parametrize("args", [(0, 5, 50), (5, 5, -1), (5, 5, 101)])
    def test_rejects_bad_input(self, args):
        with pytest.raises(ConfigError):
            generate_chunk_pattern(*args)


class TestCubeChunkPattern:
    def test_pooled_across_faces(self):
        rng = np.random.default_rng(5)
        patterns = generate_cube_chunk_pattern(10, 10, 50, rng)
        assert patterns.shape == (6, 10, 10)
        # 6 faces * 4 chunks, half of them
        assert patterns.sum() == 12 * CHUNK_SIZE * CHUNK_SIZE
        assert _chunks_uniform(patterns)

    def test_extremes(self):
        assert generate_cube_chunk_pattern(5, 5, 100).all()
        assert not generate_cube_chunk_pattern(5, 5, 0).any()


class TestChunkPatternValue:
    def test_missing_pattern_defaults_to_enabled(self):
        assert chunk_pattern_value(None, 0, 0, 0) is True
        assert chunk_pattern_value([], 3, 1, 1) is True
        assert chunk_pattern_value([[[False]]], 0, 4, 4) is True

    def test_reads_value(self):
        patterns = generate_cube_chunk_pattern(5, 5, 0)
        assert chunk_pattern_value(patterns, 2, 1, 1) is False
