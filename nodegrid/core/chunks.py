"""Chunked enable/disable patterns.

The grid is cut into ``CHUNK_SIZE`` x ``CHUNK_SIZE`` blocks (edge blocks are
truncated) and a shuffled subset of blocks is switched on, so ``fill_percentage``
controls how much of the grid shows color while keeping the disabled regions
blocky. Patterns are regenerated on every fill change; nothing is cached.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .errors import ConfigError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 5
CUBE_FACES = 6


def enabled_chunk_count(fill_percentage: float, total_chunks: int) -> int:
    # half-up rounding, 2.5 chunks -> 3
    return int(math.floor(fill_percentage / 100.0 * total_chunks + 0.5))


def _check(width: int, height: int, fill_percentage: float) -> None:
    if width < 1 or height < 1:
        raise ConfigError(f"grid dimensions must be positive, got {width}x{height}")
    if not 0.0 <= fill_percentage <= 100.0:
        raise ConfigError(f"fill percentage must lie in [0, 100], got {fill_percentage!r}")


def _chunk_grid(width: int, height: int) -> tuple:
    return (math.ceil(height / CHUNK_SIZE), math.ceil(width / CHUNK_SIZE))


def _stamp(flags: np.ndarray, width: int, height: int) -> np.ndarray:
    """Expand per-chunk flags (``[..., chunks_y, chunks_x]``) onto cells and crop."""
    cells = np.repeat(np.repeat(flags, CHUNK_SIZE, axis=-2), CHUNK_SIZE, axis=-1)
    return cells[..., :height, :width].copy()


def _shuffled_flags(total: int, fill_percentage: float, rng: Optional[np.random.Generator]) -> np.ndarray:
    rng = rng if rng is not None else np.random.default_rng()
    count = enabled_chunk_count(fill_percentage, total)
    flags = np.zeros(total, dtype=bool)
    # permutation is a Fisher-Yates shuffle of the chunk indices
    flags[rng.permutation(total)[:count]] = True
    logger.debug("chunk pattern: %d/%d chunks enabled (%.1f%%)", count, total, fill_percentage)
    return flags


def generate_chunk_pattern(
    width: int,
    height: int,
    fill_percentage: float,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Boolean matrix of shape ``(height, width)``; True marks an enabled cell."""
    _check(width, height, fill_percentage)
    if fill_percentage >= 100:
        return np.ones((height, width), dtype=bool)
    if fill_percentage <= 0:
        return np.zeros((height, width), dtype=bool)
    chunks_y, chunks_x = _chunk_grid(width, height)
    flags = _shuffled_flags(chunks_y * chunks_x, fill_percentage, rng)
    return _stamp(flags.reshape(chunks_y, chunks_x), width, height)


def generate_cube_chunk_pattern(
    width: int,
    height: int,
    fill_percentage: float,
    rng: Optional[np.random.Generator] = None,
    faces: int = CUBE_FACES,
) -> np.ndarray:
    """Patterns for every cube face, shape ``(faces, height, width)``.

    Chunks of all faces go through a single shuffle, so the fill applies to the
    cube as a whole: one face may end up fully lit while another stays dark.
    """
    _check(width, height, fill_percentage)
    if fill_percentage >= 100:
        return np.ones((faces, height, width), dtype=bool)
    if fill_percentage <= 0:
        return np.zeros((faces, height, width), dtype=bool)
    chunks_y, chunks_x = _chunk_grid(width, height)
    flags = _shuffled_flags(faces * chunks_y * chunks_x, fill_percentage, rng)
    return _stamp(flags.reshape(faces, chunks_y, chunks_x), width, height)


def chunk_pattern_value(patterns: Optional[Sequence], face: int, row: int, col: int) -> bool:
    """Look up one cell of a per-face pattern stack.

    A missing stack, a missing face or an out-of-range cell counts as enabled so
    an absent pattern never blanks a face.
    """
    if patterns is None or face < 0 or face >= len(patterns):
        return True
    pattern = patterns[face]
    if pattern is None or row < 0 or row >= len(pattern):
        return True
    line = pattern[row]
    if col < 0 or col >= len(line):
        return True
    return bool(line[col])
