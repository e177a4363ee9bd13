from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import ConfigError

# Padding values are authored against a 600 px canvas and scale with the
# smaller canvas side.
REFERENCE_CANVAS = 600.0


@dataclass(frozen=True)
class GridSpacing:
    uniform_spacing: float
    actual_grid_width: float
    actual_grid_height: float
    offset_x: float
    offset_y: float
    circle_diameter: Optional[float] = None

    def position(self, row: int, col: int) -> Tuple[float, float]:
        return (self.offset_x + col * self.uniform_spacing, self.offset_y + row * self.uniform_spacing)

    def cell_at(self, x: float, y: float) -> Tuple[int, int]:
        """Nearest ``(row, col)`` for a canvas point; may fall outside the grid."""
        if self.uniform_spacing <= 0:
            return (0, 0)
        col = int(np.floor((x - self.offset_x) / self.uniform_spacing + 0.5))
        row = int(np.floor((y - self.offset_y) / self.uniform_spacing + 0.5))
        return (row, col)

    def positions(self, grid_width: int, grid_height: int) -> np.ndarray:
        """Array of shape ``(grid_height, grid_width, 2)`` holding every cell's x, y."""
        rows, cols = np.mgrid[0:grid_height, 0:grid_width].astype(np.float64)
        return np.stack(
            (self.offset_x + cols * self.uniform_spacing, self.offset_y + rows * self.uniform_spacing),
            axis=-1,
        )


def _check(canvas_width: float, canvas_height: float, grid_width: int, grid_height: int) -> None:
    if grid_width < 1 or grid_height < 1:
        raise ConfigError(f"grid dimensions must be positive, got {grid_width}x{grid_height}")
    if canvas_width <= 0 or canvas_height <= 0:
        raise ConfigError(f"canvas size must be positive, got {canvas_width}x{canvas_height}")


def proportional_padding(canvas_width: float, canvas_height: float, padding: float) -> float:
    return (padding / REFERENCE_CANVAS) * min(canvas_width, canvas_height)


def available_dimensions(canvas_width: float, canvas_height: float, padding: float) -> Tuple[float, float]:
    pad = proportional_padding(canvas_width, canvas_height, padding)
    return (canvas_width - 2 * pad, canvas_height - 2 * pad)


def uniform_spacing(
    canvas_width: float,
    canvas_height: float,
    grid_width: int,
    grid_height: int,
    padding: float,
) -> float:
    _check(canvas_width, canvas_height, grid_width, grid_height)
    avail_w, avail_h = available_dimensions(canvas_width, canvas_height, padding)
    max_x = avail_w / (grid_width - 1) if grid_width > 1 else avail_w
    max_y = avail_h / (grid_height - 1) if grid_height > 1 else avail_h
    return max(0.0, min(max_x, max_y))


def grid_spacing(
    canvas_width: float,
    canvas_height: float,
    grid_width: int,
    grid_height: int,
    padding: float,
    gap_factor: Optional[float] = None,
) -> GridSpacing:
    """Pitch and centering offsets for a ``grid_width`` x ``grid_height`` lattice.

    The lattice is centered on the canvas; with ``gap_factor`` the node diameter
    is ``spacing * gap_factor`` (1.0 makes neighbours touch).
    """
    spacing = uniform_spacing(canvas_width, canvas_height, grid_width, grid_height, padding)
    actual_w = spacing * (grid_width - 1) if grid_width > 1 else 0.0
    actual_h = spacing * (grid_height - 1) if grid_height > 1 else 0.0
    return GridSpacing(
        uniform_spacing=spacing,
        actual_grid_width=actual_w,
        actual_grid_height=actual_h,
        offset_x=(canvas_width - actual_w) / 2.0,
        offset_y=(canvas_height - actual_h) / 2.0,
        circle_diameter=None if gap_factor is None else spacing * gap_factor,
    )


def cell_position(
    index: int,
    grid_width: int,
    grid_height: int,
    canvas_width: float,
    canvas_height: float,
    padding: float,
) -> Tuple[float, float, int, int]:
    """``(x, y, row, col)`` of the ``index``-th cell in row-major order."""
    row, col = divmod(int(index), grid_width)
    spacing = grid_spacing(canvas_width, canvas_height, grid_width, grid_height, padding)
    x, y = spacing.position(row, col)
    return (x, y, row, col)
