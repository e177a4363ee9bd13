"""Tests for grid spacing."""
import numpy as np
import pytest

from nodegrid.core.errors import ConfigError
from nodegrid.core.grid import cell_position, grid_spacing, proportional_padding, uniform_spacing


class TestGridSpacing:
    def test_node_mode_grid(self):
        g = grid_spacing(600, 600, 5, 5, 150, gap_factor=1)
        assert g.uniform_spacing == pytest.approx(75.0)
        assert g.actual_grid_width == pytest.approx(300.0)
        assert (g.offset_x, g.offset_y) == pytest.approx((150.0, 150.0))
        assert g.circle_diameter == pytest.approx(75.0)
        assert g.position(0, 0) == pytest.approx((150.0, 150.0))
        assert g.position(4, 4) == pytest.approx((450.0, 450.0))

    def test_rectangular_canvas_uses_tighter_axis(self):
        g = grid_spacing(400, 600, 5, 10, 150)
        assert proportional_padding(400, 600, 150) == pytest.approx(100.0)
        assert g.uniform_spacing == pytest.approx(400.0 / 9.0)
        assert g.offset_x == pytest.approx((400 - 4 * 400.0 / 9.0) / 2)
        assert g.circle_diameter is None

    def test_single_cell_is_centered(self):
        g = grid_spacing(600, 600, 1, 1, 150)
        assert g.uniform_spacing == pytest.approx(300.0)
        assert g.position(0, 0) == pytest.approx((300.0, 300.0))

    def test_cell_at_inverts_position(self):
        g = grid_spacing(600, 600, 10, 10, 100)
        x, y = g.position(2, 7)
        assert g.cell_at(x + 3, y - 3) == (2, 7)

    def test_positions_array(self):
        g = grid_spacing(600, 600, 5, 4, 150)
        pos = g.positions(5, 4)
        assert pos.shape == (4, 5, 2)
        assert tuple(pos[3, 2]) == pytest.approx(g.position(3, 2))

    def test_cell_position(self):
        x, y, row, col = cell_position(7, 5, 5, 600, 600, 150)
        assert (row, col) == (1, 2)
        assert (x, y) == pytest.approx((300.0, 225.0))

    def test_padding_larger_than_canvas_clamps_to_zero(self):
        assert uniform_spacing(600, 600, 5, 5, 400) == 0.0

    @pytest.mark.parametrize("args", [(600, 600, 0, 5, 10), (600, 600, 5, -1, 10), (0, 600, 5, 5, 10)])
    def test_rejects_bad_dimensions(self, args):
        with pytest.raises(ConfigError):
            grid_spacing(*args)
