"""Tests for color helpers."""
import numpy as np
import pytest

from nodegrid.core.errors import ConfigError
from nodegrid.utils.colors import (
    PALETTES,
    RANDOM_GENERATOR,
    Theme,
    generate_color_grid,
    generate_random_palette,
    lerp_color,
    neutral_color,
    parse_color,
    resolve_palette,
    scale_color,
)


class TestParseColor:
    def test_formats(self):
        assert parse_color("#ff0000") == (255, 0, 0, 255)
        assert parse_color("#00ff00", alpha=230) == (0, 255, 0, 230)
        assert parse_color("hsl(240, 100%, 50%)") == (0, 0, 255, 255)
        assert parse_color("white") == (255, 255, 255, 255)
        assert parse_color((1, 2, 3)) == (1, 2, 3, 255)
        assert parse_color((1, 2, 3, 4)) == (1, 2, 3, 4)

    def test_rejects_garbage(self):
        with pytest.raises(ConfigError):
            parse_color("not-a-color")
        with pytest.raises(ConfigError):
            parse_color((1, 2))


class TestHelpers:
    def test_lerp_and_scale(self):
        assert lerp_color((0, 0, 0, 0), (100, 200, 50, 255), 0.5) == (50, 100, 25, 128)
        assert scale_color((200, 100, 10, 7), 1.5) == (255, 150, 15, 7)

    def test_neutral(self):
        assert neutral_color("dark") == (42, 42, 42, 100)
        assert neutral_color(Theme.LIGHT, surface=True) == (208, 208, 208, 255)
        with pytest.raises(ConfigError):
            Theme.coerce("sepia")


class TestPalettes:
    def test_resolve(self):
        assert resolve_palette("ocean") == PALETTES["ocean"]
        assert resolve_palette(RANDOM_GENERATOR) == RANDOM_GENERATOR
        with pytest.raises(ConfigError):
            resolve_palette([])

    def test_random_palette_parses(self):
        colors = generate_random_palette(10, np.random.default_rng(2))
        assert len(colors) == 10
        for c in colors:
            r, g, b, a = parse_color(c)
            assert a == 255

    def test_color_grid(self):
        grid = generate_color_grid("pastel", 4, 3, np.random.default_rng(0))
        assert len(grid) == 3 and all(len(row) == 4 for row in grid)
        assert all(c in PALETTES["pastel"] for row in grid for c in row)
        rgrid = generate_color_grid(RANDOM_GENERATOR, 2, 2, np.random.default_rng(0))
        assert all(c.startswith("#") and len(c) == 7 for row in rgrid for c in row)
