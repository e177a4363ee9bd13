from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import ImageColor

from ..core.errors import ConfigError

Color = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int]]

RANDOM_GENERATOR = "RANDOM_GENERATOR"

PALETTES: Dict[str, List[str]] = {
    "rainbow": [
        "#FF0000", "#FF4500", "#FFA500", "#FFD700", "#FFFF00", "#ADFF2F",
        "#00FF00", "#00FA9A", "#00CED1", "#00BFFF", "#0000FF", "#4169E1",
        "#8A2BE2", "#9400D3", "#FF00FF", "#FF1493", "#FF69B4",
    ],
    "chromatic": ["#90EE90", "#32CD32", "#228B22", "#006400", "#8FBC8F", "#9ACD32", "#ADFF2F"],
    "pastel": ["#FFB3BA", "#FFDFBA", "#FFFFBA", "#BAFFC9", "#BAE1FF", "#E0BBE4", "#FFDFD3"],
    "monochrome": ["#000000", "#2B2B2B", "#555555", "#808080", "#AAAAAA", "#D5D5D5", "#FFFFFF"],
    "ocean": ["#001F3F", "#0074D9", "#7FDBFF", "#39CCCC", "#3D9970", "#2ECC40", "#01FF70"],
    "sunset": ["#FF006E", "#FB5607", "#FFBE0B", "#8338EC", "#3A86FF", "#FF4365", "#FFA07A"],
    "neon": ["#FF073A", "#FF0099", "#F0E68C", "#39FF14", "#00FFFF", "#FF1493", "#FFFF33", "#FF69B4"],
}


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def coerce(cls, value: Union["Theme", str]) -> "Theme":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigError(f"unknown theme {value!r}; expected 'dark' or 'light'") from None


# Placeholder colors for disabled / not yet entered nodes.
_PLANAR_NEUTRAL = {Theme.DARK: (42, 42, 42, 100), Theme.LIGHT: (208, 208, 208, 100)}
_PLANAR_NEUTRAL_GLOW = {Theme.DARK: (42, 42, 42, 30), Theme.LIGHT: (208, 208, 208, 20)}
_SURFACE_NEUTRAL = {Theme.DARK: (42, 42, 42, 255), Theme.LIGHT: (208, 208, 208, 255)}


def neutral_color(theme: Union[Theme, str], surface: bool = False) -> Color:
    theme = Theme.coerce(theme)
    return (_SURFACE_NEUTRAL if surface else _PLANAR_NEUTRAL)[theme]


def neutral_glow(theme: Union[Theme, str]) -> Color:
    return _PLANAR_NEUTRAL_GLOW[Theme.coerce(theme)]


def parse_color(value: ColorLike, alpha: Optional[int] = None) -> Color:
    """Return an RGBA tuple for a CSS-style string (hex, ``rgb()``, ``hsl()``, name)
    or an RGB/RGBA sequence. ``alpha`` overrides whatever alpha the input carried."""
    if isinstance(value, str):
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError as exc:
            raise ConfigError(f"cannot parse color {value!r}") from exc
    else:
        rgb = tuple(int(c) for c in value)
        if len(rgb) not in (3, 4):
            raise ConfigError(f"color must have 3 or 4 channels, got {value!r}")
    r, g, b = (int(np.clip(c, 0, 255)) for c in rgb[:3])
    a = rgb[3] if len(rgb) == 4 else 255
    if alpha is not None:
        a = alpha
    return (r, g, b, int(np.clip(a, 0, 255)))


def with_alpha(color: Color, alpha: int) -> Color:
    return (color[0], color[1], color[2], int(np.clip(alpha, 0, 255)))


def lerp_color(a: Color, b: Color, t: float) -> Color:
    t = float(np.clip(t, 0.0, 1.0))
    return tuple(int(round(ca + (cb - ca) * t)) for ca, cb in zip(a, b))  # type: ignore[return-value]


def scale_color(color: Color, factor: float) -> Color:
    """Multiply the RGB channels (alpha untouched), saturating at 255."""
    r, g, b = (int(np.clip(round(c * factor), 0, 255)) for c in color[:3])
    return (r, g, b, color[3])


def random_hex_color(rng: np.random.Generator) -> str:
    return "#" + format(int(rng.integers(0, 0xFFFFFF)), "06x")


def generate_random_palette(size: int = 20, rng: Optional[np.random.Generator] = None) -> List[str]:
    """Vibrant HSL colors: saturation 50-100%, lightness 40-70%."""
    rng = rng or np.random.default_rng()
    out: List[str] = []
    for _ in range(max(0, int(size))):
        hue = rng.random() * 360.0
        sat = 50.0 + rng.random() * 50.0
        light = 40.0 + rng.random() * 30.0
        out.append(f"hsl({hue:.1f}, {sat:.1f}%, {light:.1f}%)")
    return out


def resolve_palette(palette: Union[str, Sequence[ColorLike]]) -> Union[str, List[ColorLike]]:
    """Turn a palette name, the random directive or an explicit list into something
    :func:`pick_color` accepts. Empty palettes are rejected."""
    if isinstance(palette, str):
        if palette == RANDOM_GENERATOR:
            return RANDOM_GENERATOR
        try:
            return list(PALETTES[palette])
        except KeyError:
            raise ConfigError(f"unknown palette {palette!r}") from None
    colors = list(palette)
    if not colors:
        raise ConfigError("palette must contain at least one color")
    return colors


def pick_color(palette: Union[str, Sequence[ColorLike]], rng: np.random.Generator) -> ColorLike:
    if palette == RANDOM_GENERATOR:
        return random_hex_color(rng)
    return palette[int(rng.integers(len(palette)))]


def generate_color_grid(
    palette: Union[str, Sequence[ColorLike]],
    width: int,
    height: int,
    rng: Optional[np.random.Generator] = None,
) -> List[List[ColorLike]]:
    rng = rng or np.random.default_rng()
    resolved = resolve_palette(palette)
    return [[pick_color(resolved, rng) for _ in range(width)] for _ in range(height)]
