from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..utils.colors import ColorLike, Theme, resolve_palette
from .entity import DEFAULT_GLYPHS, RenderStyle
from .errors import ConfigError

logger = logging.getLogger(__name__)

Palette = Union[str, Tuple[ColorLike, ...]]


@dataclass(frozen=True)
class FieldSettings:
    grid_width: int = 5
    grid_height: int = 5
    canvas_width: float = 600.0
    canvas_height: float = 600.0
    padding: float = 150.0
    gap_factor: float = 1.0
    palette: Palette = "chromatic"
    render_style: RenderStyle = RenderStyle.DISC
    hover_scale: float = 1.8
    magnetic_effect: bool = False
    stroke_width: float = 0.0
    light_glow: float = 1.1
    dark_glow: float = 1.2
    fill_percentage: float = 100.0
    theme: Theme = Theme.DARK
    recolor_on_click: bool = False
    animations_enabled: bool = False
    glyphs: Tuple[str, ...] = field(default=DEFAULT_GLYPHS)

    def __post_init__(self):
        # normalize loose inputs so equal settings compare equal
        object.__setattr__(self, "render_style", RenderStyle.coerce(self.render_style))
        object.__setattr__(self, "theme", Theme.coerce(self.theme))
        if not isinstance(self.palette, str):
            object.__setattr__(self, "palette", tuple(self.palette))
        object.__setattr__(self, "glyphs", tuple(self.glyphs))

    @property
    def cells(self) -> int:
        return self.grid_width * self.grid_height

    @property
    def glow(self) -> float:
        """Peak glow factor for the current theme."""
        return self.light_glow if self.theme is Theme.LIGHT else self.dark_glow

    def validate(self) -> "FieldSettings":
        if self.grid_width < 1 or self.grid_height < 1:
            raise ConfigError(f"grid dimensions must be positive, got {self.grid_width}x{self.grid_height}")
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ConfigError(f"canvas size must be positive, got {self.canvas_width}x{self.canvas_height}")
        if self.padding < 0:
            raise ConfigError(f"padding must not be negative, got {self.padding!r}")
        if self.gap_factor <= 0:
            raise ConfigError(f"gap_factor must be positive, got {self.gap_factor!r}")
        if self.hover_scale <= 0:
            raise ConfigError(f"hover_scale must be positive, got {self.hover_scale!r}")
        if self.stroke_width < 0:
            raise ConfigError(f"stroke_width must not be negative, got {self.stroke_width!r}")
        if not 0.0 <= self.fill_percentage <= 100.0:
            raise ConfigError(f"fill percentage must lie in [0, 100], got {self.fill_percentage!r}")
        if self.light_glow <= 0 or self.dark_glow <= 0:
            raise ConfigError("glow factors must be positive")
        resolve_palette(self.palette)
        if self.render_style is RenderStyle.GLYPH and not self.glyphs:
            raise ConfigError("glyph rendering needs at least one glyph")
        return self

    def replace(self, **changes: Any) -> "FieldSettings":
        return dataclasses.replace(self, **changes).validate()


NODE_MODE = FieldSettings(
    grid_width=5,
    grid_height=5,
    padding=150.0,
    gap_factor=1.0,
    palette="chromatic",
    stroke_width=0.0,
    hover_scale=1.8,
    magnetic_effect=False,
    animations_enabled=False,
    light_glow=1.1,
    dark_glow=1.2,
)

BLOCK_MODE = FieldSettings(
    grid_width=25,
    grid_height=25,
    padding=50.0,
    gap_factor=1.0,
    palette="chromatic",
    stroke_width=0.5,
    hover_scale=1.5,
    magnetic_effect=False,
    animations_enabled=True,
    light_glow=1.0,
    dark_glow=1.1,
)

# grid_width, grid_height, canvas_width, canvas_height, padding
NODE_DIMENSIONS: Dict[str, Dict[str, float]] = {
    "5x5": dict(grid_width=5, grid_height=5, canvas_width=600, canvas_height=600, padding=150),
    "5x10": dict(grid_width=5, grid_height=10, canvas_width=400, canvas_height=600, padding=150),
    "10x5": dict(grid_width=10, grid_height=5, canvas_width=600, canvas_height=400, padding=150),
    "10x10": dict(grid_width=10, grid_height=10, canvas_width=600, canvas_height=600, padding=100),
    "15x15": dict(grid_width=15, grid_height=15, canvas_width=600, canvas_height=600, padding=75),
    "20x20": dict(grid_width=20, grid_height=20, canvas_width=600, canvas_height=600, padding=60),
    "25x25": dict(grid_width=25, grid_height=25, canvas_width=600, canvas_height=600, padding=50),
}


def preset(dimensions: str, base: FieldSettings = NODE_MODE) -> FieldSettings:
    try:
        changes = NODE_DIMENSIONS[dimensions]
    except KeyError:
        raise ConfigError(f"unknown grid preset {dimensions!r}; expected one of {sorted(NODE_DIMENSIONS)}") from None
    return base.replace(**changes)


# Keys used by exported settings that do not map one-to-one after snake_casing.
_ALIASES = {
    "color_palette": "palette",
    "render_mode": "render_style",
    "magnetic": "magnetic_effect",
    "light_mode_glow_factor": "light_glow",
    "dark_mode_glow_factor": "dark_glow",
    "emojis": "glyphs",
}

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _config_to_dict(cfg: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(cfg) and not isinstance(cfg, type):
        return dataclasses.asdict(cfg)
    if isinstance(cfg, Mapping):
        return dict(cfg)
    raise ConfigError(f"cannot read settings from {type(cfg).__name__}")


def settings_from_dict(
    data: Union[Mapping[str, Any], Any],
    base: Optional[FieldSettings] = None,
) -> FieldSettings:
    """Build validated :class:`FieldSettings` from a plain dict.

    Keys may be snake_case or camelCase; unknown keys are logged and dropped.
    Missing keys fall back to ``base`` (``NODE_MODE`` by default).
    """
    raw = _config_to_dict(data)
    known = {f.name for f in dataclasses.fields(FieldSettings)}
    changes: Dict[str, Any] = {}
    unknown = []
    for key, value in raw.items():
        name = _snake(str(key))
        name = _ALIASES.get(name, name)
        if name == "grid_size":
            continue
        if name in known:
            changes[name] = value
        else:
            unknown.append(key)
    if unknown:
        logger.warning("ignoring unknown settings keys: %s", ", ".join(sorted(map(str, unknown))))
    # single-dimension shorthand
    size = raw.get("gridSize", raw.get("grid_size"))
    if size is not None:
        changes.setdefault("grid_width", size)
        changes.setdefault("grid_height", size)
    base = base if base is not None else NODE_MODE
    try:
        return base.replace(**changes)
    except ConfigError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc

