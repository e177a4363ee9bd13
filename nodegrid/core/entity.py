"""One animated grid node.

A node owns its position, size and color and runs two small state machines:

* the one-shot entry reveal (neutral placeholder until ``trigger + delay``);
* the click cycle ``IDLE -> SHRINKING -> PAUSED -> BOUNCING -> IDLE``.

The flat field and the cube share this class; the difference between them is
the projection (where the pointer distance comes from) and the tuning blocks
passed in. Every update takes ``now`` in milliseconds, so the node is a pure
function of its state, the clock and the pointer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.colors import Color, ColorLike, Theme, neutral_color, neutral_glow, parse_color, scale_color, with_alpha
from .easing import ease_in_quad, elastic_out
from .errors import ConfigError
from .proximity import PLANAR_RESPONSE, PlanarProjection, ProximityResponse, SurfaceProjection
from .springs import PLANAR_SPRING, SpringConfig, apply_spring

Vec3 = Tuple[float, float, float]
Projection = Union[PlanarProjection, SurfaceProjection]

DEFAULT_GLYPHS: Tuple[str, ...] = (
    "\U0001F31F", "\U0001F525", "✨", "\U0001F48E", "\U0001F388", "\U0001F340",
    "\U0001F308", "⚡", "\U0001F3AF", "\U0001F338", "\U0001F355", "\U0001F680",
)
CHARACTER_GLYPH = "$"


class ClickPhase(Enum):
    IDLE = "idle"
    SHRINKING = "shrinking"
    PAUSED = "paused"
    BOUNCING = "bouncing"


class EntryPhase(Enum):
    NOT_ENTERED = "not_entered"
    ENTERING = "entering"
    ENTERED = "entered"


class RenderStyle(str, Enum):
    DISC = "disc"
    GLYPH = "glyph"
    CHARACTER = "character"

    @classmethod
    def coerce(cls, value: Union["RenderStyle", str]) -> "RenderStyle":
        if isinstance(value, cls):
            return value
        aliases = {"circle": cls.DISC, "emoji": cls.GLYPH, "dollar": cls.CHARACTER}
        key = str(value).lower()
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ConfigError(f"unknown render style {value!r}") from None


@dataclass(frozen=True)
class AnimationTiming:
    shrink: float = 100.0
    pause: float = 300.0
    bounce: float = 800.0
    kick_window: float = 60.0

    @property
    def total(self) -> float:
        return self.shrink + self.pause + self.bounce


@dataclass(frozen=True)
class EntityStyle:
    color_alpha: int = 230
    glow_alpha: int = 70
    highlight_color: Color = (255, 255, 255, 255)
    highlight_size: float = 0.0
    stroke_width: float = 1.0
    # fraction of the remaining color distance covered per tick, 1.0 snaps
    color_ease: float = 1.0
    surface: bool = False


PLANAR_STYLE = EntityStyle()
SURFACE_STYLE = EntityStyle(color_alpha=255, glow_alpha=255, color_ease=0.05, surface=True)


class EntitySnapshot(NamedTuple):
    x: float
    y: float
    z: float
    size: float
    color: Color
    glow_color: Color
    glow_factor: float
    highlight: Optional[Tuple[float, float]]
    enabled: bool
    entered: bool
    click_phase: ClickPhase
    glyph: Optional[str]
    face: Optional[int]
    row: int
    col: int


def _mix(a: Sequence[float], b: Sequence[float], t: float) -> Tuple[float, ...]:
    return tuple(ca + (cb - ca) * t for ca, cb in zip(a, b))


def _to_color(c: Sequence[float]) -> Color:
    return tuple(int(min(255, max(0, round(v)))) for v in c)  # type: ignore[return-value]


class Entity:
    def __init__(
        self,
        origin: Sequence[float],
        size: float,
        color: ColorLike,
        *,
        projection: Projection,
        response: ProximityResponse = PLANAR_RESPONSE,
        spring: SpringConfig = PLANAR_SPRING,
        timing: AnimationTiming = AnimationTiming(),
        style: EntityStyle = PLANAR_STYLE,
        render_style: Union[RenderStyle, str] = RenderStyle.DISC,
        glyphs: Sequence[str] = DEFAULT_GLYPHS,
        glyph: Optional[str] = None,
        max_offset: Optional[float] = None,
        enabled: bool = True,
        theme: Union[Theme, str] = Theme.DARK,
        row: int = 0,
        col: int = 0,
        face: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if size < 0:
            raise ConfigError(f"node size must not be negative, got {size!r}")
        ox, oy = float(origin[0]), float(origin[1])
        oz = float(origin[2]) if len(origin) > 2 else 0.0
        self.origin: Vec3 = (ox, oy, oz)
        self.row, self.col, self.face = int(row), int(col), face

        self.projection = projection
        self.response = response
        self.spring = spring
        self.timing = timing
        self.style = style
        self.max_offset = float(size if max_offset is None else max_offset)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.color_ease = style.color_ease

        self.x, self.y, self.z = self.origin
        self.target_x, self.target_y, self.target_z = self.origin
        self.vx = self.vy = self.vz = 0.0

        self.original_size = float(size)
        self.size = float(size)
        self.target_size = float(size)
        self.v_size = 0.0

        self.theme = Theme.coerce(theme)
        self.enabled = bool(enabled)
        self.base_color = parse_color(color, alpha=style.color_alpha)
        self.target_color: Color = self._neutral()
        self._color: Tuple[float, ...] = self.target_color
        self.glow_color: Color = self._neutral_glow()
        self.highlight_color: Color = style.highlight_color

        self.render_style = RenderStyle.coerce(render_style)
        self.glyphs = tuple(glyphs)
        if self.render_style is RenderStyle.GLYPH and not self.glyphs and glyph is None:
            raise ConfigError("glyph rendering needs at least one glyph")
        if self.render_style is RenderStyle.CHARACTER:
            self.glyph: Optional[str] = CHARACTER_GLYPH
        elif self.render_style is RenderStyle.GLYPH:
            self.glyph = glyph if glyph is not None else self.glyphs[int(self.rng.integers(len(self.glyphs)))]
        else:
            self.glyph = glyph

        self.click_phase = ClickPhase.IDLE
        self.activated_at = 0.0
        self.color_changed = False
        self.glyph_changed = False
        self._recolor_pending = False

        self.entry_phase = EntryPhase.NOT_ENTERED
        self.entry_delay = 0.0
        self.entry_triggered_at: Optional[float] = None

        self._distance: Optional[float] = None
        self._pointer = None

    # -- colors ---------------------------------------------------------

    @property
    def color(self) -> Color:
        return _to_color(self._color)

    def _neutral(self) -> Color:
        return neutral_color(self.theme, surface=self.style.surface)

    def _neutral_glow(self) -> Color:
        return self._neutral() if self.style.surface else neutral_glow(self.theme)

    def _base_glow(self) -> Color:
        return self.base_color if self.style.surface else with_alpha(self.base_color, self.style.glow_alpha)

    def _show_base(self) -> None:
        self.target_color = self.base_color
        self._color = self.base_color
        self.glow_color = self._base_glow()

    def _show_neutral(self) -> None:
        self.target_color = self._neutral()
        self._color = self.target_color
        self.glow_color = self._neutral_glow()

    @property
    def visible(self) -> bool:
        """True when the node shows its own color rather than the placeholder."""
        return self.enabled and self.entry_phase is EntryPhase.ENTERED

    def set_color(self, color: ColorLike, snap: bool = False) -> None:
        """Change the base color. Only visible nodes show it right away; with
        ``snap`` the current color jumps instead of easing."""
        self.base_color = parse_color(color, alpha=self.style.color_alpha)
        if not self.visible:
            return
        self.target_color = self.base_color
        self.glow_color = self._base_glow()
        if snap or self.color_ease >= 1.0:
            self._color = self.base_color

    def set_enabled(self, enabled: bool, theme: Union[Theme, str, None] = None) -> None:
        if theme is not None:
            self.theme = Theme.coerce(theme)
        self.enabled = bool(enabled)
        if self.visible:
            self._show_base()
        else:
            self._show_neutral()

    # -- entry ----------------------------------------------------------

    @property
    def entered(self) -> bool:
        return self.entry_phase is EntryPhase.ENTERED

    def start_entry(self, delay: float, theme: Union[Theme, str, None] = None, now: Optional[float] = None) -> bool:
        """Arm the entry reveal. Without ``now`` the node waits for :meth:`trigger_entry`.

        Ignored once the node has entered: the reveal happens at most once.
        """
        if self.entered:
            return False
        if theme is not None:
            self.theme = Theme.coerce(theme)
        self.entry_delay = max(0.0, float(delay))
        if now is None:
            self.entry_phase = EntryPhase.NOT_ENTERED
            self.entry_triggered_at = None
        else:
            self.entry_phase = EntryPhase.ENTERING
            self.entry_triggered_at = float(now)
        self._show_neutral()
        return True

    def trigger_entry(self, now: float) -> bool:
        if self.entry_phase is not EntryPhase.NOT_ENTERED:
            return False
        self.entry_phase = EntryPhase.ENTERING
        self.entry_triggered_at = float(now)
        return True

    def skip_entry(self) -> None:
        if not self.entered:
            self._enter()

    def _enter(self) -> None:
        self.entry_phase = EntryPhase.ENTERED
        if self.enabled:
            self._show_base()

    # -- click cycle ----------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.click_phase is not ClickPhase.IDLE

    def activate(self, now: float) -> bool:
        """Start a click cycle. Returns False (and changes nothing) unless the
        node is idle, entered and enabled."""
        if self.busy or not self.visible:
            return False
        self.click_phase = ClickPhase.SHRINKING
        self.activated_at = float(now)
        self.color_changed = False
        self.glyph_changed = False
        self._recolor_pending = False
        return True

    def consume_recolor(self) -> bool:
        """True once per cycle, after the node has vanished in the pause phase."""
        pending, self._recolor_pending = self._recolor_pending, False
        return pending

    def _resting_size(self, distance: Optional[float]) -> float:
        if not self.visible:
            return self.original_size * self.response.min_shrink
        return self.original_size * self.response.size_factor(distance)

    def _resample_glyph(self) -> None:
        others = [g for g in self.glyphs if g != self.glyph]
        if others:
            self.glyph = others[int(self.rng.integers(len(others)))]
        self.glyph_changed = True

    def _advance_click(self, now: float, distance: Optional[float]) -> bool:
        """Run one tick of the click cycle. Returns True when size was driven
        directly and the spring must leave it alone this tick."""
        t = self.timing
        elapsed = max(0.0, now - self.activated_at)

        # Phases are entered in order; a tick landing past the shrink always
        # stops in the pause so the recolor flag flips.
        if self.click_phase is ClickPhase.SHRINKING:
            if elapsed < t.shrink:
                self.size = self.original_size * (1.0 - ease_in_quad(elapsed / t.shrink))
                self.target_size = self.size
                self.v_size = 0.0
                return True
            self.click_phase = ClickPhase.PAUSED
            return self._hold_paused()

        if self.click_phase is ClickPhase.PAUSED:
            if elapsed < t.shrink + t.pause:
                return self._hold_paused()
            if elapsed > t.total:
                # the whole bounce was skipped; settle straight back to rest
                if self.render_style is RenderStyle.GLYPH and not self.glyph_changed:
                    self._resample_glyph()
                self.click_phase = ClickPhase.IDLE
                self.target_size = self._resting_size(distance)
                return False
            self.click_phase = ClickPhase.BOUNCING
            self._kick(distance)
            return False

        if elapsed > t.total:
            self.click_phase = ClickPhase.IDLE
            self.target_size = self._resting_size(distance)
            return False

        bounce_age = elapsed - (t.shrink + t.pause)
        if bounce_age < t.kick_window:
            self._kick(distance)
        else:
            progress = min(1.0, bounce_age / t.bounce) if t.bounce > 0 else 1.0
            self.target_size = self._resting_size(distance) * elastic_out(progress)
        return False

    def _hold_paused(self) -> bool:
        self.size = 0.0
        self.target_size = 0.0
        self.v_size = 0.0
        if not self.color_changed:
            self.color_changed = True
            self._recolor_pending = True
        return True

    def _kick(self, distance: Optional[float]) -> None:
        proper = self._resting_size(distance)
        self.size = proper * 0.2
        self.target_size = self.size
        self.v_size = proper * 0.3
        if self.render_style is RenderStyle.GLYPH and not self.glyph_changed:
            self._resample_glyph()

    # -- per frame ------------------------------------------------------

    def advance(self, now: float, pointer=None) -> None:
        if self.entry_phase is EntryPhase.ENTERING and now - self.entry_triggered_at >= self.entry_delay:
            self._enter()

        distance = self.projection.distance(self.origin, pointer)
        self._distance = distance
        self._pointer = pointer

        direct = False
        if not self.visible:
            self.target_x, self.target_y, self.target_z = self.origin
            if not self.busy:
                self.target_size = self._resting_size(distance)
        else:
            self.target_x, self.target_y, self.target_z = self.projection.target_position(
                self.origin, pointer, distance, self.response, self.max_offset
            )
            if self.response.brighten > 0:
                factor = self.response.brighten_factor(distance)
                self.target_color = scale_color(self.base_color, factor)
        if self.busy:
            direct = self._advance_click(now, distance)
        elif self.visible:
            self.target_size = self._resting_size(distance)

        cfg = self.spring
        self.x, self.vx = apply_spring(self.x, self.target_x, self.vx, cfg)
        self.y, self.vy = apply_spring(self.y, self.target_y, self.vy, cfg)
        self.z, self.vz = apply_spring(self.z, self.target_z, self.vz, cfg)
        if not direct:
            self.size, self.v_size = apply_spring(self.size, self.target_size, self.v_size, cfg)
        if self.size < 0.0:
            self.size = 0.0
            self.v_size = max(0.0, self.v_size)

        if self.visible and self._color != self.target_color:
            ease = min(1.0, max(0.0, self.color_ease))
            self._color = _mix(self._color, self.target_color, ease)

    # -- read side ------------------------------------------------------

    def glow_factor(self) -> float:
        return self.response.glow_factor(self._distance)

    def highlight_position(self) -> Optional[Tuple[float, float]]:
        """Where the specular dot sits inside the disc; cosmetic only."""
        if self.style.surface or self.render_style is not RenderStyle.DISC:
            return None
        pointer = self._pointer
        if pointer is None:
            return (self.x, self.y)
        dx, dy = pointer[0] - self.x, pointer[1] - self.y
        dist = math.hypot(dx, dy)
        radius = self.size / 2.0
        max_off = radius * 0.4
        if dist <= 0.1:
            return (self.x, self.y)
        if dist < radius * 0.5:
            # hug the center when the pointer sits on top of the node
            blend = 0.1 + 0.9 * dist / (radius * 0.5)
            offset = max_off * blend
        else:
            offset = min(max_off, max_off * 200.0 / (dist + 50.0))
        return (self.x + dx / dist * offset, self.y + dy / dist * offset)

    def snapshot(self) -> EntitySnapshot:
        return EntitySnapshot(
            x=self.x,
            y=self.y,
            z=self.z,
            size=max(0.0, self.size),
            color=self.color,
            glow_color=self.glow_color,
            glow_factor=self.glow_factor(),
            highlight=self.highlight_position(),
            enabled=self.enabled,
            entered=self.entered,
            click_phase=self.click_phase,
            glyph=self.glyph,
            face=self.face,
            row=self.row,
            col=self.col,
        )

    def __repr__(self) -> str:
        where = f"face={self.face}, " if self.face is not None else ""
        return f"Entity({where}row={self.row}, col={self.col}, phase={self.click_phase.value}, size={self.size:.2f})"
