"""Grid containers.

A field owns every node of one grid, rebuilds them in bulk and steps them once
per frame. Regeneration builds the new collection off to the side and swaps it
in as one tuple, so a half-built grid is never visible to ``tick`` or to an
interaction router holding the field.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.colors import ColorLike, Theme, pick_color, resolve_palette
from .chunks import CUBE_FACES, chunk_pattern_value, generate_chunk_pattern, generate_cube_chunk_pattern
from .config import NODE_MODE, FieldSettings
from .cube import DEFAULT_SHAPE, CubeShape, SurfaceLayout, surface_layout
from .cycler import ColorCycler
from .entity import PLANAR_STYLE, SURFACE_STYLE, Entity, EntitySnapshot
from .grid import GridSpacing, grid_spacing
from .proximity import PLANAR_RESPONSE, SURFACE_RESPONSE, PlanarProjection, ProximityResponse, SurfaceProjection
from .springs import PLANAR_SPRING, SURFACE_SPRING

logger = logging.getLogger(__name__)

MIN_ENTRY_DELAY = 500.0
MAX_ENTRY_DELAY = 3000.0

CellColors = Union[Mapping[Tuple[int, ...], ColorLike], Sequence[Any], None]


def entry_delay_max(cells: int) -> float:
    """Upper bound of the random entry delay; larger grids take longer to reveal."""
    return min(MIN_ENTRY_DELAY + cells * 4.0, MAX_ENTRY_DELAY)


def _lookup(colors: CellColors, key: Tuple[int, ...]) -> Optional[ColorLike]:
    """Color for ``key`` from a mapping or nested lists; None when absent."""
    if colors is None:
        return None
    if isinstance(colors, Mapping):
        return colors.get(key)
    node: Any = colors
    for i in key:
        if node is None or i >= len(node):
            return None
        node = node[i]
    return node or None


class _Field:
    projection: Union[PlanarProjection, SurfaceProjection]

    def __init__(self, settings: FieldSettings, rng: Optional[np.random.Generator] = None):
        self.settings = settings.validate()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.entities: Tuple[Entity, ...] = ()
        self._index: Dict[Tuple[int, ...], Entity] = {}
        self.pattern: Optional[np.ndarray] = None
        self.cycler: Optional[ColorCycler] = None

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self):
        return iter(self.entities)

    def _key(self, e: Entity) -> Tuple[int, ...]:
        raise NotImplementedError

    def _response(self) -> ProximityResponse:
        raise NotImplementedError

    def _palette(self):
        return resolve_palette(self.settings.palette)

    def _swap(self, entities: List[Entity], now: Optional[float]) -> None:
        self.entities = tuple(entities)
        self._index = {self._key(e): e for e in self.entities}
        if self.settings.animations_enabled:
            self.start_color_cycle(0.0 if now is None else now)
        elif self.cycler is not None:
            self.stop_color_cycle()

    def start_color_cycle(self, now: float) -> ColorCycler:
        if self.cycler is not None:
            self.cycler.stop()
        self.cycler = ColorCycler(self.settings.palette, rng=self.rng)
        self.cycler.start(self.entities, now)
        return self.cycler

    def stop_color_cycle(self) -> None:
        if self.cycler is not None:
            self.cycler.stop()
            self.cycler = None

    def _order(self, snapshots: List[EntitySnapshot], pointer) -> List[EntitySnapshot]:
        return snapshots

    def tick(self, now: float, pointer=None) -> List[EntitySnapshot]:
        """Step every node once and return the frame's snapshots."""
        if self.cycler is not None:
            self.cycler.tick(now)
        recolor = self.settings.recolor_on_click
        palette = self._palette() if recolor else None
        for e in self.entities:
            e.advance(now, pointer)
            if e.consume_recolor() and recolor:
                e.set_color(pick_color(palette, self.rng))
        return self._order([e.snapshot() for e in self.entities], pointer)

    def entities_under(self, pointer) -> List[Entity]:
        if self.projection.is_absent(pointer):
            return []
        return [e for e in self.entities if self.projection.hit((e.x, e.y, e.z), e.size, pointer)]

    def set_theme(self, theme: Union[Theme, str]) -> None:
        self.settings = self.settings.replace(theme=theme)
        response = self._response()
        for e in self.entities:
            e.response = response
            e.set_enabled(e.enabled, self.settings.theme)
        logger.debug("theme set to %s on %d nodes", self.settings.theme.value, len(self.entities))

    def set_palette(self, palette, now: float) -> Tuple[Entity, ...]:
        self.settings = self.settings.replace(palette=palette)
        return self.regenerate(now, skip_entry=True)

    def regenerate(self, now: Optional[float], skip_entry: bool = False, colors: CellColors = None) -> Tuple[Entity, ...]:
        raise NotImplementedError


class NodeField(_Field):
    """Flat grid of nodes on a canvas."""

    def __init__(self, settings: FieldSettings = NODE_MODE, rng: Optional[np.random.Generator] = None):
        super().__init__(settings, rng)
        self.spacing: Optional[GridSpacing] = None
        self.projection = PlanarProjection(settings.canvas_width, settings.canvas_height, settings.magnetic_effect)

    def _key(self, e: Entity) -> Tuple[int, ...]:
        return (e.row, e.col)

    def _response(self) -> ProximityResponse:
        s = self.settings
        return ProximityResponse(
            near_radius=PLANAR_RESPONSE.near_radius,
            far_radius=PLANAR_RESPONSE.far_radius,
            max_grow=s.hover_scale,
            min_shrink=PLANAR_RESPONSE.min_shrink,
            max_glow=max(s.glow, PLANAR_RESPONSE.min_glow),
        )

    def regenerate(self, now: Optional[float], skip_entry: bool = False, colors: CellColors = None) -> Tuple[Entity, ...]:
        """Rebuild every node from the current settings.

        ``colors`` pins individual cells (``{(row, col): color}`` or nested
        lists); the rest draw from the palette. Without ``skip_entry`` each
        node gets a random entry delay starting at ``now``.
        """
        s = self.settings
        spacing = grid_spacing(s.canvas_width, s.canvas_height, s.grid_width, s.grid_height, s.padding, s.gap_factor)
        projection = PlanarProjection(s.canvas_width, s.canvas_height, magnetic=s.magnetic_effect)
        pattern = generate_chunk_pattern(s.grid_width, s.grid_height, s.fill_percentage, self.rng)
        palette = self._palette()
        response = self._response()
        style = replace(PLANAR_STYLE, stroke_width=s.stroke_width)
        max_delay = entry_delay_max(s.cells)

        entities: List[Entity] = []
        for row in range(s.grid_height):
            for col in range(s.grid_width):
                color = _lookup(colors, (row, col))
                if color is None:
                    color = pick_color(palette, self.rng)
                e = Entity(
                    spacing.position(row, col),
                    spacing.circle_diameter,
                    color,
                    projection=projection,
                    response=response,
                    spring=PLANAR_SPRING,
                    style=style,
                    render_style=s.render_style,
                    glyphs=s.glyphs,
                    enabled=bool(pattern[row, col]),
                    theme=s.theme,
                    row=row,
                    col=col,
                    rng=self.rng,
                )
                if skip_entry or now is None:
                    e.skip_entry()
                else:
                    e.start_entry(self.rng.random() * max_delay, s.theme, now=now)
                entities.append(e)

        self.spacing, self.projection, self.pattern = spacing, projection, pattern
        self._swap(entities, now)
        logger.debug(
            "regenerated %dx%d field: %d nodes, max entry delay %.0f ms%s",
            s.grid_width, s.grid_height, len(entities), max_delay, " (entry skipped)" if skip_entry else "",
        )
        return self.entities

    def _order(self, snapshots: List[EntitySnapshot], pointer) -> List[EntitySnapshot]:
        # far nodes first so the ones near the pointer are drawn on top
        if self.projection.is_absent(pointer):
            return snapshots
        px, py = pointer[0], pointer[1]
        return sorted(snapshots, key=lambda n: (n.x - px) ** 2 + (n.y - py) ** 2, reverse=True)

    def entity_at(self, row: int, col: int) -> Optional[Entity]:
        return self._index.get((row, col))

    def set_fill_percentage(self, fill_percentage: float) -> np.ndarray:
        self.settings = self.settings.replace(fill_percentage=fill_percentage)
        s = self.settings
        pattern = generate_chunk_pattern(s.grid_width, s.grid_height, s.fill_percentage, self.rng)
        for e in self.entities:
            e.set_enabled(bool(pattern[e.row, e.col]), s.theme)
        self.pattern = pattern
        logger.debug("fill set to %.1f%%: %d of %d nodes enabled", s.fill_percentage, int(pattern.sum()), pattern.size)
        return pattern


class CubeField(_Field):
    """Nodes on the six faces of one rounded cube.

    Entry is prepared on regeneration and started with :meth:`trigger_entry`
    (typically once the scene is on screen). Nodes the chunk pattern switches
    on afterwards start their own entry when they are enabled.
    """

    def __init__(
        self,
        settings: FieldSettings = NODE_MODE,
        shape: CubeShape = DEFAULT_SHAPE,
        rng: Optional[np.random.Generator] = None,
    ):
        super().__init__(settings, rng)
        self.shape = shape
        self.layout: Optional[SurfaceLayout] = None
        self.projection = SurfaceProjection()
        self.entry_started = False

    def _key(self, e: Entity) -> Tuple[int, ...]:
        return (e.face, e.row, e.col)

    def _response(self) -> ProximityResponse:
        s = self.settings
        return ProximityResponse(
            near_radius=SURFACE_RESPONSE.near_radius,
            far_radius=SURFACE_RESPONSE.far_radius,
            max_grow=s.hover_scale,
            min_shrink=SURFACE_RESPONSE.min_shrink,
            max_glow=max(s.glow, SURFACE_RESPONSE.min_glow),
            exponent=SURFACE_RESPONSE.exponent,
            brighten=SURFACE_RESPONSE.brighten,
        )

    def regenerate(
        self,
        now: Optional[float] = None,
        skip_entry: bool = False,
        colors: CellColors = None,
        trigger: bool = False,
    ) -> Tuple[Entity, ...]:
        """Rebuild the cube. ``colors`` is keyed by ``(face, row, col)``.

        Entry is only prepared; pass ``trigger`` (with ``now``) to start it
        right away, as when rebuilding a cube that is already on screen.
        """
        s = self.settings
        layout = surface_layout(s.grid_width, s.grid_height, s.theme, self.shape)
        patterns = generate_cube_chunk_pattern(s.grid_width, s.grid_height, s.fill_percentage, self.rng)
        palette = self._palette()
        response = self._response()
        max_delay = entry_delay_max(CUBE_FACES * s.cells)

        entities: List[Entity] = []
        for face in range(CUBE_FACES):
            for row in range(s.grid_height):
                for col in range(s.grid_width):
                    color = _lookup(colors, (face, row, col))
                    if color is None:
                        color = pick_color(palette, self.rng)
                    e = Entity(
                        layout.origins[face, row, col],
                        layout.entity_size,
                        color,
                        projection=self.projection,
                        response=response,
                        spring=SURFACE_SPRING,
                        style=SURFACE_STYLE,
                        render_style=s.render_style,
                        glyphs=s.glyphs,
                        max_offset=0.0,
                        enabled=chunk_pattern_value(patterns, face, row, col),
                        theme=s.theme,
                        row=row,
                        col=col,
                        face=face,
                        rng=self.rng,
                    )
                    if skip_entry:
                        e.skip_entry()
                    else:
                        e.start_entry(self.rng.random() * max_delay, s.theme)
                    entities.append(e)

        self.layout, self.pattern = layout, patterns
        self.entry_started = skip_entry
        self._swap(entities, now)
        logger.debug(
            "regenerated cube %dx%d per face: %d nodes, max entry delay %.0f ms",
            s.grid_width, s.grid_height, len(entities), max_delay,
        )
        if trigger and not skip_entry and now is not None:
            self.trigger_entry(now)
        return self.entities

    def trigger_entry(self, now: float) -> int:
        """Start the entry of every enabled node still waiting; returns the count."""
        self.entry_started = True
        return sum(1 for e in self.entities if e.enabled and e.trigger_entry(now))

    def entity_at(self, face: int, row: int, col: int) -> Optional[Entity]:
        return self._index.get((face, row, col))

    def set_fill_percentage(self, fill_percentage: float, now: Optional[float] = None) -> np.ndarray:
        self.settings = self.settings.replace(fill_percentage=fill_percentage)
        s = self.settings
        patterns = generate_cube_chunk_pattern(s.grid_width, s.grid_height, s.fill_percentage, self.rng)
        started = 0
        for e in self.entities:
            enabled = chunk_pattern_value(patterns, e.face, e.row, e.col)
            was_enabled = e.enabled
            e.set_enabled(enabled, s.theme)
            if enabled and not was_enabled and self.entry_started and now is not None and e.trigger_entry(now):
                started += 1
        self.pattern = patterns
        logger.debug(
            "cube fill set to %.1f%%: %d of %d nodes enabled, %d entries started",
            s.fill_percentage, int(patterns.sum()), patterns.size, started,
        )
        return patterns

    def set_theme(self, theme: Union[Theme, str]) -> None:
        super().set_theme(theme)
        s = self.settings
        size = surface_layout(s.grid_width, s.grid_height, s.theme, self.shape).entity_size
        for e in self.entities:
            e.original_size = size
