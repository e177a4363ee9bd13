"""Pointer proximity response and the projections that feed it.

A node reacts to the pointer through one curve (:class:`ProximityResponse`)
evaluated on a distance. Where that distance comes from depends on the
projection: canvas pixels for the flat field, distance from the pick ray for
nodes on the cube surface.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from .errors import ConfigError

Vec3 = Tuple[float, float, float]

# Pointer positions this far outside the canvas mean "no pointer" (touch ended,
# pointer left the surface).
POINTER_ABSENT_MARGIN = 500.0
POINTER_ABSENT = (-1000.0, -1000.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass(frozen=True)
class ProximityResponse:
    near_radius: float = 180.0
    far_radius: float = 300.0
    max_grow: float = 1.5
    min_shrink: float = 0.7
    min_glow: float = 1.0
    max_glow: float = 1.2
    exponent: float = 2.0
    far_glow_boost: float = 1.05
    brighten: float = 0.0

    def __post_init__(self):
        if self.near_radius <= 0:
            raise ConfigError(f"near_radius must be positive, got {self.near_radius!r}")
        if self.far_radius < self.near_radius:
            raise ConfigError("far_radius must not be smaller than near_radius")
        if self.max_grow <= 0 or self.min_shrink < 0:
            raise ConfigError("size factors must be positive")

    def influence(self, distance: Optional[float]) -> float:
        if distance is None or distance >= self.near_radius:
            return 0.0
        return ((self.near_radius - max(0.0, distance)) / self.near_radius) ** self.exponent

    def _blend(self, distance: float) -> float:
        span = self.far_radius - self.near_radius
        return (distance - self.near_radius) / span if span > 0 else 1.0

    def size_factor(self, distance: Optional[float]) -> float:
        """Multiplier on the original size; ``None`` means the pointer is absent."""
        if distance is None or distance >= self.far_radius:
            return self.min_shrink
        if distance < self.near_radius:
            return 1.0 + (self.max_grow - 1.0) * self.influence(distance)
        return _lerp(1.0, self.min_shrink, self._blend(distance))

    def glow_factor(self, distance: Optional[float]) -> float:
        # inverse to size: the closer the pointer, the tighter the glow
        far_glow = self.max_glow * self.far_glow_boost
        if distance is None or distance >= self.far_radius:
            return far_glow
        if distance < self.near_radius:
            return _lerp(self.max_glow, self.min_glow, self.influence(distance))
        # blends all the way to far_glow so there is no step at far_radius
        return _lerp(self.max_glow, far_glow, self._blend(distance))

    def brighten_factor(self, distance: Optional[float]) -> float:
        if self.brighten <= 0 or distance is None or distance >= self.near_radius:
            return 1.0
        linear = 1.0 - max(0.0, distance) / self.near_radius
        return 1.0 + linear ** 3 * self.brighten


PLANAR_RESPONSE = ProximityResponse()
SURFACE_RESPONSE = ProximityResponse(
    near_radius=0.7, far_radius=0.7, max_grow=1.5, min_shrink=1.0, exponent=2.5, brighten=0.3
)


class Ray(NamedTuple):
    origin: Vec3
    direction: Vec3


class PlanarProjection:
    """Screen-space projection for the flat field; pointers are canvas ``(x, y)``."""

    def __init__(self, width: float, height: float, magnetic: bool = False, pull: float = 0.5):
        self.width = float(width)
        self.height = float(height)
        self.magnetic = bool(magnetic)
        self.pull = float(pull)

    def is_absent(self, pointer) -> bool:
        if pointer is None:
            return True
        x, y = pointer[0], pointer[1]
        m = POINTER_ABSENT_MARGIN
        return x < -m or y < -m or x > self.width + m or y > self.height + m

    def distance(self, point: Vec3, pointer) -> Optional[float]:
        if self.is_absent(pointer):
            return None
        return math.hypot(pointer[0] - point[0], pointer[1] - point[1])

    def target_position(self, origin: Vec3, pointer, distance: Optional[float], response: ProximityResponse, max_offset: float) -> Vec3:
        if not self.magnetic or distance is None or distance >= response.near_radius or max_offset <= 0:
            return origin
        influence = ((response.near_radius - distance) / response.near_radius) ** 3
        ox = (pointer[0] - origin[0]) * influence * self.pull
        oy = (pointer[1] - origin[1]) * influence * self.pull
        length = math.hypot(ox, oy)
        if length > max_offset:
            s = max_offset / length
            ox, oy = ox * s, oy * s
        return (origin[0] + ox, origin[1] + oy, origin[2])

    def hit(self, position: Vec3, size: float, pointer) -> bool:
        d = self.distance(position, pointer)
        return d is not None and d < size / 2.0


class SurfaceProjection:
    """Projection for nodes fixed on the cube; pointers are :class:`Ray` picks."""

    magnetic = False

    def is_absent(self, pointer) -> bool:
        return pointer is None

    def distance(self, point: Vec3, pointer) -> Optional[float]:
        if pointer is None:
            return None
        ox, oy, oz = pointer.origin
        dx, dy, dz = pointer.direction
        norm = math.sqrt(dx * dx + dy * dy + dz * dz)
        if norm <= 0:
            return None
        dx, dy, dz = dx / norm, dy / norm, dz / norm
        # the cube is convex and centered: nodes whose outward direction points
        # along the ray sit on the far side and never see the pointer
        if point[0] * dx + point[1] * dy + point[2] * dz >= 0:
            return None
        px, py, pz = point[0] - ox, point[1] - oy, point[2] - oz
        # closest point on the ray, not the infinite line
        t = max(0.0, px * dx + py * dy + pz * dz)
        return math.sqrt((px - dx * t) ** 2 + (py - dy * t) ** 2 + (pz - dz * t) ** 2)

    def target_position(self, origin: Vec3, pointer, distance: Optional[float], response: ProximityResponse, max_offset: float) -> Vec3:
        return origin

    def hit(self, position: Vec3, size: float, pointer) -> bool:
        d = self.distance(position, pointer)
        return d is not None and d < size / 2.0
