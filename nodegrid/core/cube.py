"""Rounded-cube surface mapping.

Points of an axis-aligned cube are pushed onto a cube with rounded edges and
gently bulging faces in two stages:

1. corner rounding: each axis is clamped to ``half - corner_radius`` and the
   residual is projected onto a sphere of radius ``corner_radius``;
2. face curvature: the rounded point is blended with its projection onto the
   sphere of radius ``half`` (``face_roundness`` 0 keeps the cube, 1 gives a
   sphere).

Node placement and the render mesh must use the same :class:`CubeShape` or the
nodes drift off the visible surface.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from ..utils.colors import Theme
from .errors import ConfigError

Vec3 = Tuple[float, float, float]

# Below this residual length the corner stage leaves the point alone.
_CORNER_EPS = 1e-3


@dataclass(frozen=True)
class CubeShape:
    cube_size: float = 2.0
    corner_radius: float = 0.25
    face_roundness: float = 0.35

    def __post_init__(self):
        if self.cube_size <= 0:
            raise ConfigError(f"cube_size must be positive, got {self.cube_size!r}")
        if not 0.0 <= self.corner_radius <= self.cube_size / 2:
            raise ConfigError(f"corner_radius must lie in [0, cube_size/2], got {self.corner_radius!r}")
        if not 0.0 <= self.face_roundness <= 1.0:
            raise ConfigError(f"face_roundness must lie in [0, 1], got {self.face_roundness!r}")

    @property
    def half_size(self) -> float:
        return self.cube_size / 2.0

    def map(self, x: float, y: float, z: float) -> Vec3:
        return map_to_rounded_cube(x, y, z, self.cube_size, self.corner_radius, self.face_roundness)


DEFAULT_SHAPE = CubeShape()


def _sign(v: float) -> float:
    return math.copysign(1.0, v) if v else 0.0


def map_to_rounded_cube(
    x: float,
    y: float,
    z: float,
    cube_size: float = 2.0,
    corner_radius: float = 0.25,
    face_roundness: float = 0.35,
) -> Vec3:
    x, y, z = float(x), float(y), float(z)
    half = cube_size / 2.0
    inner = half - corner_radius
    cx = _sign(x) * min(abs(x), inner)
    cy = _sign(y) * min(abs(y), inner)
    cz = _sign(z) * min(abs(z), inner)

    dx, dy, dz = x - cx, y - cy, z - cz
    dist = (dx * dx + dy * dy + dz * dz) ** 0.5
    rx, ry, rz = x, y, z
    if dist > _CORNER_EPS:
        s = corner_radius / dist
        rx, ry, rz = cx + dx * s, cy + dy * s, cz + dz * s

    nx, ny, nz = rx / half, ry / half, rz / half
    length = (nx * nx + ny * ny + nz * nz) ** 0.5
    if length <= 0:
        return (rx, ry, rz)

    k = face_roundness
    return (
        rx * (1 - k) + nx / length * half * k,
        ry * (1 - k) + ny / length * half * k,
        rz * (1 - k) + nz / length * half * k,
    )


def map_points(points: np.ndarray, shape: CubeShape = DEFAULT_SHAPE) -> np.ndarray:
    """Vectorized :func:`map_to_rounded_cube` over an ``(..., 3)`` array."""
    p = np.asarray(points, dtype=np.float64)
    flat = p.reshape(-1, 3)
    half = shape.half_size
    inner = half - shape.corner_radius

    clamped = np.sign(flat) * np.minimum(np.abs(flat), inner)
    resid = flat - clamped
    dist = np.linalg.norm(resid, axis=1, keepdims=True)
    far = dist > _CORNER_EPS
    scale = shape.corner_radius / np.where(far, dist, 1.0)
    rounded = np.where(far, clamped + resid * scale, flat)

    norm = rounded / half
    length = np.linalg.norm(norm, axis=1, keepdims=True)
    nonzero = length > 0
    sphere = np.where(nonzero, norm / np.where(nonzero, length, 1.0) * half, rounded)
    k = shape.face_roundness
    out = rounded * (1 - k) + sphere * k
    return out.reshape(p.shape)


# (normal, up, right) frames of the six faces for mesh generation.
FACE_FRAMES: Tuple[Tuple[Vec3, Vec3, Vec3], ...] = (
    ((0, 0, 1), (0, 1, 0), (1, 0, 0)),     # front
    ((0, 0, -1), (0, 1, 0), (-1, 0, 0)),   # back
    ((1, 0, 0), (0, 1, 0), (0, 0, -1)),    # right
    ((-1, 0, 0), (0, 1, 0), (0, 0, 1)),    # left
    ((0, 1, 0), (0, 0, -1), (1, 0, 0)),    # top
    ((0, -1, 0), (0, 0, 1), (1, 0, 0)),    # bottom
)


@dataclass
class RoundedCubeMesh:
    vertices: np.ndarray  # (N, 3) float
    normals: np.ndarray   # (N, 3) float, unit length
    indices: np.ndarray   # (M, 3) int, triangles


def build_rounded_cube_mesh(shape: CubeShape = DEFAULT_SHAPE, segments: int = 32) -> RoundedCubeMesh:
    if segments < 1:
        raise ConfigError(f"segments must be positive, got {segments!r}")
    half = shape.half_size
    n = segments + 1
    grid = np.linspace(-half, half, n)
    uu, vv = np.meshgrid(grid, grid)  # uu varies along columns, vv along rows

    verts: List[np.ndarray] = []
    tris: List[np.ndarray] = []
    for face, (normal, up, right) in enumerate(FACE_FRAMES):
        flat = (
            np.asarray(normal, dtype=np.float64) * half
            + uu[..., None] * np.asarray(right, dtype=np.float64)
            + vv[..., None] * np.asarray(up, dtype=np.float64)
        )
        verts.append(flat.reshape(-1, 3))

        base = face * n * n
        r, c = np.mgrid[0:segments, 0:segments]
        a = base + r * n + c
        b = a + 1
        d = a + n
        e = d + 1
        quads = np.stack((a, b, d, b, e, d), axis=-1).reshape(-1, 3)
        tris.append(quads)

    vertices = map_points(np.concatenate(verts), shape)
    lengths = np.linalg.norm(vertices, axis=1, keepdims=True)
    normals = vertices / np.where(lengths > 0, lengths, 1.0)
    return RoundedCubeMesh(vertices=vertices, normals=normals, indices=np.concatenate(tris).astype(np.int64))


def face_point(face: int, u: float, v: float, half: float) -> Vec3:
    """Place face-local ``(u, v)`` (``v`` grows downwards) on the flat cube."""
    if face == 0:
        return (u, -v, half)
    if face == 1:
        return (-u, -v, -half)
    if face == 2:
        return (half, -v, -u)
    if face == 3:
        return (-half, -v, u)
    if face == 4:
        return (u, half, v)
    if face == 5:
        return (u, -half, -v)
    raise ConfigError(f"cube face must lie in [0, 6), got {face!r}")


@dataclass(frozen=True)
class SurfaceLayout:
    spacing: float
    entity_size: float
    effective_size: float
    origins: np.ndarray  # (6, height, width, 3)


def _padding_ratio(max_dim: int) -> float:
    if max_dim <= 5:
        return 0.12
    if max_dim <= 10:
        return 0.07
    if max_dim <= 15:
        return 0.05
    if max_dim <= 20:
        return 0.04
    return 0.033


def _size_scale(max_dim: int) -> float:
    if max_dim <= 10:
        return 0.85
    if max_dim <= 15:
        return 0.88
    if max_dim <= 20:
        return 0.94
    return 1.0


def surface_layout(
    width: int,
    height: int,
    theme: Union[Theme, str] = Theme.DARK,
    shape: CubeShape = DEFAULT_SHAPE,
) -> SurfaceLayout:
    """Node origins for a ``width`` x ``height`` grid on every face, already
    mapped onto the rounded surface, plus the node size for the grid."""
    if width < 1 or height < 1:
        raise ConfigError(f"grid dimensions must be positive, got {width}x{height}")
    theme = Theme.coerce(theme)
    max_dim = max(width, height)
    effective = shape.cube_size * (1 - 2 * _padding_ratio(max_dim))
    spacing = effective / (max_dim - 1) if max_dim > 1 else effective
    base = 0.36 if theme is Theme.LIGHT else 0.324
    size = spacing * base * _size_scale(max_dim)

    offset = effective / 2.0
    half = shape.half_size
    origins = np.empty((6, height, width, 3), dtype=np.float64)
    for face in range(6):
        for row in range(height):
            v = row / (height - 1) * effective - offset if height > 1 else 0.0
            for col in range(width):
                u = col / (width - 1) * effective - offset if width > 1 else 0.0
                origins[face, row, col] = face_point(face, u, v, half)
    return SurfaceLayout(spacing=spacing, entity_size=size, effective_size=effective, origins=map_points(origins, shape))
