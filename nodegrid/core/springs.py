from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import ConfigError


@dataclass(frozen=True)
class SpringConfig:
    stiffness: float = 0.2
    damping: float = 0.7

    def __post_init__(self):
        for name in ("stiffness", "damping"):
            value = getattr(self, name)
            if not 0.0 < value < 1.0:
                raise ConfigError(f"spring {name} must lie in (0, 1), got {value!r}")


DEFAULT_SPRING = SpringConfig()
PLANAR_SPRING = SpringConfig(stiffness=0.15, damping=0.75)
SURFACE_SPRING = SpringConfig(stiffness=0.2, damping=0.7)


def spring_force(current: float, target: float, velocity: float, config: SpringConfig = DEFAULT_SPRING) -> float:
    return velocity * config.damping + (target - current) * config.stiffness


def apply_spring(
    current: float,
    target: float,
    velocity: float,
    config: SpringConfig = DEFAULT_SPRING,
) -> Tuple[float, float]:
    """One damped step for a single scalar channel. Returns ``(value, velocity)``.

    Not clamped: overshooting the target is what makes nodes bounce.
    """
    v = spring_force(current, target, velocity, config)
    return current + v, v


def apply_spring_array(
    current: np.ndarray,
    target: np.ndarray,
    velocity: np.ndarray,
    config: SpringConfig = DEFAULT_SPRING,
) -> Tuple[np.ndarray, np.ndarray]:
    current = np.asarray(current, dtype=np.float64)
    v = np.asarray(velocity, dtype=np.float64) * config.damping + (np.asarray(target, dtype=np.float64) - current) * config.stiffness
    return current + v, v
