"""Tests for the spring integrator."""
import numpy as np
import pytest

from nodegrid.core.errors import ConfigError
from nodegrid.core.springs import (
    DEFAULT_SPRING,
    PLANAR_SPRING,
    SpringConfig,
    apply_spring,
    apply_spring_array,
)


class TestApplySpring:
    def test_single_step(self):
        value, velocity = apply_spring(0.0, 10.0, 0.0, SpringConfig(0.2, 0.7))
        assert velocity == pytest.approx(2.0)
        assert value == pytest.approx(2.0)

    def test_deterministic(self):
        a = apply_spring(1.5, -3.0, 0.25, PLANAR_SPRING)
        b = apply_spring(1.5, -3.0, 0.25, PLANAR_SPRING)
        assert a == b

    def test_converges(self):
        value, velocity = 0.0, 0.0
        for _ in range(300):
            value, velocity = apply_spring(value, 10.0, velocity)
        assert value == pytest.approx(10.0, abs=1e-3)
        assert velocity == pytest.approx(0.0, abs=1e-3)

    def test_overshoots_before_settling(self):
        value, velocity = 0.0, 0.0
        peak = 0.0
        for _ in range(60):
            value, velocity = apply_spring(value, 10.0, velocity, PLANAR_SPRING)
            peak = max(peak, value)
        assert peak > 10.0

    def test_at_rest_stays_put(self):
        assert apply_spring(4.0, 4.0, 0.0) == (4.0, 0.0)


class TestSpringArray:
    def test_matches_scalar(self):
        current = np.array([0.0, 5.0, -2.0])
        target = np.array([10.0, 5.0, 3.0])
        velocity = np.array([0.0, 1.0, -0.5])
        values, velocities = apply_spring_array(current, target, velocity, DEFAULT_SPRING)
        for i in range(3):
            v, vel = apply_spring(current[i], target[i], velocity[i], DEFAULT_SPRING)
            assert values[i] == pytest.approx(v)
            assert velocities[i] == pytest.approx(vel)


class TestSpringConfig:
    @pytest.mark.parametrize("stiffness,damping", [(0.0, 0.5), (0.5, 1.0), (1.2, 0.5), (0.5, -0.1)])
    def test_rejects_out_of_range(self, stiffness, damping):
        with pytest.raises(ConfigError):
            SpringConfig(stiffness, damping)

    def test_defaults(self):
        assert (PLANAR_SPRING.stiffness, PLANAR_SPRING.damping) == (0.15, 0.75)
        assert (DEFAULT_SPRING.stiffness, DEFAULT_SPRING.damping) == (0.2, 0.7)
