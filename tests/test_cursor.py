"""Tests for the cursor follower."""
import pytest

from nodegrid.core.cursor import CursorFollower


class TestCursorFollower:
    def test_first_step(self):
        c = CursorFollower()
        state = c.update(0.0, (100.0, 0.0))
        assert state.x == pytest.approx(8.0)
        assert state.size == pytest.approx(20.0)

    def test_converges_on_pointer(self):
        c = CursorFollower()
        for i in range(300):
            state = c.update(i * 16.0, (100.0, 50.0))
        assert (state.x, state.y) == pytest.approx((100.0, 50.0), abs=1e-2)

    def test_click_grows_then_releases(self):
        c = CursorFollower()
        c.click(0.0)
        state = c.update(16.0, (0.0, 0.0))
        assert state.clicked
        assert state.size > 20.0
        state = c.update(201.0, (0.0, 0.0))
        assert not state.clicked

    def test_no_pointer_coasts_to_a_stop(self):
        c = CursorFollower()
        c.update(0.0, (100.0, 0.0))
        for i in range(100):
            c.update(i * 16.0, None)
        # only momentum is left: 8 + 8 * 0.8 / 0.2
        assert c.vx == pytest.approx(0.0, abs=1e-6)
        assert c.x == pytest.approx(40.0, abs=1e-3)
