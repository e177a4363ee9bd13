"""Tests for the grid containers."""
import numpy as np
import pytest

from nodegrid.core.config import BLOCK_MODE, NODE_MODE
from nodegrid.core.entity import ClickPhase, EntryPhase
from nodegrid.core.field import CubeField, NodeField, entry_delay_max
from nodegrid.core.proximity import Ray


def rng(seed=0):
    return np.random.default_rng(seed)


class TestEntryDelay:
    def test_bounds(self):
        assert entry_delay_max(25) == 600.0
        assert entry_delay_max(150) == 1100.0
        assert entry_delay_max(625) == 3000.0


class TestNodeField:
    def test_regenerate_builds_grid(self):
        field = NodeField(NODE_MODE, rng())
        entities = field.regenerate(0.0)
        assert len(entities) == 25
        assert field.pattern.all()
        e = field.entity_at(0, 0)
        assert (e.x, e.y) == pytest.approx((150.0, 150.0))
        assert e.original_size == pytest.approx(75.0)
        assert field.entity_at(5, 0) is None

    def test_entry_completes_within_max_delay(self):
        field = NodeField(NODE_MODE, rng())
        field.regenerate(0.0)
        assert not any(e.entered for e in field)
        field.tick(entry_delay_max(25) + 1)
        assert all(e.entered for e in field)

    def test_regeneration_swaps_whole_collection(self):
        field = NodeField(NODE_MODE, rng())
        old = field.regenerate(0.0, skip_entry=True)
        old[0].activate(0.0)
        new = field.regenerate(10.0, skip_entry=True)
        assert isinstance(new, tuple)
        assert not {id(e) for e in old} & {id(e) for e in new}
        assert all(e.click_phase is ClickPhase.IDLE for e in new)

    def test_painter_order(self):
        field = NodeField(NODE_MODE, rng())
        field.regenerate(0.0, skip_entry=True)
        snaps = field.tick(16.0, (150.0, 150.0))
        assert (snaps[-1].row, snaps[-1].col) == (0, 0)
        assert (snaps[0].row, snaps[0].col) == (4, 4)
        d = [(s.x - 150.0) ** 2 + (s.y - 150.0) ** 2 for s in snaps]
        assert d == sorted(d, reverse=True)

    def test_no_pointer_keeps_grid_order(self):
        field = NodeField(NODE_MODE, rng())
        field.regenerate(0.0, skip_entry=True)
        snaps = field.tick(16.0)
        assert [(s.row, s.col) for s in snaps[:2]] == [(0, 0), (0, 1)]

    def test_pinned_colors(self):
        field = NodeField(NODE_MODE, rng())
        field.regenerate(0.0, skip_entry=True, colors={(0, 0): "#0000ff"})
        assert field.entity_at(0, 0).color == (0, 0, 255, 230)
        field.regenerate(0.0, skip_entry=True, colors=[["#ff0000"]])
        assert field.entity_at(0, 0).color == (255, 0, 0, 230)

    def test_fill_percentage(self):
        field = NodeField(BLOCK_MODE.replace(fill_percentage=0), rng())
        field.regenerate(0.0, skip_entry=True)
        assert not any(e.enabled for e in field)
        assert field.entity_at(3, 3).color == (42, 42, 42, 100)
        pattern = field.set_fill_percentage(100)
        assert pattern.all()
        assert all(e.enabled for e in field)
        field.set_fill_percentage(40)
        assert sum(e.enabled for e in field) == 10 * 25

    def test_set_theme_updates_neutral(self):
        field = NodeField(NODE_MODE.replace(fill_percentage=0), rng())
        field.regenerate(0.0, skip_entry=True)
        field.set_theme("light")
        assert field.entity_at(0, 0).color == (208, 208, 208, 100)
        assert field.entity_at(0, 0).response.max_glow == pytest.approx(1.1)

    def test_set_palette_regenerates(self):
        field = NodeField(NODE_MODE, rng())
        old = field.regenerate(0.0)
        new = field.set_palette(["#123456"], 100.0)
        assert new is field.entities and new is not old
        assert all(e.entered and e.color == (0x12, 0x34, 0x56, 230) for e in field)

    def test_recolor_on_click(self):
        settings = NODE_MODE.replace(recolor_on_click=True, palette=["#0000ff"])
        field = NodeField(settings, rng())
        field.regenerate(0.0, skip_entry=True, colors={(0, 0): "#ff0000"})
        e = field.entity_at(0, 0)
        e.activate(0.0)
        now = 0.0
        while e.click_phase is not ClickPhase.BOUNCING:
            now += 16.0
            field.tick(now)
        assert e.base_color == (0, 0, 255, 230)

    def test_entities_under(self):
        field = NodeField(NODE_MODE, rng())
        field.regenerate(0.0, skip_entry=True)
        assert field.entities_under((150.0, 150.0)) == [field.entity_at(0, 0)]
        assert field.entities_under(None) == []

    def test_animations_start_color_cycle(self):
        field = NodeField(NODE_MODE.replace(animations_enabled=True), rng())
        field.regenerate(0.0, skip_entry=True)
        assert field.cycler is not None and field.cycler.running
        field.stop_color_cycle()
        assert field.cycler is None

    def test_colors_snap_after_cycle_stops(self):
        field = NodeField(NODE_MODE.replace(animations_enabled=True), rng())
        field.regenerate(0.0, skip_entry=True)
        field.stop_color_cycle()
        e = field.entity_at(2, 2)
        e.set_color("#0000ff")
        e.advance(16.0)
        assert e.color == (0, 0, 255, 230)


class TestCubeField:
    def test_regenerate_prepares_entry(self):
        field = CubeField(NODE_MODE, rng=rng())
        field.regenerate()
        assert len(field) == 6 * 25
        field.tick(5000.0)
        assert all(e.entry_phase is EntryPhase.NOT_ENTERED for e in field)
        assert field.trigger_entry(0.0) == 150
        field.tick(entry_delay_max(150) + 1)
        assert all(e.entered for e in field)

    def test_addressing(self):
        field = CubeField(NODE_MODE, rng=rng())
        field.regenerate(skip_entry=True)
        e = field.entity_at(3, 1, 2)
        assert (e.face, e.row, e.col) == (3, 1, 2)
        assert tuple(field.layout.origins[3, 1, 2]) == pytest.approx(e.origin)

    def test_newly_enabled_nodes_start_entry(self):
        field = CubeField(NODE_MODE.replace(fill_percentage=0), rng=rng())
        field.regenerate()
        assert field.trigger_entry(0.0) == 0
        field.set_fill_percentage(100, now=50.0)
        assert all(e.entry_phase is EntryPhase.ENTERING for e in field)
        field.tick(50.0 + entry_delay_max(150))
        assert all(e.entered for e in field)

    def test_enable_before_trigger_waits(self):
        field = CubeField(NODE_MODE.replace(fill_percentage=0), rng=rng())
        field.regenerate()
        field.set_fill_percentage(100, now=50.0)
        assert all(e.entry_phase is EntryPhase.NOT_ENTERED for e in field)

    def test_trigger_on_regenerate(self):
        field = CubeField(NODE_MODE, rng=rng())
        field.regenerate(100.0, trigger=True)
        assert field.entry_started
        assert all(e.entry_phase is EntryPhase.ENTERING for e in field)

    def test_ray_hit_activates(self):
        field = CubeField(NODE_MODE, rng=rng())
        field.regenerate(skip_entry=True)
        target = field.entity_at(0, 2, 2)
        x, y, z = target.origin
        ray = Ray((x, y, 5.0), (0.0, 0.0, -1.0))
        under = field.entities_under(ray)
        assert under == [target]

    def test_theme_resizes_nodes(self):
        field = CubeField(NODE_MODE, rng=rng())
        field.regenerate(skip_entry=True)
        dark = field.entity_at(0, 0, 0).original_size
        field.set_theme("light")
        assert field.entity_at(0, 0, 0).original_size > dark
