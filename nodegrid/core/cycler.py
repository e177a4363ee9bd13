from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.colors import RANDOM_GENERATOR, ColorLike, pick_color, resolve_palette
from .entity import Entity

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
    entity: Entity
    due: float
    interval: Optional[float] = None


class ColorCycler:
    """Keeps recoloring enabled nodes at random intervals.

    Start times are staggered by list position so the grid changes as a ripple
    rather than all at once. While running, node color easing is raised so the
    changes blend quickly; :meth:`stop` restores each node's own easing.
    """

    def __init__(
        self,
        palette: Union[str, Sequence[ColorLike], None] = None,
        rng: Optional[np.random.Generator] = None,
        transition: float = 0.15,
        interval: Tuple[float, float] = (400.0, 600.0),
        stagger_step: float = 50.0,
        stagger_span: float = 500.0,
    ):
        self.palette = RANDOM_GENERATOR if palette is None else resolve_palette(palette)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.transition = transition
        self.interval = interval
        self.stagger_step = stagger_step
        self.stagger_span = stagger_span
        self._slots: List[_Slot] = []
        self._entities: Tuple[Entity, ...] = ()
        self.running = False

    def start(self, entities: Sequence[Entity], now: float) -> None:
        self._entities = tuple(entities)
        self._slots = []
        for i, e in enumerate(self._entities):
            e.color_ease = self.transition
            if not e.enabled:
                continue
            self._slots.append(_Slot(e, now + (i * self.stagger_step) % self.stagger_span))
        self.running = True
        logger.debug("color cycle started on %d of %d nodes", len(self._slots), len(self._entities))

    def stop(self) -> None:
        for e in self._entities:
            e.color_ease = e.style.color_ease
        self._slots = []
        self._entities = ()
        self.running = False

    def tick(self, now: float) -> int:
        """Recolor every node whose slot is due; returns how many changed."""
        if not self.running:
            return 0
        changed = 0
        lo, hi = self.interval
        for slot in self._slots:
            if now < slot.due:
                continue
            if slot.interval is None:
                slot.interval = lo + self.rng.random() * (hi - lo)
            slot.due += slot.interval
            # nodes disabled after start keep their slot but are skipped
            if slot.entity.enabled:
                slot.entity.set_color(pick_color(self.palette, self.rng))
                changed += 1
        return changed
