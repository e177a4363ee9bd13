from __future__ import annotations

from typing import NamedTuple, Optional, Tuple


class CursorState(NamedTuple):
    x: float
    y: float
    size: float
    clicked: bool


class CursorFollower:
    """Soft marker trailing the pointer. Grows briefly after a click."""

    def __init__(
        self,
        stiffness: float = 0.1,
        damping: float = 0.8,
        mass: float = 1.0,
        size: float = 20.0,
        click_size: float = 30.0,
        click_hold: float = 200.0,
    ):
        self.stiffness = stiffness
        self.damping = damping
        self.mass = mass
        self.rest_size = size
        self.click_size = click_size
        self.click_hold = click_hold

        self.x = self.y = 0.0
        self.size = size
        self.vx = self.vy = self.v_size = 0.0
        self.clicked = False
        self.clicked_at = 0.0

    def click(self, now: float) -> None:
        self.clicked = True
        self.clicked_at = now

    def _step(self, value: float, target: float, velocity: float) -> Tuple[float, float]:
        # force is divided by mass before damping, unlike the node springs
        velocity = (velocity + (target - value) * self.stiffness / self.mass) * self.damping
        return value + velocity, velocity

    def update(self, now: float, pointer: Optional[Tuple[float, float]]) -> CursorState:
        if pointer is not None:
            tx, ty = pointer[0], pointer[1]
        else:
            tx, ty = self.x, self.y
        target_size = self.click_size if self.clicked else self.rest_size

        self.x, self.vx = self._step(self.x, tx, self.vx)
        self.y, self.vy = self._step(self.y, ty, self.vy)
        self.size, self.v_size = self._step(self.size, target_size, self.v_size)

        if self.clicked and now - self.clicked_at > self.click_hold:
            self.clicked = False
        return CursorState(self.x, self.y, self.size, self.clicked)
