from __future__ import annotations

import logging
from typing import Callable, List, NamedTuple, Optional, Set, Tuple

from ..utils.colors import ColorLike, parse_color
from .entity import Entity

logger = logging.getLogger(__name__)

# After a touch ends the pointer lingers briefly so the click animation can
# play out under it before proximity falls back to "absent".
POINTER_RESET_DELAY = 100.0
# Fallback when a touch start never gets its touch end.
TOUCH_RELEASE_TIMEOUT = 300.0

CellCallback = Callable[[int, int], None]


class RouterState(NamedTuple):
    pressed: bool
    dragging: bool
    painted: int


class InteractionRouter:
    """Turns pointer and touch events into node activations.

    In normal mode every node under the pointer is activated. In edit mode the
    nodes under the pointer are repainted with ``edit_color`` and reported to
    ``on_cell_click``; a cell is painted once per drag.

    ``field`` only needs ``entities_under(pointer)``. The router keeps the
    pointer itself: pass :attr:`pointer` to the field's ``tick``.
    """

    def __init__(
        self,
        field,
        edit_mode: bool = False,
        edit_color: Optional[ColorLike] = None,
        on_cell_click: Optional[CellCallback] = None,
    ):
        self.field = field
        self.edit_mode = edit_mode
        self.edit_color = None if edit_color is None else parse_color(edit_color)
        self.on_cell_click = on_cell_click

        self.pointer = None
        self.pressed = False
        self.dragging = False
        self._painted: Set[Tuple[Optional[int], int, int]] = set()
        self._release_at: Optional[float] = None
        self._reset_at: Optional[float] = None

    @property
    def state(self) -> RouterState:
        return RouterState(self.pressed, self.dragging, len(self._painted))

    def rebind(self, field) -> None:
        self.field = field
        self._painted.clear()

    def set_edit_mode(self, edit_mode: bool, edit_color: Optional[ColorLike] = None) -> None:
        self.edit_mode = edit_mode
        if edit_color is not None:
            self.edit_color = parse_color(edit_color)
        self.dragging = False
        self._painted.clear()

    def _begin_drag(self) -> None:
        if self.edit_mode:
            self.dragging = True
            self._painted.clear()

    def _end_drag(self) -> None:
        if self.edit_mode:
            if self._painted:
                logger.debug("edit drag ended, %d cells painted", len(self._painted))
            self.dragging = False
            self._painted.clear()

    # -- mouse ----------------------------------------------------------

    def mouse_pressed(self, now: float, pointer) -> List[Entity]:
        self.pointer = pointer
        self.pressed = True
        self._begin_drag()
        return self._hit(now)

    def mouse_dragged(self, now: float, pointer) -> List[Entity]:
        self.pointer = pointer
        if not self.pressed:
            return []
        if self.edit_mode and not self.dragging:
            self.dragging = True
        return self._hit(now)

    def mouse_released(self, now: float, pointer=None) -> None:
        if pointer is not None:
            self.pointer = pointer
        self.pressed = False
        self._end_drag()

    def mouse_moved(self, now: float, pointer) -> None:
        self.pointer = pointer

    # -- touch ----------------------------------------------------------

    def touch_started(self, now: float, pointer) -> List[Entity]:
        self.pointer = pointer
        self.pressed = True
        self._reset_at = None
        self._begin_drag()
        self._release_at = now + TOUCH_RELEASE_TIMEOUT
        return self._hit(now)

    def touch_moved(self, now: float, pointer) -> List[Entity]:
        if pointer is None:
            return []
        self.pointer = pointer
        if self.edit_mode and not self.dragging:
            self.dragging = True
        return self._hit(now)

    def touch_ended(self, now: float) -> None:
        self.pressed = False
        self._release_at = None
        if self.edit_mode:
            self._end_drag()
        else:
            self._reset_at = now + POINTER_RESET_DELAY

    def poll(self, now: float) -> None:
        """Apply deferred touch resets that have come due."""
        if self._release_at is not None and now >= self._release_at:
            self.pressed = False
            if not self.edit_mode:
                self._reset_at = self._release_at + POINTER_RESET_DELAY
            self._release_at = None
        if self._reset_at is not None and now >= self._reset_at:
            self.pointer = None
            self._reset_at = None

    # -- dispatch -------------------------------------------------------

    def _hit(self, now: float) -> List[Entity]:
        touched: List[Entity] = []
        for e in self.field.entities_under(self.pointer):
            if self.edit_mode:
                if self._paint(e):
                    touched.append(e)
            elif e.activate(now):
                touched.append(e)
        return touched

    def _paint(self, e: Entity) -> bool:
        cell = (e.face, e.row, e.col)
        if self.dragging:
            if cell in self._painted:
                return False
            self._painted.add(cell)
        if self.edit_color is not None:
            e.set_color(self.edit_color, snap=True)
        if self.on_cell_click is not None:
            self.on_cell_click(e.row, e.col)
        return True
