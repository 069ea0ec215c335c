"""A single position on a board."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .events import CellStateChanged
from .ship import Coordinate, Ship

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .board import Board

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Cell:
    """Grid cell holding an optional, non-owning reference to a ship."""

    x: int
    y: int
    board: Board | None = field(default=None, repr=False)
    occupant: Ship | None = None
    was_shot: bool = False

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def fire(self) -> bool:
        """Shoot this cell and return whether a ship was hit.

        The owning board is told when the shot sinks the occupant, so its live
        ship count drops once per ship no matter how often the cell is fired.
        """
        self.was_shot = True
        ship = self.occupant
        if ship is None:
            logger.debug("cell_miss", extra={"x": self.x, "y": self.y})
            self._notify(hit=False, ship_sunk=False)
            return False

        was_alive = ship.is_alive()
        ship.hit()
        sunk = was_alive and not ship.is_alive()
        if sunk and self.board is not None:
            self.board.register_sunk(ship)
        logger.debug("cell_hit", extra={"x": self.x, "y": self.y, "ship_sunk": sunk})
        self._notify(hit=True, ship_sunk=sunk)
        return True

    def reset(self) -> None:
        self.occupant = None
        self.was_shot = False

    def _notify(self, *, hit: bool, ship_sunk: bool) -> None:
        if self.board is None or self.board.events is None:
            return
        self.board.events.publish(
            CellStateChanged(
                owner=self.board.owner,
                position=self.coordinate,
                hit=hit,
                ship_sunk=ship_sunk,
            )
        )
