"""Ship domain model for the Broadside engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidShipSize

MIN_SHIP_SIZE = 1
MAX_SHIP_SIZE = 5


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate; ``x`` is the column and ``y`` the row."""

    x: int
    y: int


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(eq=False)
class Ship:
    """A single ship; its health drops by one for every hit it takes."""

    size: int
    orientation: Orientation
    health: int = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.size, int) or not MIN_SHIP_SIZE <= self.size <= MAX_SHIP_SIZE:
            raise InvalidShipSize(
                f"Ship size must be between {MIN_SHIP_SIZE} and {MAX_SHIP_SIZE}, got {self.size!r}."
            )
        self.health = self.size

    @property
    def vertical(self) -> bool:
        return self.orientation is Orientation.VERTICAL

    def hit(self) -> None:
        """Take one point of damage; a sunk ship ignores further hits."""
        if self.is_alive():
            self.health -= 1

    def is_alive(self) -> bool:
        return self.health > 0

    def span(self, origin: Coordinate) -> list[Coordinate]:
        """Return the ordered coordinates this ship would cover from ``origin``."""
        dx, dy = (0, 1) if self.vertical else (1, 0)
        return [Coordinate(origin.x + offset * dx, origin.y + offset * dy) for offset in range(self.size)]
