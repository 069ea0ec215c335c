"""Board management for the Broadside engine."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from broadside.telemetry import get_meter, get_tracer

from .cell import Cell
from .errors import BoardInitializationError, IndexOutOfRange, ShipPlacementError
from .events import EventBus, ShipPlaced
from .ship import Coordinate, Orientation, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

BOARD_SIZE = 10
FLEET_SIZES: tuple[int, ...] = (5, 4, 3, 2, 1)

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a board",
)


@dataclass(frozen=True)
class ShotResult:
    """Outcome of a single shot against a board."""

    position: Coordinate
    hit: bool
    ship_sunk: bool


class Board:
    """A 10×10 grid of cells together with the fleet placed on it."""

    def __init__(
        self,
        *,
        enemy: bool = False,
        owner: str = "unknown",
        fleet_size: int = len(FLEET_SIZES),
        events: EventBus | None = None,
    ) -> None:
        self.size = BOARD_SIZE
        self.enemy = enemy
        self.owner = owner
        self.fleet_size = fleet_size
        self.events = events
        self.ships: list[Ship] = []
        self._ships_remaining = fleet_size
        self._rows = self._build_grid()

    def _build_grid(self) -> list[list[Cell]]:
        try:
            return [[Cell(x, y, board=self) for x in range(self.size)] for y in range(self.size)]
        except Exception as exc:
            logger.error("board_grid_failed", extra={"owner": self.owner}, exc_info=True)
            raise BoardInitializationError("Failed to initialise the grid.") from exc

    @property
    def ships_remaining(self) -> int:
        """Number of ships on this board that are still afloat."""
        return self._ships_remaining

    def register_sunk(self, ship: Ship) -> None:
        """Called by a cell when its shot sinks ``ship``."""
        self._ships_remaining = max(0, self._ships_remaining - 1)
        logger.info(
            "ship_sunk",
            extra={"owner": self.owner, "size": ship.size, "remaining": self._ships_remaining},
        )

    def is_valid_point(self, x: int, y: int) -> bool:
        """Check whether a position lies inside the board boundaries."""
        return 0 <= x < self.size and 0 <= y < self.size

    def get_cell(self, x: int, y: int) -> Cell:
        if not self.is_valid_point(x, y):
            logger.error("cell_out_of_bounds", extra={"x": x, "y": y, "owner": self.owner})
            raise IndexOutOfRange(f"Cell ({x}, {y}) is outside the {self.size}x{self.size} board.")
        return self._rows[y][x]

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell, row by row."""
        for row in self._rows:
            yield from row

    def neighbours(self, x: int, y: int) -> list[Cell]:
        """Return the in-bounds cells left, right, above and below a position."""
        candidates = ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1))
        return [self.get_cell(cx, cy) for cx, cy in candidates if self.is_valid_point(cx, cy)]

    def can_place_ship(self, ship: Ship, x: int, y: int) -> bool:
        """Determine whether a ship fits at the origin without touching another ship."""
        for coord in ship.span(Coordinate(x, y)):
            if not self.is_valid_point(coord.x, coord.y):
                return False
            if self.get_cell(coord.x, coord.y).occupant is not None:
                return False
            if any(neighbour.occupant is not None for neighbour in self.neighbours(coord.x, coord.y)):
                return False
        return True

    def place_ship(self, ship: Ship, x: int, y: int) -> bool:
        """Place ``ship`` with its origin at ``(x, y)`` if the position is legal."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.size", ship.size)
            span.set_attribute("ship.orientation", ship.orientation.value)
            span.set_attribute("ship.origin.x", x)
            span.set_attribute("ship.origin.y", y)
            span.set_attribute("board.owner", self.owner)
            details = {
                "owner": self.owner,
                "size": ship.size,
                "orientation": ship.orientation.name,
                "x": x,
                "y": y,
            }
            if not self.can_place_ship(ship, x, y):
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.warning("ship_placement_failed", extra=details)
                return False

            positions = tuple(ship.span(Coordinate(x, y)))
            try:
                for coord in positions:
                    self.get_cell(coord.x, coord.y).occupant = ship
            except IndexError as exc:
                logger.error("ship_placement_error", extra=details, exc_info=True)
                raise ShipPlacementError(f"Error placing ship at ({x}, {y}).") from exc

            self.ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info("ship_placed", extra=details)
            if self.events is not None:
                self.events.publish(
                    ShipPlaced(
                        owner=self.owner,
                        size=ship.size,
                        orientation=ship.orientation,
                        positions=positions,
                    )
                )
            return True

    def fire_at(self, x: int, y: int) -> ShotResult | None:
        """Shoot the cell at ``(x, y)``; returns ``None`` if it was already shot."""
        with tracer.start_as_current_span("board.fire_at") as span:
            span.set_attribute("shot.x", x)
            span.set_attribute("shot.y", y)
            span.set_attribute("board.owner", self.owner)
            cell = self.get_cell(x, y)
            if cell.was_shot:
                logger.info("shot_repeated", extra={"x": x, "y": y, "owner": self.owner})
                return None

            ship = cell.occupant
            was_alive = ship is not None and ship.is_alive()
            hit = cell.fire()
            result = ShotResult(
                position=cell.coordinate,
                hit=hit,
                ship_sunk=was_alive and not ship.is_alive(),
            )
            outcome = "hit" if hit else "miss"
            span.set_attribute("shot.outcome", outcome)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome, "owner": self.owner})
            logger.info(
                f"shot_{outcome}",
                extra={"x": x, "y": y, "owner": self.owner, "ship_sunk": result.ship_sunk},
            )
            return result

    def all_ships_sunk(self) -> bool:
        return self._ships_remaining == 0

    def random_placement(self, rng: random.Random, sizes: Sequence[int] = FLEET_SIZES) -> None:
        """Clear the board and place one ship per size at random legal positions."""
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            self.clear()
            orientations = list(Orientation)
            for size in sizes:
                placed = False
                attempts = 0
                while not placed:
                    candidate = Ship(size, rng.choice(orientations))
                    placed = self.place_ship(candidate, rng.randrange(self.size), rng.randrange(self.size))
                    attempts += 1
                logger.debug(
                    "random_ship_placed",
                    extra={"size": size, "attempts": attempts, "owner": self.owner},
                )

    def clear(self) -> None:
        """Remove every ship and shot, restoring the full live-ship count."""
        for cell in self.cells():
            cell.reset()
        self.ships.clear()
        self._ships_remaining = self.fleet_size
        logger.debug("board_cleared", extra={"owner": self.owner})
