"""Hunt-and-kill shot selection for the computer opponent."""

from __future__ import annotations

import logging
import random
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING

from broadside.engine.ship import Coordinate

if TYPE_CHECKING:  # pragma: no cover - typing only
    from broadside.engine.board import Board, ShotResult

logger = logging.getLogger(__name__)


class TargetingMode(Enum):
    HUNT = "hunt"
    KILL = "kill"


class HuntKillTargeting:
    """Stateful shot selector operating against a single opposing board.

    In hunt mode it fires at a random cell it has not targeted yet. Each hit is
    queued; while the queue is non-empty it is in kill mode and works through
    the neighbours of the oldest queued hit, stopping at the first new hit.
    """

    def __init__(self, board: Board, rng: random.Random) -> None:
        self.board = board
        self._rng = rng
        self.fired: set[Coordinate] = set()
        self.hunt_queue: deque[Coordinate] = deque()
        self.hit_cells: list[Coordinate] = []

    @property
    def mode(self) -> TargetingMode:
        return TargetingMode.KILL if self.hunt_queue else TargetingMode.HUNT

    @property
    def exhausted(self) -> bool:
        """True once every cell on the board has been fired upon."""
        return len(self.fired) >= self.board.size * self.board.size

    def step(self) -> list[ShotResult]:
        """Run one selection step and return the shots it fired, in order."""
        if self.hunt_queue:
            return self._fire_at_adjacent()
        shot = self._fire_random()
        return [shot] if shot is not None else []

    def reset(self) -> None:
        self.fired.clear()
        self.hunt_queue.clear()
        self.hit_cells.clear()

    def _fire_random(self) -> ShotResult | None:
        candidates = [
            cell.coordinate
            for cell in self.board.cells()
            if not cell.was_shot and cell.coordinate not in self.fired
        ]
        if not candidates:
            logger.warning("targeting_no_candidates", extra={"fired": len(self.fired)})
            return None
        return self._fire(self._rng.choice(candidates), TargetingMode.HUNT)

    def _fire_at_adjacent(self) -> list[ShotResult]:
        # Remaining neighbours of ``target`` are not revisited once one of them hits.
        target = self.hunt_queue.popleft()
        shots: list[ShotResult] = []
        for neighbour in self.board.neighbours(target.x, target.y):
            coord = neighbour.coordinate
            if coord in self.fired or neighbour.was_shot:
                continue
            shot = self._fire(coord, TargetingMode.KILL)
            if shot is None:
                continue
            shots.append(shot)
            if shot.hit:
                break
        return shots

    def _fire(self, coord: Coordinate, mode: TargetingMode) -> ShotResult | None:
        self.fired.add(coord)
        shot = self.board.fire_at(coord.x, coord.y)
        if shot is None:
            return None
        if shot.hit:
            self.hit_cells.append(coord)
            self.hunt_queue.append(coord)
        logger.info(
            "ai_shot",
            extra={
                "x": coord.x,
                "y": coord.y,
                "mode": mode.value,
                "hit": shot.hit,
                "ship_sunk": shot.ship_sunk,
            },
        )
        return shot
