"""Exception types raised by the Broadside engine.

Ordinary gameplay outcomes (a rejected placement, a repeated shot) are
reported through return values. These exceptions signal programming faults.
"""

from __future__ import annotations


class BattleshipError(Exception):
    """Base class for all engine faults."""


class InvalidShipSize(BattleshipError, ValueError):
    """Raised when a ship is constructed with a size outside the fleet range."""


class ShipPlacementError(BattleshipError):
    """Raised when committing a validated placement fails unexpectedly."""


class IndexOutOfRange(BattleshipError, IndexError):
    """Raised when a cell outside the board is accessed."""


class BoardInitializationError(BattleshipError):
    """Raised when the board grid cannot be built."""
