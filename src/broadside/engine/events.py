"""State-change notifications published by the engine.

Front-ends subscribe to these instead of polling. Dispatch is synchronous and
happens on the thread that triggered the change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .game import GameResult, Player, TurnIndicator
    from .ship import Coordinate, Orientation

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent")
EventHandler = Callable[[Any], None]


@dataclass(frozen=True)
class CellStateChanged:
    """A cell was fired upon."""

    owner: str
    position: Coordinate
    hit: bool
    ship_sunk: bool


@dataclass(frozen=True)
class ShipPlaced:
    owner: str
    size: int
    orientation: Orientation
    positions: tuple[Coordinate, ...]


@dataclass(frozen=True)
class TurnChanged:
    indicator: TurnIndicator


@dataclass(frozen=True)
class GameEnded:
    result: GameResult
    winner: Player


@dataclass(frozen=True)
class Subscription:
    id: int


class EventBus:
    """In-process pub/sub keyed on event type."""

    def __init__(self) -> None:
        self._next_id = 1
        self._subscriptions: dict[int, tuple[type, EventHandler]] = {}

    def subscribe(self, event_type: type[TEvent], handler: Callable[[TEvent], None]) -> Subscription:
        """Register ``handler`` for ``event_type`` and its subclasses."""
        sub_id = self._next_id
        self._next_id += 1
        self._subscriptions[sub_id] = (event_type, handler)
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.pop(subscription.id, None)

    def publish(self, event: object) -> int:
        """Deliver ``event`` and return the number of handlers invoked."""
        invoked = 0
        for subscribed_type, handler in tuple(self._subscriptions.values()):
            if isinstance(event, subscribed_type):
                handler(event)
                invoked += 1
        logger.debug("event_published", extra={"event": type(event).__name__, "handlers": invoked})
        return invoked
