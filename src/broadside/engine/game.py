"""Human-vs-AI Broadside game session."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

from broadside.ai.targeting import HuntKillTargeting
from broadside.telemetry import get_meter, get_tracer

from .board import Board
from .config import GameConfig
from .events import EventBus, GameEnded, TurnChanged
from .ship import Orientation, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

MOVE_COUNTER = meter.create_counter(
    "broadside_engine_moves",
    unit="1",
    description="Number of player shots handled by GameSession",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class Player(Enum):
    """The two sides of a match."""

    PLAYER = "player"
    ENEMY = "enemy"

    def opponent(self) -> Player:
        """Return the opposing side."""
        return Player.ENEMY if self is Player.PLAYER else Player.PLAYER


class TurnIndicator(Enum):
    """What a front-end should show as the current turn."""

    PLAYER = "Your Turn"
    ENEMY = "Enemy's Turn"
    PAUSED = "Game Paused"


class GameResult(Enum):
    """Outcome from the human player's point of view."""

    WIN = "You Win!"
    LOSE = "You Lose!"


@dataclass(frozen=True)
class ShotOutcome:
    """Result of a player shot, including everything the AI did in reply."""

    accepted: bool
    hit: bool = False
    ship_sunk: bool = False
    game_over: bool = False
    winner: Player | None = None


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current session."""

    phase: GamePhase
    turn: TurnIndicator
    ships_to_place: int
    player_ships_remaining: int
    enemy_ships_remaining: int
    result: GameResult | None
    winner: Player | None


class GameSession:
    """Coordinates setup, turn order and win detection between the two boards."""

    targeting_factory = HuntKillTargeting

    def __init__(
        self,
        config: GameConfig | None = None,
        events: EventBus | None = None,
        rng_seed: int | None = None,
    ) -> None:
        self.config = config or GameConfig(rng_seed=rng_seed)
        seed = rng_seed if rng_seed is not None else self.config.rng_seed
        self.events = events or EventBus()
        self.rng = random.Random(seed)
        fleet_size = len(self.config.fleet)
        self.player_board = Board(
            enemy=False, owner=Player.PLAYER.value, fleet_size=fleet_size, events=self.events
        )
        self.enemy_board = Board(
            enemy=True, owner=Player.ENEMY.value, fleet_size=fleet_size, events=self.events
        )
        self.targeting = self.targeting_factory(self.player_board, self.rng)
        self._reset_state()

    def _reset_state(self) -> None:
        self._pending_sizes: list[int] = list(self.config.fleet)
        self.running = False
        self.paused = False
        self.turn = Player.PLAYER
        self.result: GameResult | None = None
        self.winner: Player | None = None

    @property
    def ships_to_place(self) -> int:
        return len(self._pending_sizes)

    @property
    def next_ship_size(self) -> int | None:
        """Size of the next ship the player is expected to place, largest first."""
        return max(self._pending_sizes) if self._pending_sizes else None

    @property
    def phase(self) -> GamePhase:
        if self.result is not None:
            return GamePhase.FINISHED
        if self.paused:
            return GamePhase.PAUSED
        if self.running:
            return GamePhase.PLAYING
        return GamePhase.SETUP

    @property
    def turn_indicator(self) -> TurnIndicator:
        if self.paused:
            return TurnIndicator.PAUSED
        return TurnIndicator.ENEMY if self.turn is Player.ENEMY else TurnIndicator.PLAYER

    def place_player_ship(self, size: int, orientation: Orientation, x: int, y: int) -> bool:
        """Place one of the player's ships during setup.

        Returns ``False`` for any ordinary rejection: wrong phase, paused, a
        size that is not left to place, or an illegal position. Placing the
        last ship starts the game.
        """
        ship = Ship(size, orientation)
        if self.phase is not GamePhase.SETUP:
            logger.warning(
                "placement_rejected_wrong_phase", extra={"phase": self.phase.value, "size": size}
            )
            return False
        if size not in self._pending_sizes:
            logger.warning(
                "placement_rejected_size",
                extra={"size": size, "pending": list(self._pending_sizes)},
            )
            return False
        if not self.player_board.place_ship(ship, x, y):
            return False

        self._pending_sizes.remove(size)
        logger.info("player_ship_placed", extra={"size": size, "ships_to_place": self.ships_to_place})
        if not self._pending_sizes:
            self._start_game()
        return True

    def _start_game(self) -> None:
        with tracer.start_as_current_span("game.start"):
            self.enemy_board.random_placement(self.rng, self.config.fleet)
            self.running = True
            self.turn = Player.PLAYER
            logger.info("game_started", extra={"fleet": list(self.config.fleet)})
            self._publish_turn()

    def fire_at_enemy(self, x: int, y: int) -> ShotOutcome:
        """Fire the player's shot at the enemy board.

        A miss hands the turn to the AI, which keeps firing until it misses or
        wins before this method returns.
        """
        with tracer.start_as_current_span("game.fire_at_enemy") as span:
            span.set_attribute("x", x)
            span.set_attribute("y", y)
            if not self.running or self.paused or self.turn is not Player.PLAYER:
                logger.info(
                    "shot_ignored",
                    extra={"phase": self.phase.value, "turn": self.turn.value, "x": x, "y": y},
                )
                return ShotOutcome(accepted=False)

            shot = self.enemy_board.fire_at(x, y)
            if shot is None:
                return ShotOutcome(accepted=False)

            MOVE_COUNTER.add(1, attributes={"result": "hit" if shot.hit else "miss"})
            if self.enemy_board.all_ships_sunk():
                self._finish(Player.PLAYER)
            elif not shot.hit:
                self.turn = Player.ENEMY
                self._publish_turn()
                self._enemy_turn()

            span.set_attribute("hit", shot.hit)
            span.set_attribute("game_over", self.result is not None)
            return ShotOutcome(
                accepted=True,
                hit=shot.hit,
                ship_sunk=shot.ship_sunk,
                game_over=self.result is not None,
                winner=self.winner,
            )

    def _enemy_turn(self) -> None:
        """Let the AI fire until it misses or sinks the player's last ship.

        If a fault escapes mid-turn, the turn is handed back to the player so
        the session stays playable.
        """
        try:
            while self.running and self.turn is Player.ENEMY:
                shots = self.targeting.step()
                if self.player_board.all_ships_sunk():
                    self._finish(Player.ENEMY)
                    return
                if shots:
                    if not shots[-1].hit:
                        self.turn = Player.PLAYER
                elif self.targeting.exhausted:
                    self.turn = Player.PLAYER
        finally:
            if self.running and self.turn is Player.ENEMY:
                logger.error("enemy_turn_aborted", extra={"fired": len(self.targeting.fired)})
                self.turn = Player.PLAYER
        self._publish_turn()

    def _finish(self, winner: Player) -> None:
        self.running = False
        self.winner = winner
        self.result = GameResult.WIN if winner is Player.PLAYER else GameResult.LOSE
        logger.info("game_finished", extra={"winner": winner.value, "result": self.result.name})
        self.events.publish(GameEnded(result=self.result, winner=winner))

    def pause(self) -> None:
        if self.paused or self.result is not None:
            return
        self.paused = True
        logger.info("game_paused")
        self._publish_turn()

    def resume(self) -> None:
        if not self.paused:
            return
        self.paused = False
        logger.info("game_resumed")
        self._publish_turn()

    def toggle_pause(self) -> None:
        if self.paused:
            self.resume()
        else:
            self.pause()

    def restart(self, seed: int | None = None) -> None:
        """Clear both boards and the AI state and return to ship placement."""
        with tracer.start_as_current_span("game.restart"):
            logger.info("game_restarting")
            if seed is not None:
                self.rng.seed(seed)
            self._reset_state()
            self.targeting.reset()
            self.enemy_board.clear()
            self.player_board.clear()
            self._publish_turn()
            logger.info("game_restarted")

    def get_state(self) -> GameState:
        """Return an immutable view of the current session."""
        return GameState(
            phase=self.phase,
            turn=self.turn_indicator,
            ships_to_place=self.ships_to_place,
            player_ships_remaining=self.player_board.ships_remaining,
            enemy_ships_remaining=self.enemy_board.ships_remaining,
            result=self.result,
            winner=self.winner,
        )

    def _publish_turn(self) -> None:
        self.events.publish(TurnChanged(indicator=self.turn_indicator))
