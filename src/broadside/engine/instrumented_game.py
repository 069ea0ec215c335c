"""Instrumented game session with telemetry hooks."""

from __future__ import annotations

import time

from broadside.ai.instrumented_targeting import InstrumentedHuntKillTargeting
from broadside.engine.game import GameSession, ShotOutcome
from broadside.engine.ship import Orientation
from broadside.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedGameSession(GameSession):
    """Wraps GameSession with tracing, metrics, and logging."""

    targeting_factory = InstrumentedHuntKillTargeting

    def __init__(self, *args, **kwargs) -> None:
        self._logger = get_logger("broadside.engine")
        self._tracer = get_tracer("broadside.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0
        super().__init__(*args, **kwargs)
        self._start_game_span()

    def place_player_ship(self, size: int, orientation: Orientation, x: int, y: int) -> bool:
        with self._tracer.start_as_current_span("broadside.engine.place_player_ship") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("ship.size", size)
            span.set_attribute("ship.orientation", orientation.value)
            span.set_attribute("coord.x", x)
            span.set_attribute("coord.y", y)
            placed = super().place_player_ship(size, orientation, x, y)
            span.set_attribute("placed", placed)
            record_game_metric(
                "broadside_ship_placements_total",
                1,
                {"result": "success" if placed else "rejected"},
            )
            self._logger.info("place_player_ship size=%d at (%d,%d) placed=%s", size, x, y, placed)
            return placed

    def fire_at_enemy(self, x: int, y: int) -> ShotOutcome:
        with self._tracer.start_as_current_span("broadside.engine.fire_at_enemy") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("coord.x", x)
            span.set_attribute("coord.y", y)

            try:
                outcome = super().fire_at_enemy(x, y)
            except IndexError as exc:
                record_game_metric(
                    "broadside_game_invalid_moves_total",
                    1,
                    {"reason": "out_of_bounds"},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error("Invalid shot at (%d,%d): %s", x, y, exc)
                raise

            span.set_attribute("accepted", outcome.accepted)
            span.set_attribute("hit", outcome.hit)
            span.set_attribute("sunk", outcome.ship_sunk)
            if outcome.accepted:
                record_game_metric("broadside_shots_total", 1, {"player": "player"})
                record_game_metric(
                    "broadside_shots_by_result_total",
                    1,
                    {"player": "player", "result": "hit" if outcome.hit else "miss"},
                )
            self._logger.info(
                "fire_at_enemy coord=(%d,%d) accepted=%s hit=%s",
                x,
                y,
                outcome.accepted,
                outcome.hit,
            )

            if outcome.game_over and outcome.winner:
                span.set_attribute("winner", outcome.winner.name)
                self._finish_game()
            return outcome

    def _enemy_turn(self) -> None:
        with self._tracer.start_as_current_span("broadside.engine.enemy_turn") as span:
            fired_before = len(self.targeting.fired)
            super()._enemy_turn()
            shots = len(self.targeting.fired) - fired_before
            span.set_attribute("shots", shots)
            record_game_metric("broadside_shots_total", shots, {"player": "enemy"})

    def restart(self, seed: int | None = None) -> None:
        with self._tracer.start_as_current_span("broadside.engine.restart"):
            super().restart(seed)
        self._start_game_span()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("broadside.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        total_shots = sum(
            1 for board in (self.player_board, self.enemy_board) for cell in board.cells() if cell.was_shot
        )
        winner = self.winner.name if self.winner else "unknown"

        record_game_metric("broadside_game_completed_total", 1, {"winner": winner})
        record_game_metric("broadside_game_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("broadside.engine.game_complete") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("winner", winner)
            span.set_attribute("shots", total_shots)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("shots", total_shots)
            self._game_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info("Game finished. Winner=%s shots=%d duration_s=%.3f", winner, total_shots, duration)
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
