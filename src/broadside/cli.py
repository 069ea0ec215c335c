"""Command-line front-end for playing Broadside against the hunt-and-kill AI."""

from __future__ import annotations

import argparse
import logging
from typing import Callable, Sequence

from broadside.engine.board import Board
from broadside.engine.config import GameConfig
from broadside.engine.errors import BattleshipError
from broadside.engine.events import CellStateChanged, GameEnded, TurnChanged
from broadside.engine.game import GamePhase, GameSession, Player
from broadside.engine.instrumented_game import InstrumentedGameSession
from broadside.engine.ship import Coordinate, Orientation
from broadside.telemetry import init_telemetry, load_telemetry_config
from broadside.telemetry.logger import configure_console_logging

ROW_LABELS = "ABCDEFGHIJ"

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def _coordinate_from_input(text: str) -> Coordinate:
    """Parse ``A5`` (row letter, column number) or ``"x y"`` into a coordinate."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        y = ROW_LABELS.index(cleaned[0])
        try:
            x = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            x, y = map(int, parts)
        except ValueError as exc:
            raise ValueError("Coordinates must be whole numbers.") from exc
    if x not in range(10) or y not in range(10):
        raise ValueError("Coordinates must be within the 10x10 board.")
    return Coordinate(x, y)


def _label(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.y]}{coord.x + 1}"


def _format_board(board: Board, show_ships: bool) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(board.size))
    rows = [header]
    for y in range(board.size):
        symbols = []
        for x in range(board.size):
            cell = board.get_cell(x, y)
            if cell.was_shot:
                symbol = "X" if cell.occupant is not None else "o"
            elif show_ships and cell.occupant is not None:
                symbol = "S"
            else:
                symbol = "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[y]} |" + " ".join(symbols))
    return "\n".join(rows)


def _parse_orientation(raw: str) -> Orientation | None:
    cleaned = raw.strip().upper()
    if cleaned in {"H", "HOR", "HORIZONTAL"}:
        return Orientation.HORIZONTAL
    if cleaned in {"V", "VER", "VERTICAL"}:
        return Orientation.VERTICAL
    return None


class ConsoleFrontEnd:
    """Text front-end that drives a GameSession and narrates its events."""

    def __init__(
        self,
        session: GameSession,
        input_fn: InputFn | None = None,
        output_fn: OutputFn | None = None,
    ) -> None:
        self.session = session
        self._input = input_fn or input
        self._output = output_fn or print
        self._quit = False
        session.events.subscribe(CellStateChanged, self._on_cell_changed)
        session.events.subscribe(TurnChanged, self._on_turn_changed)
        session.events.subscribe(GameEnded, self._on_game_ended)

    def _on_cell_changed(self, event: CellStateChanged) -> None:
        shooter = "You" if event.owner == Player.ENEMY.value else "Enemy"
        outcome = "hit" if event.hit else "miss"
        if event.ship_sunk:
            outcome = "hit and sank a ship!"
        self._output(f"{shooter} fired at {_label(event.position)}: {outcome}")

    def _on_turn_changed(self, event: TurnChanged) -> None:
        self._output(f"-- {event.indicator.value} --")

    def _on_game_ended(self, event: GameEnded) -> None:
        self._output(f"\n{event.result.value}")

    def _handle_command(self, raw: str) -> bool:
        """Handle quit/pause/restart; return True if ``raw`` was a command."""
        command = raw.strip().lower()
        if command == "q":
            self._quit = True
            return True
        if command == "p":
            self.session.toggle_pause()
            return True
        if command == "r":
            self.session.restart()
            return True
        return False

    def place_fleet(self, auto_place: bool) -> None:
        if auto_place:
            self._auto_place()
            return
        while not self._quit and self.session.phase in {GamePhase.SETUP, GamePhase.PAUSED}:
            if self.session.phase is GamePhase.PAUSED:
                raw = self._input("Game paused. Enter 'p' to resume or 'q' to quit: ")
                self._handle_command(raw)
                continue
            size = self.session.next_ship_size
            self._output("\nYour board:")
            self._output(_format_board(self.session.player_board, show_ships=True))
            raw = self._input(f"Place ship of length {size}. Orientation [H/V]: ")
            if self._handle_command(raw):
                continue
            orientation = _parse_orientation(raw)
            if orientation is None:
                self._output("Please enter H for horizontal or V for vertical.")
                continue
            raw = self._input("Enter starting coordinate (e.g., A1): ")
            if self._handle_command(raw):
                continue
            try:
                start = _coordinate_from_input(raw)
            except ValueError as exc:
                self._output(f"Invalid coordinate: {exc}")
                continue
            if not self.session.place_player_ship(size, orientation, start.x, start.y):
                self._output("Ship cannot be placed there (out of bounds or touching). Try again.")

    def _auto_place(self) -> None:
        rng = self.session.rng
        while self.session.phase is GamePhase.SETUP:
            size = self.session.next_ship_size
            self.session.place_player_ship(
                size,
                rng.choice(list(Orientation)),
                rng.randrange(self.session.player_board.size),
                rng.randrange(self.session.player_board.size),
            )
        self._output("Your ships have been positioned automatically.")

    def play(self, auto_place: bool = False) -> GameSession:
        self._output("Welcome to Broadside!\n")
        while not self._quit:
            phase = self.session.phase
            if phase is GamePhase.SETUP:
                self.place_fleet(auto_place)
            elif phase is GamePhase.PAUSED:
                raw = self._input("Game paused. Enter 'p' to resume or 'q' to quit: ")
                self._handle_command(raw)
            elif phase is GamePhase.PLAYING:
                self._player_turn()
            else:
                raw = self._input("Enter 'r' to play again or 'q' to quit: ")
                self._handle_command(raw)
        return self.session

    def _player_turn(self) -> None:
        self._output("\nYour board:")
        self._output(_format_board(self.session.player_board, show_ships=True))
        self._output("\nEnemy waters:")
        self._output(_format_board(self.session.enemy_board, show_ships=False))
        raw = self._input("Target (e.g., A5), 'p' pause, 'r' restart, 'q' quit: ")
        if self._handle_command(raw):
            return
        try:
            coord = _coordinate_from_input(raw)
        except ValueError as exc:
            self._output(f"Invalid input: {exc}")
            return
        try:
            outcome = self.session.fire_at_enemy(coord.x, coord.y)
        except BattleshipError as exc:
            self._output(f"Error: {exc}")
            return
        if not outcome.accepted:
            self._output("That cell has already been targeted. Choose another.")


def build_session(seed: int | None = None, telemetry: bool = False) -> GameSession:
    config = GameConfig.from_env(**({"rng_seed": seed} if seed is not None else {}))
    if telemetry:
        init_telemetry(load_telemetry_config())
        return InstrumentedGameSession(config=config)
    return GameSession(config=config)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Broadside via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--auto-place", action="store_true", help="Place your fleet at random."
    )
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="Enable OpenTelemetry export configured from the environment.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr.")
    args = parser.parse_args(argv)
    configure_console_logging(logging.INFO if args.verbose else logging.WARNING)
    session = build_session(seed=args.seed, telemetry=args.telemetry)
    ConsoleFrontEnd(session).play(auto_place=args.auto_place)


if __name__ == "__main__":
    main()
