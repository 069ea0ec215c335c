"""High-level gameplay tests."""

import pytest

from broadside.engine.board import FLEET_SIZES
from broadside.engine.config import GameConfig
from broadside.engine.errors import IndexOutOfRange, InvalidShipSize
from broadside.engine.events import CellStateChanged, EventBus, GameEnded, TurnChanged
from broadside.engine.game import (
    GamePhase,
    GameResult,
    GameSession,
    Player,
    ShotOutcome,
    TurnIndicator,
)
from broadside.engine.ship import Coordinate, Orientation, Ship

# Non-touching horizontal layout: one ship per even row.
PLAYER_LAYOUT = {5: (0, 0), 4: (0, 2), 3: (0, 4), 2: (0, 6), 1: (0, 8)}


def _place_fleet(session: GameSession) -> None:
    for size in FLEET_SIZES:
        x, y = PLAYER_LAYOUT[size]
        assert session.place_player_ship(size, Orientation.HORIZONTAL, x, y)


def _empty_cell(session: GameSession) -> tuple[int, int]:
    for cell in session.enemy_board.cells():
        if cell.occupant is None and not cell.was_shot:
            return cell.x, cell.y
    raise AssertionError("no empty cell")


def _occupied_cell(session: GameSession) -> tuple[int, int]:
    for cell in session.enemy_board.cells():
        if cell.occupant is not None and not cell.was_shot:
            return cell.x, cell.y
    raise AssertionError("no occupied cell")


def test_full_setup_starts_game_with_full_fleets() -> None:
    session = GameSession(rng_seed=42)
    assert session.phase is GamePhase.SETUP
    assert session.next_ship_size == 5

    _place_fleet(session)

    assert session.phase is GamePhase.PLAYING
    assert session.ships_to_place == 0
    assert session.next_ship_size is None
    assert session.player_board.ships_remaining == 5
    assert session.enemy_board.ships_remaining == 5
    assert sorted(ship.size for ship in session.enemy_board.ships) == sorted(FLEET_SIZES)
    assert session.turn is Player.PLAYER


def test_placement_rejections_do_not_count() -> None:
    session = GameSession(rng_seed=1)
    assert session.place_player_ship(5, Orientation.HORIZONTAL, 0, 0)
    assert not session.place_player_ship(5, Orientation.HORIZONTAL, 0, 4)
    assert not session.place_player_ship(4, Orientation.HORIZONTAL, 0, 1)
    assert session.ships_to_place == 4
    with pytest.raises(InvalidShipSize):
        session.place_player_ship(6, Orientation.VERTICAL, 5, 5)


def test_fire_before_game_starts_is_ignored() -> None:
    session = GameSession()
    assert session.fire_at_enemy(0, 0) == ShotOutcome(accepted=False)


def test_player_hit_keeps_turn() -> None:
    session = GameSession(rng_seed=3)
    _place_fleet(session)
    x, y = _occupied_cell(session)

    outcome = session.fire_at_enemy(x, y)
    assert outcome.accepted and outcome.hit
    assert session.turn is Player.PLAYER
    assert session.targeting.fired == set()


def test_player_miss_hands_turn_to_ai_and_back() -> None:
    session = GameSession(rng_seed=5)
    _place_fleet(session)
    x, y = _empty_cell(session)

    outcome = session.fire_at_enemy(x, y)
    assert outcome.accepted and not outcome.hit
    assert session.targeting.fired, "AI should have fired at least once"
    if not outcome.game_over:
        assert session.turn is Player.PLAYER


def test_repeated_shot_is_ignored() -> None:
    session = GameSession(rng_seed=8)
    _place_fleet(session)
    x, y = _occupied_cell(session)
    session.fire_at_enemy(x, y)
    assert session.fire_at_enemy(x, y).accepted is False


def test_out_of_bounds_shot_raises() -> None:
    session = GameSession(rng_seed=8)
    _place_fleet(session)
    with pytest.raises(IndexOutOfRange):
        session.fire_at_enemy(10, 10)


def test_sinking_last_enemy_ship_wins() -> None:
    bus = EventBus()
    ended: list[GameEnded] = []
    bus.subscribe(GameEnded, ended.append)
    session = GameSession(rng_seed=11, events=bus)
    _place_fleet(session)

    targets = [cell for cell in session.enemy_board.cells() if cell.occupant is not None]
    outcome = None
    for cell in targets:
        outcome = session.fire_at_enemy(cell.x, cell.y)
        assert outcome.hit
    assert outcome is not None
    assert outcome.game_over
    assert outcome.winner is Player.PLAYER
    assert session.phase is GamePhase.FINISHED
    assert session.result is GameResult.WIN
    assert ended == [GameEnded(result=GameResult.WIN, winner=Player.PLAYER)]
    assert session.fire_at_enemy(*_empty_cell(session)).accepted is False


def test_ai_stops_immediately_when_player_fleet_is_gone() -> None:
    bus = EventBus()
    ai_shots: list[CellStateChanged] = []
    bus.subscribe(
        CellStateChanged,
        lambda event: ai_shots.append(event) if event.owner == Player.PLAYER.value else None,
    )
    session = GameSession(config=GameConfig(rng_seed=2, fleet=(1,)), events=bus)
    assert session.place_player_ship(1, Orientation.HORIZONTAL, 4, 4)

    # The player only ever targets empty water, so the AI must win.
    outcome = ShotOutcome(accepted=False)
    while not outcome.game_over:
        x, y = _empty_cell(session)
        outcome = session.fire_at_enemy(x, y)
        assert outcome.accepted

    assert outcome.winner is Player.ENEMY
    assert session.result is GameResult.LOSE
    assert session.player_board.ships_remaining == 0
    assert session.targeting.hit_cells[-1] == Coordinate(4, 4)
    assert ai_shots[-1].position == Coordinate(4, 4)
    assert ai_shots[-1].ship_sunk
    assert len(ai_shots) == len(session.targeting.fired)
    assert not session.running


def test_enemy_turn_fault_hands_turn_back_to_player() -> None:
    bus = EventBus()
    failures: list[CellStateChanged] = []

    def fail_once(event: CellStateChanged) -> None:
        if event.owner == Player.PLAYER.value and not failures:
            failures.append(event)
            raise RuntimeError("front-end crashed")

    bus.subscribe(CellStateChanged, fail_once)
    session = GameSession(rng_seed=4, events=bus)
    _place_fleet(session)

    with pytest.raises(RuntimeError):
        session.fire_at_enemy(*_empty_cell(session))

    assert failures
    assert session.turn is Player.PLAYER
    assert session.phase is GamePhase.PLAYING
    assert session.turn_indicator is TurnIndicator.PLAYER
    assert session.fire_at_enemy(*_empty_cell(session)).accepted


def test_full_game_ai_never_refires() -> None:
    bus = EventBus()
    ai_shots: list[tuple[int, int]] = []
    bus.subscribe(
        CellStateChanged,
        lambda event: ai_shots.append((event.position.x, event.position.y))
        if event.owner == Player.PLAYER.value
        else None,
    )
    session = GameSession(rng_seed=21, events=bus)
    _place_fleet(session)

    while session.phase is GamePhase.PLAYING:
        target = next(cell for cell in session.enemy_board.cells() if not cell.was_shot)
        assert session.fire_at_enemy(target.x, target.y).accepted

    assert session.phase is GamePhase.FINISHED
    assert ai_shots
    assert len(ai_shots) == len(set(ai_shots))
    assert set(ai_shots) == {(c.x, c.y) for c in session.targeting.fired}


def test_pause_blocks_shots_and_placement() -> None:
    bus = EventBus()
    turns: list[TurnIndicator] = []
    bus.subscribe(TurnChanged, lambda event: turns.append(event.indicator))
    session = GameSession(rng_seed=4, events=bus)

    session.pause()
    assert session.phase is GamePhase.PAUSED
    assert not session.place_player_ship(5, Orientation.HORIZONTAL, 0, 0)
    session.resume()
    _place_fleet(session)

    session.toggle_pause()
    assert session.fire_at_enemy(*_empty_cell(session)).accepted is False
    session.toggle_pause()
    assert session.phase is GamePhase.PLAYING
    assert turns[:2] == [TurnIndicator.PAUSED, TurnIndicator.PLAYER]
    assert turns[-2:] == [TurnIndicator.PAUSED, TurnIndicator.PLAYER]


def test_restart_returns_to_setup() -> None:
    session = GameSession(rng_seed=9)
    _place_fleet(session)
    session.fire_at_enemy(*_empty_cell(session))
    session.pause()

    session.restart(seed=9)

    state = session.get_state()
    assert state.phase is GamePhase.SETUP
    assert state.turn is TurnIndicator.PLAYER
    assert state.ships_to_place == 5
    assert state.player_ships_remaining == 5
    assert state.enemy_ships_remaining == 5
    assert state.result is None
    assert session.player_board.ships == []
    assert session.enemy_board.ships == []
    assert session.targeting.fired == set()
    assert not any(cell.was_shot for cell in session.player_board.cells())


def test_restart_with_seed_reproduces_enemy_layout() -> None:
    session = GameSession(rng_seed=13)
    _place_fleet(session)
    first = [(cell.x, cell.y) for cell in session.enemy_board.cells() if cell.occupant]

    session.restart(seed=13)
    _place_fleet(session)
    second = [(cell.x, cell.y) for cell in session.enemy_board.cells() if cell.occupant]
    assert first == second


def test_game_config_fleet_drives_setup() -> None:
    session = GameSession(config=GameConfig(fleet=(2, 3)))
    assert session.next_ship_size == 3
    assert session.place_player_ship(3, Orientation.VERTICAL, 0, 0)
    assert session.place_player_ship(2, Orientation.VERTICAL, 5, 0)
    assert session.phase is GamePhase.PLAYING
    assert session.enemy_board.ships_remaining == 2
    assert isinstance(session.enemy_board.ships[0], Ship)
