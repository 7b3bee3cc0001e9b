"""Tests for turn processing.

The `tunnel` fixture is rooms 0-9 in a line; the `state` fixture puts the
Wumpus in room 9, a pit in room 0, and the first spawn in room 5.
"""

import pytest

from wumpus.engine.turns import (
    BREEZE,
    CHIRPING,
    ERROR,
    FOOTSTEPS,
    LOST,
    MAX_BAT_DROPS,
    OK,
    STENCH,
    WIN,
    get_hazard_locations,
    get_map_data,
    get_neighbors,
    get_perceptions,
    get_status,
    handle_turn,
    initialize_player,
)


class Constant:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def hunter(state):
    initialize_player(state, "a")
    return state.players["a"]


def test_initialize_players_in_spawn_order(state):
    assert initialize_player(state, "a") == 5
    assert initialize_player(state, "b") == 2
    player = state.players["a"]
    assert player.arrows == 5
    assert player.is_alive
    assert player.visited == [5]


def test_initialize_player_twice_keeps_slot(state):
    initialize_player(state, "a")
    assert initialize_player(state, "a") == 5
    assert len(state.players) == 1


def test_spawn_slots_exhausted(state):
    for pid in "abcd":
        assert initialize_player(state, pid) is not None
    assert initialize_player(state, "e") is None
    assert "e" not in state.players


def test_move_to_neighbor(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "move", 6)
    assert result.status == OK
    assert hunter.location == 6
    assert hunter.visited == [5, 6]
    assert state.turns == 1


def test_move_to_non_neighbor(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "move", 7)
    assert result.status == ERROR
    assert hunter.location == 5
    assert hunter.visited == [5]
    assert state.turns == 0


def test_move_without_target(tunnel, state, hunter):
    assert handle_turn(tunnel, state, "a", "move").status == ERROR
    assert hunter.location == 5


def test_move_into_pit(tunnel, state, hunter):
    hunter.location = 1
    result = handle_turn(tunnel, state, "a", "move", 0)
    assert result.status == LOST
    assert not hunter.is_alive
    assert result.perceptions == []
    assert "pit" in result.message


def test_move_into_wumpus(tunnel, state, hunter):
    hunter.location = 8
    result = handle_turn(tunnel, state, "a", "move", 9)
    assert result.status == LOST
    assert not hunter.is_alive
    assert state.wumpus_location == 9


def test_bat_drops_player_elsewhere(tunnel, state, hunter, scripted):
    state.bats = frozenset({6})
    result = handle_turn(tunnel, state, "a", "move", 6, rng=scripted(0.35))
    assert result.status == OK
    assert hunter.location == 3
    assert hunter.visited == [5, 6, 3]
    assert "bat" in result.message


def test_bat_chain_ends_in_pit(tunnel, state, hunter, scripted):
    state.bats = frozenset({6, 3})
    result = handle_turn(tunnel, state, "a", "move", 6, rng=scripted(0.35, 0.05))
    assert result.status == LOST
    assert hunter.location == 0
    assert not hunter.is_alive


def test_bat_chain_is_bounded(tunnel, state, hunter):
    state.bats = frozenset({6})
    result = handle_turn(tunnel, state, "a", "move", 6, rng=Constant(0.65))
    assert result.status == OK
    assert hunter.location == 6
    assert hunter.is_alive
    assert len(hunter.visited) == 2 + MAX_BAT_DROPS


def test_shoot_without_arrows(tunnel, state, hunter):
    hunter.arrows = 0
    result = handle_turn(tunnel, state, "a", "shoot", 6)
    assert result.status == ERROR
    assert hunter.arrows == 0


def test_shoot_non_neighbor(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "shoot", 8)
    assert result.status == ERROR
    assert hunter.arrows == 5


def test_shoot_wumpus_wins(tunnel, state, hunter, scripted):
    state.wumpus_location = 6
    # An empty script fails loudly if the Wumpus tries to move
    result = handle_turn(tunnel, state, "a", "shoot", 6, rng=scripted())
    assert result.status == WIN
    assert state.wumpus_location is None
    assert hunter.arrows == 4
    assert get_hazard_locations(state)["wumpus"] is None


def test_miss_and_wumpus_sleeps(tunnel, state, hunter, scripted):
    result = handle_turn(tunnel, state, "a", "shoot", 4, rng=scripted(0.9))
    assert result.status == OK
    assert state.wumpus_location == 9
    assert hunter.arrows == 4


def test_miss_and_wumpus_wanders(tunnel, state, hunter, scripted):
    state.wumpus_location = 6
    result = handle_turn(tunnel, state, "a", "shoot", 4, rng=scripted(0.1, 0.7))
    assert result.status == OK
    assert state.wumpus_location == 7
    assert STENCH not in result.perceptions


def test_miss_and_wumpus_eats_shooter(tunnel, state, hunter, scripted):
    state.wumpus_location = 6
    result = handle_turn(tunnel, state, "a", "shoot", 4, rng=scripted(0.1, 0.2))
    assert result.status == LOST
    assert state.wumpus_location == 5
    assert not hunter.is_alive
    assert result.perceptions == []


def test_shoot_other_player(tunnel, state, hunter, scripted):
    initialize_player(state, "b")
    state.players["b"].location = 4
    result = handle_turn(tunnel, state, "a", "shoot", 4, rng=scripted(0.9))
    assert result.status == OK
    assert not state.players["b"].is_alive
    assert "killed b" in result.message


def test_dead_player_cannot_act(tunnel, state, hunter):
    hunter.is_alive = False
    for action, target in (("move", 6), ("shoot", 6), ("pass", None)):
        result = handle_turn(tunnel, state, "a", action, target)
        assert result.status == LOST
        assert result.perceptions == []
    assert hunter.location == 5
    assert hunter.arrows == 5
    assert state.turns == 0


def test_pass(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "pass")
    assert result.status == OK
    assert hunter.location == 5
    assert state.turns == 1


def test_unknown_action(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "dance")
    assert result.status == ERROR
    assert "Unknown action" in result.message
    assert state.turns == 0


def test_perceptions(tunnel, state):
    assert get_perceptions(tunnel, state, 8) == [STENCH]
    assert get_perceptions(tunnel, state, 1) == [BREEZE]
    assert get_perceptions(tunnel, state, 5) == []
    state.bats = frozenset({4})
    assert get_perceptions(tunnel, state, 5) == [CHIRPING]


def test_perceptions_hear_living_players_only(tunnel, state, hunter):
    initialize_player(state, "b")
    state.players["b"].location = 6
    assert FOOTSTEPS in get_perceptions(tunnel, state, 5, "a")
    assert get_perceptions(tunnel, state, 6, "b") == [FOOTSTEPS]
    # A player never hears themselves
    assert get_perceptions(tunnel, state, 7, "b") == []
    state.players["b"].is_alive = False
    assert FOOTSTEPS not in get_perceptions(tunnel, state, 5, "a")


def test_result_perceptions_follow_final_room(tunnel, state, hunter):
    hunter.location = 7
    result = handle_turn(tunnel, state, "a", "move", 8)
    assert result.perceptions == [STENCH]


def test_get_status(tunnel, state, hunter):
    hunter.location = 8
    status = get_status(tunnel, state, "a")
    assert status == {
        "location": 8,
        "arrows": 5,
        "perceptions": [STENCH],
        "alive": True,
        "visited": [5],
    }
    hunter.is_alive = False
    assert get_status(tunnel, state, "a")["perceptions"] == []


def test_get_neighbors(tunnel, state, hunter):
    assert get_neighbors(tunnel, state, "a") == (4, None, 6, None)


def test_map_and_hazards(tunnel, state):
    data = get_map_data(tunnel)
    assert len(data) == 30
    assert data[5] == [4, None, 6, None]
    assert get_hazard_locations(state) == {"wumpus": 9, "pits": [0], "bats": []}


def test_result_to_dict(tunnel, state, hunter):
    result = handle_turn(tunnel, state, "a", "pass")
    assert result.to_dict() == {
        "status": OK,
        "message": "You passed your turn.",
        "perceptions": [],
    }
