"""Turn processing and perception.

handle_turn(graph, state, player_id, action, target, rng) -> TurnResult is
the main entry point. It dispatches to one handler per action; handlers
mutate state in place and fill in the result. The caller is trusted to have
checked that it is this player's turn.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass, field

from ..logging import get_logger
from .rng import RandomSource, choose
from .state import GameState, PlayerState
from .world import Links, RoomGraph

logger = get_logger(__name__)

# Result statuses
OK = "ok"
ERROR = "error"
WIN = "win"
LOST = "lost"

ACTIONS = ("move", "shoot", "pass")

STENCH = "There's a stench coming from a nearby room."
BREEZE = "There's a cold breeze coming from a nearby room."
CHIRPING = "There is some chirping coming from a nearby room."
FOOTSTEPS = "Sounds like there is a fellow adventurer in a nearby room."

WUMPUS_MOVE_CHANCE = 0.75
# Upper bound on bat chains within a single turn
MAX_BAT_DROPS = 32


@dataclass
class TurnResult:
    status: str
    message: str
    perceptions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "perceptions": list(self.perceptions),
        }


def initialize_player(state: GameState, player_id: str) -> int | None:
    """Put a new player on the next free spawn. Returns the start room.

    Returns None when every spawn slot is taken.
    """
    if player_id in state.players:
        return state.players[player_id].location

    slot = len(state.players)
    if slot >= len(state.spawns):
        logger.warning("spawn_slots_exhausted", player_id=player_id, slots=len(state.spawns))
        return None

    start = state.spawns[slot]
    state.players[player_id] = PlayerState(location=start, visited=[start])
    logger.info("player_initialized", player_id=player_id, room=start, slot=slot)
    return start


def get_perceptions(
    graph: RoomGraph, state: GameState, room: int, player_id: str | None = None
) -> list[str]:
    """What can be sensed from a room. Reads state only."""
    neighbors = graph.adjacent(room)
    perceptions = []
    if state.wumpus_location is not None and state.wumpus_location in neighbors:
        perceptions.append(STENCH)
    if any(n in state.pits for n in neighbors):
        perceptions.append(BREEZE)
    if any(n in state.bats for n in neighbors):
        perceptions.append(CHIRPING)
    if any(
        pid != player_id and other.is_alive and other.location in neighbors
        for pid, other in state.players.items()
    ):
        perceptions.append(FOOTSTEPS)
    return perceptions


def get_status(graph: RoomGraph, state: GameState, player_id: str) -> dict:
    player = state.players[player_id]
    if player.is_alive:
        perceptions = get_perceptions(graph, state, player.location, player_id)
    else:
        perceptions = []
    return {
        "location": player.location,
        "arrows": player.arrows,
        "perceptions": perceptions,
        "alive": player.is_alive,
        "visited": list(player.visited),
    }


def get_neighbors(graph: RoomGraph, state: GameState, player_id: str) -> Links:
    """The (west, north, east, south) links of the player's room."""
    return graph.neighbors(state.players[player_id].location)


def get_map_data(graph: RoomGraph) -> list[list[int | None]]:
    return [list(links) for links in graph.links]


def get_hazard_locations(state: GameState) -> dict:
    """Where the hazards are right now. For observers, not players."""
    return {
        "wumpus": state.wumpus_location,
        "pits": sorted(state.pits),
        "bats": sorted(state.bats),
    }


def _kill(player_id: str, player: PlayerState, result: TurnResult, message: str, cause: str) -> None:
    player.is_alive = False
    result.status = LOST
    result.message += message
    logger.info("player_died", player_id=player_id, room=player.location, cause=cause)


def _resolve_hazards(
    graph: RoomGraph,
    state: GameState,
    player_id: str,
    player: PlayerState,
    result: TurnResult,
    rng: RandomSource,
) -> None:
    """Apply whatever lives in the player's room, following bat chains."""
    drops = 0
    while True:
        room = player.location
        if room == state.wumpus_location:
            _kill(player_id, player, result, " You bumped into the Wumpus! It ate you. Game over!", "wumpus")
            return
        if room in state.pits:
            _kill(player_id, player, result, " You fell into a pit! Game over.", "pit")
            return
        if room not in state.bats:
            return
        if drops >= MAX_BAT_DROPS:
            logger.warning("bat_drop_limit_reached", player_id=player_id, room=room)
            return

        drops += 1
        destination = choose(rng, graph.rooms())
        player.location = destination
        player.visited.append(destination)
        result.message += f" A giant bat picks you up and drops you in room {destination}."


def _move_wumpus(graph: RoomGraph, state: GameState, rng: RandomSource) -> None:
    """The Wumpus may wake up and wander to a neighbouring room."""
    if state.wumpus_location is None:
        return
    if rng.random() >= WUMPUS_MOVE_CHANCE:
        return
    neighbors = graph.adjacent(state.wumpus_location)
    if not neighbors:
        return
    origin = state.wumpus_location
    state.wumpus_location = choose(rng, neighbors)
    logger.debug("wumpus_moved", origin=origin, room=state.wumpus_location)


def _turn_move(
    graph: RoomGraph,
    state: GameState,
    player_id: str,
    player: PlayerState,
    target: int | None,
    rng: RandomSource,
) -> TurnResult:
    if not graph.is_adjacent(player.location, target):
        return TurnResult(ERROR, "Invalid move. Choose an adjacent cave.")

    player.location = target
    player.visited.append(target)
    result = TurnResult(OK, f"You moved to room {target}.")
    _resolve_hazards(graph, state, player_id, player, result, rng)
    return result


def _turn_shoot(
    graph: RoomGraph,
    state: GameState,
    player_id: str,
    player: PlayerState,
    target: int | None,
    rng: RandomSource,
) -> TurnResult:
    if player.arrows <= 0:
        return TurnResult(ERROR, "You have no arrows left!")
    if not graph.is_adjacent(player.location, target):
        return TurnResult(ERROR, "Invalid target. You can only shoot into an adjacent cave.")

    player.arrows -= 1
    result = TurnResult(OK, f"You shoot into room {target}. Arrows remaining: {player.arrows}.")

    if target == state.wumpus_location:
        state.wumpus_location = None
        result.status = WIN
        result.message = "Victory! You killed the Wumpus!"
        logger.info("wumpus_killed", player_id=player_id, room=target)

    for pid, other in state.players.items():
        if pid != player_id and other.is_alive and other.location == target:
            other.is_alive = False
            result.message += f" You shot and killed {pid}!"
            logger.info("player_died", player_id=pid, room=target, cause="arrow", shooter=player_id)

    # A miss wakes the Wumpus
    if result.status != WIN and state.wumpus_alive:
        _move_wumpus(graph, state, rng)
        if state.wumpus_location == player.location:
            _kill(player_id, player, result, " The Wumpus woke up and ate you!", "wumpus")

    return result


def _turn_pass(
    graph: RoomGraph,
    state: GameState,
    player_id: str,
    player: PlayerState,
    target: int | None,
    rng: RandomSource,
) -> TurnResult:
    return TurnResult(OK, "You passed your turn.")


_ACTION_DISPATCH: dict[str, Callable[..., TurnResult]] = {
    "move": _turn_move,
    "shoot": _turn_shoot,
    "pass": _turn_pass,
}


def handle_turn(
    graph: RoomGraph,
    state: GameState,
    player_id: str,
    action: str,
    target: int | None = None,
    rng: RandomSource | None = None,
) -> TurnResult:
    """Process one action for one player and return the outcome."""
    rng = rng if rng is not None else random
    player = state.players[player_id]
    if not player.is_alive:
        return TurnResult(LOST, "You are dead and cannot act.")

    handler = _ACTION_DISPATCH.get(action)
    if handler is None:
        result = TurnResult(ERROR, f"Unknown action '{action}'.")
    else:
        result = handler(graph, state, player_id, player, target, rng)

    if result.status != ERROR:
        state.turns += 1

    if player.is_alive:
        result.perceptions = get_perceptions(graph, state, player.location, player_id)
    else:
        result.perceptions = []

    logger.info(
        "turn_processed",
        player_id=player_id,
        action=action,
        target=target,
        status=result.status,
        room=player.location,
    )
    return result
