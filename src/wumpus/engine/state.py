"""Mutable per-game state.

The cave graph itself never changes once generated; this holds everything
that does: where each player is, their arrows, and where the Wumpus is.
"""

from dataclasses import dataclass, field

from .world import Cave

STARTING_ARROWS = 5
MAX_PLAYERS = 4


@dataclass
class PlayerState:
    """One hunter. Dead players stay in the game state for good."""

    location: int
    arrows: int = STARTING_ARROWS
    is_alive: bool = True
    visited: list[int] = field(default_factory=list)


@dataclass
class GameState:
    """Dynamic state of one game."""

    # None once the Wumpus has been shot
    wumpus_location: int | None
    pits: frozenset[int] = frozenset()
    bats: frozenset[int] = frozenset()
    spawns: tuple[int, ...] = ()
    players: dict[str, PlayerState] = field(default_factory=dict)
    turns: int = 0

    @property
    def wumpus_alive(self) -> bool:
        return self.wumpus_location is not None

    @property
    def spawns_left(self) -> int:
        return max(0, len(self.spawns) - len(self.players))

    def living_players(self) -> list[str]:
        return [pid for pid, player in self.players.items() if player.is_alive]


def new_game_state(cave: Cave) -> GameState:
    """Fresh state with hazards where the generator left them."""
    return GameState(
        wumpus_location=cave.hazards.wumpus,
        pits=frozenset(cave.hazards.pits),
        bats=frozenset(cave.hazards.bats),
        spawns=cave.spawns.players[:MAX_PLAYERS],
    )
