"""Lobby layer bridging Gemini identities and the game engine.

A GameSession pairs one generated cave with its engine state and turn
order. The SessionStore owns every live session by id, plus an index of
which game each identity is in. Nothing here survives a restart.
"""

import threading
import uuid

from .config import Config
from .engine.generator import CaveGenerator
from .engine.rng import RandomSource, make_rng
from .engine.state import GameState, new_game_state
from .engine.turns import (
    ERROR,
    WIN,
    TurnResult,
    get_hazard_locations,
    get_map_data,
    get_neighbors,
    get_status,
    handle_turn,
    initialize_player,
)
from .engine.world import Cave, Links, RoomGraph
from .logging import game_context, get_logger

logger = get_logger(__name__)

# Game statuses
OPEN = "open"
STARTED = "started"
FINISHED = "finished"


class LobbyError(Exception):
    """A request the lobby cannot honour. The message is shown to the player."""


class GameNotFoundError(LobbyError):
    pass


class GameFullError(LobbyError):
    pass


class GameClosedError(LobbyError):
    pass


class NotInGameError(LobbyError):
    pass


class AlreadyInGameError(LobbyError):
    pass


class NotYourTurnError(LobbyError):
    pass


class GameSession:
    """One game: a cave, its state, and whose turn it is."""

    def __init__(self, game_id: str, cave: Cave, rng: RandomSource | None = None):
        self.game_id = game_id
        self.cave = cave
        self.state: GameState = new_game_state(cave)
        self.rng = rng if rng is not None else make_rng()
        self.status = OPEN
        self.player_order: list[str] = []
        self.current_index = 0
        # identity (certificate fingerprint) -> engine player id
        self.identities: dict[str, str] = {}
        self.lock = threading.Lock()

    @classmethod
    def create(
        cls, config: Config, game_id: str | None = None, seed: object = None
    ) -> "GameSession":
        """Generate a fresh cave from config and wrap it in a session."""
        game_id = game_id or uuid.uuid4().hex
        if seed is None:
            seed = config.seed if config.seed is not None else uuid.uuid4().hex
        generator = CaveGenerator(
            seed=seed,
            width=config.map_width,
            height=config.map_height,
            room_count=config.room_count,
            trap_count=config.trap_count,
            bat_count=config.bat_count,
        )
        with game_context(game_id):
            cave = generator.generate()
        return cls(game_id, cave, rng=make_rng(seed))

    @property
    def graph(self) -> RoomGraph:
        return self.cave.graph

    @property
    def current_player(self) -> str | None:
        if not self.player_order:
            return None
        return self.player_order[self.current_index]

    def player_id_for(self, identity: str) -> str:
        try:
            return self.identities[identity]
        except KeyError:
            raise NotInGameError("You are not in this game.") from None

    def add_player(self, identity: str) -> str:
        """Seat a new player on the next spawn and return their player id."""
        if identity in self.identities:
            raise AlreadyInGameError("You are already in this game.")
        if self.status != OPEN:
            raise GameClosedError("Cannot join. The game has already started.")
        if self.state.spawns_left == 0:
            raise GameFullError("This game is full.")

        player_id = f"player{len(self.state.players) + 1}"
        with game_context(self.game_id):
            initialize_player(self.state, player_id)
        self.identities[identity] = player_id
        self.player_order.append(player_id)
        return player_id

    def remove_player(self, identity: str) -> None:
        """Take a player out of the turn order. Their state stays behind."""
        player_id = self.identities.pop(identity)
        # A hunter who walks out is gone from the cave for good
        self.state.players[player_id].is_alive = False

        current = self.current_player
        self.player_order.remove(player_id)
        if not self.player_order:
            self.current_index = 0
            return
        if current in self.player_order:
            self.current_index = self.player_order.index(current)
        else:
            self.current_index %= len(self.player_order)
            self._skip_dead()

    def advance_turn(self) -> None:
        """Hand the turn to the next living player in join order."""
        if not self.player_order:
            return
        self.current_index = (self.current_index + 1) % len(self.player_order)
        self._skip_dead()

    def _skip_dead(self) -> None:
        for _ in range(len(self.player_order)):
            if self.state.players[self.player_order[self.current_index]].is_alive:
                return
            self.current_index = (self.current_index + 1) % len(self.player_order)

    def take_turn(
        self, identity: str, action: str, target: int | None = None
    ) -> TurnResult:
        """Validate turn order, then let the engine process the action."""
        with self.lock, game_context(self.game_id):
            player_id = self.player_id_for(identity)
            if not self.state.players[player_id].is_alive:
                # The engine answers dead players without touching state
                return handle_turn(self.graph, self.state, player_id, action, target, self.rng)
            if self.status == FINISHED:
                raise GameClosedError("The game is over.")
            current = self.current_player
            if player_id != current:
                raise NotYourTurnError(f"It is currently {current}'s turn. Please wait!")

            result = handle_turn(self.graph, self.state, player_id, action, target, self.rng)
            if result.status == ERROR:
                return result

            self.status = STARTED
            if result.status == WIN or not self.state.living_players():
                self.status = FINISHED
                logger.info("game_finished", outcome=result.status, turns=self.state.turns)
            else:
                self.advance_turn()
            return result

    def status_for(self, identity: str) -> dict:
        player_id = self.player_id_for(identity)
        status = get_status(self.graph, self.state, player_id)
        status.update(
            player_id=player_id,
            current_player=self.current_player,
            game_status=self.status,
            neighbors=self.neighbors_for(identity),
        )
        return status

    def neighbors_for(self, identity: str) -> Links:
        return get_neighbors(self.graph, self.state, self.player_id_for(identity))

    def map_data(self) -> list[list[int | None]]:
        return get_map_data(self.graph)

    def hazard_locations(self) -> dict:
        return get_hazard_locations(self.state)

    def summary(self) -> dict:
        return {
            "game_id": self.game_id,
            "status": self.status,
            "players": len(self.player_order),
            "caves": len(self.graph),
            "current_player": self.current_player,
        }


class SessionStore:
    """Every live game, keyed by id, and the game each identity is in."""

    def __init__(self, config: Config):
        self.config = config
        self._games: dict[str, GameSession] = {}
        self._player_games: dict[str, str] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._games)

    def create_game(self, identity: str, seed: object = None) -> GameSession:
        """Create a game with the caller as its first player."""
        with self._lock:
            if identity in self._player_games:
                raise AlreadyInGameError("You are already in a game. Leave it first.")
            game = GameSession.create(self.config, seed=seed)
            game.add_player(identity)
            self._games[game.game_id] = game
            self._player_games[identity] = game.game_id
        logger.info("game_created", game_id=game.game_id, identity=identity, seed=game.cave.seed)
        return game

    def join_game(self, game_id: str, identity: str) -> GameSession:
        with self._lock:
            if identity in self._player_games:
                raise AlreadyInGameError("You are already in a game. Leave it first.")
            game = self.get_game(game_id)
            with game.lock:
                player_id = game.add_player(identity)
            self._player_games[identity] = game_id
        logger.info("game_joined", game_id=game_id, identity=identity, player_id=player_id)
        return game

    def leave_game(self, identity: str) -> bool:
        """Leave the current game. Returns True if that closed the game."""
        with self._lock:
            game_id = self._player_games.pop(identity, None)
            if game_id is None:
                raise NotInGameError("You are not in any game.")
            game = self._games.get(game_id)
            if game is None:
                return True
            with game.lock:
                game.remove_player(identity)
            logger.info("player_left", game_id=game_id, identity=identity)
            if not game.player_order:
                self.delete_game(game_id)
                return True
            return False

    def delete_game(self, game_id: str) -> None:
        with self._lock:
            game = self._games.pop(game_id, None)
            if game is None:
                return
            for identity in game.identities:
                self._player_games.pop(identity, None)
        logger.info("game_closed", game_id=game_id)

    def get_game(self, game_id: str) -> GameSession:
        with self._lock:
            try:
                return self._games[game_id]
            except KeyError:
                raise GameNotFoundError("Game not found.") from None

    def game_for_player(self, identity: str) -> GameSession:
        with self._lock:
            game_id = self._player_games.get(identity)
            if game_id is None or game_id not in self._games:
                self._player_games.pop(identity, None)
                raise NotInGameError("You are not in any game.")
            return self._games[game_id]

    def list_games(self) -> list[dict]:
        with self._lock:
            return [game.summary() for game in self._games.values()]

    def turn_status(self, game_id: str) -> str | None:
        """Whose turn it is in a game."""
        return self.get_game(game_id).current_player
