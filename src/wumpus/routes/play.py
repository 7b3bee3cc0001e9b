"""Gameplay routes."""

from xitzin import Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..app import get_store
from ..engine.turns import LOST, WIN
from ..engine.world import DIRECTION_NAMES
from ..render import render_map
from ..session import GameSession, LobbyError, SessionStore


def _store(request: Request) -> SessionStore:
    return get_store(request.app)


def _fingerprint(request: Request) -> str:
    return get_identity(request).fingerprint


def _parse_room(room: str) -> int | None:
    try:
        return int(room)
    except ValueError:
        return None


def _render_lobby(app: Xitzin, store: SessionStore, message: str = ""):
    return app.template("home.gmi", games=store.list_games(), message=message)


def _render_play(
    app: Xitzin,
    game: GameSession,
    identity: str,
    message: str = "",
    perceptions: list[str] | None = None,
):
    """Render the main play view for one player."""
    status = game.status_for(identity)
    exits = [
        {"direction": DIRECTION_NAMES[d], "room": room}
        for d, room in enumerate(status["neighbors"])
        if room is not None
    ]
    return app.template(
        "play.gmi",
        game_id=game.game_id,
        game_status=game.status,
        player_id=status["player_id"],
        current_player=status["current_player"],
        your_turn=status["current_player"] == status["player_id"],
        location=status["location"],
        arrows=status["arrows"],
        alive=status["alive"],
        perceptions=status["perceptions"] if perceptions is None else perceptions,
        visited=status["visited"],
        exits=exits,
        cave_map=render_map(game.graph, marks={status["location"]: "@"}),
        message=message,
    )


def _act(app: Xitzin, request: Request, action: str, room: str | None = None):
    """Run one turn for the requesting player and render the outcome."""
    store = _store(request)
    identity = _fingerprint(request)
    try:
        game = store.game_for_player(identity)
    except LobbyError as exc:
        return _render_lobby(app, store, message=str(exc))

    target = None
    if room is not None:
        target = _parse_room(room)
        if target is None:
            return _render_play(app, game, identity, message=f"'{room}' is not a room.")

    try:
        result = game.take_turn(identity, action, target)
    except LobbyError as exc:
        return _render_play(app, game, identity, message=str(exc))

    message = result.message
    if result.status == WIN:
        message += " The hunt is over."
    elif result.status == LOST:
        message += " Your hunt has ended."
    return _render_play(app, game, identity, message=message, perceptions=result.perceptions)


def _register_lobby_routes(app: Xitzin) -> None:
    """Register create, join and leave routes."""

    @app.gemini("/new", name="new_game")
    @require_certificate
    def new_game(request: Request):
        """Start a new game with the caller as first player."""
        store = _store(request)
        identity = _fingerprint(request)
        try:
            game = store.create_game(identity)
        except LobbyError as exc:
            return _render_lobby(app, store, message=str(exc))
        return _render_play(
            app,
            game,
            identity,
            message="New game created. Share the game id for others to join.",
        )

    @app.gemini("/join/{game_id}", name="join")
    @require_certificate
    def join(request: Request, game_id: str):
        store = _store(request)
        identity = _fingerprint(request)
        try:
            game = store.join_game(game_id, identity)
        except LobbyError as exc:
            return _render_lobby(app, store, message=str(exc))
        return _render_play(app, game, identity, message=f"Joined game {game_id}. Go kill the Wumpus!")

    @app.gemini("/leave", name="leave")
    @require_certificate
    def leave(request: Request):
        store = _store(request)
        try:
            closed = store.leave_game(_fingerprint(request))
        except LobbyError as exc:
            return _render_lobby(app, store, message=str(exc))
        if closed:
            message = "You have left the game. Lobby closed due to zero players."
        else:
            message = "You left the game."
        return _render_lobby(app, store, message=message)


def _register_action_routes(app: Xitzin) -> None:
    """Register the play view and turn actions."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        store = _store(request)
        identity = _fingerprint(request)
        try:
            game = store.game_for_player(identity)
        except LobbyError as exc:
            return _render_lobby(app, store, message=str(exc))
        return _render_play(app, game, identity)

    @app.gemini("/move/{room}", name="move")
    @require_certificate
    def move(request: Request, room: str):
        return _act(app, request, "move", room)

    @app.gemini("/shoot/{room}", name="shoot")
    @require_certificate
    def shoot(request: Request, room: str):
        return _act(app, request, "shoot", room)

    @app.gemini("/pass", name="pass_turn")
    @require_certificate
    def pass_turn(request: Request):
        return _act(app, request, "pass")

    @app.gemini("/hazards", name="hazards")
    @require_certificate
    def hazards(request: Request):
        """Observer view of the hazards in the caller's game."""
        store = _store(request)
        if not request.app.state.config.show_hazards:
            return _render_lobby(app, store, message="The hazard view is disabled.")
        try:
            game = store.game_for_player(_fingerprint(request))
        except LobbyError as exc:
            return _render_lobby(app, store, message=str(exc))
        return app.template(
            "hazards.gmi",
            game_id=game.game_id,
            hazards=game.hazard_locations(),
            cave_map=render_map(game.graph, show_kinds=True),
        )


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_lobby_routes(app)
    _register_action_routes(app)
