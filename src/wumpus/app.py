"""Xitzin application factory for Hunt the Wumpus."""

from pathlib import Path

from xitzin import Xitzin

from .config import Config
from .logging import get_logger
from .session import SessionStore

logger = get_logger(__name__)


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    templates_dir = Path(__file__).parent / "templates"

    app = Xitzin(
        title="Hunt the Wumpus",
        version="0.1.0",
        templates_dir=templates_dir,
    )

    app.state.config = config
    app.state.store = SessionStore(config)

    @app.on_startup
    async def startup():
        logger.info(
            "startup_complete",
            map_width=config.map_width,
            map_height=config.map_height,
            room_count=config.room_count,
            fixed_seed=config.seed is not None,
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app


def get_store(app: Xitzin) -> SessionStore:
    """Get the session store from the app."""
    return app.state.store
