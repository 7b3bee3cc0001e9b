"""Multiplayer Hunt the Wumpus over Gemini."""

from .app import create_app
from .config import Config
from .logging import configure_logging, get_logger

__all__ = ["main", "create_app", "Config"]


def main() -> None:
    """Entry point for the wumpus server."""
    config = Config.from_env()
    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
        hash_fingerprints=config.hash_fingerprints,
    )

    get_logger(__name__).info(
        "server_starting",
        host=config.host,
        port=config.port,
        map_size=f"{config.map_width}x{config.map_height}",
        seed=config.seed,
    )

    create_app(config).run(
        host=config.host,
        port=config.port,
        certfile=str(config.certfile) if config.certfile else None,
        keyfile=str(config.keyfile) if config.keyfile else None,
    )
