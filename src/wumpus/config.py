"""Configuration for Hunt the Wumpus."""

import os
from dataclasses import dataclass
from pathlib import Path


def _flag(name: str, default: bool) -> bool:
    """Read a boolean; only an explicit opposite of the default flips it."""
    value = os.getenv(name)
    if value is None:
        return default
    if default:
        return value.lower() not in ("false", "0", "no")
    return value.lower() in ("true", "1", "yes")


@dataclass
class Config:
    """Application configuration."""

    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True

    # Cave generation
    map_width: int = 8
    map_height: int = 8
    room_count: int = 30
    trap_count: int = 4
    bat_count: int = 4
    seed: str | None = None

    # Expose the observer hazard view
    show_hazards: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("WUMPUS_CERTFILE")
        keyfile = os.getenv("WUMPUS_KEYFILE")
        log_file = os.getenv("WUMPUS_LOG_FILE")

        return cls(
            host=os.getenv("WUMPUS_HOST", cls.host),
            port=int(os.getenv("WUMPUS_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("WUMPUS_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=_flag("WUMPUS_JSON_LOGS", cls.json_logs),
            hash_fingerprints=_flag("WUMPUS_HASH_FINGERPRINTS", cls.hash_fingerprints),
            map_width=int(os.getenv("WUMPUS_MAP_WIDTH", str(cls.map_width))),
            map_height=int(os.getenv("WUMPUS_MAP_HEIGHT", str(cls.map_height))),
            room_count=int(os.getenv("WUMPUS_ROOM_COUNT", str(cls.room_count))),
            trap_count=int(os.getenv("WUMPUS_TRAP_COUNT", str(cls.trap_count))),
            bat_count=int(os.getenv("WUMPUS_BAT_COUNT", str(cls.bat_count))),
            seed=os.getenv("WUMPUS_SEED") or None,
            show_hazards=_flag("WUMPUS_SHOW_HAZARDS", cls.show_hazards),
        )
