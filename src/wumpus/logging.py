"""Logging configuration for Hunt the Wumpus."""

import hashlib
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO

import structlog

# Event keys carrying a client certificate fingerprint
IDENTITY_KEYS = ("fingerprint", "identity")

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def hash_identity_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace certificate fingerprints with a short hash."""
    for key in IDENTITY_KEYS:
        value = event_dict.get(key)
        if value and value != "unknown":
            event_dict[f"{key}_hash"] = hashlib.sha256(value.encode()).hexdigest()[:12]
            del event_dict[key]
    return event_dict


def build_processors(
    json_logs: bool, hash_fingerprints: bool, colors: bool
) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"
        ),
    ]
    if hash_fingerprints:
        processors.append(hash_identity_processor)
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_logs: bool = False,
    hash_fingerprints: bool = True,
) -> None:
    """Configure structured logging for the application."""
    output_stream: TextIO = open(log_file, "a") if log_file else sys.stdout

    structlog.configure(
        processors=build_processors(
            json_logs, hash_fingerprints, colors=output_stream.isatty()
        ),
        wrapper_class=structlog.make_filtering_bound_logger(
            LEVELS.get(log_level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output_stream),
        cache_logger_on_first_use=True,
    )


@contextmanager
def game_context(game_id: str) -> Iterator[None]:
    """Tag every log event emitted inside the block with the game id."""
    with structlog.contextvars.bound_contextvars(game_id=game_id):
        yield


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)
