"""
Configuration - Environment settings and logging setup.

Environment variables:
    CARDROOM_ENV                  development | production (default development)
    CARDROOM_LOG_LEVEL            DEBUG, INFO, WARNING, ERROR (default INFO)
    CARDROOM_MAX_GAME_AGE         Seconds a game may sit idle before cleanup (3600)
    CARDROOM_CLEANUP_INTERVAL     Seconds between cleanup sweeps (300)
    CARDROOM_DEFAULT_MAX_PLAYERS  Seat limit when a request gives none (6)
    ALLOWED_ORIGINS               Comma-separated CORS origins (default *)
    HOST / PORT                   Bind address for `cardroom serve`
"""

import logging
import os


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


CARDROOM_ENV = os.getenv("CARDROOM_ENV", "development")
LOG_LEVEL = os.getenv("CARDROOM_LOG_LEVEL", "INFO")
MAX_GAME_AGE_SECONDS = _int_env("CARDROOM_MAX_GAME_AGE", 3600)
CLEANUP_INTERVAL_SECONDS = _int_env("CARDROOM_CLEANUP_INTERVAL", 300)
DEFAULT_MAX_PLAYERS = _int_env("CARDROOM_DEFAULT_MAX_PLAYERS", 6)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _int_env("PORT", 8080)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_log_level(level: str | None) -> int:
    """Map a level name to a logging constant; unknown names mean INFO."""
    return _LEVELS.get((level or "").strip().upper(), logging.INFO)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=parse_log_level(level or LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
