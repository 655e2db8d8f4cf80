"""Runtime settings for the town server, read from ``COVEYTOWN_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class BackendSettings:
    server_salt: str
    host: str
    port: int
    log_level: str


def _port_from_env(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"COVEYTOWN_PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"COVEYTOWN_PORT out of range: {port}")
    return port


def _log_level_from_env(raw: str) -> str:
    level = raw.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"COVEYTOWN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def load_settings() -> BackendSettings:
    return BackendSettings(
        server_salt=os.getenv("COVEYTOWN_SERVER_SALT", "dev-salt"),
        host=os.getenv("COVEYTOWN_HOST", "127.0.0.1"),
        port=_port_from_env(os.getenv("COVEYTOWN_PORT", "8081")),
        log_level=_log_level_from_env(os.getenv("COVEYTOWN_LOG_LEVEL", "INFO")),
    )
