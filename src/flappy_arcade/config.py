"""Runtime settings loaded from .env and environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    API_URL, LOCAL_DB_FILE, SERVER_DB_FILE, SERVER_HOST, SERVER_PORT
)

DEV_SECRET_KEY = "flappy-dev-secret-change-me"


@dataclass(frozen=True)
class ClientConfig:
    api_url: str
    local_db_file: str
    muted: bool
    http_timeout_s: float
    log_level: str


@dataclass(frozen=True)
class ServerConfig:
    db_file: str
    secret_key: str
    production: bool
    host: str
    port: int
    log_level: str


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def load_client_config() -> ClientConfig:
    """Load game client settings from .env and the environment."""
    load_dotenv()
    return ClientConfig(
        api_url=os.environ.get("FLAPPY_API_URL", API_URL).rstrip("/"),
        local_db_file=os.environ.get("FLAPPY_LOCAL_DB", LOCAL_DB_FILE),
        muted=_flag("FLAPPY_MUTED"),
        http_timeout_s=float(os.environ.get("FLAPPY_HTTP_TIMEOUT_S", "5")),
        log_level=os.environ.get("FLAPPY_LOG_LEVEL", "info"),
    )


def load_server_config() -> ServerConfig:
    """Load score server settings. Production refuses to start with the dev secret."""
    load_dotenv()
    production = os.environ.get("FLAPPY_ENV", "development").lower() == "production"
    secret_key = os.environ.get("FLAPPY_SECRET_KEY", DEV_SECRET_KEY)
    if production and secret_key == DEV_SECRET_KEY:
        raise RuntimeError("Missing required env in production: FLAPPY_SECRET_KEY")

    return ServerConfig(
        db_file=os.environ.get("FLAPPY_DB_FILE", SERVER_DB_FILE),
        secret_key=secret_key,
        production=production,
        host=os.environ.get("FLAPPY_HOST", SERVER_HOST),
        port=int(os.environ.get("FLAPPY_PORT", str(SERVER_PORT))),
        log_level=os.environ.get("FLAPPY_LOG_LEVEL", "info"),
    )
