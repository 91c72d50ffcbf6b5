from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

DEFAULT_PORT = 3000
DEFAULT_DATA_DIR = "./data"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PORT: HTTP listening port. Default 3000
    - HOST: HTTP bind address. Default '0.0.0.0'
    - DATA_DIR: directory holding tasks.json. Default './data'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: console log level name. Default 'INFO'
    """

    port: int
    host: str
    data_dir: str
    cors_allow_origins: List[str]
    log_level: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value


def _parse_port(value: str, default: int = DEFAULT_PORT) -> int:
    try:
        port = int(value.strip())
    except ValueError:
        return default
    if not (0 < port < 65536):
        return default
    return port


def _parse_log_level(value: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        port=_parse_port(_get_env("PORT", str(DEFAULT_PORT))),
        host=_get_env("HOST", "0.0.0.0").strip(),
        data_dir=_get_env("DATA_DIR", DEFAULT_DATA_DIR).strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
