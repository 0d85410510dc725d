"""
Environment-driven configuration.

Every value is read on call so tests (and process managers) can change the
environment without re-importing modules.
"""

from __future__ import annotations

import os

DEFAULT_REQUEST_TIMEOUT_S = 30.0
DEFAULT_PORT = 5000


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def db_pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def db_pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 5), 1)


def db_command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT_S", 30.0)


def request_timeout_s() -> float:
    value = _env_float("REQUEST_TIMEOUT_S", DEFAULT_REQUEST_TIMEOUT_S)
    return value if value > 0 else DEFAULT_REQUEST_TIMEOUT_S


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    origins = [part.strip() for part in raw.split(",")]
    return [o for o in origins if o] or ["*"]


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def database_url() -> str:
    return os.environ.get("DATABASE_URL", "").strip()
