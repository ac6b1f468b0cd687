"""
Environment-driven settings.

Every value is read on call so tests can override it with monkeypatch.setenv.
"""

from __future__ import annotations

import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

MEMORY_DATABASE_URL = "memory://"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


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


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq-only params such as sslmode.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = _env_str("DATABASE_URL", MEMORY_DATABASE_URL)
    if url == MEMORY_DATABASE_URL:
        return url
    return _sanitize_database_url(url)


def uses_memory_store() -> bool:
    return database_url() == MEMORY_DATABASE_URL


def pool_min_size() -> int:
    return max(1, _env_int("DB_POOL_MIN_SIZE", 1))


def pool_max_size() -> int:
    return max(pool_min_size(), _env_int("DB_POOL_MAX_SIZE", 5))


def command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT", 30.0)


def auto_create_schema() -> bool:
    return _env_bool("DB_AUTO_CREATE_SCHEMA", True)


def seed_demo_users() -> bool:
    return _env_bool("SEED_DEMO_USERS", False)


def cors_allow_origins() -> list[str]:
    raw = _env_str("CORS_ALLOW_ORIGINS", "*")
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def request_timeout_s() -> float:
    return _env_float("REQUEST_TIMEOUT_S", 10.0)


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    value = _env_str("LOG_FORMAT", "text").lower()
    return value if value in {"text", "json"} else "text"


def api_host() -> str:
    return _env_str("API_HOST", "127.0.0.1")


def api_port() -> int:
    return _env_int("API_PORT", 3000)
