from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

DEFAULT_SESSION_MAX_AGE = 86400


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SESSION_BACKEND: 'memory' (default, and currently the only backend)
    - SESSION_COOKIE_NAME: name of the cookie carrying the session key. Default 'todo_session'
    - SESSION_MAX_AGE: idle seconds before a session expires; 0 disables expiry. Default 86400
    - SESSION_COOKIE_SECURE: 'true' to mark the session cookie Secure (default: false)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name for the application logger. Default 'INFO'
    """

    session_backend: str
    session_cookie_name: str
    session_max_age: int
    session_cookie_secure: bool
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


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
    backend = _get_env("SESSION_BACKEND", "memory").strip().lower()
    if backend not in {"memory"}:
        backend = "memory"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        session_backend=backend,
        session_cookie_name=_get_env("SESSION_COOKIE_NAME", "todo_session").strip(),
        session_max_age=_parse_int(_get_env("SESSION_MAX_AGE", str(DEFAULT_SESSION_MAX_AGE)), DEFAULT_SESSION_MAX_AGE),
        session_cookie_secure=_parse_bool(_get_env("SESSION_COOKIE_SECURE", "false"), False),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )
