from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - ORGANIZER_DATA_DIR: directory holding assignments.json and notes.json. Default './data'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - STATUS_TRANSITION_POLICY: 'strict' (default) enforces the status transition table,
      'any' accepts every status value
    - APP_ENV: deployment environment name, 'development' by default
    - LOG_LEVEL: root log level, 'INFO' by default
    """

    data_dir: str
    cors_allow_origins: List[str]
    status_transition_policy: str
    app_env: str
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        # Star will be handled in main via allow_origins=["*"]
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    policy = _get_env("STATUS_TRANSITION_POLICY", "strict").strip().lower()
    if policy not in {"strict", "any"}:
        # Fallback to the transition table if unsupported
        policy = "strict"

    data_dir = _get_env("ORGANIZER_DATA_DIR", "./data").strip()
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    return Settings(
        data_dir=data_dir,
        cors_allow_origins=origins,
        status_transition_policy=policy,
        app_env=_get_env("APP_ENV", "development").strip().lower(),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
