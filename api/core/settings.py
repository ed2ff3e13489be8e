"""
Environment-driven settings.

Values are read on each call so tests (and reloads) can change the
environment without rebuilding anything.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def api_name() -> str:
    return env_str("API_NAME", "Kontaktar API")


def api_version() -> str:
    return env_str("API_VERSION", "1.0.0")


def webhook_secret() -> str | None:
    # None means "not configured"; the webhook route reports that as a server error.
    return os.environ.get("CLERK_WEBHOOK_SECRET", "").strip() or None


def store_timeout_seconds() -> float:
    return env_float("STORE_TIMEOUT_SECONDS", 10.0)
