# backend/settings/checks.py
"""
Fail-fast checks for production configuration.

Every helper raises ImproperlyConfigured with the offending setting name so a
bad deploy stops at import time instead of serving traffic.
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

INSECURE_SECRET_KEYS = {"", "dev-insecure-change-me"}
LOCAL_HOST_MARKERS = ("localhost", "127.0.0.1")


def require_secret_key(value: str | None) -> str:
    key = (value or "").strip()
    if key in INSECURE_SECRET_KEYS:
        raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")
    return key


def require_postgres_url(value: str | None) -> str:
    url = (value or "").strip()
    if not url:
        raise ImproperlyConfigured("DATABASE_URL must be set in production (PostgreSQL).")
    if not url.startswith(("postgres://", "postgresql://", "pgsql://")):
        # checkout relies on SELECT ... FOR UPDATE
        raise ImproperlyConfigured("DATABASE_URL must point to PostgreSQL in production.")
    return url


def require_public_origins(name: str, origins: list[str]) -> list[str]:
    """Non-empty, https only, no loopback hosts."""
    if not origins:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    for origin in origins:
        if not origin.startswith("https://"):
            raise ImproperlyConfigured(f"{name} must be https:// in production: {origin}")
        if any(marker in origin for marker in LOCAL_HOST_MARKERS):
            raise ImproperlyConfigured(f"Remove {origin} from {name} in production.")
    return origins
