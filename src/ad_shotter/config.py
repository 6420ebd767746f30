"""Environment-driven settings for the API and the bulk CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache

DEFAULT_LOCAL_DIR = os.path.join("public", "screenshots")
DEFAULT_LOCAL_URL_PREFIX = "/screenshots"
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000
DEFAULT_SELECTOR_TIMEOUT_MS = 5000
DEFAULT_VIEWPORT_WIDTH = 1280
DEFAULT_VIEWPORT_HEIGHT = 800
DEFAULT_BULK_DELAY_MS = 1000

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    project_id: str | None = None
    gcs_bucket: str | None = None
    firestore_database: str = "(default)"
    local_dir: str = DEFAULT_LOCAL_DIR
    local_url_prefix: str = DEFAULT_LOCAL_URL_PREFIX
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    selector_timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS
    default_viewport_width: int = DEFAULT_VIEWPORT_WIDTH
    default_viewport_height: int = DEFAULT_VIEWPORT_HEIGHT
    bulk_delay_ms: int = DEFAULT_BULK_DELAY_MS
    allowed_email_domain: str | None = None
    debug_html: bool = False
    log_level: str = "INFO"

    @property
    def bulk_delay_s(self) -> float:
        return max(0, self.bulk_delay_ms) / 1000.0

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_str(name: str) -> str | None:
    raw = os.getenv(name, "").strip()
    return raw or None


def load_settings() -> Settings:
    """Read settings from the process environment."""

    return Settings(
        project_id=_env_str("AD_SHOTTER_PROJECT_ID"),
        gcs_bucket=_env_str("AD_SHOTTER_GCS_BUCKET"),
        firestore_database=_env_str("AD_SHOTTER_FIRESTORE_DATABASE") or "(default)",
        local_dir=_env_str("AD_SHOTTER_LOCAL_DIR") or DEFAULT_LOCAL_DIR,
        local_url_prefix=(_env_str("AD_SHOTTER_LOCAL_URL_PREFIX") or DEFAULT_LOCAL_URL_PREFIX).rstrip("/"),
        navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT_MS", DEFAULT_NAVIGATION_TIMEOUT_MS),
        selector_timeout_ms=_env_int("SELECTOR_TIMEOUT_MS", DEFAULT_SELECTOR_TIMEOUT_MS),
        default_viewport_width=_env_int("DEFAULT_VIEWPORT_WIDTH", DEFAULT_VIEWPORT_WIDTH),
        default_viewport_height=_env_int("DEFAULT_VIEWPORT_HEIGHT", DEFAULT_VIEWPORT_HEIGHT),
        bulk_delay_ms=_env_int("BULK_DELAY_MS", DEFAULT_BULK_DELAY_MS),
        allowed_email_domain=_env_str("AD_SHOTTER_ALLOWED_EMAIL_DOMAIN"),
        debug_html=os.getenv("AD_SHOTTER_DEBUG_HTML", "0").lower() in _TRUE_VALUES,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the memoized process settings."""

    return load_settings()


__all__ = ["Settings", "get_settings", "load_settings"]
