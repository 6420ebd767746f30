"""Service version resolution helpers."""

from __future__ import annotations

import os

APP_NAME = "ad-shotter"
APP_VERSION = "1.4.0"


def get_app_version(component: str = APP_NAME, version: str = APP_VERSION) -> str:
    """Return a human-readable version string with an env override."""

    return os.getenv("AD_SHOTTER_VERSION", f"{component}:{version}")


__all__ = ["APP_NAME", "APP_VERSION", "get_app_version"]
