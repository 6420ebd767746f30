"""URL helpers for capture targets."""

from __future__ import annotations

import urllib.parse


def is_http_url(url: str | None) -> bool:
    """Return True for absolute http(s) URLs with a host."""

    if not url:
        return False
    try:
        parsed = urllib.parse.urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def target_hostname(url: str | None, default: str = "") -> str:
    """Hostname shown for a capture target; falls back to ``default``."""

    if not url:
        return default
    try:
        host = urllib.parse.urlparse(url).hostname
    except ValueError:
        return default
    return host or default


__all__ = ["is_http_url", "target_hostname"]
