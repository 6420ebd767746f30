"""Debug artifact helpers for failed captures."""

from __future__ import annotations

import os

from playwright.async_api import Page

from .logging import jlog

DEBUG_DIR = os.path.join("media", "debug")


def ensure_debug_dir(directory: str = DEBUG_DIR) -> str:
    """Create the debug directory if it does not exist and return the path."""

    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as exc:
        jlog("warning", event="debug_dir_error", directory=directory, error=str(exc))
    return directory


async def dump_page_html(page: Page, capture_id: str, directory: str = DEBUG_DIR) -> str | None:
    """Persist the current page HTML for later debugging (best effort)."""

    try:
        ensure_debug_dir(directory)
        html = await page.content()
        path = os.path.join(directory, f"page_{capture_id}.html")
        with open(path, "w", encoding="utf-8") as f:
            f.write(html)
    except Exception as exc:  # pragma: no cover - logging only
        jlog("error", event="debug_save_html_error", capture_id=capture_id, error=str(exc))
        return None
    jlog("info", event="debug_html_saved", capture_id=capture_id, path=path)
    return path


__all__ = ["DEBUG_DIR", "dump_page_html", "ensure_debug_dir"]
