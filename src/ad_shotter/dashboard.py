"""History pagination and dashboard aggregation over activity records."""

from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from typing import Any, Iterable

from .categories import ad_type_count
from .config import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from .urls import target_hostname

UTC = getattr(datetime, "UTC", timezone.utc)

HISTORY_FETCH_LIMIT = 50
HISTORY_PAGE_SIZES = (6, 9, 12, 24)
DEFAULT_PAGE_SIZE = 9
RECENT_ROWS = 5
FULL_WINDOW_MAX_PAGES = 7


def history_item(activity: dict[str, Any]) -> dict[str, Any]:
    """Flatten a screenshot activity into a history entry."""

    details = activity.get("details") or {}
    timestamp = activity.get("timestamp")
    if not isinstance(timestamp, int):
        timestamp = int(time.time() * 1000)
    return {
        "id": activity.get("id"),
        "timestamp": timestamp,
        "url": details.get("url") or "",
        "selector": details.get("selector") or "",
        "viewportWidth": details.get("viewportWidth") or DEFAULT_VIEWPORT_WIDTH,
        "viewportHeight": details.get("viewportHeight") or DEFAULT_VIEWPORT_HEIGHT,
        "screenshotUrl": details.get("screenshotUrl") or "",
        "width": details.get("width") or 0,
        "height": details.get("height") or 0,
        "assetId": details.get("assetId"),
        "images": details.get("images") or [],
        "bulkPresetId": details.get("bulkPresetId"),
        "bulkPresetName": details.get("bulkPresetName"),
    }


def page_window(current: int, total: int) -> list[int | None]:
    """Page buttons to show; ``None`` marks an ellipsis gap.

    Up to seven pages are all shown. Beyond that the first, the last and the
    pages adjacent to ``current`` are kept.
    """

    window: list[int | None] = []
    for page in range(1, total + 1):
        if total <= FULL_WINDOW_MAX_PAGES or page in (1, total) or abs(page - current) <= 1:
            window.append(page)
        elif window and window[-1] is not None:
            window.append(None)
    return window


def paginate(items: list[dict[str, Any]], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> dict[str, Any]:
    if per_page not in HISTORY_PAGE_SIZES:
        raise ValueError(f"perPage must be one of {HISTORY_PAGE_SIZES}")
    total_items = len(items)
    total_pages = math.ceil(total_items / per_page)
    page = min(max(1, page), max(1, total_pages))
    start = (page - 1) * per_page
    chunk = items[start : start + per_page]
    return {
        "items": chunk,
        "page": page,
        "perPage": per_page,
        "totalItems": total_items,
        "totalPages": total_pages,
        "pageWindow": page_window(page, total_pages),
        "showingFrom": start + 1 if chunk else 0,
        "showingTo": start + len(chunk),
    }


def group_by_bulk_preset(history: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Group history entries by their bulk preset tag, keeping first-seen order.

    Entries captured outside a bulk run end up in a group with a ``None`` id.
    """

    groups: dict[str | None, dict[str, Any]] = {}
    for item in history:
        key = item.get("bulkPresetId")
        group = groups.get(key)
        if group is None:
            group = groups[key] = {"bulkPresetId": key, "bulkPresetName": item.get("bulkPresetName"), "items": []}
        group["items"].append(item)
    return list(groups.values())


def _display_date(timestamp: Any) -> str:
    if isinstance(timestamp, int):
        return datetime.fromtimestamp(timestamp / 1000, UTC).date().isoformat()
    return datetime.now(UTC).date().isoformat()


def recent_row(activity: dict[str, Any]) -> dict[str, Any]:
    details = activity.get("details") or {}
    email = activity.get("userEmail") or ""
    return {
        "id": activity.get("id"),
        "website": target_hostname(details.get("url") or "https://example.com", default="example.com"),
        "screenshotType": details.get("selector") or "Unknown",
        "status": "Completed",
        "date": _display_date(activity.get("timestamp")),
        "user": email.split("@")[0] if email else "Anonymous",
    }


def dashboard_stats(
    screenshots: list[dict[str, Any]],
    presets: list[dict[str, Any]],
    bulk_presets: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "totalScreenshots": len(screenshots),
        "totalPresets": len(presets) + len(bulk_presets),
        "totalAdTypes": ad_type_count(),
        "recentScreenshots": [recent_row(a) for a in screenshots[:RECENT_ROWS]],
    }


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "HISTORY_FETCH_LIMIT",
    "HISTORY_PAGE_SIZES",
    "dashboard_stats",
    "group_by_bulk_preset",
    "history_item",
    "page_window",
    "paginate",
    "recent_row",
]
