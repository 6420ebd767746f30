"""Firestore persistence for single and bulk screenshot presets."""

from __future__ import annotations

from typing import Any, Mapping

from ..config import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from ..logging import jlog
from .firestore import DESCENDING, SERVER_TIMESTAMP, query_with_index_fallback, snapshot_to_dict

PRESETS_COLLECTION = "screenshotPresets"
BULK_PRESETS_COLLECTION = "bulkScreenshotPresets"


def _writable(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}


def format_bulk_preset(row: dict[str, Any]) -> dict[str, Any]:
    """Fill the defaults older bulk preset documents may lack."""

    return {
        "id": row.get("id"),
        "name": row.get("name") or "",
        "items": row.get("items") or [],
        "viewportWidth": row.get("viewportWidth") or DEFAULT_VIEWPORT_WIDTH,
        "viewportHeight": row.get("viewportHeight") or DEFAULT_VIEWPORT_HEIGHT,
        "createdAt": row.get("createdAt"),
        "updatedAt": row.get("updatedAt"),
    }


def list_presets(client, *, category: str | None = None) -> list[dict[str, Any]]:
    """Return presets newest first, optionally restricted to one category."""

    collection = client.collection(PRESETS_COLLECTION)
    if category:
        return query_with_index_fallback(collection, field="category", value=category, order_by="createdAt")
    return [snapshot_to_dict(s) for s in collection.order_by("createdAt", direction=DESCENDING).stream()]


def get_preset(client, preset_id: str) -> dict[str, Any] | None:
    snap = client.collection(PRESETS_COLLECTION).document(preset_id).get()
    if not snap.exists:
        return None
    return snapshot_to_dict(snap)


def create_preset(client, data: Mapping[str, Any]) -> str:
    _, ref = client.collection(PRESETS_COLLECTION).add(
        {**_writable(data), "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP}
    )
    jlog("info", event="preset_created", preset_id=ref.id, name=data.get("name"))
    return ref.id


def update_preset(client, preset_id: str, data: Mapping[str, Any]) -> None:
    """Apply a partial update; raises ``NotFound`` for unknown ids."""

    client.collection(PRESETS_COLLECTION).document(preset_id).update({**_writable(data), "updatedAt": SERVER_TIMESTAMP})
    jlog("info", event="preset_updated", preset_id=preset_id)


def delete_preset(client, preset_id: str) -> None:
    client.collection(PRESETS_COLLECTION).document(preset_id).delete()
    jlog("info", event="preset_deleted", preset_id=preset_id)


def list_bulk_presets(client) -> list[dict[str, Any]]:
    """Return bulk presets, most recently updated first."""

    query = client.collection(BULK_PRESETS_COLLECTION).order_by("updatedAt", direction=DESCENDING)
    return [format_bulk_preset(snapshot_to_dict(s)) for s in query.stream()]


def get_bulk_preset(client, preset_id: str) -> dict[str, Any] | None:
    snap = client.collection(BULK_PRESETS_COLLECTION).document(preset_id).get()
    if not snap.exists:
        return None
    return format_bulk_preset(snapshot_to_dict(snap))


def create_bulk_preset(client, data: Mapping[str, Any]) -> str:
    _, ref = client.collection(BULK_PRESETS_COLLECTION).add(
        {**_writable(data), "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP}
    )
    jlog("info", event="bulk_preset_created", preset_id=ref.id, items=len(data.get("items") or []))
    return ref.id


def update_bulk_preset(client, preset_id: str | None, data: Mapping[str, Any]) -> None:
    if not preset_id:
        raise ValueError("Preset ID is required for updates")
    client.collection(BULK_PRESETS_COLLECTION).document(preset_id).update(
        {**_writable(data), "updatedAt": SERVER_TIMESTAMP}
    )
    jlog("info", event="bulk_preset_updated", preset_id=preset_id)


def delete_bulk_preset(client, preset_id: str) -> None:
    client.collection(BULK_PRESETS_COLLECTION).document(preset_id).delete()
    jlog("info", event="bulk_preset_deleted", preset_id=preset_id)


__all__ = [
    "BULK_PRESETS_COLLECTION",
    "PRESETS_COLLECTION",
    "create_bulk_preset",
    "create_preset",
    "delete_bulk_preset",
    "delete_preset",
    "format_bulk_preset",
    "get_bulk_preset",
    "get_preset",
    "list_bulk_presets",
    "list_presets",
    "update_bulk_preset",
    "update_preset",
]
