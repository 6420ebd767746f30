"""Firestore persistence for the append-only activity log."""

from __future__ import annotations

from typing import Any, Mapping

from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1.base_query import FieldFilter

from ..auth import SessionUser
from ..capture import ScreenshotResult
from ..geometry import Viewport
from ..logging import jlog
from ..urls import target_hostname
from .firestore import DESCENDING, SERVER_TIMESTAMP, query_with_index_fallback, snapshot_to_dict

ACTIVITIES_COLLECTION = "activities"
SCREENSHOT_ACTION = "took a screenshot"
SCREENSHOT_TARGET = "screenshot"
UNKNOWN_EMAIL = "unknown@example.com"


def create_activity(client, activity: Mapping[str, Any]) -> str:
    """Append an activity record stamped with the server time."""

    _, ref = client.collection(ACTIVITIES_COLLECTION).add({**activity, "timestamp": SERVER_TIMESTAMP})
    jlog("info", event="activity_created", activity_id=ref.id, action=activity.get("action"))
    return ref.id


def screenshot_details(
    *,
    url: str,
    selector: str,
    result: ScreenshotResult,
    viewport: Viewport | None = None,
    bulk_preset_id: str | None = None,
    bulk_preset_name: str | None = None,
) -> dict[str, Any]:
    details: dict[str, Any] = {
        "url": url,
        "selector": selector,
        "screenshotUrl": result.screenshot_url,
        "width": result.width,
        "height": result.height,
        "images": [img.to_dict() for img in result.images],
    }
    if viewport is not None:
        details["viewportWidth"] = viewport.width
        details["viewportHeight"] = viewport.height
    if result.asset_id:
        details["assetId"] = result.asset_id
    if bulk_preset_id:
        details["bulkPresetId"] = bulk_preset_id
    if bulk_preset_name:
        details["bulkPresetName"] = bulk_preset_name
    return details


def record_screenshot_activity(
    client,
    user: SessionUser,
    *,
    url: str,
    selector: str,
    result: ScreenshotResult,
    viewport: Viewport | None = None,
    bulk_preset_id: str | None = None,
    bulk_preset_name: str | None = None,
) -> str:
    """Record one capture in the activity log and return the new record id."""

    return create_activity(
        client,
        {
            "userId": user.uid,
            "userEmail": user.email or UNKNOWN_EMAIL,
            "userName": user.display_name,
            "userPhotoURL": user.photo_url,
            "action": SCREENSHOT_ACTION,
            "targetType": SCREENSHOT_TARGET,
            "targetId": result.screenshot_url,
            "targetName": target_hostname(url, default=url),
            "details": screenshot_details(
                url=url,
                selector=selector,
                result=result,
                viewport=viewport,
                bulk_preset_id=bulk_preset_id,
                bulk_preset_name=bulk_preset_name,
            ),
        },
    )


def get_recent_activities(client, count: int = 5) -> list[dict[str, Any]]:
    try:
        query = client.collection(ACTIVITIES_COLLECTION).order_by("timestamp", direction=DESCENDING).limit(count)
        return [snapshot_to_dict(s) for s in query.stream()]
    except GoogleAPICallError as exc:
        jlog("error", event="recent_activities_error", error=str(exc))
        return []


def get_user_activities(client, user_id: str, count: int = 5) -> list[dict[str, Any]]:
    try:
        query = (
            client.collection(ACTIVITIES_COLLECTION)
            .where(filter=FieldFilter("userId", "==", user_id))
            .order_by("timestamp", direction=DESCENDING)
            .limit(count)
        )
        return [snapshot_to_dict(s) for s in query.stream()]
    except GoogleAPICallError as exc:
        jlog("error", event="user_activities_error", user_id=user_id, error=str(exc))
        return []


def get_screenshot_activities(client, count: int = 20) -> list[dict[str, Any]]:
    """Most recent screenshot activities, tolerating a missing composite index."""

    try:
        return query_with_index_fallback(
            client.collection(ACTIVITIES_COLLECTION),
            field="targetType",
            value=SCREENSHOT_TARGET,
            order_by="timestamp",
            limit=count,
        )
    except GoogleAPICallError as exc:
        jlog("error", event="screenshot_activities_error", error=str(exc))
        return []


def remove_screenshot_activity(client, activity_id: str, user: SessionUser | None = None) -> dict[str, Any] | None:
    """Hard-delete one activity record and return what it held.

    Returns ``None`` (and leaves the record alone) when it does not exist, when
    ``user`` is given and does not own it, or when the store fails. Remote
    assets are not touched; the caller reads ``details.assetId`` from the
    returned record to find the image that belonged to it.
    """

    try:
        ref = client.collection(ACTIVITIES_COLLECTION).document(activity_id)
        snap = ref.get()
        if not snap.exists:
            jlog("warning", event="activity_not_found", activity_id=activity_id)
            return None
        data = snap.to_dict() or {}
        if user is not None and data.get("userId") != user.uid:
            jlog("warning", event="activity_delete_forbidden", activity_id=activity_id, user_id=user.uid)
            return None
        ref.delete()
    except GoogleAPICallError as exc:
        jlog("error", event="activity_delete_error", activity_id=activity_id, error=str(exc))
        return None
    jlog("info", event="activity_deleted", activity_id=activity_id)
    return data


def delete_screenshot_activity(client, activity_id: str, user: SessionUser | None = None) -> bool:
    return remove_screenshot_activity(client, activity_id, user) is not None


def stored_asset_id(activity: dict[str, Any] | None) -> str | None:
    """Remote asset id recorded with a screenshot activity, if any."""

    details = (activity or {}).get("details") or {}
    return details.get("assetId") or None


__all__ = [
    "ACTIVITIES_COLLECTION",
    "SCREENSHOT_ACTION",
    "SCREENSHOT_TARGET",
    "create_activity",
    "delete_screenshot_activity",
    "get_recent_activities",
    "get_screenshot_activities",
    "get_user_activities",
    "record_screenshot_activity",
    "remove_screenshot_activity",
    "screenshot_details",
    "stored_asset_id",
]
