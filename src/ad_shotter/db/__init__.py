"""Firestore-backed stores for presets and the activity log."""

from .activities import (
    ACTIVITIES_COLLECTION,
    create_activity,
    delete_screenshot_activity,
    get_recent_activities,
    get_screenshot_activities,
    get_user_activities,
    record_screenshot_activity,
    remove_screenshot_activity,
    stored_asset_id,
)
from .firestore import firestore_connect
from .presets import (
    BULK_PRESETS_COLLECTION,
    PRESETS_COLLECTION,
    create_bulk_preset,
    create_preset,
    delete_bulk_preset,
    delete_preset,
    get_bulk_preset,
    get_preset,
    list_bulk_presets,
    list_presets,
    update_bulk_preset,
    update_preset,
)

__all__ = [
    "ACTIVITIES_COLLECTION",
    "BULK_PRESETS_COLLECTION",
    "PRESETS_COLLECTION",
    "create_activity",
    "create_bulk_preset",
    "create_preset",
    "delete_bulk_preset",
    "delete_preset",
    "delete_screenshot_activity",
    "firestore_connect",
    "get_bulk_preset",
    "get_preset",
    "get_recent_activities",
    "get_screenshot_activities",
    "get_user_activities",
    "list_bulk_presets",
    "list_presets",
    "record_screenshot_activity",
    "remove_screenshot_activity",
    "stored_asset_id",
    "update_bulk_preset",
    "update_preset",
]
