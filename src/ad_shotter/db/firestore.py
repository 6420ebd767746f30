"""Firestore client and query helpers shared by the preset and activity stores."""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any

from google.api_core.exceptions import FailedPrecondition
from google.cloud import firestore  # type: ignore[attr-defined]
from google.cloud.firestore_v1.base_query import FieldFilter

from ..logging import jlog

DESCENDING = firestore.Query.DESCENDING
SERVER_TIMESTAMP = firestore.SERVER_TIMESTAMP
INDEX_FALLBACK_OVERFETCH = 5


@lru_cache(maxsize=4)
def firestore_connect(project: str | None = None, database: str = "(default)") -> firestore.Client:
    """Return a memoized Firestore client for the project/database pair."""

    return firestore.Client(project=project, database=database)


def to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def convert_timestamps(data: Any) -> Any:
    """Replace Firestore timestamps with epoch milliseconds, recursively."""

    if isinstance(data, datetime):
        return to_millis(data)
    if isinstance(data, dict):
        return {k: convert_timestamps(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_timestamps(v) for v in data]
    return data


def snapshot_to_dict(snapshot) -> dict[str, Any]:
    return {"id": snapshot.id, **convert_timestamps(snapshot.to_dict() or {})}


def query_with_index_fallback(
    collection,
    *,
    field: str,
    value: Any,
    order_by: str,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Run ``field == value`` ordered by ``order_by`` descending.

    The combined filter+sort needs a composite index. Until Firestore reports
    it ready, read the plain sorted query (over-fetching when limited) and
    filter in memory instead.
    """

    query = collection.where(filter=FieldFilter(field, "==", value)).order_by(order_by, direction=DESCENDING)
    if limit:
        query = query.limit(limit)
    try:
        return [snapshot_to_dict(s) for s in query.stream()]
    except FailedPrecondition as exc:
        jlog("warning", event="firestore_index_not_ready", collection=collection.id, field=field, error=str(exc))

    fallback = collection.order_by(order_by, direction=DESCENDING)
    if limit:
        fallback = fallback.limit(limit * INDEX_FALLBACK_OVERFETCH)
    rows = [row for row in (snapshot_to_dict(s) for s in fallback.stream()) if row.get(field) == value]
    return rows[:limit] if limit else rows


__all__ = [
    "DESCENDING",
    "INDEX_FALLBACK_OVERFETCH",
    "SERVER_TIMESTAMP",
    "convert_timestamps",
    "firestore_connect",
    "query_with_index_fallback",
    "snapshot_to_dict",
    "to_millis",
]
