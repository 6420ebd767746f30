"""Structured JSON logging for the API and the bulk CLI.

Each record is one JSON object: a timestamp, the process-wide fields from
:func:`set_global_context`, the fields of every enclosing
:func:`logging_context` block and the event fields themselves. Scoped fields
live in a :class:`contextvars.ContextVar`, so concurrent requests served by
the same event loop never see each other's ``capture_id``.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping

UTC = getattr(datetime, "UTC", timezone.utc)
LOGGER_NAME = "ad_shotter"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

_process_fields: dict[str, Any] = {}
_scoped_fields: ContextVar[Mapping[str, Any]] = ContextVar("ad_shotter_log_fields", default={})


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install the line format on the root logger and set the package level.

    Safe to call from both the uvicorn lifespan and the CLI: the root handler
    is only added when none exists yet.
    """

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger(LOGGER_NAME).setLevel(_resolve_level(level))


def set_global_context(**fields: Any) -> None:
    _process_fields.update({k: v for k, v in fields.items() if v is not None})


@contextmanager
def logging_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every record emitted inside the ``with`` block."""

    merged = {**_scoped_fields.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _scoped_fields.set(merged)
    try:
        yield
    finally:
        _scoped_fields.reset(token)


def current_context() -> dict[str, Any]:
    return {**_process_fields, **_scoped_fields.get()}


def jlog(level: str, /, **fields: Any) -> None:
    """Emit one JSON record under the ``ad_shotter`` logger."""

    log = logging.getLogger(LOGGER_NAME)
    method = getattr(log, level.lower())
    if not log.isEnabledFor(_resolve_level(level)):
        return
    record = {"ts": datetime.now(UTC).isoformat(), **current_context(), **fields}
    method(json.dumps(record, ensure_ascii=False, sort_keys=True, default=str))


def capturelog(event: str, *, url: str, selector: str, level: str = "info", **kw: Any) -> None:
    """Capture-scoped shortcut: every record names the target URL and selector."""

    jlog(level, event=event, url=url, selector=selector, **kw)


__all__ = [
    "LOGGER_NAME",
    "capturelog",
    "configure_logging",
    "current_context",
    "jlog",
    "logging_context",
    "set_global_context",
]
