"""Metadata helpers for screenshot asset uploads."""

from __future__ import annotations

from collections import OrderedDict
from typing import OrderedDict as OrderedDictType


def build_asset_metadata(
    *,
    capture_id: str,
    source_url: str,
    selector: str,
    width: float,
    height: float,
    pixel_width: int,
    pixel_height: int,
    viewport_width: int,
    viewport_height: int,
    sha256: str,
    app_version: str,
    bulk_preset_id: str | None = None,
) -> OrderedDictType[str, str]:
    """Return metadata with deterministic ordering for auditability."""

    md: OrderedDictType[str, str] = OrderedDict()
    md["capture_id"] = capture_id
    md["source_url"] = source_url
    md["selector"] = selector
    md["width"] = f"{width:g}"
    md["height"] = f"{height:g}"
    md["pixel_width"] = str(pixel_width)
    md["pixel_height"] = str(pixel_height)
    md["viewport_width"] = str(viewport_width)
    md["viewport_height"] = str(viewport_height)
    md["sha256"] = sha256
    md["app_version"] = app_version
    if bulk_preset_id:
        md["bulk_preset_id"] = bulk_preset_id
    return md


__all__ = ["build_asset_metadata"]
