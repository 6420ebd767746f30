"""PNG inspection helpers for captured rasters."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from io import BytesIO

from PIL import Image


@dataclass(frozen=True, slots=True)
class PngInfo:
    sha256: str
    width: int
    height: int
    size_bytes: int


def png_info(png_bytes: bytes) -> PngInfo:
    """Return the digest and pixel dimensions of a PNG payload."""

    with Image.open(BytesIO(png_bytes)) as im:
        width, height = im.size
    return PngInfo(
        sha256=hashlib.sha256(png_bytes).hexdigest(),
        width=width,
        height=height,
        size_bytes=len(png_bytes),
    )


__all__ = ["PngInfo", "png_info"]
