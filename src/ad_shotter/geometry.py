"""Element and image geometry derived from rendered DOM measurements."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Viewport:
    width: int
    height: int

    def as_playwright(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class ElementBox:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ImageInfo:
    rendered_width: int
    rendered_height: int
    intrinsic_width: int
    intrinsic_height: int
    aspect_ratio: str
    scale_factor: float | None
    src: str
    alt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "renderedWidth": self.rendered_width,
            "renderedHeight": self.rendered_height,
            "intrinsicWidth": self.intrinsic_width,
            "intrinsicHeight": self.intrinsic_height,
            "aspectRatio": self.aspect_ratio,
            "scaleFactor": self.scale_factor,
            "src": self.src,
            "alt": self.alt,
        }


def round_half_up(value: Any) -> int:
    """Round a CSS pixel measurement the way the browser's ``Math.round`` does."""

    return int(math.floor(float(value or 0) + 0.5))


def gcd(a: int, b: int) -> int:
    """Euclid's algorithm; ``gcd(a, 0) == a`` so ``gcd(0, 0) == 0``."""

    return a if b == 0 else gcd(b, a % b)


def aspect_ratio(width: int, height: int) -> str:
    """Reduce ``width:height`` to lowest terms, e.g. 1920x1080 -> ``16:9``.

    Zero sides are not special-cased: 0x50 reduces by 50 to ``0:1``. A 0x0
    box has no common divisor and is reported as ``0:0``.
    """

    divisor = gcd(width, height)
    if divisor == 0:
        return "0:0"
    return f"{width // divisor}:{height // divisor}"


def scale_factor(intrinsic: int, rendered: int) -> float | None:
    """Return how many intrinsic pixels back each rendered pixel."""

    if rendered <= 0:
        return None
    return round(intrinsic / rendered, 2)


def image_info_from_measurement(raw: dict[str, Any]) -> ImageInfo:
    """Build :class:`ImageInfo` from one raw ``<img>`` measurement.

    ``raw`` carries the float bounding-rect ``width``/``height``, the
    ``naturalWidth``/``naturalHeight`` integers and ``src``/``alt``.
    """

    rendered_w = round_half_up(raw.get("width"))
    rendered_h = round_half_up(raw.get("height"))
    natural_w = int(raw.get("naturalWidth") or 0)
    natural_h = int(raw.get("naturalHeight") or 0)
    return ImageInfo(
        rendered_width=rendered_w,
        rendered_height=rendered_h,
        intrinsic_width=natural_w,
        intrinsic_height=natural_h,
        aspect_ratio=aspect_ratio(rendered_w, rendered_h),
        scale_factor=scale_factor(natural_w, rendered_w),
        src=str(raw.get("src") or ""),
        alt=raw.get("alt"),
    )


__all__ = [
    "ElementBox",
    "ImageInfo",
    "Viewport",
    "aspect_ratio",
    "gcd",
    "image_info_from_measurement",
    "round_half_up",
    "scale_factor",
]
