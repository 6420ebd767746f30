"""Request and response bodies for the HTTP API (camelCase on the wire)."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .config import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from .geometry import Viewport


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ViewportIn(ApiModel):
    width: int = Field(default=DEFAULT_VIEWPORT_WIDTH, gt=0, le=10000)
    height: int = Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0, le=10000)

    def to_viewport(self) -> Viewport:
        return Viewport(width=self.width, height=self.height)


class CaptureRequest(ApiModel):
    url: Optional[str] = None
    selector: Optional[str] = None
    viewport: Optional[ViewportIn] = None


class ImageInfoOut(ApiModel):
    rendered_width: int
    rendered_height: int
    intrinsic_width: int
    intrinsic_height: int
    aspect_ratio: str
    scale_factor: Optional[float] = None
    src: str
    alt: Optional[str] = None


class CaptureResponse(ApiModel):
    screenshot_url: str
    width: float
    height: float
    images: List[ImageInfoOut] = []
    asset_id: Optional[str] = None
    # legacy name of asset_id, still read by older clients
    cloudinary_id: Optional[str] = None
    activity_id: Optional[str] = None
    activity_warning: Optional[str] = None


class DeleteScreenshotRequest(ApiModel):
    activity_id: Optional[str] = None
    asset_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("assetId", "cloudinaryId", "asset_id"),
    )


class DeleteScreenshotResponse(ApiModel):
    success: bool
    asset_deleted: bool
    cloudinary_deleted: Optional[bool] = None
    message: str

    @model_validator(mode="after")
    def _mirror_legacy_flag(self) -> "DeleteScreenshotResponse":
        if self.cloudinary_deleted is None:
            self.cloudinary_deleted = self.asset_deleted
        return self


class PresetIn(ApiModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    selector: str = Field(min_length=1)
    category: str = Field(min_length=1)
    subcategory: str = Field(min_length=1)
    viewport_width: int = Field(default=DEFAULT_VIEWPORT_WIDTH, gt=0)
    viewport_height: int = Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0)
    description: Optional[str] = None


class BulkItemIn(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(min_length=1)
    selector: str = Field(min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None


class BulkPresetIn(ApiModel):
    name: str = Field(min_length=1)
    items: List[BulkItemIn] = Field(min_length=1)
    viewport_width: int = Field(default=DEFAULT_VIEWPORT_WIDTH, gt=0)
    viewport_height: int = Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0)


class BulkCaptureRequest(ApiModel):
    items: List[BulkItemIn] = []
    viewport: Optional[ViewportIn] = None
    preset_id: Optional[str] = None
    bulk_preset_name: Optional[str] = None


__all__ = [
    "ApiModel",
    "BulkCaptureRequest",
    "BulkItemIn",
    "BulkPresetIn",
    "CaptureRequest",
    "CaptureResponse",
    "DeleteScreenshotRequest",
    "DeleteScreenshotResponse",
    "ImageInfoOut",
    "PresetIn",
    "ViewportIn",
]
