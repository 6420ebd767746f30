"""Screenshot asset storage: Google Cloud Storage with a local-disk fallback."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Mapping

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import storage  # type: ignore[attr-defined]

from .config import DEFAULT_LOCAL_URL_PREFIX, Settings
from .errors import StorageError
from .imaging import png_info
from .logging import jlog

ASSET_FOLDER = "screenshots"
CACHE_CONTROL = "public, max-age=31536000, immutable"


@dataclass(frozen=True, slots=True)
class AssetUploadResult:
    public_id: str
    url: str
    secure_url: str
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class StoredScreenshot:
    screenshot_url: str
    asset_id: str | None
    backend: str


Uploader = Callable[[bytes, str, Mapping[str, str]], AssetUploadResult]


@lru_cache(maxsize=2)
def storage_connect(project: str | None = None) -> storage.Client:
    """Return a memoized Cloud Storage client."""

    return storage.Client(project=project)


def new_screenshot_filename() -> str:
    return f"{uuid.uuid4()}.png"


def canonical_asset_name(filename: str) -> str:
    return f"{ASSET_FOLDER}/{filename}"


def local_screenshot_url(url_prefix: str, filename: str) -> str:
    return f"{url_prefix.rstrip('/')}/{filename}"


def _pixel_size(png_bytes: bytes, metadata: Mapping[str, str]) -> tuple[int, int]:
    try:
        return int(metadata["pixel_width"]), int(metadata["pixel_height"])
    except (KeyError, ValueError):
        info = png_info(png_bytes)
        return info.width, info.height


def upload_screenshot(
    storage_client: storage.Client,
    bucket_name: str,
    filename: str,
    png_bytes: bytes,
    metadata: Mapping[str, str] | None = None,
) -> AssetUploadResult:
    """Upload a PNG under ``screenshots/<filename>`` and describe the stored asset.

    Pixel dimensions come from the ``pixel_width``/``pixel_height`` metadata the
    capture already measured; the PNG is only decoded when they are absent.
    """

    width, height = _pixel_size(png_bytes, metadata or {})
    name = canonical_asset_name(filename)
    bucket = storage_client.bucket(bucket_name)
    blob = bucket.blob(name)
    blob.cache_control = CACHE_CONTROL
    blob.metadata = dict(metadata or {})
    blob.upload_from_string(png_bytes, content_type="image/png")
    return AssetUploadResult(
        public_id=name,
        url=f"gs://{bucket_name}/{name}",
        secure_url=blob.public_url,
        width=width,
        height=height,
    )


def delete_screenshot_asset(storage_client: storage.Client, bucket_name: str, public_id: str) -> bool:
    """Delete a previously uploaded asset. Returns ``False`` instead of raising."""

    if not public_id:
        return False
    try:
        storage_client.bucket(bucket_name).blob(public_id).delete()
    except NotFound:
        jlog("warning", event="asset_delete_not_found", public_id=public_id, bucket=bucket_name)
        return False
    except GoogleAPICallError as exc:
        jlog("error", event="asset_delete_error", public_id=public_id, bucket=bucket_name, error=str(exc))
        return False
    jlog("info", event="asset_deleted", public_id=public_id, bucket=bucket_name)
    return True


def write_local_screenshot(directory: str, filename: str, png_bytes: bytes) -> str:
    """Write the PNG into the public fallback directory and return its path."""

    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, filename)
    with open(path, "wb") as fh:
        fh.write(png_bytes)
    return path


def gcs_uploader(client_factory: Callable[[], storage.Client], bucket_name: str) -> Uploader:
    """Bind a bucket to :func:`upload_screenshot`; the client is resolved per call."""

    def _upload(png_bytes: bytes, filename: str, metadata: Mapping[str, str]) -> AssetUploadResult:
        return upload_screenshot(client_factory(), bucket_name, filename, png_bytes, metadata)

    return _upload


class ScreenshotStore:
    """Persist capture rasters remotely, falling back to local disk on failure."""

    def __init__(
        self,
        uploader: Uploader | None,
        *,
        local_dir: str,
        url_prefix: str = DEFAULT_LOCAL_URL_PREFIX,
    ) -> None:
        self.uploader = uploader
        self.local_dir = local_dir
        self.url_prefix = url_prefix

    def save(self, png_bytes: bytes, filename: str, metadata: Mapping[str, str] | None = None) -> StoredScreenshot:
        if self.uploader is not None:
            try:
                uploaded = self.uploader(png_bytes, filename, metadata or {})
            except Exception as exc:
                jlog(
                    "warning",
                    event="remote_upload_failed_using_local_fallback",
                    filename=filename,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            else:
                jlog("info", event="asset_uploaded", public_id=uploaded.public_id, width=uploaded.width, height=uploaded.height)
                return StoredScreenshot(screenshot_url=uploaded.secure_url, asset_id=uploaded.public_id, backend="remote")
        else:
            jlog("info", event="remote_store_disabled", filename=filename)

        try:
            path = write_local_screenshot(self.local_dir, filename, png_bytes)
        except OSError as exc:
            jlog("error", event="local_fallback_write_error", filename=filename, directory=self.local_dir, error=str(exc))
            raise StorageError("Failed to save screenshot locally after remote upload failure") from exc
        jlog("info", event="screenshot_saved_locally", path=path)
        return StoredScreenshot(
            screenshot_url=local_screenshot_url(self.url_prefix, filename),
            asset_id=None,
            backend="local",
        )


def store_from_settings(settings: Settings) -> ScreenshotStore:
    uploader = None
    if settings.gcs_bucket:
        uploader = gcs_uploader(lambda: storage_connect(settings.project_id), settings.gcs_bucket)
    return ScreenshotStore(uploader, local_dir=settings.local_dir, url_prefix=settings.local_url_prefix)


__all__ = [
    "ASSET_FOLDER",
    "AssetUploadResult",
    "ScreenshotStore",
    "StoredScreenshot",
    "Uploader",
    "canonical_asset_name",
    "delete_screenshot_asset",
    "gcs_uploader",
    "local_screenshot_url",
    "new_screenshot_filename",
    "storage_connect",
    "store_from_settings",
    "upload_screenshot",
    "write_local_screenshot",
]
