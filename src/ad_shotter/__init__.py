"""Element screenshot capture with measurement, storage fallback and history."""

from .bulk import BulkCaptureReport, BulkItem, BulkItemOutcome, run_bulk_capture
from .capture import ScreenshotResult, take_screenshot
from .config import Settings, get_settings, load_settings
from .errors import CaptureError, ElementNotFoundError, NavigationError, StorageError
from .geometry import ElementBox, ImageInfo, Viewport, aspect_ratio, gcd, scale_factor
from .logging import jlog
from .storage import ScreenshotStore, store_from_settings
from .versioning import get_app_version

__all__ = [
    "BulkCaptureReport",
    "BulkItem",
    "BulkItemOutcome",
    "CaptureError",
    "ElementBox",
    "ElementNotFoundError",
    "ImageInfo",
    "NavigationError",
    "ScreenshotResult",
    "ScreenshotStore",
    "Settings",
    "StorageError",
    "Viewport",
    "aspect_ratio",
    "gcd",
    "get_app_version",
    "get_settings",
    "jlog",
    "load_settings",
    "run_bulk_capture",
    "scale_factor",
    "store_from_settings",
    "take_screenshot",
]
