"""Element screenshot capture.

A capture launches its own headless Chromium, navigates to the target URL,
waits for the CSS selector, measures the element and every ``<img>`` inside
it, crops a PNG of just that element and hands the bytes to a
:class:`~ad_shotter.storage.ScreenshotStore`. The browser is always released
before storage is attempted; nothing is persisted unless the browser phase
succeeded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings, get_settings
from .debug import dump_page_html
from .errors import ElementNotFoundError, NavigationError
from .geometry import ElementBox, ImageInfo, Viewport, image_info_from_measurement
from .imaging import png_info
from .logging import capturelog, logging_context
from .metadata import build_asset_metadata
from .playwright import launch_page, wait_assets_ready
from .storage import ScreenshotStore, new_screenshot_filename
from .versioning import get_app_version

ELEMENT_RECT_JS = """
(sel) => {
    const el = document.querySelector(sel);
    if (!el) return null;
    const rect = el.getBoundingClientRect();
    return { width: rect.width, height: rect.height };
}
"""

IMAGE_MEASUREMENTS_JS = """
(sel) => {
    const el = document.querySelector(sel);
    if (!el) return [];
    return Array.from(el.querySelectorAll('img')).map(img => {
        const rect = img.getBoundingClientRect();
        return {
            width: rect.width,
            height: rect.height,
            naturalWidth: img.naturalWidth,
            naturalHeight: img.naturalHeight,
            src: img.src,
            alt: img.alt,
        };
    });
}
"""

BrowserFactory = Callable[[Viewport], AsyncContextManager[Page]]


@dataclass(frozen=True)
class ScreenshotResult:
    screenshot_url: str
    width: float
    height: float
    images: list[ImageInfo] = field(default_factory=list)
    asset_id: str | None = None
    capture_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "screenshotUrl": self.screenshot_url,
            "width": self.width,
            "height": self.height,
            "images": [img.to_dict() for img in self.images],
        }
        if self.asset_id:
            out["assetId"] = self.asset_id
            out["cloudinaryId"] = self.asset_id
        return out


async def navigate(page: Page, url: str, timeout_ms: int) -> None:
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise NavigationError(f"Navigation timeout of {timeout_ms} ms exceeded for {url}") from exc
    except PlaywrightError as exc:
        raise NavigationError(f"Navigation to {url} failed: {exc}") from exc


async def wait_for_element(page: Page, selector: str, timeout_ms: int) -> None:
    try:
        await page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
    except PlaywrightTimeoutError as exc:
        raise ElementNotFoundError(selector, f"Element not found within {timeout_ms} ms: {selector}") from exc


async def measure_element(page: Page, selector: str) -> ElementBox:
    rect = await page.evaluate(ELEMENT_RECT_JS, selector)
    if not rect:
        raise ElementNotFoundError(selector)
    return ElementBox(width=float(rect["width"]), height=float(rect["height"]))


async def screenshot_element(page: Page, selector: str) -> bytes:
    handle = await page.query_selector(selector)
    if handle is None:
        raise ElementNotFoundError(selector)
    return await handle.screenshot(type="png")


async def collect_image_info(page: Page, selector: str) -> list[ImageInfo]:
    raw = await page.evaluate(IMAGE_MEASUREMENTS_JS, selector)
    return [image_info_from_measurement(item) for item in raw or []]


async def take_screenshot(
    url: str,
    selector: str,
    viewport: Viewport | None = None,
    *,
    store: ScreenshotStore,
    settings: Settings | None = None,
    browser_factory: BrowserFactory = launch_page,
    bulk_preset_id: str | None = None,
) -> ScreenshotResult:
    """Capture ``selector`` on ``url`` and persist the cropped PNG.

    Raises :class:`NavigationError` or :class:`ElementNotFoundError` before
    anything is stored, and :class:`StorageError` when both the remote upload
    and the local fallback fail.
    """

    settings = settings or get_settings()
    viewport = viewport or Viewport(settings.default_viewport_width, settings.default_viewport_height)
    filename = new_screenshot_filename()
    capture_id = filename.rsplit(".", 1)[0]

    with logging_context(capture_id=capture_id):
        capturelog("capture_start", url=url, selector=selector, viewport_width=viewport.width, viewport_height=viewport.height)
        try:
            async with browser_factory(viewport) as page:
                await navigate(page, url, settings.navigation_timeout_ms)
                try:
                    await wait_for_element(page, selector, settings.selector_timeout_ms)
                except ElementNotFoundError:
                    if settings.debug_html:
                        await dump_page_html(page, capture_id)
                    raise
                await wait_assets_ready(page)
                box = await measure_element(page, selector)
                png_bytes = await screenshot_element(page, selector)
                images = await collect_image_info(page, selector)
        except Exception as exc:
            capturelog("capture_error", url=url, selector=selector, level="error", error=str(exc), error_type=type(exc).__name__)
            raise

        info = png_info(png_bytes)
        metadata = build_asset_metadata(
            capture_id=capture_id,
            source_url=url,
            selector=selector,
            width=box.width,
            height=box.height,
            pixel_width=info.width,
            pixel_height=info.height,
            viewport_width=viewport.width,
            viewport_height=viewport.height,
            sha256=info.sha256,
            app_version=get_app_version(),
            bulk_preset_id=bulk_preset_id,
        )
        stored = await asyncio.to_thread(store.save, png_bytes, filename, metadata)
        capturelog(
            "capture_done",
            url=url,
            selector=selector,
            width=box.width,
            height=box.height,
            images=len(images),
            backend=stored.backend,
            bytes=info.size_bytes,
        )
        return ScreenshotResult(
            screenshot_url=stored.screenshot_url,
            width=box.width,
            height=box.height,
            images=images,
            asset_id=stored.asset_id,
            capture_id=capture_id,
        )


__all__ = [
    "BrowserFactory",
    "ELEMENT_RECT_JS",
    "IMAGE_MEASUREMENTS_JS",
    "ScreenshotResult",
    "collect_image_info",
    "measure_element",
    "navigate",
    "screenshot_element",
    "take_screenshot",
    "wait_for_element",
]
