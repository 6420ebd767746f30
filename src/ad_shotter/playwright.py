"""Playwright helpers for the capture routine."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Page, async_playwright

from .geometry import Viewport
from .logging import jlog

CHROMIUM_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


async def wait_assets_ready(page: Page) -> None:
    """Wait for fonts and images to settle so natural sizes are populated."""

    try:
        await page.evaluate(
            """
            () => Promise.all([
                (document.fonts && document.fonts.ready) ? document.fonts.ready : Promise.resolve(),
                Promise.all(
                    Array.from(document.images || []).map(img => {
                        if (img.complete) return Promise.resolve();
                        return new Promise(res => {
                            img.addEventListener('load', () => res(), { once: true });
                            img.addEventListener('error', () => res(), { once: true });
                        });
                    })
                )
            ])
            """
        )
    except Exception as exc:
        jlog("debug", event="wait_assets_ready_error", error=str(exc))


async def cleanup_playwright(context, browser) -> None:
    """Close the browser context and process, logging instead of raising."""

    try:
        if context:
            await context.close()
    except Exception as exc:
        jlog("warning", event="context_close_error", error=str(exc))
    try:
        if browser:
            await browser.close()
    except Exception as exc:
        jlog("warning", event="browser_close_error", error=str(exc))


@asynccontextmanager
async def launch_page(viewport: Viewport) -> AsyncIterator[Page]:
    """Launch an isolated headless Chromium and yield a single page.

    Every call owns its browser process end to end; it is closed when the
    ``async with`` block exits, whether or not the capture succeeded.
    """

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=True, args=CHROMIUM_LAUNCH_ARGS)
        context = None
        try:
            context = await browser.new_context(viewport=viewport.as_playwright())
            page = await context.new_page()
            yield page
        finally:
            await cleanup_playwright(context, browser)


__all__ = [
    "CHROMIUM_LAUNCH_ARGS",
    "cleanup_playwright",
    "launch_page",
    "wait_assets_ready",
]
