"""Exceptions raised by the capture pipeline."""

from __future__ import annotations


class CaptureError(RuntimeError):
    """Base class for failures that abort a single capture."""


class NavigationError(CaptureError):
    """The target page did not settle within the navigation timeout."""


class ElementNotFoundError(CaptureError):
    """The CSS selector never matched an element within the wait window."""

    def __init__(self, selector: str, message: str | None = None) -> None:
        super().__init__(message or f"Element not found: {selector}")
        self.selector = selector


class StorageError(CaptureError):
    """Neither the remote asset store nor the local fallback accepted the image."""


__all__ = ["CaptureError", "ElementNotFoundError", "NavigationError", "StorageError"]
