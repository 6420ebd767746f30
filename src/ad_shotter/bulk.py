"""Sequential bulk capture with a fixed politeness delay between items."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping

from .capture import ScreenshotResult
from .geometry import Viewport
from .logging import jlog, logging_context


@dataclass(frozen=True)
class BulkItem:
    url: str
    selector: str
    category: str | None = None
    subcategory: str | None = None
    description: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BulkItem":
        url = str(data.get("url") or "").strip()
        selector = str(data.get("selector") or "").strip()
        if not url or not selector:
            raise ValueError(f"Bulk item missing url/selector: {dict(data)}")
        return cls(
            url=url,
            selector=selector,
            category=data.get("category") or None,
            subcategory=data.get("subcategory") or None,
            description=data.get("description") or None,
        )


@dataclass(frozen=True)
class BulkItemOutcome:
    index: int
    item: BulkItem
    result: ScreenshotResult | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "index": self.index,
            "url": self.item.url,
            "selector": self.item.selector,
            "success": self.success,
        }
        if self.result is not None:
            out["result"] = self.result.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class BulkCaptureReport:
    outcomes: list[BulkItemOutcome] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failure_count(self) -> int:
        return len(self.outcomes) - self.success_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [o.to_dict() for o in self.outcomes],
            "successCount": self.success_count,
            "failureCount": self.failure_count,
        }


CaptureFn = Callable[[BulkItem, Viewport], Awaitable[ScreenshotResult]]
OutcomeHook = Callable[[BulkItemOutcome], Awaitable[None]]


async def run_bulk_capture(
    items: Iterable[BulkItem],
    viewport: Viewport,
    *,
    capture: CaptureFn,
    delay_s: float,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_outcome: OutcomeHook | None = None,
) -> BulkCaptureReport:
    """Capture each item in order, one at a time.

    A failing item is recorded and the loop moves on. ``delay_s`` is slept
    between consecutive items only.
    """

    outcomes: list[BulkItemOutcome] = []
    started = time.monotonic()
    for index, item in enumerate(items):
        if index and delay_s > 0:
            await sleep(delay_s)
        with logging_context(bulk_index=index):
            try:
                result = await capture(item, viewport)
            except Exception as exc:
                jlog("warning", event="bulk_item_failed", url=item.url, selector=item.selector, error=str(exc))
                outcome = BulkItemOutcome(index=index, item=item, error=str(exc))
            else:
                jlog("info", event="bulk_item_done", url=item.url, selector=item.selector, screenshot_url=result.screenshot_url)
                outcome = BulkItemOutcome(index=index, item=item, result=result)
            if on_outcome is not None:
                try:
                    await on_outcome(outcome)
                except Exception as exc:
                    jlog("error", event="bulk_outcome_hook_error", url=item.url, error=str(exc))
        outcomes.append(outcome)

    report = BulkCaptureReport(outcomes=outcomes)
    jlog(
        "info",
        event="bulk_complete",
        total=len(outcomes),
        successes=report.success_count,
        failures=report.failure_count,
        elapsed_s=round(time.monotonic() - started, 2),
    )
    return report


__all__ = ["BulkCaptureReport", "BulkItem", "BulkItemOutcome", "CaptureFn", "run_bulk_capture"]
