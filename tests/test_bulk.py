import asyncio

import pytest

from ad_shotter.bulk import BulkItem, run_bulk_capture
from ad_shotter.capture import ScreenshotResult
from ad_shotter.errors import ElementNotFoundError
from ad_shotter.geometry import Viewport


def _items():
    return [
        BulkItem("https://a.example.com/", "#ad"),
        BulkItem("https://b.example.com/", "#missing"),
        BulkItem("https://c.example.com/", "#ad"),
    ]


async def _capture(item, viewport):
    if item.selector == "#missing":
        raise ElementNotFoundError(item.selector)
    return ScreenshotResult(screenshot_url=f"{item.url}shot.png", width=300, height=250)


def test_bulk_item_from_mapping():
    item = BulkItem.from_mapping({"url": " https://a.example.com ", "selector": "#ad", "category": ""})
    assert item.url == "https://a.example.com"
    assert item.category is None
    with pytest.raises(ValueError):
        BulkItem.from_mapping({"url": "https://a.example.com"})


def test_bulk_continues_after_failure_and_keeps_order():
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    report = asyncio.run(run_bulk_capture(_items(), Viewport(1280, 800), capture=_capture, delay_s=1.0, sleep=sleep))
    assert report.success_count == 2
    assert report.failure_count == 1
    assert [o.item.url for o in report.outcomes] == [i.url for i in _items()]
    assert [o.success for o in report.outcomes] == [True, False, True]
    assert "Element not found" in report.outcomes[1].error
    assert sleeps == [1.0, 1.0]

    payload = report.to_dict()
    assert payload["successCount"] == 2
    assert payload["failureCount"] == 1
    assert payload["results"][0]["result"]["screenshotUrl"] == "https://a.example.com/shot.png"
    assert "result" not in payload["results"][1]


def test_bulk_zero_delay_never_sleeps():
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    asyncio.run(run_bulk_capture(_items(), Viewport(1280, 800), capture=_capture, delay_s=0, sleep=sleep))
    assert sleeps == []


def test_bulk_outcome_hook_errors_do_not_stop_the_run():
    seen = []

    async def on_outcome(outcome):
        seen.append(outcome.index)
        if outcome.index == 0:
            raise RuntimeError("activity store down")

    report = asyncio.run(
        run_bulk_capture(_items(), Viewport(1280, 800), capture=_capture, delay_s=0, on_outcome=on_outcome)
    )
    assert seen == [0, 1, 2]
    assert report.success_count == 2
