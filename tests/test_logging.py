import asyncio
import json
import logging

from ad_shotter.logging import LOGGER_NAME, current_context, jlog, logging_context, set_global_context


def test_logging_context_nests_and_unwinds():
    with logging_context(capture_id="outer", url="https://a.example.com"):
        with logging_context(capture_id="inner", bulk_index=None):
            ctx = current_context()
            assert ctx["capture_id"] == "inner"
            assert ctx["url"] == "https://a.example.com"
            assert "bulk_index" not in ctx
        assert current_context()["capture_id"] == "outer"
    assert "capture_id" not in current_context()


def test_logging_context_is_isolated_between_tasks():
    seen = {}

    async def worker(name):
        with logging_context(capture_id=name):
            await asyncio.sleep(0)
            seen[name] = current_context()["capture_id"]

    async def main():
        await asyncio.gather(worker("a"), worker("b"))

    asyncio.run(main())
    assert seen == {"a": "a", "b": "b"}


def test_jlog_emits_one_json_object(caplog):
    set_global_context(service="test-suite")
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        with logging_context(capture_id="c1"):
            jlog("info", event="capture_done", width=300.5)
    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "capture_done"
    assert payload["capture_id"] == "c1"
    assert payload["service"] == "test-suite"
    assert payload["width"] == 300.5
    assert "ts" in payload
