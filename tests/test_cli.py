import asyncio
import json

import pytest
from conftest import FakeBrowser

from ad_shotter.cli import iter_manifest_entries, parse_args, run, write_report
from ad_shotter.db import ACTIVITIES_COLLECTION, create_bulk_preset
from ad_shotter.geometry import Viewport


def test_iter_manifest_entries_csv(tmp_path):
    manifest = tmp_path / "ads.csv"
    manifest.write_text("URL,Selector,category\nhttps://a.example.com,#ad,HOME\n,,\nhttps://b.example.com,.banner,\n", encoding="utf-8")
    items = list(iter_manifest_entries(str(manifest)))
    assert [(i.url, i.selector) for i in items] == [("https://a.example.com", "#ad"), ("https://b.example.com", ".banner")]
    assert items[0].category == "HOME"
    assert items[1].category is None


def test_iter_manifest_entries_jsonl(tmp_path):
    manifest = tmp_path / "ads.jsonl"
    manifest.write_text(
        "\n" + json.dumps({"url": "https://a.example.com", "selector": "#ad"}) + "\n\n"
        + json.dumps({"url": "https://b.example.com", "selector": "#b", "description": "side"}) + "\n",
        encoding="utf-8",
    )
    items = list(iter_manifest_entries(str(manifest)))
    assert [i.url for i in items] == ["https://a.example.com", "https://b.example.com"]
    assert items[1].description == "side"


def test_iter_manifest_entries_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(iter_manifest_entries(str(tmp_path / "nope.csv")))


def test_parse_args_validation():
    args = parse_args(["--manifest-path", "ads.csv", "--viewport", "1440x900", "--delay-ms", "0"])
    assert args.viewport == Viewport(1440, 900)
    assert args.delay_ms == 0
    with pytest.raises(SystemExit):
        parse_args([])
    with pytest.raises(SystemExit):
        parse_args(["--manifest-path", "a.csv", "--preset-id", "p1"])
    with pytest.raises(SystemExit):
        parse_args(["--manifest-path", "a.csv", "--record-activity"])
    with pytest.raises(SystemExit):
        parse_args(["--manifest-path", "a.csv", "--viewport", "wide"])


def test_run_manifest(tmp_path, ad_page, recording_store):
    manifest = tmp_path / "ads.csv"
    manifest.write_text("url,selector\nhttps://a.example.com,#ad\nhttps://b.example.com,#missing\n", encoding="utf-8")
    args = parse_args(["--manifest-path", str(manifest), "--delay-ms", "0", "--local-dir", str(tmp_path)])
    browser = FakeBrowser(ad_page)
    report = asyncio.run(run(args, store=recording_store, browser_factory=browser))
    assert report.success_count == 1
    assert report.failure_count == 1
    assert browser.closed == 2

    out = tmp_path / "report.json"
    write_report(report, str(out))
    assert json.loads(out.read_text(encoding="utf-8"))["successCount"] == 1


def test_run_preset_records_activity(tmp_path, fake_db, ad_page, recording_store):
    preset_id = create_bulk_preset(
        fake_db,
        {
            "name": "Weekly",
            "items": [{"url": "https://a.example.com", "selector": "#ad"}, {"url": "https://b.example.com", "selector": "#ad"}],
            "viewportWidth": 1024,
            "viewportHeight": 768,
        },
    )
    args = parse_args(
        ["--preset-id", preset_id, "--delay-ms", "0", "--record-activity", "--user-id", "ops", "--user-email", "ops@example.com"]
    )
    browser = FakeBrowser(ad_page)
    report = asyncio.run(run(args, db=fake_db, store=recording_store, browser_factory=browser))
    assert report.success_count == 2
    assert browser.viewports == [Viewport(1024, 768)] * 2
    assert all(call[2]["bulk_preset_id"] == preset_id for call in recording_store.calls)

    activities = [s.to_dict() for s in fake_db.collection(ACTIVITIES_COLLECTION).stream()]
    assert len(activities) == 2
    assert {a["details"]["bulkPresetName"] for a in activities} == {"Weekly"}


def test_run_unknown_preset(fake_db, recording_store):
    args = parse_args(["--preset-id", "nope"])
    with pytest.raises(ValueError, match="Bulk preset not found"):
        asyncio.run(run(args, db=fake_db, store=recording_store))
