import pytest

from ad_shotter.categories import ad_type_count
from ad_shotter.dashboard import dashboard_stats, group_by_bulk_preset, history_item, page_window, paginate, recent_row


def test_page_window_shows_everything_for_small_totals():
    assert page_window(3, 5) == [1, 2, 3, 4, 5]
    assert page_window(1, 0) == []


def test_page_window_collapses_gaps():
    assert page_window(5, 10) == [1, None, 4, 5, 6, None, 10]
    assert page_window(1, 10) == [1, 2, None, 10]
    assert page_window(10, 10) == [1, None, 9, 10]


def test_paginate_slices_and_clamps():
    items = [{"id": i} for i in range(20)]
    page = paginate(items, 3, 9)
    assert [i["id"] for i in page["items"]] == [18, 19]
    assert page["totalPages"] == 3
    assert (page["showingFrom"], page["showingTo"]) == (19, 20)
    assert paginate(items, 99, 9)["page"] == 3
    empty = paginate([], 1, 6)
    assert empty["items"] == []
    assert empty["showingFrom"] == 0
    assert empty["page"] == 1


def test_paginate_rejects_unknown_page_size():
    with pytest.raises(ValueError):
        paginate([], 1, 10)


def test_history_item_defaults():
    item = history_item({"id": "a1", "timestamp": 1714521600000, "details": {"url": "https://x.example.com", "selector": "#ad"}})
    assert item["viewportWidth"] == 1280
    assert item["viewportHeight"] == 800
    assert item["images"] == []
    assert item["timestamp"] == 1714521600000


def test_group_by_bulk_preset_keeps_first_seen_order():
    history = [
        {"id": 1, "bulkPresetId": "w", "bulkPresetName": "Weekly"},
        {"id": 2, "bulkPresetId": None},
        {"id": 3, "bulkPresetId": "w", "bulkPresetName": "Weekly"},
    ]
    groups = group_by_bulk_preset(history)
    assert [g["bulkPresetId"] for g in groups] == ["w", None]
    assert [i["id"] for i in groups[0]["items"]] == [1, 3]


def test_recent_row_and_stats():
    activity = {
        "id": "a1",
        "userEmail": "ops@example.com",
        "timestamp": 1714521600000,
        "details": {"url": "https://www.example.com/page", "selector": ".hero"},
    }
    row = recent_row(activity)
    assert row == {
        "id": "a1",
        "website": "www.example.com",
        "screenshotType": ".hero",
        "status": "Completed",
        "date": "2024-05-01",
        "user": "ops",
    }
    assert recent_row({"id": "a2"})["user"] == "Anonymous"

    stats = dashboard_stats([activity] * 7, [{"id": "p"}], [{"id": "b1"}, {"id": "b2"}])
    assert stats["totalScreenshots"] == 7
    assert stats["totalPresets"] == 3
    assert stats["totalAdTypes"] == ad_type_count()
    assert len(stats["recentScreenshots"]) == 5
