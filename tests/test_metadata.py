from ad_shotter.metadata import build_asset_metadata


def _metadata(**overrides):
    kwargs = dict(
        capture_id="cap-1",
        source_url="https://example.com/",
        selector="#ad",
        width=300.0,
        height=250.5,
        pixel_width=300,
        pixel_height=250,
        viewport_width=1280,
        viewport_height=800,
        sha256="f" * 64,
        app_version="ad-shotter:1.4.0",
    )
    kwargs.update(overrides)
    return build_asset_metadata(**kwargs)


def test_build_asset_metadata_orders_keys():
    md = _metadata()
    assert list(md.keys()) == [
        "capture_id",
        "source_url",
        "selector",
        "width",
        "height",
        "pixel_width",
        "pixel_height",
        "viewport_width",
        "viewport_height",
        "sha256",
        "app_version",
    ]
    assert md["width"] == "300"
    assert md["height"] == "250.5"
    assert md["pixel_height"] == "250"
    assert md["viewport_width"] == "1280"


def test_build_asset_metadata_tags_bulk_preset():
    md = _metadata(bulk_preset_id="bp-9")
    assert md["bulk_preset_id"] == "bp-9"
