"""Bulk capture from the command line.

Reads ``url, selector[, category, subcategory]`` entries from a CSV or JSON
Lines manifest, or loads a stored bulk preset, and captures each entry in
order with the same delay the API uses.

Usage (examples)
----------------
# Manifest file, local fallback storage only
python scripts/bulk_capture.py --manifest-path ads.csv --viewport 1440x900

# Stored bulk preset, uploading to Cloud Storage and logging activity
python scripts/bulk_capture.py \\
  --preset-id 3kq9... --gcs-bucket your-asset-bucket \\
  --record-activity --user-id ops-bot --user-email ops@example.com
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import os
from dataclasses import dataclass
from typing import Iterable, Sequence

from .auth import SessionUser
from .bulk import BulkCaptureReport, BulkItem, BulkItemOutcome, run_bulk_capture
from .capture import BrowserFactory, take_screenshot
from .config import Settings, get_settings
from .db import firestore_connect, get_bulk_preset, record_screenshot_activity
from .geometry import Viewport
from .logging import configure_logging, jlog, logging_context, set_global_context
from .playwright import launch_page
from .storage import ScreenshotStore, store_from_settings
from .versioning import get_app_version


@dataclass(frozen=True)
class CliArgs:
    manifest_path: str | None
    preset_id: str | None
    viewport: Viewport | None
    delay_ms: int | None
    gcs_bucket: str | None
    project_id: str | None
    local_dir: str | None
    record_activity: bool
    user_id: str | None
    user_email: str | None
    output_path: str | None


def parse_viewport(raw: str) -> Viewport:
    try:
        w, h = raw.lower().split("x", 1)
        viewport = Viewport(int(w), int(h))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"viewport must look like 1280x800, got {raw!r}") from exc
    if viewport.width <= 0 or viewport.height <= 0:
        raise argparse.ArgumentTypeError("viewport dimensions must be positive")
    return viewport


def validate_args(args: argparse.Namespace) -> None:
    if bool(args.manifest_path) == bool(args.preset_id):
        raise ValueError("Provide exactly one of --manifest-path or --preset-id")
    if args.record_activity and not (args.user_id and args.user_email):
        raise ValueError("--record-activity requires --user-id and --user-email")
    if args.delay_ms is not None and args.delay_ms < 0:
        raise ValueError("--delay-ms must not be negative")


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    p = argparse.ArgumentParser(description="Capture element screenshots for a list of URL/selector pairs")
    p.add_argument("--manifest-path", help="CSV (url,selector[,category,subcategory]) or JSONL manifest")
    p.add_argument("--preset-id", help="Bulk preset document id to run instead of a manifest")
    p.add_argument("--viewport", type=parse_viewport, help="Viewport as WIDTHxHEIGHT")
    p.add_argument("--delay-ms", type=int, help="Delay between items (default: BULK_DELAY_MS or 1000)")
    p.add_argument("--gcs-bucket", help="Asset bucket; without one every image goes to the local directory")
    p.add_argument("--project-id")
    p.add_argument("--local-dir", help="Fallback directory for images")
    p.add_argument("--record-activity", action="store_true", help="Write an activity record per successful capture")
    p.add_argument("--user-id")
    p.add_argument("--user-email")
    p.add_argument("--output-path", help="Write the JSON report here instead of stdout")
    ns = p.parse_args(argv)
    try:
        validate_args(ns)
    except ValueError as exc:
        p.error(str(exc))
    return CliArgs(
        manifest_path=ns.manifest_path,
        preset_id=ns.preset_id,
        viewport=ns.viewport,
        delay_ms=ns.delay_ms,
        gcs_bucket=ns.gcs_bucket,
        project_id=ns.project_id,
        local_dir=ns.local_dir,
        record_activity=ns.record_activity,
        user_id=ns.user_id,
        user_email=ns.user_email,
        output_path=ns.output_path,
    )


def iter_manifest_entries(path: str) -> Iterable[BulkItem]:
    """
    Yield :class:`BulkItem` entries from a manifest file.

    Accepted formats:
    - CSV with headers (url, selector) and optional category, subcategory
    - JSON Lines where each object provides the same keys
    """
    resolved = os.path.expanduser(path)
    try:
        with open(resolved, "r", encoding="utf-8") as fh:
            probe = ""
            while True:
                pos = fh.tell()
                line = fh.readline()
                if not line:
                    break
                stripped = line.strip()
                if stripped:
                    probe = stripped
                    fh.seek(pos)
                    break
            if not probe:
                return
            if probe.startswith("{") or resolved.endswith((".jsonl", ".json")):
                for raw in fh:
                    raw = raw.strip()
                    if not raw:
                        continue
                    yield BulkItem.from_mapping(json.loads(raw))
            else:
                fh.seek(0)
                reader = csv.DictReader(fh)
                if not reader.fieldnames:
                    raise ValueError("Manifest CSV must include headers url, selector.")
                for row in reader:
                    if not row or not any((v or "").strip() for v in row.values()):
                        continue
                    yield BulkItem.from_mapping({k.strip().lower(): (v or "").strip() for k, v in row.items() if k})
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Manifest file not found: {resolved}") from exc


def _settings_for(args: CliArgs) -> Settings:
    return get_settings().with_overrides(
        gcs_bucket=args.gcs_bucket,
        project_id=args.project_id,
        local_dir=args.local_dir,
        bulk_delay_ms=args.delay_ms,
    )


async def run(
    args: CliArgs,
    *,
    db=None,
    store: ScreenshotStore | None = None,
    browser_factory: BrowserFactory = launch_page,
) -> BulkCaptureReport:
    """Execute one bulk capture run for the supplied CLI arguments."""

    settings = _settings_for(args)
    if store is None:
        store = store_from_settings(settings)
    if db is None and (args.preset_id or args.record_activity):
        db = firestore_connect(settings.project_id, settings.firestore_database)

    preset_name = None
    viewport = args.viewport
    if args.preset_id:
        preset = await asyncio.to_thread(get_bulk_preset, db, args.preset_id)
        if preset is None:
            raise ValueError(f"Bulk preset not found: {args.preset_id}")
        items = [BulkItem.from_mapping(item) for item in preset["items"]]
        viewport = viewport or Viewport(preset["viewportWidth"], preset["viewportHeight"])
        preset_name = preset["name"]
    else:
        items = list(iter_manifest_entries(args.manifest_path or ""))
    viewport = viewport or Viewport(settings.default_viewport_width, settings.default_viewport_height)

    jlog(
        "info",
        event="bulk_run_start",
        items=len(items),
        preset_id=args.preset_id,
        manifest_path=args.manifest_path,
        gcs_bucket=settings.gcs_bucket,
        viewport_width=viewport.width,
        viewport_height=viewport.height,
    )

    async def capture_item(item: BulkItem, vp: Viewport):
        return await take_screenshot(
            item.url,
            item.selector,
            vp,
            store=store,
            settings=settings,
            browser_factory=browser_factory,
            bulk_preset_id=args.preset_id,
        )

    on_outcome = None
    if args.record_activity:
        user = SessionUser(uid=args.user_id or "", email=args.user_email or "")

        async def on_outcome(outcome: BulkItemOutcome) -> None:
            if outcome.result is None:
                return
            await asyncio.to_thread(
                record_screenshot_activity,
                db,
                user,
                url=outcome.item.url,
                selector=outcome.item.selector,
                result=outcome.result,
                viewport=viewport,
                bulk_preset_id=args.preset_id,
                bulk_preset_name=preset_name,
            )

    return await run_bulk_capture(
        items,
        viewport,
        capture=capture_item,
        delay_s=settings.bulk_delay_s,
        on_outcome=on_outcome,
    )


def write_report(report: BulkCaptureReport, output_path: str | None) -> None:
    payload = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(payload)
        jlog("info", event="bulk_report_written", path=output_path)
    else:
        print(payload)


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(get_settings().log_level)
    set_global_context(app="ad_shotter", pipeline="bulk")
    with logging_context(version=get_app_version()):
        args = parse_args(argv)
        report = asyncio.run(run(args))
        write_report(report, args.output_path)
    return 0 if report.failure_count == 0 else 1


__all__ = ["CliArgs", "iter_manifest_entries", "main", "parse_args", "run", "write_report"]
