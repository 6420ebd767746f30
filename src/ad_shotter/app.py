"""FastAPI application: capture, delete, bulk, presets, history and dashboard."""

from __future__ import annotations

import argparse
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Iterable, Mapping

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from google.api_core.exceptions import NotFound
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .auth import SessionUser, require_session
from .bulk import BulkItem, BulkItemOutcome, run_bulk_capture
from .capture import ScreenshotResult, take_screenshot
from .categories import PRESET_CATEGORIES, PRESET_SUBCATEGORIES, is_known_subcategory
from .config import Settings, get_settings
from .dashboard import (
    DEFAULT_PAGE_SIZE,
    HISTORY_FETCH_LIMIT,
    dashboard_stats,
    group_by_bulk_preset,
    history_item,
    paginate,
)
from .db import (
    create_bulk_preset,
    create_preset,
    delete_bulk_preset,
    delete_preset,
    firestore_connect,
    get_bulk_preset,
    get_preset,
    get_recent_activities,
    get_screenshot_activities,
    get_user_activities,
    list_bulk_presets,
    list_presets,
    record_screenshot_activity,
    remove_screenshot_activity,
    stored_asset_id,
    update_bulk_preset,
    update_preset,
)
from .geometry import Viewport
from .logging import configure_logging, jlog, set_global_context
from .models import (
    BulkCaptureRequest,
    BulkPresetIn,
    CaptureRequest,
    CaptureResponse,
    DeleteScreenshotRequest,
    DeleteScreenshotResponse,
    PresetIn,
)
from .playwright import launch_page
from .storage import delete_screenshot_asset, storage_connect, store_from_settings
from .urls import is_http_url
from .versioning import APP_NAME, get_app_version

CaptureFn = Callable[..., Awaitable[ScreenshotResult]]
AssetDeleter = Callable[[str], bool]

router = APIRouter()


# ============================
# Wiring
# ============================


def default_asset_deleter(settings: Settings) -> AssetDeleter:
    def _delete(public_id: str) -> bool:
        if not settings.gcs_bucket:
            jlog("warning", event="asset_delete_skipped_no_bucket", public_id=public_id)
            return False
        try:
            client = storage_connect(settings.project_id)
        except Exception as exc:
            jlog("error", event="storage_client_error", error=str(exc))
            return False
        return delete_screenshot_asset(client, settings.gcs_bucket, public_id)

    return _delete


def get_db(request: Request):
    state = request.app.state
    if state.db is None:
        state.db = firestore_connect(state.settings.project_id, state.settings.firestore_database)
    return state.db


def _default_viewport(settings: Settings) -> Viewport:
    return Viewport(settings.default_viewport_width, settings.default_viewport_height)


def _bulk_items(raw: Iterable[Mapping[str, Any]]) -> list[BulkItem]:
    try:
        return [BulkItem.from_mapping(item) for item in raw]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _check_category(category: str, subcategory: str) -> None:
    if category not in PRESET_SUBCATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")
    if not is_known_subcategory(category, subcategory):
        raise HTTPException(status_code=400, detail=f"Unknown subcategory for {category}: {subcategory}")


# ============================
# Screenshots
# ============================


@router.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": APP_NAME, "version": get_app_version()}


@router.post("/api/screenshot", response_model=CaptureResponse, response_model_exclude_none=True)
async def capture_screenshot(body: CaptureRequest, request: Request, user: SessionUser = Depends(require_session)):
    if not body.url or not body.selector:
        raise HTTPException(status_code=400, detail="URL and CSS selector are required")
    if not is_http_url(body.url):
        raise HTTPException(status_code=400, detail="URL must be an absolute http(s) URL")

    state = request.app.state
    viewport = body.viewport.to_viewport() if body.viewport else _default_viewport(state.settings)
    try:
        result = await state.capture(body.url, body.selector, viewport)
    except Exception as exc:
        jlog("error", event="capture_request_failed", url=body.url, selector=body.selector, error=str(exc))
        return JSONResponse({"error": f"Failed to capture screenshot: {exc}"}, status_code=500)

    payload: dict[str, Any] = result.to_dict()
    try:
        db = await asyncio.to_thread(get_db, request)
        payload["activityId"] = await asyncio.to_thread(
            record_screenshot_activity,
            db,
            user,
            url=body.url,
            selector=body.selector,
            result=result,
            viewport=viewport,
        )
    except Exception as exc:
        jlog("error", event="activity_record_failed", url=body.url, error=str(exc))
        payload["activityWarning"] = "Screenshot captured but the activity could not be recorded"
    return CaptureResponse.model_validate(payload)


@router.delete("/api/screenshot/delete", response_model=DeleteScreenshotResponse)
def delete_screenshot(body: DeleteScreenshotRequest, request: Request, user: SessionUser = Depends(require_session)):
    if not body.activity_id:
        raise HTTPException(status_code=400, detail="Activity ID is required")
    state = request.app.state
    try:
        removed = remove_screenshot_activity(get_db(request), body.activity_id, user)
        success = removed is not None
        owned_asset = stored_asset_id(removed)
        asset_deleted = not body.asset_id
        if owned_asset and body.asset_id in (None, owned_asset):
            asset_deleted = state.delete_asset(owned_asset)
        elif success and body.asset_id:
            jlog(
                "warning",
                event="asset_id_mismatch",
                activity_id=body.activity_id,
                requested_asset_id=body.asset_id,
                stored_asset_id=owned_asset,
            )
        if not asset_deleted:
            jlog("warning", event="asset_not_deleted", asset_id=body.asset_id, activity_id=body.activity_id)
    except Exception as exc:
        jlog("error", event="delete_request_failed", activity_id=body.activity_id, error=str(exc))
        return JSONResponse({"error": "Failed to delete screenshot"}, status_code=500)
    return DeleteScreenshotResponse(
        success=success,
        asset_deleted=asset_deleted,
        message="Screenshot deleted successfully" if success else "Failed to delete screenshot activity",
    )


@router.post("/api/screenshot/bulk")
async def capture_bulk(body: BulkCaptureRequest, request: Request, user: SessionUser = Depends(require_session)):
    state = request.app.state
    db = await asyncio.to_thread(get_db, request)
    preset_name = body.bulk_preset_name
    viewport = body.viewport.to_viewport() if body.viewport else None
    items = _bulk_items(item.to_document() for item in body.items)

    if body.preset_id:
        preset = await asyncio.to_thread(get_bulk_preset, db, body.preset_id)
        if preset is None:
            raise HTTPException(status_code=404, detail="Bulk preset not found")
        items = _bulk_items(preset["items"])
        viewport = viewport or Viewport(preset["viewportWidth"], preset["viewportHeight"])
        preset_name = preset_name or preset["name"]
    if not items:
        raise HTTPException(status_code=400, detail="No bulk items provided")
    viewport = viewport or _default_viewport(state.settings)

    async def capture_item(item: BulkItem, vp: Viewport) -> ScreenshotResult:
        return await state.capture(item.url, item.selector, vp, bulk_preset_id=body.preset_id)

    async def record(outcome: BulkItemOutcome) -> None:
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
            bulk_preset_id=body.preset_id,
            bulk_preset_name=preset_name,
        )

    report = await run_bulk_capture(
        items,
        viewport,
        capture=capture_item,
        delay_s=state.settings.bulk_delay_s,
        on_outcome=record,
    )
    return report.to_dict()


# ============================
# Presets
# ============================


@router.get("/api/categories")
def categories_index(user: SessionUser = Depends(require_session)):
    return {"categories": PRESET_CATEGORIES, "subcategories": PRESET_SUBCATEGORIES}


@router.get("/api/presets")
def presets_index(request: Request, category: str | None = None, user: SessionUser = Depends(require_session)):
    return list_presets(get_db(request), category=category)


@router.post("/api/presets", status_code=201)
def presets_create(body: PresetIn, request: Request, user: SessionUser = Depends(require_session)):
    _check_category(body.category, body.subcategory)
    return {"id": create_preset(get_db(request), body.to_document())}


@router.get("/api/presets/{preset_id}")
def presets_show(preset_id: str, request: Request, user: SessionUser = Depends(require_session)):
    preset = get_preset(get_db(request), preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail="Preset not found")
    return preset


@router.put("/api/presets/{preset_id}")
def presets_update(preset_id: str, body: PresetIn, request: Request, user: SessionUser = Depends(require_session)):
    _check_category(body.category, body.subcategory)
    update_preset(get_db(request), preset_id, body.to_document())
    return {"success": True}


@router.delete("/api/presets/{preset_id}")
def presets_delete(preset_id: str, request: Request, user: SessionUser = Depends(require_session)):
    delete_preset(get_db(request), preset_id)
    return {"success": True}


@router.get("/api/bulk-presets")
def bulk_presets_index(request: Request, user: SessionUser = Depends(require_session)):
    return list_bulk_presets(get_db(request))


@router.post("/api/bulk-presets", status_code=201)
def bulk_presets_create(body: BulkPresetIn, request: Request, user: SessionUser = Depends(require_session)):
    return {"id": create_bulk_preset(get_db(request), body.to_document())}


@router.get("/api/bulk-presets/{preset_id}")
def bulk_presets_show(preset_id: str, request: Request, user: SessionUser = Depends(require_session)):
    preset = get_bulk_preset(get_db(request), preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail="Bulk preset not found")
    return preset


@router.put("/api/bulk-presets/{preset_id}")
def bulk_presets_update(preset_id: str, body: BulkPresetIn, request: Request, user: SessionUser = Depends(require_session)):
    update_bulk_preset(get_db(request), preset_id, body.to_document())
    return {"success": True}


@router.delete("/api/bulk-presets/{preset_id}")
def bulk_presets_delete(preset_id: str, request: Request, user: SessionUser = Depends(require_session)):
    delete_bulk_preset(get_db(request), preset_id)
    return {"success": True}


# ============================
# Activity, history, dashboard
# ============================


@router.get("/api/activities")
def activities_index(
    request: Request,
    limit: int = Query(5, ge=1, le=100),
    mine: bool = False,
    user: SessionUser = Depends(require_session),
):
    db = get_db(request)
    if mine:
        return get_user_activities(db, user.uid, limit)
    return get_recent_activities(db, limit)


def _history(request: Request) -> list[dict[str, Any]]:
    return [history_item(a) for a in get_screenshot_activities(get_db(request), HISTORY_FETCH_LIMIT)]


@router.get("/api/history")
def history_index(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, alias="perPage"),
    user: SessionUser = Depends(require_session),
):
    try:
        return paginate(_history(request), page, per_page)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/api/history/groups")
def history_groups(request: Request, user: SessionUser = Depends(require_session)):
    return group_by_bulk_preset(_history(request))


@router.get("/api/dashboard")
def dashboard(request: Request, user: SessionUser = Depends(require_session)):
    db = get_db(request)
    return dashboard_stats(
        get_screenshot_activities(db, HISTORY_FETCH_LIMIT),
        list_presets(db),
        list_bulk_presets(db),
    )


# ============================
# Error handlers
# ============================


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": "Invalid request", "details": jsonable_encoder(exc.errors())}, status_code=400)


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse({"error": "Not found"}, status_code=404)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    jlog("error", event="unhandled_error", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ============================
# Application factory
# ============================


def create_app(
    settings: Settings | None = None,
    *,
    db=None,
    capture: CaptureFn | None = None,
    delete_asset: AssetDeleter | None = None,
) -> FastAPI:
    """Build the API. ``db``, ``capture`` and ``delete_asset`` default to the
    Firestore, Playwright and Cloud Storage implementations."""

    settings = settings or get_settings()

    if capture is None:
        store = store_from_settings(settings)

        async def capture(url: str, selector: str, viewport: Viewport, bulk_preset_id: str | None = None):
            return await take_screenshot(
                url,
                selector,
                viewport,
                store=store,
                settings=settings,
                browser_factory=launch_page,
                bulk_preset_id=bulk_preset_id,
            )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        set_global_context(app="ad_shotter", version=get_app_version())
        os.makedirs(settings.local_dir, exist_ok=True)
        jlog("info", event="service_started", gcs_bucket=settings.gcs_bucket, local_dir=settings.local_dir)
        yield
        jlog("info", event="service_stopped")

    app = FastAPI(
        title="Ad Shotter",
        description="Capture screenshots of page elements and keep a history of them",
        version=get_app_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.capture = capture
    app.state.delete_asset = delete_asset or default_asset_deleter(settings)

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(Exception, _unhandled_error)
    app.include_router(router)
    app.mount(settings.local_url_prefix, StaticFiles(directory=settings.local_dir, check_dir=False), name="screenshots")
    return app


def main() -> None:
    p = argparse.ArgumentParser(description="Run the Ad Shotter API")
    p.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    p.add_argument("--reload", action="store_true")
    args = p.parse_args()
    uvicorn.run("ad_shotter.app:create_app", factory=True, host=args.host, port=args.port, reload=args.reload)


__all__ = ["create_app", "default_asset_deleter", "main", "router"]
