import copy
import itertools
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from io import BytesIO

import pytest
from google.api_core.exceptions import FailedPrecondition, NotFound
from google.cloud import firestore
from PIL import Image
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ad_shotter.capture import ELEMENT_RECT_JS, IMAGE_MEASUREMENTS_JS
from ad_shotter.storage import StoredScreenshot

_EPOCH = datetime(2024, 5, 1, tzinfo=timezone.utc)


def png_bytes(width: int = 40, height: int = 20) -> bytes:
    img = Image.new("RGB", (width, height), (200, 30, 30))
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


# ============================
# Firestore
# ============================


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    def set(self, data):
        self._collection.docs[self.id] = self._collection.client.resolve(data)

    def update(self, data):
        if self.id not in self._collection.docs:
            raise NotFound(f"No document to update: {self._collection.id}/{self.id}")
        self._collection.docs[self.id].update(self._collection.client.resolve(data))

    def delete(self):
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, limit=None):
        self._collection = collection
        self._filters = tuple(filters)
        self._order = order
        self._limit = limit

    def where(self, *, filter):
        return FakeQuery(self._collection, self._filters + (filter,), self._order, self._limit)

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return FakeQuery(self._collection, self._filters, (field, direction), self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, self._order, count)

    def stream(self):
        client = self._collection.client
        if client.fail_indexed_queries and self._filters and self._order:
            raise FailedPrecondition("The query requires an index.")
        rows = list(self._collection.docs.items())
        for f in self._filters:
            assert f.op_string == "=="
            rows = [(k, v) for k, v in rows if v.get(f.field_path) == f.value]
        if self._order:
            field, direction = self._order
            rows = [(k, v) for k, v in rows if v.get(field) is not None]
            rows.sort(key=lambda kv: kv[1][field], reverse=direction == firestore.Query.DESCENDING)
        if self._limit:
            rows = rows[: self._limit]
        return iter([FakeSnapshot(k, copy.deepcopy(v)) for k, v in rows])


class FakeCollection(FakeQuery):
    def __init__(self, client, name):
        self.client = client
        self.id = name
        self.docs = {}
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or self.client.next_id())

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self.client.now(), ref


class FakeFirestore:
    """In-memory stand-in for the handful of Firestore calls the stores make."""

    def __init__(self, fail_indexed_queries=False):
        self.fail_indexed_queries = fail_indexed_queries
        self._collections = {}
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    def next_id(self):
        return f"doc{next(self._ids)}"

    def now(self):
        return _EPOCH + timedelta(seconds=next(self._ticks))

    def resolve(self, data):
        return {k: (self.now() if v is firestore.SERVER_TIMESTAMP else copy.deepcopy(v)) for k, v in data.items()}


@pytest.fixture
def fake_db():
    return FakeFirestore()


# ============================
# Playwright
# ============================


class FakeHandle:
    def __init__(self, png):
        self._png = png

    async def screenshot(self, type="png"):
        return self._png


class FakePage:
    """Page double: ``elements`` maps selector -> rect, images and PNG bytes."""

    def __init__(self, elements=None, goto_error=None, html="<html></html>"):
        self.elements = elements or {}
        self.goto_error = goto_error
        self.html = html
        self.visited = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector, timeout=None, state=None):
        if selector not in self.elements:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def evaluate(self, script, arg=None):
        element = self.elements.get(arg)
        if script == ELEMENT_RECT_JS:
            return element["rect"] if element else None
        if script == IMAGE_MEASUREMENTS_JS:
            return element.get("images", []) if element else []
        return None

    async def query_selector(self, selector):
        element = self.elements.get(selector)
        return FakeHandle(element["png"]) if element else None

    async def content(self):
        return self.html


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.viewports = []
        self.open = 0
        self.closed = 0

    @asynccontextmanager
    async def __call__(self, viewport):
        self.viewports.append(viewport)
        self.open += 1
        try:
            yield self.page
        finally:
            self.closed += 1


@pytest.fixture
def ad_page():
    return FakePage(
        elements={
            "#ad": {
                "rect": {"width": 300.0, "height": 250.5},
                "images": [
                    {
                        "width": 300.4,
                        "height": 149.6,
                        "naturalWidth": 600,
                        "naturalHeight": 300,
                        "src": "https://cdn.example.com/banner.png",
                        "alt": "banner",
                    }
                ],
                "png": png_bytes(300, 250),
            }
        }
    )


class RecordingStore:
    def __init__(self, stored=None):
        self.calls = []
        self._stored = stored

    def save(self, png, filename, metadata=None):
        self.calls.append((png, filename, dict(metadata or {})))
        return self._stored or StoredScreenshot(
            screenshot_url=f"https://storage.googleapis.com/bucket/screenshots/{filename}",
            asset_id=f"screenshots/{filename}",
            backend="remote",
        )


@pytest.fixture
def recording_store():
    return RecordingStore()
