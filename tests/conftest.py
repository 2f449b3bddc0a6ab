import threading

import pytest
from fastapi.testclient import TestClient

from feedcatalog.core.config import Settings
from feedcatalog.core.errors import FetchError
from feedcatalog.main import create_app

FEED_CSV = "id,name,sku,price,qty\n1,Widget,SKU1,9.99,10\n2,Bolt,SKU2,0.50,100\n"


class StubFetcher:
    """Returns queued payloads in order, repeating the last one; exceptions in the queue are raised."""

    def __init__(self, *payloads: object) -> None:
        self.payloads = list(payloads) or [FEED_CSV]
        self.calls = 0
        self._lock = threading.Lock()

    def fetch(self) -> str:
        with self._lock:
            index = min(self.calls, len(self.payloads) - 1)
            self.calls += 1
            payload = self.payloads[index]
        if isinstance(payload, Exception):
            raise payload
        return payload

    def push(self, payload: object) -> None:
        with self._lock:
            self.payloads = self.payloads[: self.calls] + [payload]


@pytest.fixture()
def settings() -> Settings:
    return Settings(sheet_csv_url="https://feed.example.com/products.csv", refresh_interval_seconds=3600)


@pytest.fixture()
def fetcher() -> StubFetcher:
    return StubFetcher(FEED_CSV)


@pytest.fixture()
def app(settings: Settings, fetcher: StubFetcher):
    return create_app(settings=settings, feed_fetcher=fetcher)


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def failing_fetcher() -> StubFetcher:
    return StubFetcher(FetchError("feed down"))
