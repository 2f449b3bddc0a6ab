import logging
import threading
import time
from datetime import datetime, timezone

import pytest

from conftest import FEED_CSV, StubFetcher
from feedcatalog.core.errors import FetchError, ParseError
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.refresh import PeriodicRefresher, RefreshCoordinator

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
BAD_FEED = "id,name,sku,price,qty\n1,Widget,SKU1,9.99,10\nbad,Bolt,SKU2,0.50,100\n"


def _wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_refresh_publishes_snapshot_and_metadata() -> None:
    store = CatalogStore()
    coordinator = RefreshCoordinator(store, StubFetcher(FEED_CSV), clock=lambda: FIXED_NOW)

    outcome = coordinator.refresh()

    assert outcome.count == 2
    assert outcome.refresh_count == 1
    assert outcome.refreshed_at == FIXED_NOW
    assert store.current().refreshed_at == FIXED_NOW
    assert [product.sku for product in store.current().products] == ["SKU1", "SKU2"]


@pytest.mark.parametrize(
    ("failure", "error_type"),
    [(FetchError("timeout"), FetchError), (BAD_FEED, ParseError)],
)
def test_failed_refresh_keeps_previous_snapshot(failure, error_type) -> None:
    store = CatalogStore()
    coordinator = RefreshCoordinator(store, StubFetcher(FEED_CSV, failure))
    coordinator.refresh()
    before = store.current()

    with pytest.raises(error_type):
        coordinator.refresh()

    assert store.current() is before
    assert store.current().refresh_count == 1
    assert coordinator.failed_attempts == 1
    assert coordinator.last_error


def test_first_refresh_failure_leaves_store_unloaded() -> None:
    store = CatalogStore()
    coordinator = RefreshCoordinator(store, StubFetcher(BAD_FEED))

    with pytest.raises(ParseError):
        coordinator.refresh()

    assert store.is_loaded is False


def test_successful_refresh_clears_last_error() -> None:
    coordinator = RefreshCoordinator(CatalogStore(), StubFetcher(FetchError("down"), FEED_CSV))

    with pytest.raises(FetchError):
        coordinator.refresh()
    coordinator.refresh()

    assert coordinator.last_error is None
    assert coordinator.failed_attempts == 1


class BlockingFetcher:
    def __init__(self) -> None:
        self.release = threading.Event()
        self.first_started = threading.Event()
        self.active = 0
        self.max_active = 0
        self.calls = 0
        self._lock = threading.Lock()

    def fetch(self) -> str:
        with self._lock:
            self.calls += 1
            call = self.calls
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if call == 1:
                self.first_started.set()
                self.release.wait(timeout=5)
            return f"id,name,sku,price,qty\n{call},Item {call},SKU{call},1.00,{call}\n"
        finally:
            with self._lock:
                self.active -= 1


def test_concurrent_triggers_are_serialized_and_newest_wins() -> None:
    store = CatalogStore()
    fetcher = BlockingFetcher()
    coordinator = RefreshCoordinator(store, fetcher)

    first = threading.Thread(target=coordinator.refresh)
    first.start()
    assert fetcher.first_started.wait(timeout=5)
    second = threading.Thread(target=coordinator.refresh)
    second.start()
    time.sleep(0.05)
    fetcher.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert fetcher.max_active == 1
    assert fetcher.calls == 2
    assert store.current().refresh_count == 2
    assert store.current().products[0].id == 2


def test_periodic_refresher_survives_failures() -> None:
    store = CatalogStore()
    fetcher = StubFetcher(FetchError("down"), BAD_FEED, FEED_CSV)
    coordinator = RefreshCoordinator(store, fetcher)
    refresher = PeriodicRefresher(coordinator, interval_seconds=0.01)

    refresher.start()
    try:
        assert _wait_for(lambda: store.current().refresh_count >= 2)
    finally:
        refresher.stop()

    assert coordinator.failed_attempts == 2
    assert len(store.current()) == 2


def test_periodic_refresher_logs_unexpected_errors(caplog: pytest.LogCaptureFixture) -> None:
    coordinator = RefreshCoordinator(CatalogStore(), StubFetcher(RuntimeError("boom")))
    refresher = PeriodicRefresher(coordinator, interval_seconds=3600)

    refresher.tick()

    assert "Unexpected error during periodic refresh" in caplog.text


def test_periodic_refresher_logs_catalog_errors_and_keeps_snapshot(caplog: pytest.LogCaptureFixture) -> None:
    store = CatalogStore()
    coordinator = RefreshCoordinator(store, StubFetcher(FEED_CSV, FetchError("down")))
    coordinator.refresh()
    before = store.current()
    refresher = PeriodicRefresher(coordinator, interval_seconds=3600)

    with caplog.at_level(logging.WARNING, logger="feedcatalog.services.refresh"):
        refresher.tick()

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert any("Periodic refresh failed" in record.getMessage() for record in warnings)
    assert store.current() is before


def test_periodic_refresher_stops_promptly_and_schedules_no_more_ticks() -> None:
    fetcher = StubFetcher(FEED_CSV)
    refresher = PeriodicRefresher(RefreshCoordinator(CatalogStore(), fetcher), interval_seconds=0.01)

    refresher.start()
    assert _wait_for(lambda: fetcher.calls >= 1)
    started = time.monotonic()
    refresher.stop()

    assert time.monotonic() - started < 1.0
    assert refresher.running is False
    calls_after_stop = fetcher.calls
    time.sleep(0.05)
    assert fetcher.calls == calls_after_stop


def test_stop_before_first_tick_does_not_wait_for_interval() -> None:
    fetcher = StubFetcher(FEED_CSV)
    refresher = PeriodicRefresher(RefreshCoordinator(CatalogStore(), fetcher), interval_seconds=3600)

    refresher.start()
    started = time.monotonic()
    refresher.stop()

    assert time.monotonic() - started < 1.0
    assert fetcher.calls == 0
