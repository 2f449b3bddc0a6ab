from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from feedcatalog.clients.feed import FeedFetcher
from feedcatalog.core.errors import CatalogError
from feedcatalog.models import RefreshOutcome, Snapshot
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.ingestion import parse_products

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshCoordinator:
    """Runs fetch, parse and publish cycles against a ``CatalogStore``.

    Cycles are serialized: a trigger that arrives while another cycle is in
    flight waits for it and then runs a full cycle of its own.
    """

    def __init__(
        self,
        store: CatalogStore,
        fetcher: FeedFetcher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.clock = clock
        self.failed_attempts = 0
        self.last_error: str | None = None
        self._lock = threading.Lock()

    def refresh(self) -> RefreshOutcome:
        with self._lock:
            try:
                raw_text = self.fetcher.fetch()
                products = parse_products(raw_text)
            except CatalogError as exc:
                self.failed_attempts += 1
                self.last_error = str(exc)
                raise

            previous = self.store.current()
            snapshot = Snapshot(
                products=tuple(products),
                refreshed_at=self.clock(),
                refresh_count=previous.refresh_count + 1,
            )
            self.store.replace(snapshot)
            self.last_error = None

        logger.info("Catalog refreshed: %s products (refresh #%s)", len(snapshot), snapshot.refresh_count)
        return RefreshOutcome(
            count=len(snapshot),
            refreshed_at=snapshot.refreshed_at,
            refresh_count=snapshot.refresh_count,
        )


class PeriodicRefresher:
    def __init__(self, coordinator: RefreshCoordinator, interval_seconds: float, join_timeout_seconds: float = 5.0) -> None:
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self.join_timeout_seconds = join_timeout_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="catalog-refresher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=self.join_timeout_seconds)
            if thread.is_alive():
                logger.warning("Refresher did not stop within %ss; abandoning in-flight refresh", self.join_timeout_seconds)
        self._thread = None

    def tick(self) -> None:
        try:
            self.coordinator.refresh()
        except CatalogError as exc:
            logger.warning("Periodic refresh failed, keeping previous snapshot: %s", exc)
        except Exception:
            logger.exception("Unexpected error during periodic refresh")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.tick()
