import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from feedcatalog.api.routes import admin, meta, products
from feedcatalog.clients.feed import FeedFetcher, HttpFeedFetcher
from feedcatalog.core.config import Settings, get_settings
from feedcatalog.core.logging import configure_logging
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.refresh import PeriodicRefresher, RefreshCoordinator

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, feed_fetcher: FeedFetcher | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        owned_fetcher = None
        fetcher = feed_fetcher
        if fetcher is None:
            fetcher = owned_fetcher = HttpFeedFetcher.from_settings(settings)

        store = CatalogStore()
        coordinator = RefreshCoordinator(store, fetcher)
        refresher = PeriodicRefresher(coordinator, settings.refresh_interval_seconds)
        try:
            # No traffic is served unless the first load succeeds.
            outcome = await run_in_threadpool(coordinator.refresh)
            logger.info("Initial catalog load: %s products", outcome.count)

            app.state.store = store
            app.state.coordinator = coordinator
            refresher.start()
            yield
        finally:
            await run_in_threadpool(refresher.stop)
            if owned_fetcher is not None:
                owned_fetcher.close()
            logger.info("Catalog service stopped")

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"code": "validation_error", "message": "Invalid request", "details": exc.errors()})

    app.include_router(products.router)
    app.include_router(admin.router)
    app.include_router(meta.router)
    return app


app = create_app()
