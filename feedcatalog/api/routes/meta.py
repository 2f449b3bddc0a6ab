from fastapi import APIRouter, Depends

from feedcatalog.api.deps import get_catalog_store, get_refresh_coordinator
from feedcatalog.schemas.meta import HealthOut
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.refresh import RefreshCoordinator

router = APIRouter(tags=["meta"])


@router.get("/health", response_model=HealthOut)
def health(
    store: CatalogStore = Depends(get_catalog_store),
    coordinator: RefreshCoordinator = Depends(get_refresh_coordinator),
) -> HealthOut:
    snapshot = store.current()
    return HealthOut(
        status="ok",
        products=len(snapshot),
        loaded=store.is_loaded,
        last_reload=snapshot.refreshed_at,
        refresh_count=snapshot.refresh_count,
        failed_refreshes=coordinator.failed_attempts,
        last_error=coordinator.last_error,
    )
