from contextlib import closing

from fastapi import APIRouter, Depends

from feedcatalog.api.deps import (
    RecordClientFactory,
    get_catalog_store,
    get_record_client_factory,
    get_refresh_coordinator,
)
from feedcatalog.core.config import VismaSettings, get_visma_settings
from feedcatalog.core.errors import ApiError, AppHTTPException, AuthError, FetchError, ParseError
from feedcatalog.schemas.admin import PushResponse, RecordFailureOut, ReloadResponse
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.reconciliation import reconcile
from feedcatalog.services.refresh import RefreshCoordinator

router = APIRouter(prefix="/products/admin", tags=["admin"])


@router.post("/reload", response_model=ReloadResponse)
def reload_catalog(coordinator: RefreshCoordinator = Depends(get_refresh_coordinator)) -> ReloadResponse:
    try:
        outcome = coordinator.refresh()
    except FetchError as exc:
        raise AppHTTPException(status_code=502, error=ApiError(code="feed_unavailable", message=str(exc))) from exc
    except ParseError as exc:
        raise AppHTTPException(
            status_code=502,
            error=ApiError(code="feed_invalid", message=str(exc), details={"line": exc.line_number}),
        ) from exc
    return ReloadResponse(status="reloaded", count=outcome.count)


@router.post("/push-to-visma", response_model=PushResponse)
def push_to_visma(
    store: CatalogStore = Depends(get_catalog_store),
    settings: VismaSettings = Depends(get_visma_settings),
    client_factory: RecordClientFactory = Depends(get_record_client_factory),
) -> PushResponse:
    missing = settings.missing()
    if missing:
        raise AppHTTPException(
            status_code=400,
            error=ApiError(
                code="missing_configuration",
                message=f"Missing Visma configuration: {', '.join(missing)}",
                details={"missing": missing},
            ),
        )

    snapshot = store.current()
    try:
        with closing(client_factory(settings)) as client:
            result = reconcile(snapshot, client)
    except AuthError as exc:
        raise AppHTTPException(status_code=502, error=ApiError(code="auth_failed", message=str(exc))) from exc

    return PushResponse(
        status="completed",
        created=result.succeeded,
        failed=result.failed,
        failures=[RecordFailureOut(sku=failure.sku, reason=failure.reason) for failure in result.failures],
    )
