from collections.abc import Callable
from typing import Protocol

from fastapi import Request

from feedcatalog.clients.visma import VismaClient
from feedcatalog.core.config import VismaSettings
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.reconciliation import RecordTarget
from feedcatalog.services.refresh import RefreshCoordinator


class RecordClient(RecordTarget, Protocol):
    def close(self) -> None: ...


RecordClientFactory = Callable[[VismaSettings], RecordClient]


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_refresh_coordinator(request: Request) -> RefreshCoordinator:
    return request.app.state.coordinator


def get_record_client_factory() -> RecordClientFactory:
    return VismaClient
