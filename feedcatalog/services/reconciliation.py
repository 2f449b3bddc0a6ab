from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

from feedcatalog.core.errors import RecordSyncError
from feedcatalog.models import ReconciliationResult, RecordFailure, Snapshot

logger = logging.getLogger(__name__)


class RecordTarget(Protocol):
    def authenticate(self) -> None: ...

    def create_record(self, name: str, sku: str, price: Decimal) -> None: ...


def reconcile(snapshot: Snapshot, target: RecordTarget) -> ReconciliationResult:
    """Create one external record per product in ``snapshot``.

    Authentication happens once before any record and its ``AuthError``
    propagates. Per-record failures are counted and the pass moves on.
    Nothing here is idempotent: running it twice creates records twice.
    """
    target.authenticate()

    result = ReconciliationResult()
    for product in snapshot.products:
        try:
            target.create_record(product.name, product.sku, product.price)
        except RecordSyncError as exc:
            logger.warning("Failed to sync product %s (%s): %s", product.id, product.sku, exc.reason)
            result.failed += 1
            result.failures.append(RecordFailure(sku=product.sku, reason=exc.reason))
            continue
        result.succeeded += 1

    logger.info("Reconciliation finished: %s created, %s failed", result.succeeded, result.failed)
    return result
