from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    sku: str
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class Snapshot:
    """One published view of the catalog together with the refresh that produced it."""

    products: tuple[Product, ...] = field(default_factory=tuple)
    refreshed_at: datetime | None = None
    refresh_count: int = 0

    def __len__(self) -> int:
        return len(self.products)


EMPTY_SNAPSHOT = Snapshot()


@dataclass(frozen=True)
class RefreshOutcome:
    count: int
    refreshed_at: datetime
    refresh_count: int


@dataclass(frozen=True)
class RecordFailure:
    sku: str
    reason: str


@dataclass
class ReconciliationResult:
    succeeded: int = 0
    failed: int = 0
    failures: list[RecordFailure] = field(default_factory=list)

