from __future__ import annotations

from feedcatalog.models import EMPTY_SNAPSHOT, Snapshot


class CatalogStore:
    """Owns the current catalog snapshot.

    Snapshots are immutable, so publishing is a single reference assignment:
    readers never lock and always get one complete snapshot. When several
    ``replace`` calls race, the one that assigns last stays visible.
    """

    def __init__(self, initial: Snapshot = EMPTY_SNAPSHOT) -> None:
        self._snapshot = initial

    def current(self) -> Snapshot:
        return self._snapshot

    def replace(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.refreshed_at is not None
