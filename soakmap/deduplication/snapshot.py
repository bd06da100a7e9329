"""
Caller-owned snapshot of every spring in the store.

Loaded once and reused for every query in a run. There is no expiry: the
owner must call invalidate() after any insert or delete, or the snapshot
silently diverges from the store. Meant for single batch runs, not for
sharing across runs or threads.
"""

from loguru import logger

from soakmap.deduplication.types import SpringRecord, SpringRepository


class SpringSnapshot:
    """Lazily loaded, explicitly invalidated copy of the store's springs."""

    def __init__(self, repository: SpringRepository):
        self.repository = repository
        self._records: list[SpringRecord] | None = None
        self.loads = 0

    @property
    def records(self) -> list[SpringRecord]:
        """All springs, read from the repository on first access."""
        if self._records is None:
            self._records = self.repository.read_all()
            self.loads += 1
            logger.info(f"Loaded {len(self._records)} existing springs")
        return self._records

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def invalidate(self) -> None:
        """Drop the cached springs; the next access re-reads the store."""
        if self._records is not None:
            logger.debug("Spring snapshot invalidated")
        self._records = None

    def refresh(self) -> list[SpringRecord]:
        """Re-read the store now."""
        self.invalidate()
        return self.records
