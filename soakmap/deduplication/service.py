"""
Entry point for ingestion and cleanup runs.

Ties the snapshot, filter, resolver and merge executor to one repository.
One service per run: it shares one snapshot between every call.
"""

from collections.abc import Iterable

from soakmap.config import settings
from soakmap.deduplication.incremental import IncrementalFilter
from soakmap.deduplication.merge import MergeExecutor
from soakmap.deduplication.resolver import DuplicateResolver
from soakmap.deduplication.snapshot import SpringSnapshot
from soakmap.deduplication.types import (
    ClassificationResult,
    DuplicateGroup,
    MergeResult,
    SpringRecord,
    SpringRepository,
)


class DeduplicationService:
    """Duplicate detection and cleanup against a spring repository."""

    def __init__(
        self,
        repository: SpringRepository,
        snapshot: SpringSnapshot | None = None,
        threshold: float | None = None,
    ):
        self.repository = repository
        self.snapshot = snapshot or SpringSnapshot(repository)
        self.threshold = threshold or settings.dedup.proximity_threshold

    def classify(self, candidates: Iterable[SpringRecord]) -> ClassificationResult:
        """Split candidates into new springs and duplicates of existing ones."""
        return IncrementalFilter(self.snapshot.records, threshold=self.threshold).classify(candidates)

    def find_duplicate_groups(self) -> list[DuplicateGroup]:
        """Find duplicate groups across every spring in the store."""
        return DuplicateResolver(threshold=self.threshold).find_groups(self.snapshot.records)

    def merge_with_report(self, groups: Iterable[DuplicateGroup]) -> MergeResult:
        """Merge groups and return the full report, including skipped groups."""
        return MergeExecutor(self.repository, snapshot=self.snapshot).execute(groups)

    def merge(self, groups: Iterable[DuplicateGroup]) -> int:
        """Merge groups and return the number of springs deleted."""
        return self.merge_with_report(groups).deleted

    def invalidate_snapshot_cache(self) -> None:
        """Call after inserting into or deleting from the store."""
        self.snapshot.invalidate()
