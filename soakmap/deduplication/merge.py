"""
Deletes the losing springs of duplicate groups.

Every id slated for deletion is checked against the persisted id format
before anything is deleted. A group with a bad id is skipped whole; deleting
only its valid ids could remove the wrong springs.
"""

import re
from collections.abc import Iterable

from loguru import logger

from soakmap.config import settings
from soakmap.deduplication.snapshot import SpringSnapshot
from soakmap.deduplication.types import (
    DuplicateGroup,
    MergeResult,
    SkippedGroup,
    SpringRepository,
)


class MergeExecutor:
    """Applies duplicate groups to a repository."""

    def __init__(
        self,
        repository: SpringRepository,
        snapshot: SpringSnapshot | None = None,
        id_pattern: str | None = None,
    ):
        self.repository = repository
        self.snapshot = snapshot
        self.id_re = re.compile(id_pattern or settings.dedup.id_pattern)

    def is_valid_id(self, spring_id: str | None) -> bool:
        return isinstance(spring_id, str) and self.id_re.fullmatch(spring_id) is not None

    def check_group(self, group: DuplicateGroup) -> SkippedGroup | None:
        """Return why a group must not be merged, or None if it is safe."""
        invalid_ids = [i for i in group.delete_ids if not self.is_valid_id(i)]
        if invalid_ids:
            return SkippedGroup(group=group, reason="invalid id format", invalid_ids=invalid_ids)

        if group.keep_id in group.delete_ids:
            return SkippedGroup(group=group, reason="keep id is also marked for deletion")

        return None

    def execute(self, groups: Iterable[DuplicateGroup]) -> MergeResult:
        """
        Delete every delete-marked spring, keeping each group's best spring.

        Repository errors propagate; groups merged before the error stay merged.

        Returns:
            MergeResult with the deleted count and any skipped groups
        """
        result = MergeResult()

        try:
            for group in groups:
                if not group.delete_ids:
                    continue

                skipped = self.check_group(group)
                if skipped:
                    logger.warning(
                        f"Skipping group for '{group.keep.name}': {skipped.reason}"
                        + (f" ({', '.join(map(str, skipped.invalid_ids))})" if skipped.invalid_ids else "")
                    )
                    result.skipped.append(skipped)
                    continue

                deleted = self.repository.delete_by_ids(list(group.delete_ids))
                result.deleted += deleted
                result.groups_merged += 1
                logger.debug(f"Kept '{group.keep.name}' ({group.keep_id}), deleted {deleted}")
        finally:
            # Clear cache after deletions
            if self.snapshot is not None:
                self.snapshot.invalidate()

        logger.info(
            f"Merged {result.groups_merged} groups: {result.deleted} springs deleted, "
            f"{len(result.skipped)} groups skipped"
        )
        return result
