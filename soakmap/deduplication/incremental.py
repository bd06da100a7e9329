"""
Pre-insert duplicate check for freshly scraped springs.

Candidates are checked against the existing springs only, never against each
other. The proximity check looks at the candidate's own grid cell; a missed
duplicate near a cell edge is cleaned up later by the whole-corpus pass,
whereas a false positive here would silently drop a real spring.
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from soakmap.config import settings
from soakmap.deduplication.matching import keys_match
from soakmap.deduplication.spatial import SpatialIndex
from soakmap.deduplication.types import ClassificationResult, DuplicateMatch, SpringRecord
from soakmap.utils.text import normalize_spring_name


class IncrementalFilter:
    """Classifies candidate springs as new or duplicate-of an existing spring."""

    def __init__(self, existing: Sequence[SpringRecord], threshold: float | None = None):
        self.threshold = threshold or settings.dedup.proximity_threshold
        self.grid = SpatialIndex(existing, cell_size=self.threshold)

        # Index by normalized name + state for exact matching
        self.name_index: dict[tuple[str, str], SpringRecord] = {}
        self._keys: dict[int, str] = {}
        for spring in existing:
            key = normalize_spring_name(spring.name)
            self._keys[id(spring)] = key
            if key:
                self.name_index.setdefault((key, spring.state), spring)

    def find_existing(self, candidate: SpringRecord) -> SpringRecord | None:
        """Return the first existing spring the candidate duplicates, if any."""
        key = normalize_spring_name(candidate.name)

        # Name index first (faster)
        if key:
            match = self.name_index.get((key, candidate.state))
            if match is not None:
                return match

        # Proximity within the candidate's own cell
        if not candidate.has_coordinates:
            return None

        for existing in self.grid.cell_members(candidate.lat, candidate.lng):
            if keys_match(candidate, key, existing, self._keys[id(existing)], self.threshold):
                return existing

        return None

    def classify(self, candidates: Iterable[SpringRecord]) -> ClassificationResult:
        """
        Split candidates into new springs and duplicates of existing ones.

        Args:
            candidates: Drafts about to be inserted

        Returns:
            ClassificationResult; each duplicate carries the matched existing id
        """
        result = ClassificationResult()

        for candidate in candidates:
            existing = self.find_existing(candidate)
            if existing is None:
                result.new.append(candidate)
            else:
                result.duplicates.append(DuplicateMatch(draft=candidate, existing_id=existing.id))
                logger.debug(f"'{candidate.name}' ({candidate.state}) matches existing spring {existing.id}")

        logger.info(f"Classified {len(result.new)} new springs, {len(result.duplicates)} duplicates")
        return result
