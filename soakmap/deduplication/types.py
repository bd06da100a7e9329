"""
Data types for the deduplication engine.

Defines the SpringRecord dataclass the engine operates on, the result
structures it produces, the repository interface it consumes, and its
exception hierarchy.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from soakmap.utils.geo import haversine_distance


class DeduplicationError(Exception):
    """Base class for deduplication errors."""


class RepositoryError(DeduplicationError):
    """Raised by a repository when the backing store fails."""

    def __init__(self, message: str, operation: str = None):
        super().__init__(message)
        self.operation = operation


@dataclass
class SpringRecord:
    """
    A spring as seen by the deduplication engine.

    Drafts produced by scrapers have no id until the store assigns one.
    Enrichment fields are optional; "unknown" and None both mean not known.
    """
    # Required fields
    name: str
    state: str                  # Two-letter state code
    lat: float | None = None
    lng: float | None = None
    id: str | None = None

    slug: str | None = None

    # Core content
    description: str | None = None
    temp_f: int | None = None
    photo_url: str | None = None

    # Access & experience (enriched)
    access_difficulty: str | None = None
    parking: str | None = None
    fee_type: str | None = None
    clothing_optional: str | None = None
    cell_service: str | None = None
    crowd_level: str | None = None
    best_season: str | None = None
    directions: str | None = None
    safety_notes: str | None = None

    # Pipeline tracking
    source: str | None = None
    source_id: str | None = None
    enrichment_status: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass
class ScoredSpring:
    """A duplicate group member with its richness score."""
    record: SpringRecord
    score: int

    @property
    def id(self) -> str | None:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name


@dataclass
class DuplicateGroup:
    """
    Records believed to denote one real spring.

    Members are sorted by score (highest first, ties in first-seen order);
    the first member is kept and the rest are deleted on merge.
    """
    springs: list[ScoredSpring]

    # Some members only match each other through a shared neighbour
    chained: bool = False

    @property
    def keep(self) -> ScoredSpring:
        return self.springs[0]

    @property
    def keep_id(self) -> str | None:
        return self.springs[0].id

    @property
    def delete_ids(self) -> list[str | None]:
        return [s.id for s in self.springs[1:]]

    @property
    def spread_meters(self) -> float | None:
        """Largest distance between two members with coordinates."""
        points = [(s.record.lat, s.record.lng) for s in self.springs if s.record.has_coordinates]
        if len(points) < 2:
            return None
        return max(
            haversine_distance(a[0], a[1], b[0], b[1])
            for i, a in enumerate(points)
            for b in points[i + 1:]
        )

    def __len__(self) -> int:
        return len(self.springs)


@dataclass
class DuplicateMatch:
    """A candidate withheld from insertion because it matches an existing spring."""
    draft: SpringRecord
    existing_id: str


@dataclass
class ClassificationResult:
    """Outcome of classifying a batch of candidates against existing springs."""
    new: list[SpringRecord] = field(default_factory=list)
    duplicates: list[DuplicateMatch] = field(default_factory=list)


@dataclass
class SkippedGroup:
    """A duplicate group that was not merged, and why."""
    group: DuplicateGroup
    reason: str
    invalid_ids: list[str | None] = field(default_factory=list)


@dataclass
class MergeResult:
    """Result of a merge run."""
    deleted: int = 0
    groups_merged: int = 0
    skipped: list[SkippedGroup] = field(default_factory=list)


class SpringRepository(ABC):
    """
    Interface to the store that owns spring records.

    Implementations raise RepositoryError on backend failure; the engine
    never retries or recovers.
    """

    @abstractmethod
    def read_all(self) -> list[SpringRecord]:
        """Return every spring in the store."""
        pass

    @abstractmethod
    def delete_by_ids(self, ids: list[str]) -> int:
        """Delete springs by id and return how many were deleted."""
        pass
