"""
Deduplication pipeline components.

These modules decide which spring records from different sources describe
the same real spring, pick the record to keep, and delete the rest.
"""

from soakmap.deduplication.incremental import IncrementalFilter
from soakmap.deduplication.matching import are_likely_duplicates, are_names_similar
from soakmap.deduplication.merge import MergeExecutor
from soakmap.deduplication.resolver import DisjointSet, DuplicateResolver
from soakmap.deduplication.scoring import calculate_richness_score
from soakmap.deduplication.service import DeduplicationService
from soakmap.deduplication.snapshot import SpringSnapshot
from soakmap.deduplication.spatial import SpatialIndex, grid_cell
from soakmap.deduplication.types import (
    ClassificationResult,
    DeduplicationError,
    DuplicateGroup,
    DuplicateMatch,
    MergeResult,
    RepositoryError,
    ScoredSpring,
    SkippedGroup,
    SpringRecord,
    SpringRepository,
)

__all__ = [
    # Engine
    "DeduplicationService",
    "DuplicateResolver",
    "IncrementalFilter",
    "MergeExecutor",
    "SpringSnapshot",
    "SpatialIndex",
    "DisjointSet",
    # Functions
    "are_likely_duplicates",
    "are_names_similar",
    "calculate_richness_score",
    "grid_cell",
    # Types
    "SpringRecord",
    "SpringRepository",
    "ScoredSpring",
    "DuplicateGroup",
    "DuplicateMatch",
    "ClassificationResult",
    "SkippedGroup",
    "MergeResult",
    # Errors
    "DeduplicationError",
    "RepositoryError",
]
