"""
Richness scoring for picking the survivor of a duplicate group.

Higher score = more verified data = better candidate to keep. Scores are
only compared within a group, never across unrelated springs.
"""

from soakmap.config import settings
from soakmap.deduplication.types import SpringRecord

# Enriched fields worth one point each when known
ENRICHED_FIELDS = (
    "access_difficulty",
    "parking",
    "fee_type",
    "clothing_optional",
    "cell_service",
    "crowd_level",
    "best_season",
)


def _is_known(value: str | None) -> bool:
    return value is not None and value != "" and value != "unknown"


def _longer_than(text: str | None, length: int) -> bool:
    return text is not None and len(text) > length


def calculate_richness_score(spring: SpringRecord, authoritative_source: str | None = None) -> int:
    """
    Calculate a richness score for a spring.

    Args:
        spring: Spring to score
        authoritative_source: Source id that earns a bonus point
            (default from settings)

    Returns:
        Non-negative integer score
    """
    authoritative_source = authoritative_source or settings.dedup.authoritative_source
    score = 0

    # Core data
    if _longer_than(spring.description, 50):
        score += 2
    if spring.temp_f is not None:
        score += 2
    if spring.photo_url:
        score += 3

    # Enriched fields
    for field_name in ENRICHED_FIELDS:
        if _is_known(getattr(spring, field_name)):
            score += 1

    # Directions and warnings
    if _longer_than(spring.directions, 20):
        score += 1
    if _longer_than(spring.safety_notes, 10):
        score += 1

    # Source preference
    if spring.source == authoritative_source:
        score += 1
    if spring.enrichment_status == "complete":
        score += 2

    return score
