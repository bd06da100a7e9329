"""
Pairwise duplicate decisions for springs.

Name similarity alone is unreliable (scrapers truncate and embellish names)
and proximity alone is unreliable (distinct springs sit next to each other),
so a proximity match also needs similar names.
"""

import math

from soakmap.config import settings
from soakmap.deduplication.types import SpringRecord
from soakmap.utils.text import normalize_spring_name, significant_words


def are_names_similar(key_a: str, key_b: str) -> bool:
    """
    Check whether two normalized names share enough words.

    Names with 2+ significant words need at least half of the shorter
    name's words in common. Single-word names must be that same word.
    A name with no significant words is never similar to anything.
    """
    words_a = significant_words(key_a)
    words_b = significant_words(key_b)

    common = len(words_a & words_b)
    min_words = min(len(words_a), len(words_b))

    if min_words >= 2:
        return common >= math.ceil(min_words * 0.5)

    return common == 1 and len(words_a) == 1 and len(words_b) == 1


def is_within_threshold(a: SpringRecord, b: SpringRecord, threshold: float) -> bool:
    """Both springs have coordinates and differ by less than threshold on each axis."""
    if not (a.has_coordinates and b.has_coordinates):
        return False
    return abs(a.lat - b.lat) < threshold and abs(a.lng - b.lng) < threshold


def keys_match(
    a: SpringRecord,
    key_a: str,
    b: SpringRecord,
    key_b: str,
    threshold: float,
) -> bool:
    """Duplicate decision on precomputed normalized keys."""
    # Same normalized name in same state
    if key_a and a.state == b.state and key_a == key_b:
        return True

    # Very close coordinates AND similar names
    return is_within_threshold(a, b, threshold) and are_names_similar(key_a, key_b)


def are_likely_duplicates(
    a: SpringRecord,
    b: SpringRecord,
    threshold: float | None = None,
) -> bool:
    """
    Check if two springs are likely the same real-world spring.

    Args:
        a, b: Springs to compare (order does not matter)
        threshold: Proximity threshold in degrees (default from settings)

    Returns:
        True if they share a normalized name in the same state, or are
        within threshold of each other with similar names
    """
    threshold = threshold or settings.dedup.proximity_threshold
    return keys_match(
        a, normalize_spring_name(a.name),
        b, normalize_spring_name(b.name),
        threshold,
    )
