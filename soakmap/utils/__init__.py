"""Utility modules for the SoakMap pipeline."""

from soakmap.utils.geo import (
    haversine_distance,
    is_valid_coordinates,
    is_within_us,
    normalize_coordinates,
)
from soakmap.utils.logging import set_command, setup_logging
from soakmap.utils.text import (
    clean_description,
    normalize_spring_name,
    significant_words,
    slugify,
)

__all__ = [
    # Logging
    "setup_logging",
    "set_command",
    # Geographic utilities
    "is_valid_coordinates",
    "is_within_us",
    "haversine_distance",
    "normalize_coordinates",
    # Text utilities
    "normalize_spring_name",
    "significant_words",
    "slugify",
    "clean_description",
]
