"""Text processing utility functions for the SoakMap pipeline."""

import re

# Trailing "Hot Springs" / "Springs" / "Spring" (the generic part of most names)
_SPRING_SUFFIX_RE = re.compile(r"\s+(hot\s+)?springs?$")
_AREA_SUFFIX_RE = re.compile(r"\s+area$")
_APOSTROPHE_RE = re.compile(r"['‘’`]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Words this short ("of", "la", ...) carry no identity
MIN_SIGNIFICANT_WORD_LENGTH = 3


def normalize_spring_name(name: str | None) -> str:
    """Normalize a spring name into a key for matching and deduplication.

    Applies the following transformations:
    - Lowercase
    - Strips a trailing "hot springs" / "springs" / "spring"
    - Strips a trailing "area"
    - Removes apostrophes and backticks
    - Replaces every other run of non-alphanumerics with a single space

    "Baumgartner Hot Springs" and "Baumgartner Spring" both become
    "baumgartner". The result is a matching key, not a display value.

    Args:
        name: The name to normalize

    Returns:
        Normalized key, or empty string if input is empty/None
    """
    if not name:
        return ""

    key = name.strip().lower()
    key = _SPRING_SUFFIX_RE.sub("", key)
    key = _AREA_SUFFIX_RE.sub("", key)
    key = _APOSTROPHE_RE.sub("", key)
    key = _NON_ALNUM_RE.sub(" ", key)

    return key.strip()


def significant_words(key: str) -> set[str]:
    """Split a normalized key into the set of words long enough to compare."""
    return {w for w in key.split(" ") if len(w) >= MIN_SIGNIFICANT_WORD_LENGTH}


def slugify(name: str, state: str) -> str:
    """Create a URL-safe slug from a spring name and its state.

    Args:
        name: Display name
        state: Two-letter state code

    Returns:
        Slug like "goldbug-hot-springs-id"
    """
    base = _APOSTROPHE_RE.sub("", name.lower())
    base = re.sub(r"[^a-z0-9]+", "-", base).strip("-")

    return f"{base}-{state.lower()}"


def clean_description(description: str | None, max_length: int = 2000) -> str | None:
    """Clean and truncate a description string.

    Args:
        description: Raw description text
        max_length: Maximum length (default 2000 chars)

    Returns:
        Cleaned description or None if empty
    """
    if not description:
        return None

    # Remove HTML tags if present
    text = re.sub(r"<[^>]+>", "", description)

    # Remove excessive whitespace
    text = re.sub(r"\s+", " ", text).strip()

    if len(text) > max_length:
        text = text[:max_length - 3] + "..."

    return text if text else None
