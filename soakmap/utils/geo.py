"""Geographic utility functions for the SoakMap pipeline."""

import math


def is_valid_coordinates(lat: float, lng: float) -> bool:
    """Check if latitude and longitude are valid.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees

    Returns:
        True if coordinates are valid, False otherwise
    """
    return -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1, lng1: First point coordinates in degrees
        lat2, lng2: Second point coordinates in degrees

    Returns:
        Distance in meters
    """
    R = 6371000  # Earth radius in m

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = math.sin(delta_lat / 2) ** 2 + \
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def normalize_coordinates(
    lat: float | str | None,
    lng: float | str | None
) -> tuple[float | None, float | None]:
    """Coerce and validate a coordinate pair.

    Returns:
        Tuple of (lat, lng) if valid, or (None, None) if either value is
        missing, unparseable or out of range
    """
    if lat is None or lng is None:
        return None, None

    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return None, None

    if math.isnan(lat) or math.isnan(lng):
        return None, None

    if is_valid_coordinates(lat, lng):
        return lat, lng

    return None, None


# Rough (lat_min, lat_max, lng_min, lng_max) boxes covering US springs
US_BOUNDS = [
    (24.0, 49.0, -125.0, -66.0),    # Continental US
    (18.0, 23.0, -161.0, -154.0),   # Hawaii
    (51.0, 72.0, -180.0, -130.0),   # Alaska mainland
    (51.0, 55.0, 170.0, 180.0),     # Aleutians, across the dateline
]


def is_within_us(lat: float, lng: float) -> bool:
    """Check if a point falls inside one of the rough US bounding boxes."""
    return any(
        lat_min <= lat <= lat_max and lng_min <= lng <= lng_max
        for lat_min, lat_max, lng_min, lng_max in US_BOUNDS
    )
