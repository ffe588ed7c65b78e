"""
Vector and geo math for matching.

Degenerate input never raises: it degrades to a neutral signal (0
similarity, infinite distance) so one malformed listing cannot abort a
search.
"""

import math
from typing import Any

EARTH_RADIUS_KM = 6371.0


def _is_number(value: Any) -> bool:
    """True for real, non-NaN numbers (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def cosine_similarity(a: Any, b: Any) -> float:
    """
    Cosine similarity between two equal-length numeric vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| * |b|), or 0.0 for mismatched, empty, non-numeric,
        NaN or zero-norm input

    Examples:
        >>> cosine_similarity([1.0, 0.0], [1.0, 0.0])
        1.0
        >>> cosine_similarity([1.0, 0.0], [1.0])
        0.0
    """
    if not isinstance(a, (list, tuple)) or not isinstance(b, (list, tuple)):
        return 0.0
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    dot = norm_a = norm_b = 0.0
    for ai, bi in zip(a, b):
        if not _is_number(ai) or not _is_number(bi):
            return 0.0
        dot += ai * bi
        norm_a += ai * ai
        norm_b += bi * bi

    if norm_a == 0 or norm_b == 0:
        return 0.0

    result = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    if not math.isfinite(result):
        return 0.0
    return result


def _coords(point: Any) -> tuple[float, float] | None:
    """Extract (lat, lng) from a GeoPoint-like object or a dict."""
    if point is None:
        return None
    if isinstance(point, dict):
        lat, lng = point.get("lat"), point.get("lng")
    else:
        lat, lng = getattr(point, "lat", None), getattr(point, "lng", None)
    if not _is_number(lat) or not _is_number(lng):
        return None
    return float(lat), float(lng)


def geo_distance_km(a: Any, b: Any) -> float:
    """
    Haversine great-circle distance in kilometers.

    Args:
        a: First point (GeoPoint or {"lat", "lng"})
        b: Second point

    Returns:
        Distance in km, or math.inf if either point is missing or invalid
    """
    pa, pb = _coords(a), _coords(b)
    if pa is None or pb is None:
        return math.inf

    lat1, lng1 = map(math.radians, pa)
    lat2, lng2 = map(math.radians, pb)
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def zero_vector(dimensions: int) -> list[float]:
    """Degraded embedding returned when the provider is unavailable."""
    return [0.0] * dimensions


def is_zero_vector(vector: Any) -> bool:
    """True for empty or all-zero vectors."""
    if not vector:
        return True
    return all(v == 0 for v in vector)
