"""
Great-circle distance and radius ranking for gym discovery.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 10.0
FALLBACK_COUNT = 5


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _distance_to(gym: Dict[str, Any], lat: float, lon: float) -> float:
    g_lat = gym.get("latitude")
    g_lon = gym.get("longitude")
    if g_lat is None or g_lon is None:
        return math.inf
    return haversine_km(lat, lon, float(g_lat), float(g_lon))


def rank_by_distance(
    gyms: List[Dict[str, Any]],
    lat: float,
    lon: float,
    radius_km: Optional[float] = DEFAULT_RADIUS_KM,
    fallback: int = FALLBACK_COUNT,
) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Annotate gyms with `distance` and keep those inside the radius.

    When nothing falls inside the radius, the closest `fallback` gyms that
    have coordinates are returned instead and the second element of the
    result is True (search expanded). Gyms without coordinates never
    appear in the fallback.

    Returns:
        (gyms sorted by ascending distance, search_expanded)
    """
    radius = DEFAULT_RADIUS_KM if radius_km is None else radius_km

    annotated = []
    for gym in gyms:
        distance = _distance_to(gym, lat, lon)
        item = dict(gym)
        item["distance"] = round(distance, 2) if math.isfinite(distance) else None
        annotated.append((distance, item))

    annotated.sort(key=lambda pair: pair[0])

    within = [item for distance, item in annotated if distance <= radius]
    if within:
        return within, False

    located = [item for distance, item in annotated if math.isfinite(distance)]
    if not located:
        return [], False

    return located[:fallback], True
