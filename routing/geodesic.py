"""
Great-circle distance between two GeoPoints (haversine, spherical Earth).

Used directly by the straight-line fallback in route_service and anywhere a
quick distance is needed without calling the routing provider.
"""

import math

from orders.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Return the haversine distance in km. Symmetric, 0.0 for identical points."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # clamp guards against h drifting a hair above 1.0 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))
