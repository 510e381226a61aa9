#Purpose: Country boundary geofencing.
#Decides whether a coordinate is inside the permitted service region.
#Typical responsibilities:
#Hold the fixed bounding box for the country (Uganda)
#Answer contains(point, region) as a pure predicate (never throws)
#Give callers an exception form (require_inside) when they want to reject a point
#The box can later be swapped for a polygon without changing contains().

from dataclasses import dataclass #for simple data structures
from typing import Tuple, Union #for type annotations
import logging

from orders.models import GeoPoint, LatLon

logger = logging.getLogger(__name__)


class OutOfBoundsError(Exception):
    """Raised when a candidate point lies outside the permitted region."""

    def __init__(self, point, region: "BoundingRegion", message: str = ""):
        self.point = point
        self.region = region
        super().__init__(message or f"{point} is outside {region.name}")


@dataclass(frozen=True) #fixed at process start, never mutated
class BoundingRegion:
    """
    Axis-aligned box (south, west, north, east) in degrees.
    """

    south: float
    west: float
    north: float
    east: float
    name: str = "region"

    def __post_init__(self) -> None:
        if not self.south < self.north:
            raise ValueError("south must be < north")
        if not self.west < self.east:
            raise ValueError("west must be < east")

    @property
    def center(self) -> GeoPoint:
        return GeoPoint((self.south + self.north) / 2, (self.west + self.east) / 2)


# Uganda bounds (approx): south, west, north, east
UGANDA_BOUNDS = BoundingRegion(south=-1.5, west=29.5, north=4.9, east=35.1, name="Uganda")

# Kampala, used when a marker has no last valid position
DEFAULT_CENTER = GeoPoint(0.3476, 32.5825)

PointLike = Union[GeoPoint, LatLon]


def _coordinates_of(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, GeoPoint):
        return point.latitude, point.longitude
    lat, lon = point
    return float(lat), float(lon)


def contains(point: PointLike, region: BoundingRegion = UGANDA_BOUNDS) -> bool:
    """
    True iff south <= lat <= north and west <= lon <= east.

    Malformed input (None, NaN, wrong shape, non-numeric) is simply outside:
    NaN fails every comparison, everything else is caught here.
    """
    try:
        lat, lon = _coordinates_of(point)
    except (TypeError, ValueError):
        return False
    return region.south <= lat <= region.north and region.west <= lon <= region.east


def require_inside(point: PointLike, region: BoundingRegion = UGANDA_BOUNDS) -> GeoPoint:
    """
    Exception form of contains(): returns the point as a GeoPoint or raises OutOfBoundsError.
    """
    if not contains(point, region):
        logger.debug("rejected %s: outside %s", point, region.name)
        raise OutOfBoundsError(point, region, f"Location outside {region.name} - pick a point inside {region.name}.")
    if isinstance(point, GeoPoint):
        return point
    return GeoPoint.from_lat_lon(point)
