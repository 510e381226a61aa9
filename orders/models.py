"""
Purpose: Domain models for delivery intake and route estimation.
What it does:
- Defines core data structures:
- GeoPoint (latitude, longitude), immutable
- LocationEntry (point + optional address text) per LocationRole
- RouteResult (distance, duration, cost, geometry, source)
- DeliveryRequest (the snapshot taken when the form is submitted)

Defines enums:
- LocationRole = PICKUP | DELIVERY
- VehicleClass = MOTORCYCLE | CAR (each bound to a routing profile)
- RouteSource = PRIMARY | FALLBACK

Rule: No HTTP calls, no pricing math. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class GeoPoint:
    """
    A single coordinate. A new GeoPoint replaces a stored one, it is never mutated.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat, lon = self.latitude, self.longitude
        # NaN fails both comparisons, so it is rejected here too
        if not (isinstance(lat, (int, float)) and -90.0 <= lat <= 90.0):
            raise ValueError(f"latitude out of range: {lat!r}")
        if not (isinstance(lon, (int, float)) and -180.0 <= lon <= 180.0):
            raise ValueError(f"longitude out of range: {lon!r}")

    @classmethod
    def from_lat_lon(cls, coordinates: LatLon) -> GeoPoint:
        lat, lon = coordinates
        return cls(latitude=float(lat), longitude=float(lon))

    @classmethod
    def parse(cls, text: str) -> GeoPoint:
        """Parse the "lat, lng" form used by the coordinate fields."""
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 2:
            raise ValueError(f"expected 'lat, lng', got {text!r}")
        return cls(latitude=float(parts[0]), longitude=float(parts[1]))

    def as_lat_lon(self) -> LatLon:
        return (self.latitude, self.longitude)

    def as_lon_lat(self) -> Tuple[float, float]:
        #providers (GeoJSON, OpenRouteService) want lon,lat order
        return (self.longitude, self.latitude)

    def format_coords(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    def map_link(self) -> str:
        lat = f"{self.latitude:.6f}"
        lon = f"{self.longitude:.6f}"
        return f"https://www.openstreetmap.org/?mlat={lat}&mlon={lon}#map=17/{lat}/{lon}"


class LocationRole(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class VehicleClass(Enum):
    MOTORCYCLE = "motorcycle"
    CAR = "car"

    @property
    def profile(self) -> str:
        """Routing provider profile used for directions."""
        return "driving-motorcycle" if self is VehicleClass.MOTORCYCLE else "driving-car"

    @property
    def label(self) -> str:
        return "Motorcycle" if self is VehicleClass.MOTORCYCLE else "Car"

    @classmethod
    def parse(cls, value: str | VehicleClass | None) -> Optional[VehicleClass]:
        """
        Accepts the raw select value ("motorcycle", "Car", ...).
        Blank input means no vehicle selected and returns None.
        """
        if value is None or isinstance(value, VehicleClass):
            return value
        cleaned = value.strip().lower()
        if not cleaned:
            return None
        return cls(cleaned)


class RouteSource(Enum):
    PRIMARY = "PRIMARY"
    FALLBACK = "FALLBACK"


@dataclass(frozen=True)
class LocationEntry:
    """
    Current value for one LocationRole. Both fields absent means the role is not set.
    """

    point: Optional[GeoPoint] = None
    address: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self.point is not None


@dataclass(frozen=True)
class RouteResult:
    """
    Output of one route computation. Always replaced wholesale, never patched.
    """

    distance_km: float
    duration_min: int
    cost_estimate: int
    geometry: Tuple[GeoPoint, ...]
    source: RouteSource

    @property
    def is_estimate(self) -> bool:
        return self.source is RouteSource.FALLBACK

    def format_distance(self) -> str:
        return f"{self.distance_km:.1f} km"

    def format_duration(self) -> str:
        return f"{self.duration_min} min"


@dataclass(frozen=True)
class DeliveryRequest:
    """
    Immutable snapshot of the intake form taken at submission time.
    This is what goes to the submission target and the WhatsApp hand-off.
    """

    sender_name: str
    sender_phone: str
    sender_email: str
    recipient_name: str
    recipient_phone: str

    pickup: LocationEntry
    pickup_landmark: str
    delivery: LocationEntry
    delivery_landmark: str

    vehicle: VehicleClass
    package_description: str

    route: Optional[RouteResult]
    submitted_at: datetime

    special_instructions: str = "None"
    emergency_contact: str = "Not provided"
    call_recipient: bool = False
