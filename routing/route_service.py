#Purpose: Route computation for a quote (the "route resolution strategy").
#Returns the route information needed by:
#the quote panel (distance, duration, cost)
#map display / polyline geometry
#Uses the routing provider's directions endpoint primarily.
#When that fails for any reason it degrades to a straight-line estimate,
#so a caller that passed the preconditions always gets a RouteResult back.

from typing import Any, Optional, Protocol
import logging

from orders.models import GeoPoint, RouteResult, RouteSource, VehicleClass
from orders.pricing import PricingPolicy, default_pricing_policy, estimate_cost
from routing.eta_service import estimate_eta, minutes_from_seconds
from routing.geodesic import distance_km
from routing.geofence import BoundingRegion, UGANDA_BOUNDS, contains
from routing.ors_client import RoutingProviderError

logger = logging.getLogger(__name__)


class PreconditionError(Exception):
    """Route requested before both locations are set and valid, or without a vehicle."""
    pass


class DirectionsClient(Protocol):
    def directions(self, start: GeoPoint, end: GeoPoint, profile: str) -> dict: ...


class RouteResolver:
    """
    Primary / fallback route strategy.

    Each call runs one branch independently and builds a fresh RouteResult;
    nothing is cached between calls.
    """

    def __init__(self,
                 client: Optional[DirectionsClient],
                 pricing_policy: Optional[PricingPolicy] = None,
                 region: BoundingRegion = UGANDA_BOUNDS):
        self.client = client # None means offline: always straight-line
        self.pricing_policy = pricing_policy or default_pricing_policy()
        self.region = region

    def check_preconditions(self,
                            pickup: Optional[GeoPoint],
                            delivery: Optional[GeoPoint],
                            vehicle: Optional[VehicleClass]) -> None:
        if pickup is None or delivery is None:
            raise PreconditionError(f"Please set both pickup and delivery locations inside {self.region.name} first")
        if not (contains(pickup, self.region) and contains(delivery, self.region)):
            raise PreconditionError(f"Both locations must be inside {self.region.name}")
        if vehicle is None:
            raise PreconditionError("Please select a vehicle type first")

    def resolve(self,
                pickup: Optional[GeoPoint],
                delivery: Optional[GeoPoint],
                vehicle: Optional[VehicleClass]) -> RouteResult:
        """
        Compute a route between two validated points.

        Raises:
            PreconditionError if a point or the vehicle is missing or a point is out of bounds.
            Provider failures never escape; they produce a FALLBACK result.
        """
        self.check_preconditions(pickup, delivery, vehicle)

        if self.client is None:
            return self.straight_line(pickup, delivery, vehicle)

        try:
            return self.routed(pickup, delivery, vehicle)
        except RoutingProviderError as exc:
            logger.warning("routing provider failed, using straight-line estimate: %s", exc)
            return self.straight_line(pickup, delivery, vehicle)

    def routed(self, pickup: GeoPoint, delivery: GeoPoint, vehicle: VehicleClass) -> RouteResult:
        data: Any = self.client.directions(pickup, delivery, vehicle.profile)

        try:
            route_km = float(data["distance"]) / 1000
            duration_min = minutes_from_seconds(float(data["duration"]))
            geometry = tuple(GeoPoint(latitude=lat, longitude=lon) for lon, lat in data["geometry"])
        except (KeyError, TypeError, ValueError) as exc:
            # a client that slipped a bad payload through is still a provider failure
            raise RoutingProviderError(f"unusable directions payload: {exc!r}") from exc

        return RouteResult(
            distance_km=route_km,
            duration_min=duration_min,
            cost_estimate=estimate_cost(route_km, vehicle, RouteSource.PRIMARY, self.pricing_policy),
            geometry=geometry,
            source=RouteSource.PRIMARY,
        )

    def straight_line(self, pickup: GeoPoint, delivery: GeoPoint, vehicle: VehicleClass) -> RouteResult:
        straight_km = distance_km(pickup, delivery)
        return RouteResult(
            distance_km=straight_km,
            duration_min=estimate_eta(straight_km),
            cost_estimate=estimate_cost(straight_km, vehicle, RouteSource.FALLBACK, self.pricing_policy),
            geometry=(pickup, delivery),
            source=RouteSource.FALLBACK,
        )
