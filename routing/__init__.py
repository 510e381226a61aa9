#Marks routing as a package.
#Re-exports the public APIs (ORSClient, contains, distance_km, RouteResolver)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .geofence import BoundingRegion, OutOfBoundsError, UGANDA_BOUNDS, DEFAULT_CENTER, contains, require_inside
from .geodesic import distance_km
from .eta_service import estimate_eta
from .ors_client import ORSClient, RoutingProviderError
from .route_service import RouteResolver, PreconditionError

__all__ = [
           "BoundingRegion",
           "OutOfBoundsError",
           "UGANDA_BOUNDS",
           "DEFAULT_CENTER",
           "contains",
           "require_inside",
           "distance_km",
           "estimate_eta",
           "ORSClient",
           "RoutingProviderError",
           "RouteResolver",
           "PreconditionError",
           ]
