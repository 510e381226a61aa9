"""
Purpose: Package entry + stable exports.
What it does:

Marks orders as a Python package and re-exports the public API so other
modules can do:

from orders import GeoPoint, VehicleClass, estimate_cost

Should not contain business logic. Intake/submission live in their own
modules (orders.intake, orders.submission, orders.messaging) and are imported
from there, they depend on location/ and routing/.
"""
from .models import (
    GeoPoint,
    LocationRole,
    LocationEntry,
    VehicleClass,
    RouteSource,
    RouteResult,
    DeliveryRequest,
)
from .pricing import PricingPolicy, default_pricing_policy, estimate_cost, format_cost

__all__ = ["GeoPoint",
           "LocationRole",
             "LocationEntry",
               "VehicleClass",
               "RouteSource",
               "RouteResult",
               "DeliveryRequest",
               "PricingPolicy",
               "default_pricing_policy",
               "estimate_cost",
               "format_cost",
               ]
