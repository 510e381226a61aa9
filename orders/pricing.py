"""
Purpose: Pricing model for delivery quotes (single source of truth for rates).
What it does:

Stores the tunable tariff in a PricingPolicy:

BASE_FEE = 3000 UGX (flat, every delivery)

RATE_MOTORCYCLE = 1500 UGX per km

RATE_CAR = 4000 UGX per km

and converts a resolved distance into an integer cost.

Note on rounding: the routed (PRIMARY) quote rounds the distance to whole km
before multiplying, the straight-line (FALLBACK) quote does not. Both are kept
as-is because they are what customers have been quoted so far.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from .models import RouteSource, VehicleClass


def round_half_up(value: float) -> int:
    """
    Round .5 away from zero for the non-negative values we price.
    Python's round() is banker's rounding (round(2.5) == 2), quotes are not.
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PricingPolicy:
    """
    Central tariff configuration. Keep rates here so quoting logic never hardcodes money.
    """

    base_fee: int = 3000
    rate_motorcycle_per_km: int = 1500
    rate_car_per_km: int = 4000
    currency: str = "UGX"

    def rate_per_km(self, vehicle: VehicleClass) -> int:
        if vehicle is VehicleClass.MOTORCYCLE:
            return self.rate_motorcycle_per_km
        return self.rate_car_per_km

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.base_fee < 0:
            raise ValueError("base_fee must be >= 0")

        if self.rate_motorcycle_per_km < 0 or self.rate_car_per_km < 0:
            raise ValueError("per-km rates must be >= 0")

        if not self.currency:
            raise ValueError("currency must be set")


def default_pricing_policy() -> PricingPolicy:
    """
    Convenience factory for the default Uganda tariff.
    """
    p = PricingPolicy()
    p.validate()
    return p


def estimate_cost(
    distance_km: float,
    vehicle: VehicleClass,
    source: RouteSource = RouteSource.PRIMARY,
    policy: PricingPolicy | None = None,
) -> int:
    """
    Convert a distance into a cost in whole currency units.

    PRIMARY:  round(base + round(distance_km) * rate)
    FALLBACK: round(base + distance_km * rate)
    """
    if distance_km < 0 or math.isnan(distance_km):
        raise ValueError(f"distance_km must be >= 0, got {distance_km!r}")

    policy = policy or default_pricing_policy()
    rate = policy.rate_per_km(vehicle)

    billable_km = round_half_up(distance_km) if source is RouteSource.PRIMARY else distance_km
    return round_half_up(policy.base_fee + billable_km * rate)


def format_cost(amount: int, policy: PricingPolicy | None = None) -> str:
    """18000 -> '18,000 UGX'"""
    policy = policy or default_pricing_policy()
    return f"{amount:,} {policy.currency}"
