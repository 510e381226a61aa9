#Purpose: ETA estimation policy.
#Converts routing outputs into the whole-minute durations shown on a quote:
#Routed duration: provider seconds -> minutes (rounded)
#Straight-line estimate: ~3 minutes per km (20 km/h city average)
#Keeps ETA logic separate from route computation.

from orders.pricing import round_half_up

FALLBACK_MINUTES_PER_KM = 3 # 20 km/h average in town traffic


def minutes_from_seconds(duration_s: float) -> int:
    return round_half_up(duration_s / 60)


def estimate_eta(distance_km: float) -> int:
    """Duration guess for a straight-line distance, used when routing is down."""
    return round_half_up(distance_km * FALLBACK_MINUTES_PER_KM)
