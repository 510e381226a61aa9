import argparse
import logging

from dispatch import ComputeRoute, SelectPoint, SelectVehicle, SessionContext, build_dispatcher
from orders.models import GeoPoint, LocationRole
from orders.pricing import format_cost


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Quote a delivery between two points in Uganda.")
    parser.add_argument("--pickup", required=True, help='pickup "lat, lng"')
    parser.add_argument("--delivery", required=True, help='delivery "lat, lng"')
    parser.add_argument("--vehicle", default="motorcycle", choices=["motorcycle", "car"])
    parser.add_argument("--offline", action="store_true", help="skip the routing provider (straight-line estimate)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def run_quote(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    session = SessionContext()
    dispatcher = build_dispatcher(session, offline=args.offline)

    for role, text in ((LocationRole.PICKUP, args.pickup), (LocationRole.DELIVERY, args.delivery)):
        try:
            point = GeoPoint.parse(text)
        except ValueError as exc:
            print(f"[ERROR] {role.label}: {exc}")
            return 2
        outcome = dispatcher.dispatch(SelectPoint(role, point))
        if not outcome.ok:
            print(f"[ERROR] {role.label}: {outcome.message}")
            return 1

    dispatcher.dispatch(SelectVehicle(args.vehicle))
    outcome = dispatcher.dispatch(ComputeRoute())
    if not outcome.ok:
        print(f"[ERROR] {outcome.message}")
        return 1

    route = outcome.route
    print(f"\n--- Quote ({route.source.value}) ---")
    print(f"Pickup:   {session.store.get(LocationRole.PICKUP).point.format_coords()}")
    print(f"Delivery: {session.store.get(LocationRole.DELIVERY).point.format_coords()}")
    print(f"Distance: {route.format_distance()}")
    print(f"Duration: {route.format_duration()}")
    print(f"Cost:     {format_cost(route.cost_estimate)}")
    for notice in session.notices:
        if notice.level.value != "info":
            print(f"[{notice.level.value.upper()}] {notice.message}")
    return 0


if __name__ == "__main__":
    raise SystemExit(run_quote())
