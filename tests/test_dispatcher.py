import math
import threading

import pytest

from dispatch import (
    ClearLocation,
    ClearRoute,
    ComputeRoute,
    Dispatcher,
    LocateDevice,
    NoticeLevel,
    SelectPoint,
    SelectVehicle,
    SelectionMethod,
    SessionContext,
    SubmitRequest,
)
from location.device import DeviceLocationError, LocationErrorReason
from location.geocoding import ReverseGeocodeResult
from orders.intake import IntakeForm
from orders.models import GeoPoint, LocationRole, RouteSource, VehicleClass
from routing.geodesic import distance_km
from routing.ors_client import RoutingProviderError
from routing.route_service import RouteResolver

PICKUP = LocationRole.PICKUP
DELIVERY = LocationRole.DELIVERY

KAMPALA = GeoPoint(0.3476, 32.5825)
NTINDA = GeoPoint(0.35, 32.60)
NAIROBI = GeoPoint(-1.2921, 36.8219)


class MockDirections:
    def __init__(self):
        self.calls = 0

    def directions(self, start, end, profile):
        self.calls += 1
        return {"distance": 3200.0, "duration": 540.0, "geometry": [start.as_lon_lat(), end.as_lon_lat()]}


class FailingDirections:
    def directions(self, start, end, profile):
        raise RoutingProviderError("simulated outage")


class MockGeocoder:
    def __init__(self, result):
        self.result = result
        self.lookups = []

    def reverse_lookup(self, point):
        self.lookups.append(point)
        return self.result


class MockSubmitter:
    def __init__(self, accept=True):
        self.accept = accept
        self.sent = []

    def submit(self, request):
        self.sent.append(request)
        return self.accept


def make_dispatcher(client=None, **kwargs):
    session = SessionContext()
    resolver = RouteResolver(client if client is not None else MockDirections())
    return Dispatcher(session, resolver, **kwargs)


def last_notice(dispatcher):
    return dispatcher.session.notices[-1]


@pytest.fixture
def valid_form():
    return IntakeForm(
        sender_name="Sarah Namusoke",
        sender_phone="+256772123456",
        sender_email="sarah@example.com",
        pickup_landmark="Opposite Garden City",
        recipient_name="Joseph Okello",
        recipient_phone="0701234567",
        delivery_landmark="Ntinda shopping centre",
        vehicle_type="car",
        package_description="Laptop",
        terms_accepted=True,
    )


# --- selecting points ---

def test_select_point_inside_is_stored():
    dispatcher = make_dispatcher()

    outcome = dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))

    assert outcome.ok
    assert dispatcher.store.point(PICKUP) == KAMPALA
    assert last_notice(dispatcher).message == "Pickup location set"


@pytest.mark.parametrize("method", list(SelectionMethod))
def test_select_point_outside_is_rejected_and_state_kept(method):
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))

    outcome = dispatcher.dispatch(SelectPoint(PICKUP, NAIROBI, method))

    assert not outcome.ok
    assert dispatcher.store.point(PICKUP) == KAMPALA
    assert last_notice(dispatcher).level is NoticeLevel.WARNING
    assert "Uganda" in outcome.message


def test_dragged_marker_outside_reverts_to_last_valid_point():
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA, SelectionMethod.DRAG))

    outcome = dispatcher.dispatch(SelectPoint(DELIVERY, NAIROBI, SelectionMethod.DRAG))
    assert outcome.point == NTINDA

    # never set before: snaps back to Kampala
    outcome = dispatcher.dispatch(SelectPoint(PICKUP, NAIROBI, SelectionMethod.DRAG))
    assert outcome.point == KAMPALA


# --- reverse geocoding ---

def test_matching_country_fills_empty_address():
    geocoder = MockGeocoder(ReverseGeocodeResult("Kampala Road, Kampala, Uganda", "Uganda"))
    dispatcher = make_dispatcher(geocoder=geocoder)

    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))

    assert dispatcher.store.get(PICKUP).address == "Kampala Road, Kampala, Uganda"


def test_matching_country_keeps_typed_address():
    geocoder = MockGeocoder(ReverseGeocodeResult("Kampala Road, Kampala, Uganda", "Uganda"))
    dispatcher = make_dispatcher(geocoder=geocoder)
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.store.set_address(PICKUP, "Plot 12, Acacia Avenue")

    dispatcher.dispatch(SelectPoint(PICKUP, NTINDA))

    assert dispatcher.store.get(PICKUP).address == "Plot 12, Acacia Avenue"


def test_country_mismatch_warns_but_keeps_point():
    geocoder = MockGeocoder(ReverseGeocodeResult("Busia, Kenya", "Kenya"))
    dispatcher = make_dispatcher(geocoder=geocoder)

    outcome = dispatcher.dispatch(SelectPoint(PICKUP, GeoPoint(0.46, 34.09)))

    assert outcome.ok
    assert dispatcher.store.point(PICKUP) == GeoPoint(0.46, 34.09)
    assert dispatcher.store.get(PICKUP).address is None
    warnings = [n for n in dispatcher.session.notices if n.level is NoticeLevel.WARNING]
    assert warnings[0].message == "Selected location is not in Uganda (reverse lookup)."


def test_geocoder_failure_does_not_block_selection():
    dispatcher = make_dispatcher(geocoder=MockGeocoder(ReverseGeocodeResult.failed()))

    assert dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA)).ok
    assert dispatcher.store.point(PICKUP) == KAMPALA


# --- route computation ---

def test_route_requires_both_locations_and_vehicle():
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectVehicle("car"))
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))

    outcome = dispatcher.dispatch(ComputeRoute())
    assert not outcome.ok
    assert "both pickup and delivery" in outcome.message
    assert dispatcher.session.route is None

    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle(""))
    outcome = dispatcher.dispatch(ComputeRoute())
    assert not outcome.ok
    assert outcome.message == "Please select a vehicle type first"


def test_primary_route_is_applied():
    client = MockDirections()
    dispatcher = make_dispatcher(client)
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle(VehicleClass.MOTORCYCLE))

    outcome = dispatcher.dispatch(ComputeRoute())

    assert outcome.ok
    assert outcome.route.source is RouteSource.PRIMARY
    assert outcome.route.duration_min == 9
    assert outcome.route.cost_estimate == 3000 + 3 * 1500
    assert dispatcher.session.route is outcome.route
    assert last_notice(dispatcher).message == "Route calculated successfully!"


def test_end_to_end_fallback_quote():
    """
    Pickup Kampala, delivery Ntinda, car, routing provider down.
    """
    dispatcher = make_dispatcher(FailingDirections())
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle("car"))
    assert dispatcher.session.route_available

    outcome = dispatcher.dispatch(ComputeRoute())
    route = outcome.route
    straight = distance_km(KAMPALA, NTINDA)

    assert outcome.ok
    assert route.source is RouteSource.FALLBACK
    assert route.distance_km == pytest.approx(straight)
    assert route.distance_km == pytest.approx(1.96, abs=0.05)
    assert route.duration_min == math.floor(straight * 3 + 0.5)
    assert route.cost_estimate == math.floor(3000 + straight * 4000 + 0.5)
    assert last_notice(dispatcher).message == "Estimated route shown (straight-line fallback)"


def test_recomputing_replaces_route_wholesale():
    client = MockDirections()
    dispatcher = make_dispatcher(client)
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle("car"))

    first = dispatcher.dispatch(ComputeRoute()).route
    dispatcher.resolver.client = FailingDirections()
    second = dispatcher.dispatch(ComputeRoute()).route

    assert first.source is RouteSource.PRIMARY
    assert second.source is RouteSource.FALLBACK
    assert dispatcher.session.route is second


def test_superseded_result_is_not_applied():
    """
    Something clears the route while the provider call is in flight:
    the late result must not land.
    """
    dispatcher = make_dispatcher()

    class InterruptedDirections(MockDirections):
        def directions(self, start, end, profile):
            dispatcher.store.clear_route()
            return super().directions(start, end, profile)

    dispatcher.resolver.client = InterruptedDirections()
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle("car"))

    outcome = dispatcher.dispatch(ComputeRoute())

    assert not outcome.ok
    assert dispatcher.session.route is None


@pytest.mark.parametrize("event", [ClearLocation(PICKUP), ClearLocation(DELIVERY), ClearRoute(), SelectVehicle("motorcycle")])
def test_route_is_retracted(event):
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle("car"))
    dispatcher.dispatch(ComputeRoute())
    assert dispatcher.session.route is not None

    dispatcher.dispatch(event)

    assert dispatcher.session.route is None


def test_clear_location_blocks_route():
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))

    dispatcher.dispatch(ClearLocation(DELIVERY))

    assert not dispatcher.session.route_available


def test_unknown_vehicle_is_rejected():
    dispatcher = make_dispatcher()
    dispatcher.dispatch(SelectVehicle("car"))

    outcome = dispatcher.dispatch(SelectVehicle("boda-bus"))

    assert not outcome.ok
    assert dispatcher.session.vehicle is VehicleClass.CAR


# --- device location ---

def test_device_location_sets_point():
    dispatcher = make_dispatcher(device=lambda: NTINDA)

    outcome = dispatcher.dispatch(LocateDevice(DELIVERY))

    assert outcome.ok
    assert dispatcher.store.point(DELIVERY) == NTINDA
    assert last_notice(dispatcher).message == "Location found successfully!"


def test_device_outside_uganda_is_rejected():
    dispatcher = make_dispatcher(device=lambda: NAIROBI)

    outcome = dispatcher.dispatch(LocateDevice(PICKUP))

    assert not outcome.ok
    assert not dispatcher.store.get(PICKUP).is_set


def test_device_errors_leave_state_untouched():
    def denied():
        raise DeviceLocationError(LocationErrorReason.PERMISSION_DENIED)

    dispatcher = make_dispatcher(device=denied)
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))

    outcome = dispatcher.dispatch(LocateDevice(PICKUP))

    assert not outcome.ok
    assert last_notice(dispatcher).level is NoticeLevel.ERROR
    assert dispatcher.store.point(PICKUP) == KAMPALA


def test_device_timeout_is_reported():
    release = threading.Event()

    def hung():
        release.wait(2)
        return KAMPALA

    dispatcher = make_dispatcher(device=hung, device_timeout_s=0.05)
    try:
        outcome = dispatcher.dispatch(LocateDevice(PICKUP))
    finally:
        release.set()

    assert not outcome.ok
    assert "timed out" in outcome.message


# --- submission ---

def test_invalid_form_is_not_submitted(valid_form):
    submitter = MockSubmitter()
    dispatcher = make_dispatcher(submitter=submitter)
    valid_form.recipient_phone = "12345"

    outcome = dispatcher.dispatch(SubmitRequest(valid_form))

    assert not outcome.ok
    assert submitter.sent == []
    assert not dispatcher.session.completed


def test_submission_snapshots_route(valid_form):
    submitter = MockSubmitter()
    dispatcher = make_dispatcher(submitter=submitter)
    dispatcher.dispatch(SelectPoint(PICKUP, KAMPALA))
    dispatcher.dispatch(SelectPoint(DELIVERY, NTINDA))
    dispatcher.dispatch(SelectVehicle("car"))
    route = dispatcher.dispatch(ComputeRoute()).route

    outcome = dispatcher.dispatch(SubmitRequest(valid_form))

    assert outcome.ok
    assert submitter.sent == [outcome.request]
    assert outcome.request.route is route
    assert outcome.request.pickup.point == KAMPALA
    assert dispatcher.session.last_request is outcome.request
    assert dispatcher.session.completed


def test_submission_failure_still_completes(valid_form):
    dispatcher = make_dispatcher(submitter=MockSubmitter(accept=False))

    outcome = dispatcher.dispatch(SubmitRequest(valid_form))

    assert outcome.ok
    assert dispatcher.session.completed


def test_unknown_event_type():
    with pytest.raises(TypeError):
        make_dispatcher().dispatch("calculate")
