"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Takes one typed event at a time, runs the component operation it maps to,
waits for its result and only then applies state transitions to the session.
Every recoverable error becomes a Notice plus Outcome(ok=False); nothing here
is fatal and a rejected event leaves prior state intact.
"""

from typing import Callable, Dict, Optional
import logging

import config
from location.device import DeviceLocationError, GeolocationProvider, locate_device
from location.geocoding import NominatimClient, is_placeholder_address
from orders.intake import IntakeValidationError, build_delivery_request
from orders.models import GeoPoint, LocationRole, VehicleClass
from orders.submission import FormSubmitClient
from routing.geofence import DEFAULT_CENTER, OutOfBoundsError, require_inside
from routing.ors_client import ORSClient
from routing.route_service import PreconditionError, RouteResolver

from .events import (
    ClearLocation,
    ClearRoute,
    ComputeRoute,
    Event,
    LocateDevice,
    SelectPoint,
    SelectVehicle,
    SelectionMethod,
    SubmitRequest,
)
from .session import NoticeLevel, Outcome, SessionContext

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Single entry point for the intake session: dispatcher.dispatch(event) -> Outcome.
    """
    def __init__(self,
                 session: SessionContext,
                 resolver: RouteResolver,
                 geocoder: Optional[NominatimClient] = None,
                 submitter: Optional[FormSubmitClient] = None,
                 device: Optional[GeolocationProvider] = None,
                 expected_country: Optional[str] = None,
                 device_timeout_s: Optional[float] = None):
        self.session = session
        self.resolver = resolver
        self.geocoder = geocoder
        self.submitter = submitter
        self.device = device
        self.expected_country = expected_country or config.EXPECTED_COUNTRY
        self.device_timeout_s = device_timeout_s

        self._handlers: Dict[type, Callable[..., Outcome]] = {
            SelectPoint: self._select_point,
            ClearLocation: self._clear_location,
            LocateDevice: self._locate_device,
            SelectVehicle: self._select_vehicle,
            ComputeRoute: self._compute_route,
            ClearRoute: self._clear_route,
            SubmitRequest: self._submit,
        }

    @property
    def store(self):
        return self.session.store

    def dispatch(self, event: Event) -> Outcome:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported event: {event!r}")
        logger.debug("dispatching %s", event)
        return handler(event)

    # --- helpers ---

    def _reject(self, message: str, level: NoticeLevel = NoticeLevel.WARNING, **extra) -> Outcome:
        self.session.notify(level, message)
        return Outcome(ok=False, message=message, **extra)

    def _accept(self, message: str, **extra) -> Outcome:
        self.session.notify(NoticeLevel.INFO, message)
        return Outcome(ok=True, message=message, **extra)

    def _outside_message(self, method: SelectionMethod) -> str:
        name = self.session.region.name
        if method is SelectionMethod.SEARCH:
            return f"Search result is outside {name} - please pick a location inside {name}."
        if method is SelectionMethod.DRAG:
            return f"Marker outside {name} - resetting to last valid position."
        if method is SelectionMethod.DEVICE:
            return f"Your current location is outside {name}. Please set a location inside {name}."
        return f"Location outside {name} - pick a point inside {name}."

    # --- handlers ---

    def _select_point(self, event: SelectPoint) -> Outcome:
        try:
            point = require_inside(event.point, self.session.region)
        except OutOfBoundsError:
            # a dragged marker snaps back to the last accepted point (or Kampala)
            revert_to = None
            if event.method is SelectionMethod.DRAG:
                revert_to = self.store.point(event.role) or DEFAULT_CENTER
            return self._reject(self._outside_message(event.method), point=revert_to)

        self.store.set(event.role, point)
        self._enrich_address(event.role, point)

        verb = "updated" if event.method is SelectionMethod.DRAG else "set"
        return self._accept(f"{event.role.label} location {verb}", point=point)

    def _enrich_address(self, role: LocationRole, point: GeoPoint) -> None:
        """
        Best-effort address prefill. A country mismatch only warns; the point stays.
        """
        if self.geocoder is None:
            return

        result = self.geocoder.reverse_lookup(point)
        if not result.matches_country(self.expected_country):
            self.session.notify(
                NoticeLevel.WARNING,
                f"Selected location is not in {self.expected_country} (reverse lookup).",
            )
            return

        entry = self.store.get(role)
        if entry.point == point and is_placeholder_address(entry.address):
            self.store.set_address(role, result.display_name)

    def _clear_location(self, event: ClearLocation) -> Outcome:
        self.store.clear(event.role)
        return self._accept(f"{event.role.label} location cleared")

    def _locate_device(self, event: LocateDevice) -> Outcome:
        try:
            point = locate_device(self.device, self.device_timeout_s)
        except DeviceLocationError as exc:
            logger.info("device location failed: %s (%s)", exc.reason.value, exc.detail)
            return self._reject(str(exc), NoticeLevel.ERROR)

        outcome = self._select_point(SelectPoint(event.role, point, SelectionMethod.DEVICE))
        if not outcome.ok:
            return outcome
        return self._accept("Location found successfully!", point=outcome.point)

    def _select_vehicle(self, event: SelectVehicle) -> Outcome:
        try:
            vehicle = VehicleClass.parse(event.vehicle)
        except ValueError:
            return self._reject(f"Unknown vehicle type: {event.vehicle!r}", NoticeLevel.ERROR)

        if vehicle != self.session.vehicle:
            # a quote priced for the other vehicle is stale
            self.store.clear_route()
        self.session.vehicle = vehicle
        label = vehicle.label if vehicle else "none"
        return self._accept(f"Vehicle: {label}")

    def _compute_route(self, event: ComputeRoute) -> Outcome:
        pickup = self.store.point(LocationRole.PICKUP)
        delivery = self.store.point(LocationRole.DELIVERY)
        vehicle = self.session.vehicle

        try:
            self.resolver.check_preconditions(pickup, delivery, vehicle)
        except PreconditionError as exc:
            return self._reject(str(exc))

        ticket = self.store.begin_route_request()
        result = self.resolver.resolve(pickup, delivery, vehicle)
        if not self.store.apply_route(ticket, result):
            return self._reject("Route request superseded", NoticeLevel.INFO)

        if result.is_estimate:
            return self._accept("Estimated route shown (straight-line fallback)", route=result)
        return self._accept("Route calculated successfully!", route=result)

    def _clear_route(self, event: ClearRoute) -> Outcome:
        self.store.clear_route()
        return self._accept("Route cleared")

    def _submit(self, event: SubmitRequest) -> Outcome:
        try:
            request = build_delivery_request(event.form, self.store)
        except IntakeValidationError as exc:
            return self._reject(str(exc), NoticeLevel.ERROR)

        self.session.last_request = request
        if self.submitter is not None:
            # fire-and-forget, completion doesn't depend on it
            self.submitter.submit(request)
        self.session.completed = True
        return self._accept("Delivery request submitted", request=request, route=request.route)


def build_dispatcher(session: Optional[SessionContext] = None,
                     *,
                     offline: bool = False,
                     device: Optional[GeolocationProvider] = None) -> Dispatcher:
    """
    Wire a Dispatcher to the real providers configured in the environment.
    offline=True skips every HTTP collaborator (straight-line quotes only).
    """
    session = session or SessionContext()
    if offline:
        return Dispatcher(session, RouteResolver(None, region=session.region), device=device)

    return Dispatcher(
        session,
        RouteResolver(ORSClient(), region=session.region),
        geocoder=NominatimClient(),
        submitter=FormSubmitClient(),
        device=device,
    )
