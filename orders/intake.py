"""
Purpose: Intake form validation and the DeliveryRequest snapshot.
What it does:
- IntakeForm holds the raw text the customer typed (no coordinates, those live in the store)
- validate_form() applies the submission rules:
   - required fields (including both landmarks, Kampala addressing relies on them)
   - Ugandan mobile numbers for sender and recipient
   - terms accepted
   - a known vehicle type
- build_delivery_request() freezes form + locations + current route into a DeliveryRequest

Rule: No HTTP here. Sending the snapshot is orders.submission's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import re

import phonenumbers

from location.state import LocationStateStore
from .models import DeliveryRequest, LocationEntry, LocationRole, RouteResult, VehicleClass

# Uganda is UTC+3 all year (no DST)
KAMPALA_TZ = timezone(timedelta(hours=3), "EAT")

REQUIRED_FIELDS = (
    "sender_name",
    "sender_phone",
    "sender_email",
    "recipient_name",
    "recipient_phone",
    "package_description",
    "vehicle_type",
    "pickup_landmark",
    "delivery_landmark",
)

_PHONE_CHARS = re.compile(r"^\+?\d+$")


class IntakeValidationError(Exception):
    """The form can't be submitted yet. `field` names the first offending input."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


@dataclass
class IntakeForm:
    sender_name: str = ""
    sender_phone: str = ""
    sender_email: str = ""
    pickup_address: str = ""
    pickup_landmark: str = ""

    recipient_name: str = ""
    recipient_phone: str = ""
    delivery_address: str = ""
    delivery_landmark: str = ""

    vehicle_type: str = ""
    package_description: str = ""
    special_instructions: str = ""
    emergency_contact: str = ""
    call_recipient: bool = False
    terms_accepted: bool = False


def parse_uganda_mobile(value: Optional[str]) -> Optional[phonenumbers.PhoneNumber]:
    """
    Parse +2567XXXXXXXX, 2567XXXXXXXX or 07XXXXXXXX (spaces/dashes allowed).
    Returns None for anything that is not a Ugandan mobile number.
    """
    if not value:
        return None
    cleaned = re.sub(r"[\s-]", "", value)
    if not _PHONE_CHARS.match(cleaned):
        return None
    if cleaned.startswith("256"):
        cleaned = "+" + cleaned

    try:
        number = phonenumbers.parse(cleaned, "UG")
    except phonenumbers.NumberParseException:
        return None

    national = str(number.national_number)
    if number.country_code != 256 or len(national) != 9 or not national.startswith("7"):
        return None
    return number


def is_uganda_mobile(value: Optional[str]) -> bool:
    return parse_uganda_mobile(value) is not None


def normalize_phone(value: str) -> str:
    """E.164 form for valid Ugandan mobiles, the input untouched otherwise."""
    number = parse_uganda_mobile(value)
    if number is None:
        return value
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)


def validate_form(form: IntakeForm) -> VehicleClass:
    """
    Check the submission rules in the order the form shows them.
    Returns the selected VehicleClass.
    """
    for name in REQUIRED_FIELDS:
        if not str(getattr(form, name) or "").strip():
            raise IntakeValidationError(name, "Please complete all required fields including landmarks")

    if not is_uganda_mobile(form.sender_phone):
        raise IntakeValidationError("sender_phone", "Sender phone must be a valid Ugandan number (e.g. +2567...)")
    if not is_uganda_mobile(form.recipient_phone):
        raise IntakeValidationError("recipient_phone", "Recipient phone must be a valid Ugandan number (e.g. +2567...)")

    if not form.terms_accepted:
        raise IntakeValidationError("terms_accepted", "Please agree to the terms of service and privacy policy")

    try:
        vehicle = VehicleClass.parse(form.vehicle_type)
    except ValueError:
        raise IntakeValidationError("vehicle_type", f"Unknown vehicle type: {form.vehicle_type!r}") from None
    return vehicle


def _entry_for(store: LocationStateStore, role: LocationRole, typed_address: str) -> LocationEntry:
    entry = store.get(role)
    # what the customer typed wins over the looked-up address
    address = typed_address.strip() or entry.address or ""
    return LocationEntry(point=entry.point, address=address)


def build_delivery_request(
    form: IntakeForm,
    store: LocationStateStore,
    route: Optional[RouteResult] = None,
    now: Optional[datetime] = None,
) -> DeliveryRequest:
    """
    Validate the form and freeze it together with both locations and the route.

    The route defaults to whatever the store currently shows (possibly None).
    Locations are optional here: the landmarks are enough to dispatch a rider.
    """
    vehicle = validate_form(form)
    now = now or datetime.now(KAMPALA_TZ)

    return DeliveryRequest(
        sender_name=form.sender_name.strip(),
        sender_phone=normalize_phone(form.sender_phone),
        sender_email=form.sender_email.strip(),
        recipient_name=form.recipient_name.strip(),
        recipient_phone=normalize_phone(form.recipient_phone),
        pickup=_entry_for(store, LocationRole.PICKUP, form.pickup_address),
        pickup_landmark=form.pickup_landmark.strip(),
        delivery=_entry_for(store, LocationRole.DELIVERY, form.delivery_address),
        delivery_landmark=form.delivery_landmark.strip(),
        vehicle=vehicle,
        package_description=form.package_description.strip(),
        route=route if route is not None else store.route,
        submitted_at=now,
        special_instructions=form.special_instructions.strip() or "None",
        emergency_contact=form.emergency_contact.strip() or "Not provided",
        call_recipient=bool(form.call_recipient),
    )
