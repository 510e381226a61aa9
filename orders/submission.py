"""
Purpose: Hand the DeliveryRequest snapshot to the form submission target.
What it does:
- flattens a DeliveryRequest into the field set the target expects
- POSTs it (FormSubmit-style endpoint, JSON accept header)

Fire-and-forget: the estimate is already done by the time we get here, so a
failed POST is logged and reported as False, never raised. The caller moves
on to its completion state either way.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional
import logging

import requests

import config
from .models import DeliveryRequest, LocationEntry
from .pricing import format_cost

logger = logging.getLogger(__name__)

NOT_SET = "Not set"
NO_LINK = "No location set"
NO_ROUTE = "--"


def format_timestamp(moment: datetime) -> str:
    """19 October 2026, 14:05"""
    return f"{moment.day} {moment:%B %Y, %H:%M}"


def _coords(entry: LocationEntry) -> str:
    return entry.point.format_coords() if entry.point else NOT_SET


def _link(entry: LocationEntry) -> str:
    return entry.point.map_link() if entry.point else NO_LINK


def route_summary(request: DeliveryRequest) -> Dict[str, str]:
    route = request.route
    if route is None:
        return {"distance": NO_ROUTE, "duration": NO_ROUTE, "cost": NO_ROUTE}
    return {
        "distance": route.format_distance(),
        "duration": route.format_duration(),
        "cost": format_cost(route.cost_estimate),
    }


def submission_fields(request: DeliveryRequest) -> Dict[str, str]:
    """
    Flat field set for the submission target. Every value is a string.
    """
    summary = route_summary(request)
    return {
        "Sender Name": request.sender_name,
        "Sender Phone": request.sender_phone,
        "Sender Email": request.sender_email,
        "Pickup Address": request.pickup.address or "",
        "Pickup Landmark": request.pickup_landmark,
        "Pickup Coordinates": _coords(request.pickup),
        "Pickup Map Link": _link(request.pickup),
        "Recipient Name": request.recipient_name,
        "Recipient Phone": request.recipient_phone,
        "Delivery Address": request.delivery.address or "",
        "Delivery Landmark": request.delivery_landmark,
        "Delivery Coordinates": _coords(request.delivery),
        "Delivery Map Link": _link(request.delivery),
        "Vehicle Type": request.vehicle.value,
        "Package Description": request.package_description,
        "Special Instructions": request.special_instructions,
        "Emergency Contact": request.emergency_contact,
        "Call Recipient": "Yes" if request.call_recipient else "No",
        "Route Distance": summary["distance"],
        "Route Duration": summary["duration"],
        "Estimated Cost": summary["cost"],
        "Route Source": request.route.source.value if request.route else NO_ROUTE,
        "Submission Time": format_timestamp(request.submitted_at),
    }


class FormSubmitClient:
    """
    POSTs DeliveryRequests to the configured submission endpoint.
    """

    def __init__(self,
                 url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.url = url if url is not None else config.FORM_SUBMIT_URL
        self.timeout = timeout if timeout is not None else config.FORM_SUBMIT_TIMEOUT
        self.session = session or requests.Session()

    def submit(self, request: DeliveryRequest) -> bool:
        """
        True when the target accepted the request. Never raises.
        """
        if not self.url:
            logger.info("FORM_SUBMIT_URL not set, request from %s not sent", request.sender_name)
            return False

        try:
            response = self.session.post(
                self.url,
                data=submission_fields(request),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("form submission failed: %s", exc)
            return False
        return True
