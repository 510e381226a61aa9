"""
WhatsApp hand-off: a plain-text summary of a DeliveryRequest and the wa.me link
that opens a chat with dispatch prefilled with it.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import config
from .models import DeliveryRequest, VehicleClass
from .submission import format_timestamp, route_summary, submission_fields


def whatsapp_message(request: DeliveryRequest) -> str:
    fields = submission_fields(request)
    summary = route_summary(request)
    vehicle = "Motorcycle 🏍️" if request.vehicle is VehicleClass.MOTORCYCLE else "Car 🚗"

    lines = [
        "🚀 *QUICKDELIVER - DELIVERY REQUEST*",
        "",
        "*Sender Information*",
        f"📛 Name: {request.sender_name}",
        f"📞 Phone: {request.sender_phone}",
        f"📧 Email: {request.sender_email}",
        "",
        "*Pickup Location*",
        f"📍 Address: {fields['Pickup Address']}",
        f"🏷️ Landmark: {request.pickup_landmark}",
        f"📌 Coordinates: {fields['Pickup Coordinates']}",
        f"🗺️ Map: {fields['Pickup Map Link']}",
        "",
        "*Recipient Information*",
        f"📛 Name: {request.recipient_name}",
        f"📞 Phone: {request.recipient_phone}",
        "",
        "*Delivery Location*",
        f"📍 Address: {fields['Delivery Address']}",
        f"🏷️ Landmark: {request.delivery_landmark}",
        f"📌 Coordinates: {fields['Delivery Coordinates']}",
        f"🗺️ Map: {fields['Delivery Map Link']}",
        "",
        "*Route Information*",
        f"📏 Distance: {summary['distance']}",
        f"⏱️ Duration: {summary['duration']}",
        f"💰 Est. Cost: {summary['cost']}",
        "",
        "*Delivery Details*",
        f"🚗 Vehicle: {vehicle}",
        f"📦 Package: {request.package_description}",
        f"📝 Instructions: {request.special_instructions}",
        f"🆘 Emergency Contact: {request.emergency_contact}",
        f"📞 Notify Recipient: {fields['Call Recipient']}",
        "",
        f"⏰ Request Time: {format_timestamp(request.submitted_at)}",
        "",
        "---",
        "Sent via QuickDeliver Platform (Uganda)",
    ]
    return "\n".join(lines)


def whatsapp_link(request: DeliveryRequest, number: Optional[str] = None) -> str:
    number = (number or config.WHATSAPP_NUMBER).lstrip("+")
    return f"https://wa.me/{number}?text={quote(whatsapp_message(request), safe='')}"
