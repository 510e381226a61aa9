"""
Purpose: Typed user triggers.
What it does:
Every UI action (map click, marker drag, search pick, "use my location",
vehicle select, calculate/clear route, submit) becomes one of these events.
The Dispatcher is the only thing that consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from orders.intake import IntakeForm
from orders.models import LocationRole, VehicleClass
from routing.geofence import PointLike


class SelectionMethod(Enum):
    CLICK = "click"
    DRAG = "drag"
    SEARCH = "search"
    DEVICE = "device"


@dataclass(frozen=True)
class SelectPoint:
    role: LocationRole
    point: PointLike
    method: SelectionMethod = SelectionMethod.CLICK


@dataclass(frozen=True)
class ClearLocation:
    role: LocationRole


@dataclass(frozen=True)
class LocateDevice:
    role: LocationRole


@dataclass(frozen=True)
class SelectVehicle:
    vehicle: Union[str, VehicleClass, None]


@dataclass(frozen=True)
class ComputeRoute:
    pass


@dataclass(frozen=True)
class ClearRoute:
    pass


@dataclass(frozen=True)
class SubmitRequest:
    form: IntakeForm


Event = Union[SelectPoint, ClearLocation, LocateDevice, SelectVehicle, ComputeRoute, ClearRoute, SubmitRequest]
