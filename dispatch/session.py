"""
Session-scoped context: everything one customer's intake session owns.
Created by the top-level controller and passed to the Dispatcher; no module
keeps its own globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from location.state import LocationStateStore
from orders.models import DeliveryRequest, GeoPoint, RouteResult, VehicleClass
from routing.geofence import BoundingRegion, UGANDA_BOUNDS


class NoticeLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A user-facing message (what the page showed as a toast)."""
    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class Outcome:
    """Result of dispatching one event."""
    ok: bool
    message: str
    point: Optional[GeoPoint] = None
    route: Optional[RouteResult] = None
    request: Optional[DeliveryRequest] = None


@dataclass
class SessionContext:
    region: BoundingRegion = UGANDA_BOUNDS
    store: Optional[LocationStateStore] = None
    vehicle: Optional[VehicleClass] = None

    notices: List[Notice] = field(default_factory=list)

    #set once a request has been submitted
    last_request: Optional[DeliveryRequest] = None
    completed: bool = False

    def __post_init__(self) -> None:
        if self.store is None:
            self.store = LocationStateStore(region=self.region)

    def notify(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self.notices.append(notice)
        return notice

    @property
    def route(self) -> Optional[RouteResult]:
        return self.store.route

    @property
    def route_available(self) -> bool:
        """Whether "calculate route" should be offered."""
        return self.store.is_ready()
