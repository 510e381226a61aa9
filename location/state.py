"""
Purpose: Owns the session's two locations (pickup, delivery) and the current route.
What it does:
- Holds one LocationEntry per LocationRole (absent until set)
- Provides operations:
   - set(role, point, address)
   - set_address(role, address)
   - clear(role)
   - is_ready()
- Tracks the route computed from those points and who is allowed to replace it:
   - begin_route_request() hands out a ticket
   - apply_route(ticket, result) only lands the newest ticket
   - clear()/clear_route() retire every ticket handed out so far

Rule: Store owns state transitions; routing/pricing live in routing/ and orders/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

from orders.models import GeoPoint, LocationEntry, LocationRole, RouteResult
from routing.geofence import BoundingRegion, OutOfBoundsError, UGANDA_BOUNDS, contains

logger = logging.getLogger(__name__)

EMPTY_ENTRY = LocationEntry()


@dataclass
class LocationStateStore:
    """
    In-memory, session-scoped location state. Discarded with the session.
    """
    region: BoundingRegion = UGANDA_BOUNDS

    _entries: Dict[LocationRole, LocationEntry] = field(default_factory=dict)

    #current route and the newest ticket allowed to replace it
    _route: Optional[RouteResult] = None
    _route_ticket: int = 0

    # --- Public API ---

    def get(self, role: LocationRole) -> LocationEntry:
        return self._entries.get(role, EMPTY_ENTRY)

    def point(self, role: LocationRole) -> Optional[GeoPoint]:
        return self.get(role).point

    def snapshot(self) -> Dict[LocationRole, LocationEntry]:
        return {role: self.get(role) for role in LocationRole}

    def set(self, role: LocationRole, point: GeoPoint, address: Optional[str] = None) -> bool:
        """
        Accept a validated point for a role.

        Returns True when the state changed. Setting the point a role already
        holds (and no new address) is a no-op, so repeated selections are idempotent.
        Moving a role to a different point makes the current route stale.

        Raises OutOfBoundsError (state unchanged) if the point fails the region check.
        """
        if not contains(point, self.region):
            raise OutOfBoundsError(point, self.region)
        if not isinstance(point, GeoPoint):
            point = GeoPoint.from_lat_lon(point)

        current = self.get(role)
        new_address = address if address is not None else current.address
        if current.point == point and current.address == new_address:
            return False

        self._entries[role] = LocationEntry(point=point, address=new_address)
        if current.point != point:
            self._invalidate_route()
        logger.debug("%s set to %s", role.value, point.format_coords())
        return True

    def set_address(self, role: LocationRole, address: str) -> None:
        current = self.get(role)
        if not current.is_set:
            raise ValueError(f"{role.value} has no location to attach an address to")
        self._entries[role] = LocationEntry(point=current.point, address=address)

    def clear(self, role: LocationRole) -> None:
        """
        Return a role to absent. Any route computed from it (or still in flight) is stale.
        """
        self._entries.pop(role, None)
        self._invalidate_route()
        logger.debug("%s cleared", role.value)

    def is_ready(self) -> bool:
        """
        Both roles set and both still inside the region (re-checked on read).
        """
        pickup = self.point(LocationRole.PICKUP)
        delivery = self.point(LocationRole.DELIVERY)
        if pickup is None or delivery is None:
            return False
        return contains(pickup, self.region) and contains(delivery, self.region)

    # --- Route bookkeeping ---

    @property
    def route(self) -> Optional[RouteResult]:
        return self._route

    def begin_route_request(self) -> int:
        """
        Start a new computation: retracts the shown route and supersedes older tickets.
        """
        self._route = None
        self._route_ticket += 1
        return self._route_ticket

    def apply_route(self, ticket: int, result: RouteResult) -> bool:
        """
        Land a computed route if its ticket is still the newest. Returns False for stale results.
        """
        if ticket != self._route_ticket:
            logger.debug("dropping stale route result (ticket %s, newest %s)", ticket, self._route_ticket)
            return False
        self._route = result
        return True

    def clear_route(self) -> None:
        self._invalidate_route()

    # --- helpers ---

    def _invalidate_route(self) -> None:
        self._route = None
        self._route_ticket += 1
