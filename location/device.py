"""
Device geolocation with a bounded wait.

The device (browser, phone app, GPS dongle) is an external collaborator: any
callable that returns a GeoPoint, or raises DeviceLocationError with a reason.
locate_device() runs it on a worker thread and gives up after the timeout
instead of hanging the dispatcher.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Callable, Optional
import logging

import config
from orders.models import GeoPoint

logger = logging.getLogger(__name__)

GeolocationProvider = Callable[[], GeoPoint]


class LocationErrorReason(Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"

    @property
    def hint(self) -> str:
        return _HINTS[self]


_HINTS = {
    LocationErrorReason.PERMISSION_DENIED: "Please allow location access in your browser settings.",
    LocationErrorReason.POSITION_UNAVAILABLE: "Location information is unavailable.",
    LocationErrorReason.TIMEOUT: "Location request timed out.",
    LocationErrorReason.UNKNOWN: "An unknown error occurred.",
}


class DeviceLocationError(Exception):
    """Geolocation denied, unavailable or timed out. Previously stored state is untouched."""

    def __init__(self, reason: LocationErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"Unable to get your current location. {reason.hint}")


def locate_device(provider: Optional[GeolocationProvider], timeout_s: Optional[float] = None) -> GeoPoint:
    """
    Ask the device for its position, waiting at most timeout_s seconds.

    Raises:
        DeviceLocationError with the provider's reason, TIMEOUT when the wait
        expires, POSITION_UNAVAILABLE for an unusable answer, UNKNOWN otherwise.
    """
    if provider is None:
        raise DeviceLocationError(LocationErrorReason.POSITION_UNAVAILABLE, "Geolocation is not supported")

    timeout_s = timeout_s if timeout_s is not None else config.DEVICE_LOCATION_TIMEOUT_S
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="geolocation")
    future = executor.submit(provider)
    try:
        answer = future.result(timeout=timeout_s)
    except FutureTimeoutError:
        logger.warning("device location timed out after %.1fs", timeout_s)
        raise DeviceLocationError(LocationErrorReason.TIMEOUT) from None
    except DeviceLocationError:
        raise
    except Exception as exc:
        raise DeviceLocationError(LocationErrorReason.UNKNOWN, str(exc)) from exc
    finally:
        #don't block on a hung provider, its thread is abandoned
        executor.shutdown(wait=False)

    if isinstance(answer, GeoPoint):
        return answer
    try:
        return GeoPoint.from_lat_lon(answer)
    except (TypeError, ValueError) as exc:
        raise DeviceLocationError(LocationErrorReason.POSITION_UNAVAILABLE, repr(answer)) from exc
