"""
Location package: session location state, reverse geocoding, device geolocation.

Public API:
- LocationStateStore
- NominatimClient, ReverseGeocodeResult, GeocodingProviderError
- locate_device, DeviceLocationError, LocationErrorReason
"""

from .state import LocationStateStore
from .geocoding import GeocodingProviderError, NominatimClient, ReverseGeocodeResult, is_placeholder_address
from .device import DeviceLocationError, LocationErrorReason, locate_device

__all__ = [
    "LocationStateStore",
    "NominatimClient",
    "ReverseGeocodeResult",
    "GeocodingProviderError",
    "is_placeholder_address",
    "locate_device",
    "DeviceLocationError",
    "LocationErrorReason",
]
