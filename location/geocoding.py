#Purpose: Reverse geocoding adapter (Nominatim).
#Best-effort enrichment: turns a coordinate into a display address + country
#so the optional address field can be prefilled.
#Never a dependency of route/cost correctness: every failure degrades to
#ReverseGeocodeResult.failed() instead of propagating.

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import requests

import config
from orders.models import GeoPoint

logger = logging.getLogger(__name__)


class GeocodingProviderError(Exception):
    """Network failure, non-success status or unreadable body from the geocoder."""
    pass


@dataclass(frozen=True)
class ReverseGeocodeResult:
    display_name: str
    country: str

    @classmethod
    def failed(cls) -> "ReverseGeocodeResult":
        return cls(display_name="Address lookup failed", country="")

    def matches_country(self, expected: str) -> bool:
        """Case-insensitive substring match, e.g. 'uganda' in 'Uganda'."""
        return bool(expected) and expected.lower() in self.country.lower()


def is_placeholder_address(text: Optional[str]) -> bool:
    """
    True when an address field is empty or still holds its 'Enter ...' hint,
    i.e. safe to overwrite with a looked-up address.
    """
    if text is None or not text.strip():
        return True
    return "enter" in text.lower()


class NominatimClient:
    """
    Thin wrapper around Nominatim's /reverse endpoint.
    """

    def __init__(self,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url if base_url is not None else config.NOMINATIM_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.NOMINATIM_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent or config.HTTP_USER_AGENT})

    def reverse_lookup(self, point: GeoPoint) -> ReverseGeocodeResult:
        """
        Address for a point, or ReverseGeocodeResult.failed() on any error.
        """
        try:
            data = self._fetch(point)
        except GeocodingProviderError as exc:
            logger.warning("reverse geocoding failed for %s: %s", point.format_coords(), exc)
            return ReverseGeocodeResult.failed()

        address = data.get("address")
        country = address.get("country", "") if isinstance(address, dict) else ""
        return ReverseGeocodeResult(
            display_name=data.get("display_name") or "Address not found",
            country=str(country or ""),
        )

    def _fetch(self, point: GeoPoint) -> Dict[str, Any]:
        params = {
            "format": "json",
            "lat": f"{point.latitude:.6f}",
            "lon": f"{point.longitude:.6f}",
            "zoom": 18,
            "addressdetails": 1,
        }
        try:
            response = self.session.get(f"{self.base_url}/reverse", params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GeocodingProviderError(str(exc)) from exc

        if not response.ok:
            raise GeocodingProviderError(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise GeocodingProviderError("non-JSON body") from exc

        if not isinstance(data, dict):
            raise GeocodingProviderError("unexpected payload shape")
        return data
