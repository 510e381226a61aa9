#Purpose: The routing provider "adapter/client" (OpenRouteService directions).
#Sole responsibility: talk to the provider via HTTP and return normalized outputs.
#Encapsulates provider-specific details:
#coordinate formatting (lon,lat)
#URL construction (/v2/directions/{profile}/geojson)
#error handling (every failure becomes RoutingProviderError)
#parsing the GeoJSON response into our internal shape
#It should not contain pricing rules or fallback logic.

from typing import Any, Dict, List, Optional, Tuple
import logging
import math

import requests

import config
from orders.models import GeoPoint

logger = logging.getLogger(__name__)

LonLat = Tuple[float, float]


class RoutingProviderError(Exception):
    """Network failure, non-success status or malformed payload from the routing provider."""
    pass


class ORSClient:
    """
    OpenRouteService Adapter / Client

    Sole responsibility:
    - Talk to the directions endpoint via HTTP
    - Convert internal GeoPoint -> provider [lon, lat]
    - Return normalized outputs (meters, seconds, lon/lat path)

    """
    def __init__(self,
                 base_url: Optional[str] = None,
                 api_key: Optional[str] = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url if base_url is not None else config.ORS_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.ORS_API_KEY
        self.timeout = timeout if timeout is not None else config.ORS_TIMEOUT #time to wait before giving up
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("Routing base URL not set. Please set ORS_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, points: List[GeoPoint]) -> List[List[float]]:
        """Convert GeoPoints to the provider's [[lon, lat], ...] body format."""
        return [[point.longitude, point.latitude] for point in points]

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, application/geo+json",
        }
        if self.api_key:
            headers["Authorization"] = self.api_key
        return headers

    #----------------
    # Public methods
    #----------------
    def directions(self, start: GeoPoint, end: GeoPoint, profile: str) -> Dict[str, Any]:
        """
        calls the /v2/directions/{profile}/geojson endpoint and returns
        the first route's totals and path.

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
                "geometry": [(lon, lat), ...],
            }

        Raises:
            RoutingProviderError on any failure, so callers only need one except clause.
        """
        url = f"{self.base_url}/v2/directions/{profile}/geojson"
        logger.debug("directions %s: %s -> %s", profile, start.format_coords(), end.format_coords())
        body = {
            "coordinates": self.format_coordinates([start, end]),
            "instructions": False, # no turn-by-turn needed
            "preference": "recommended",
        }

        try:
            response = self.session.post(url, json=body, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise RoutingProviderError(f"routing request failed: {exc}") from exc

        if not response.ok:
            raise RoutingProviderError(f"routing provider returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise RoutingProviderError("routing provider returned a non-JSON body") from exc

        return self.parse_directions(data)

    @staticmethod
    def parse_directions(data: Any) -> Dict[str, Any]:
        """
        Normalize a GeoJSON directions payload. Anything missing or of the wrong
        shape is a malformed response.
        """
        try:
            feature = data["features"][0]
            segment = feature["properties"]["segments"][0]
            distance = float(segment["distance"])
            duration = float(segment["duration"])
            geometry: List[LonLat] = [
                (float(coordinate[0]), float(coordinate[1]))
                for coordinate in feature["geometry"]["coordinates"]
            ]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise RoutingProviderError(f"malformed routing response: {exc!r}") from exc

        if not (math.isfinite(distance) and math.isfinite(duration)) or distance < 0 or duration < 0:
            raise RoutingProviderError("routing response has invalid distance/duration")

        return {
            "distance": distance,
            "duration": duration,
            "geometry": geometry,
        }
