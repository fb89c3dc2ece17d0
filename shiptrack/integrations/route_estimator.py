"""
OpenRouteService adapter for travel-time estimates.

Estimates are presentation enrichment only: nothing here reads or writes
the shipment store, and results are neither cached nor retried.
"""

from dataclasses import dataclass
from typing import Any

import requests

from shiptrack.common.config_loader import RoutingConfig
from shiptrack.common.errors import ExternalServiceError, PlaceNotFoundError, RouteNotFoundError
from shiptrack.common.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_PROFILE = "driving-car"


@dataclass(frozen=True)
class GeocodeResult:
    """A resolved place: ``[longitude, latitude]`` and the service's label."""

    coordinates: tuple[float, float]
    name: str


@dataclass(frozen=True)
class RouteSummary:
    duration_seconds: float
    distance_meters: float


@dataclass(frozen=True)
class TravelEstimate:
    """Route between two named places, with human-readable figures."""

    start_name: str
    end_name: str
    duration_seconds: float
    distance_meters: float
    profile: str

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def distance_formatted(self) -> str:
        return format_distance(self.distance_meters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "startName": self.start_name,
            "endName": self.end_name,
            "duration": self.duration_seconds,
            "distance": self.distance_meters,
            "durationFormatted": self.duration_formatted,
            "distanceFormatted": self.distance_formatted,
            "profile": self.profile,
        }


def format_duration(seconds: float | None) -> str:
    """``"Xh Ym"`` from one hour up, ``"Y min"`` below."""
    total = max(0, int(seconds or 0))
    hours, remainder = divmod(total, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes} min"


def format_distance(meters: float | None) -> str:
    """Kilometres with two decimals, e.g. ``"12.35 km"``."""
    return f"{(meters or 0) / 1000:.2f} km"


class RouteEstimator:
    """Geocode place names and fetch driving (or other profile) routes."""

    def __init__(
        self,
        api_key: str | None,
        geocode_url: str = "https://api.openrouteservice.org/geocode/search",
        directions_url: str = "https://api.openrouteservice.org/v2/directions",
        timeout_seconds: float = 10.0,
        default_profile: str = DEFAULT_PROFILE,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.geocode_url = geocode_url
        self.directions_url = directions_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.default_profile = default_profile
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: RoutingConfig, session: requests.Session | None = None) -> "RouteEstimator":
        return cls(
            api_key=config.api_key,
            geocode_url=config.geocode_url,
            directions_url=config.directions_url,
            timeout_seconds=config.timeout_seconds,
            default_profile=config.default_profile,
            session=session,
        )

    def _require_key(self) -> str:
        if not self.api_key:
            raise ExternalServiceError("Route estimation is not configured (missing OpenRouteService API key)")
        return self.api_key

    def _request(self, method: str, url: str, what: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{what} request failed", url=url, error=str(e))
            raise ExternalServiceError(f"{what} failed: {e}") from e

        if not response.ok:
            logger.error(f"{what} returned an error", url=url, status=response.status_code)
            raise ExternalServiceError(f"{what} failed: {response.status_code} {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(f"{what} returned a non-JSON body") from e

        if not isinstance(data, dict):
            logger.error(f"{what} returned an unexpected body", url=url, body_type=type(data).__name__)
            raise ExternalServiceError(f"{what} returned an unexpected body")
        return data

    def geocode(self, place: str) -> GeocodeResult:
        """
        Resolve a place name.

        Raises:
            PlaceNotFoundError: no match for ``place``
            ExternalServiceError: transport or upstream failure
        """
        api_key = self._require_key()
        data = self._request(
            "GET",
            self.geocode_url,
            "Geocode",
            params={"api_key": api_key, "text": place, "size": 1},
        )

        features = data.get("features") or []
        if not features:
            raise PlaceNotFoundError(f"Location not found: {place}")

        try:
            feature = features[0]
            longitude, latitude = feature["geometry"]["coordinates"][:2]
            coordinates = (float(longitude), float(latitude))
            name = (feature.get("properties") or {}).get("label") or place
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ExternalServiceError("Geocode returned an unexpected body") from e
        return GeocodeResult(coordinates=coordinates, name=name)

    def route(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        profile: str | None = None,
    ) -> RouteSummary:
        """
        Fetch the first route between two ``[longitude, latitude]`` points.

        Raises:
            RouteNotFoundError: the service returned no route
            ExternalServiceError: transport or upstream failure
        """
        api_key = self._require_key()
        data = self._request(
            "POST",
            f"{self.directions_url}/{profile or self.default_profile}",
            "Route",
            headers={
                "Accept": "application/json, application/geo+json",
                "Authorization": api_key,
                "Content-Type": "application/json; charset=utf-8",
            },
            json={"coordinates": [list(start), list(end)]},
        )

        routes = data.get("routes") or []
        if not routes:
            raise RouteNotFoundError("No route found")

        try:
            summary = routes[0].get("summary") or {}
            duration = float(summary.get("duration") or 0)
            distance = float(summary.get("distance") or 0)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ExternalServiceError("Route returned an unexpected body") from e
        return RouteSummary(duration_seconds=duration, distance_meters=distance)

    def estimate(self, start_place: str, end_place: str, profile: str | None = None) -> TravelEstimate:
        """Geocode both places and route between them."""
        profile = profile or self.default_profile
        start = self.geocode(start_place)
        end = self.geocode(end_place)
        summary = self.route(start.coordinates, end.coordinates, profile)

        logger.debug(
            "Travel estimate computed",
            start=start.name,
            end=end.name,
            profile=profile,
            duration_seconds=summary.duration_seconds,
        )
        return TravelEstimate(
            start_name=start.name,
            end_name=end.name,
            duration_seconds=summary.duration_seconds,
            distance_meters=summary.distance_meters,
            profile=profile,
        )
