"""Routing service adapters for road-distance refinement."""

import logging
from abc import ABC, abstractmethod
from math import isfinite
from typing import Any, Dict, List, Optional, Sequence

import requests

from .models import Coordinate, RouteLeg

logger = logging.getLogger(__name__)


class RoutingError(Exception):
    """Raised when a routing service cannot produce a complete result."""


class RoutingService(ABC):
    """
    One-to-many road distance lookup.

    Subclasses implement a concrete provider. ``one_to_many`` either returns
    exactly one ``RouteLeg`` per destination, in destination order, or raises
    ``RoutingError``. Partial or over-long results are never returned.
    Adapters wrap their own failures in ``RoutingError``; the ranker still
    falls back to great-circle distances on any other exception.
    """

    name = "routing"

    def __init__(self, base_url: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        """
        Args:
            base_url: Root URL of the routing server
            timeout: Request timeout in seconds
            session: Optional requests session (defaults to module-level requests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def one_to_many(self, origin, destinations: Sequence) -> List[RouteLeg]:
        """
        Look up road distance and duration from origin to every destination.

        Args:
            origin: Object with ``lat``/``lon``
            destinations: Ordered objects with ``lat``/``lon``

        Returns:
            List of RouteLeg aligned to ``destinations``

        Raises:
            RoutingError: On any transport, status or payload problem
        """
        if not destinations:
            return []

        payload = self._fetch(origin, destinations)
        legs = self._parse(payload, len(destinations))

        if len(legs) != len(destinations):
            raise RoutingError(
                f"{self.name} returned {len(legs)} results for "
                f"{len(destinations)} destinations"
            )
        return legs

    def check_connection(self, origin=None) -> bool:
        """
        Test if the routing service answers a trivial request.

        Returns:
            True if the service is reachable and returns a valid result
        """
        origin = origin or Coordinate(7.06, 38.47)
        try:
            self.one_to_many(origin, [origin])
            return True
        except RoutingError as e:
            logger.warning("%s connection check failed: %s", self.name, e)
            return False

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a URL and decode the JSON body, mapping failures to RoutingError."""
        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RoutingError(f"{self.name} request failed: {e}") from e

        logger.debug("%s response status: %s", self.name, response.status_code)
        if response.status_code != 200:
            raise RoutingError(
                f"{self.name} returned status {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise RoutingError(f"{self.name} returned invalid JSON: {e}") from e

    @staticmethod
    def _distance(value, scale: float = 1.0) -> float:
        """Validate a reported distance and convert it to kilometers."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RoutingError(f"Invalid distance in routing response: {value!r}")
        distance = float(value) * scale
        if not isfinite(distance) or distance < 0:
            raise RoutingError(f"Invalid distance in routing response: {value!r}")
        return distance

    @staticmethod
    def _duration(value) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        duration = float(value)
        if not isfinite(duration) or duration < 0:
            return None
        return duration

    @abstractmethod
    def _fetch(self, origin, destinations: Sequence) -> Any:
        """Issue the provider request and return the decoded payload."""

    @abstractmethod
    def _parse(self, payload: Any, count: int) -> List[RouteLeg]:
        """Turn the provider payload into ``count`` RouteLegs."""


class GebetaRoutingService(RoutingService):
    """
    Gebeta Maps one-to-many ("onm") route matrix.

    The response lists ``origin_to_destination`` entries where index 0 is
    the origin to itself; destination ``i`` is found at index ``i + 1``.
    Distances are reported in kilometers and ``time`` in seconds.
    """

    name = "gebeta"
    ORIGIN_OFFSET = 1

    def __init__(self, base_url: str, api_key: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        super().__init__(base_url, timeout=timeout, session=session)
        self.api_key = api_key

    def _fetch(self, origin, destinations: Sequence) -> Any:
        dest_coords = ",".join(f"{{{d.lat},{d.lon}}}" for d in destinations)
        params = {
            "origin": f"{{{origin.lat},{origin.lon}}}",
            "json": f"[{dest_coords}]",
            "apiKey": self.api_key,
        }
        url = f"{self.base_url}/api/route/onm"
        logger.info("Calling Gebeta one-to-many for %d destinations", len(destinations))
        return self._get(url, params=params)

    def _parse(self, payload: Any, count: int) -> List[RouteLeg]:
        if not isinstance(payload, dict):
            raise RoutingError("Gebeta response is not a JSON object")

        entries = payload.get("origin_to_destination")
        if not isinstance(entries, list):
            raise RoutingError("Gebeta response has no origin_to_destination list")

        expected = count + self.ORIGIN_OFFSET
        if len(entries) != expected:
            raise RoutingError(
                f"Gebeta returned {len(entries)} entries, expected {expected}"
            )

        legs = []
        for entry in entries[self.ORIGIN_OFFSET:expected]:
            if not isinstance(entry, dict):
                raise RoutingError(f"Invalid Gebeta route entry: {entry!r}")
            legs.append(RouteLeg(
                distance_km=self._distance(entry.get("distance")),
                duration_s=self._duration(entry.get("time")),
            ))
        return legs


class OSRMRoutingService(RoutingService):
    """
    OSRM table service.

    The origin is sent as coordinate 0 and used as the only source, so row 0
    of the matrix starts with the origin to itself, followed by one column per
    destination. OSRM reports meters and seconds.
    """

    name = "osrm"
    ORIGIN_OFFSET = 1

    def __init__(self, base_url: str = "http://localhost:5000", profile: str = "driving",
                 timeout: float = 5.0, session: Optional[requests.Session] = None):
        super().__init__(base_url, timeout=timeout, session=session)
        self.profile = profile

    def _fetch(self, origin, destinations: Sequence) -> Any:
        points = [origin] + list(destinations)
        coords = ";".join(f"{p.lon},{p.lat}" for p in points)
        url = f"{self.base_url}/table/v1/{self.profile}/{coords}"
        params = {"sources": "0", "annotations": "distance,duration"}
        logger.info("Calling OSRM table for %d destinations", len(destinations))
        return self._get(url, params=params)

    def _parse(self, payload: Any, count: int) -> List[RouteLeg]:
        if not isinstance(payload, dict) or payload.get("code") != "Ok":
            code = payload.get("code") if isinstance(payload, dict) else None
            raise RoutingError(f"OSRM table failed with code {code!r}")

        try:
            distances = payload["distances"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise RoutingError("OSRM response has no distance row") from e

        durations = payload.get("durations")
        if isinstance(durations, list) and durations and isinstance(durations[0], list):
            durations = durations[0]
        else:
            durations = []

        expected = count + self.ORIGIN_OFFSET
        if not isinstance(distances, list) or len(distances) != expected:
            raise RoutingError(f"OSRM distance row does not have {expected} entries")

        legs = []
        for idx in range(self.ORIGIN_OFFSET, expected):
            duration = durations[idx] if idx < len(durations) else None
            legs.append(RouteLeg(
                distance_km=self._distance(distances[idx], scale=0.001),
                duration_s=self._duration(duration),
            ))
        return legs


def get_routing_service(config) -> Optional[RoutingService]:
    """
    Factory function to build the configured routing service.

    Args:
        config: Config instance

    Returns:
        RoutingService, or None when refinement is disabled

    Raises:
        ValueError: If the provider is unknown
    """
    provider = config.get_routing_provider()
    settings = config.get_routing_settings()
    timeout = float(settings.get("timeout", 5.0))
    base_url = settings.get("base_url", "")

    if provider in ("none", "off", ""):
        return None

    if provider == "gebeta":
        if not base_url:
            logger.warning("Gebeta base URL not configured, routing refinement disabled")
            return None
        return GebetaRoutingService(base_url, settings.get("api_key", ""), timeout=timeout)
    elif provider == "osrm":
        return OSRMRoutingService(
            base_url or "http://localhost:5000",
            profile=settings.get("profile", "driving"),
            timeout=timeout,
        )
    else:
        raise ValueError(
            f"Unknown routing provider: {provider}. "
            f"Valid options: gebeta, osrm, none"
        )
