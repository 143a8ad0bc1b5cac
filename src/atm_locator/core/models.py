"""Data models for ATM lookup results."""

from dataclasses import dataclass
from typing import NamedTuple, Optional


class Coordinate(NamedTuple):
    """A WGS84 point used as a ranking reference."""

    lat: float
    lon: float


class RouteLeg(NamedTuple):
    """Road distance (km) and travel time (seconds) to one destination."""

    distance_km: float
    duration_s: Optional[float] = None


@dataclass(frozen=True)
class POI:
    """A fixed-location ATM from the catalog."""

    id: str
    name: str
    lat: float
    lon: float

    def __repr__(self) -> str:
        return f"POI(id={self.id}, name='{self.name}', lat={self.lat}, lon={self.lon})"

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lon)

    @property
    def map_url(self) -> str:
        """Google Maps link for this ATM."""
        return f"https://www.google.com/maps?q={self.lat},{self.lon}"


@dataclass
class ScoredCandidate:
    """
    A POI produced by matching or ranking for a single request.

    ``score`` is set by name matching, ``distance`` (km) and ``duration``
    (seconds) by proximity ranking. ``geodesic_distance`` always holds the
    great-circle pre-filter distance, ``refined`` tells whether ``distance``
    was replaced by a routing-service road distance.
    """

    poi: POI
    score: Optional[float] = None
    distance: Optional[float] = None
    duration: Optional[float] = None
    geodesic_distance: Optional[float] = None
    refined: bool = False

    def __repr__(self) -> str:
        parts = [f"id={self.poi.id}", f"name='{self.poi.name}'"]
        if self.score is not None:
            parts.append(f"score={self.score:.2f}")
        if self.distance is not None:
            parts.append(f"distance={self.distance:.2f}km")
        if self.duration is not None:
            parts.append(f"duration={self.duration:.0f}s")
        return f"ScoredCandidate({', '.join(parts)})"

    @property
    def id(self) -> str:
        return self.poi.id

    @property
    def name(self) -> str:
        return self.poi.name

    @property
    def lat(self) -> float:
        return self.poi.lat

    @property
    def lon(self) -> float:
        return self.poi.lon
