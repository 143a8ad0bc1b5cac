"""Request flow: resolve a location or a name query to the nearest ATMs."""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .core.config import Config
from .core.models import Coordinate, POI, ScoredCandidate
from .core.routing import get_routing_service
from .matching.matcher import NameMatcher
from .ranking.proximity import DEFAULT_LIMIT, ProximityRanker


class RequestState(Enum):
    IDLE = "idle"
    MATCHING = "matching"
    LOCATING = "locating"
    RANKING = "ranking"
    REFINING = "refining"
    DONE = "done"


@dataclass
class LocateResult:
    """Outcome of one lookup. Empty ``results`` means no ATM was found."""

    mode: str
    query: Optional[str] = None
    reference: Optional[object] = None
    matches: List[ScoredCandidate] = field(default_factory=list)
    results: List[ScoredCandidate] = field(default_factory=list)
    states: List[RequestState] = field(default_factory=lambda: [RequestState.IDLE])

    @property
    def found(self) -> bool:
        return bool(self.results)

    @property
    def refined(self) -> bool:
        """True when results carry road distances from the routing service."""
        return bool(self.results) and all(c.refined for c in self.results)

    @property
    def best_match(self) -> Optional[ScoredCandidate]:
        return self.matches[0] if self.matches else None


class ATMLocator:
    """Answer "nearest ATM" requests against a fixed catalog."""

    def __init__(self, catalog: Sequence[POI], matcher: Optional[NameMatcher] = None,
                 ranker: Optional[ProximityRanker] = None, limit: int = DEFAULT_LIMIT,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize ATMLocator.

        Args:
            catalog: ATMs, loaded once and never modified
            matcher: Name matcher (defaults to NameMatcher())
            ranker: Proximity ranker (defaults to geodesic-only ranking)
            limit: Default number of ATMs per result
            logger: Logger to use (defaults to the module logger)
        """
        self.catalog = tuple(catalog)
        self.matcher = matcher or NameMatcher()
        self.ranker = ranker or ProximityRanker()
        self.limit = limit
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Config, catalog: Sequence[POI],
                    logger: Optional[logging.Logger] = None) -> "ATMLocator":
        """Build matcher, routing service and ranker from configuration."""
        matcher = NameMatcher(
            threshold=config.get_match_threshold(),
            delimiter=config.get_name_delimiter(),
            logger=logger,
        )
        ranker = ProximityRanker(
            routing_service=get_routing_service(config),
            prefilter_factor=config.get_prefilter_factor(),
            logger=logger,
        )
        return cls(catalog, matcher=matcher, ranker=ranker,
                   limit=config.get_result_limit(), logger=logger)

    def locate_by_coordinates(self, lat: float, lon: float, limit: Optional[int] = None,
                              cancel_event: Optional[threading.Event] = None) -> LocateResult:
        """
        Find the ATMs nearest to a coordinate.

        Args:
            lat: Latitude
            lon: Longitude
            limit: Number of results (defaults to the locator limit)
            cancel_event: Abort the routing wait when set

        Returns:
            LocateResult with ``results`` sorted by distance
        """
        result = LocateResult(mode="coordinates")
        self._transition(result, RequestState.LOCATING)
        self.logger.info("Received location: %s, %s", lat, lon)

        try:
            reference = Coordinate(float(lat), float(lon))
        except (TypeError, ValueError):
            self._transition(result, RequestState.DONE)
            return result

        result.reference = reference
        self._rank(result, reference, limit, cancel_event)
        return result

    def locate_by_name(self, query: str, limit: Optional[int] = None,
                       cancel_event: Optional[threading.Event] = None) -> LocateResult:
        """
        Find ATMs around the neighbourhood that best matches a name.

        The best name match becomes the reference point; the whole catalog is
        then ranked by distance from it.

        Args:
            query: Free-text neighbourhood name
            limit: Number of results (defaults to the locator limit)
            cancel_event: Abort the routing wait when set

        Returns:
            LocateResult with ``matches`` (by score) and ``results`` (by distance)
        """
        result = LocateResult(mode="name", query=query)
        self._transition(result, RequestState.MATCHING)

        result.matches = self.matcher.find_matches(query or "", self.catalog)
        if not result.matches:
            self.logger.info("No ATMs found matching %r", query)
            self._transition(result, RequestState.DONE)
            return result

        reference = result.matches[0].poi
        result.reference = reference
        self.logger.info("Sorting ATMs by proximity to: %s", reference.name)
        self._rank(result, reference, limit, cancel_event)
        return result

    def _rank(self, result: LocateResult, reference, limit, cancel_event):
        self._transition(result, RequestState.RANKING)
        limit = self.limit if limit is None else limit

        result.results = self.ranker.rank_by_proximity(
            reference, self.catalog, limit, cancel_event=cancel_event
        )
        if self.ranker.routing_service is not None and result.results:
            self._transition(result, RequestState.REFINING)
        self._transition(result, RequestState.DONE)

    def _transition(self, result: LocateResult, state: RequestState):
        self.logger.debug("Request state: %s -> %s", result.states[-1].value, state.value)
        result.states.append(state)
