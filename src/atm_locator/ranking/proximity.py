"""Two-stage proximity ranking: geodesic pre-filter, then road-distance refinement."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import List, Optional, Sequence

from ..core.models import POI, RouteLeg, ScoredCandidate
from ..core.routing import RoutingError, RoutingService
from ..core.utils import haversine_km, is_valid_coordinate

DEFAULT_LIMIT = 5
DEFAULT_PREFILTER_FACTOR = 2

# How often a cancellable wait checks the cancel event (seconds)
CANCEL_POLL_INTERVAL = 0.05


class RefinementCancelled(Exception):
    """The caller cancelled the request while waiting on the routing service."""


class ProximityRanker:
    """
    Rank ATMs by distance from a reference point.

    Every catalog entry is first ranked by great-circle distance. The
    closest ``prefilter_factor * limit`` entries are then sent to the routing
    service, if one is configured, and re-ranked by road distance. If the
    routing call fails in any way the geodesic ranking is returned instead;
    a single result never mixes road and geodesic distances.
    """

    def __init__(self, routing_service: Optional[RoutingService] = None,
                 prefilter_factor: int = DEFAULT_PREFILTER_FACTOR,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize ProximityRanker.

        Args:
            routing_service: Road-distance provider, or None for geodesic only
            prefilter_factor: Short-list size as a multiple of the limit
            logger: Logger to use (defaults to the module logger)
        """
        self.routing_service = routing_service
        self.prefilter_factor = max(1, int(prefilter_factor))
        self.logger = logger or logging.getLogger(__name__)

    def prefilter(self, reference, catalog: Sequence[POI], size: int) -> List[ScoredCandidate]:
        """
        Rank the catalog by great-circle distance and keep the ``size`` closest.

        Args:
            reference: Object with ``lat``/``lon``
            catalog: ATMs to rank
            size: Number of candidates to keep

        Returns:
            Candidates sorted ascending by distance, catalog order on ties
        """
        candidates = []
        for poi in catalog:
            distance = haversine_km(reference.lat, reference.lon, poi.lat, poi.lon)
            candidates.append(ScoredCandidate(
                poi=poi,
                distance=distance,
                geodesic_distance=distance,
            ))

        candidates.sort(key=lambda c: c.distance)
        return candidates[:max(0, size)]

    def geodesic_ranking(self, reference, catalog: Sequence[POI],
                         limit: int = DEFAULT_LIMIT) -> List[ScoredCandidate]:
        """Rank by great-circle distance only."""
        if not self._valid_request(reference, limit):
            return []
        return self.prefilter(reference, catalog, limit)

    def refine(self, reference, shortlist: List[ScoredCandidate]) -> List[ScoredCandidate]:
        """
        Replace geodesic distances with road distances from the routing service.

        Args:
            reference: Object with ``lat``/``lon``
            shortlist: Pre-filtered candidates

        Returns:
            New candidates sorted by road distance

        Raises:
            RoutingError: If the routing service fails or returns a bad result
        """
        legs = self.routing_service.one_to_many(reference, [c.poi for c in shortlist])
        return self._apply_legs(shortlist, legs)

    def rank_by_proximity(self, reference, catalog: Sequence[POI],
                          limit: int = DEFAULT_LIMIT,
                          cancel_event: Optional[threading.Event] = None) -> List[ScoredCandidate]:
        """
        Find the ``limit`` ATMs closest to a reference point.

        Args:
            reference: Object with ``lat``/``lon`` (a Coordinate or a POI)
            catalog: ATMs to rank
            limit: Maximum number of results
            cancel_event: When set during the routing call, stop waiting and
                fall back to the geodesic ranking

        Returns:
            Up to ``limit`` candidates sorted ascending by distance. Empty for
            invalid input.
        """
        if not self._valid_request(reference, limit):
            self.logger.info("Invalid ranking request: reference=%r limit=%r", reference, limit)
            return []

        shortlist_size = max(limit, limit * self.prefilter_factor)
        shortlist = self.prefilter(reference, catalog, shortlist_size)
        if not shortlist:
            return []

        self.logger.info(
            "Top %d ATMs by great-circle distance from (%.5f, %.5f)",
            len(shortlist), reference.lat, reference.lon,
        )
        for idx, candidate in enumerate(shortlist, start=1):
            self.logger.debug("%d. %s - %.2f km", idx, candidate.name, candidate.distance)

        geodesic = shortlist[:limit]
        if self.routing_service is None:
            return geodesic

        try:
            refined = self._refine_with_cancel(reference, shortlist, cancel_event)
        except RoutingError as e:
            self.logger.warning("Routing refinement failed, using great-circle ranking: %s", e)
            return geodesic
        except RefinementCancelled:
            self.logger.warning("Request cancelled during routing refinement, "
                                "using great-circle ranking")
            return geodesic
        except Exception:
            self.logger.exception("Routing service %s failed unexpectedly, "
                                  "using great-circle ranking",
                                  getattr(self.routing_service, "name", "?"))
            return geodesic

        best = refined[:limit]
        for idx, candidate in enumerate(best, start=1):
            self.logger.debug(
                "%d. %s - %.2f km (road), %.2f km (great-circle)",
                idx, candidate.name, candidate.distance, candidate.geodesic_distance,
            )
        return best

    def _refine_with_cancel(self, reference, shortlist, cancel_event):
        if cancel_event is None:
            return self.refine(reference, shortlist)

        if cancel_event.is_set():
            raise RefinementCancelled()

        # Per-request worker: requests never wait on each other's routing calls
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="atm-routing")
        try:
            future = executor.submit(self.refine, reference, shortlist)
            while True:
                try:
                    return future.result(timeout=CANCEL_POLL_INTERVAL)
                except FutureTimeout:
                    if cancel_event.is_set():
                        raise RefinementCancelled()
        finally:
            executor.shutdown(wait=False)

    @staticmethod
    def _apply_legs(shortlist: List[ScoredCandidate],
                    legs: List[RouteLeg]) -> List[ScoredCandidate]:
        if len(legs) != len(shortlist):
            raise RoutingError(
                f"Routing returned {len(legs)} results for {len(shortlist)} candidates"
            )

        refined = [
            ScoredCandidate(
                poi=candidate.poi,
                score=candidate.score,
                distance=leg.distance_km,
                duration=leg.duration_s,
                geodesic_distance=candidate.geodesic_distance,
                refined=True,
            )
            for candidate, leg in zip(shortlist, legs)
        ]
        refined.sort(key=lambda c: c.distance)
        return refined

    @staticmethod
    def _valid_request(reference, limit) -> bool:
        if reference is None or isinstance(limit, bool) or not isinstance(limit, int):
            return False
        if limit <= 0:
            return False
        lat = getattr(reference, "lat", None)
        lon = getattr(reference, "lon", None)
        return is_valid_coordinate(lat, lon)
