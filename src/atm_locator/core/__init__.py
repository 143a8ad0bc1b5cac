"""Core utilities for ATM Locator."""

from .utils import (
    haversine_km,
    is_valid_coordinate,
)
from .models import Coordinate, POI, RouteLeg, ScoredCandidate
from .config import Config
from .catalog import load_catalog
from .routing import (
    RoutingError,
    RoutingService,
    GebetaRoutingService,
    OSRMRoutingService,
    get_routing_service,
)

__all__ = [
    "haversine_km",
    "is_valid_coordinate",
    "Coordinate",
    "POI",
    "RouteLeg",
    "ScoredCandidate",
    "Config",
    "load_catalog",
    "RoutingError",
    "RoutingService",
    "GebetaRoutingService",
    "OSRMRoutingService",
    "get_routing_service",
]
