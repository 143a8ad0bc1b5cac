"""ATM Locator - Find the nearest ATMs by location or neighbourhood name."""

__version__ = "0.1.0"

# Expose main classes for programmatic use
from .core import Config, POI, Coordinate, ScoredCandidate, load_catalog
from .matching import NameMatcher, find_matches, normalize, score
from .ranking import ProximityRanker
from .locator import ATMLocator, LocateResult, RequestState
from .exporters import GPXExporter

__all__ = [
    "__version__",
    "Config",
    "POI",
    "Coordinate",
    "ScoredCandidate",
    "load_catalog",
    "NameMatcher",
    "find_matches",
    "normalize",
    "score",
    "ProximityRanker",
    "ATMLocator",
    "LocateResult",
    "RequestState",
    "GPXExporter",
]
