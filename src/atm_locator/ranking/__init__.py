"""Distance ranking."""

from .proximity import ProximityRanker, RefinementCancelled

__all__ = ["ProximityRanker", "RefinementCancelled"]
