"""Name normalization, scoring and catalog matching."""

from .normalize import normalize, NORMALIZATION_STEPS
from .similarity import score, score_keys, CONTAINMENT_SCORE
from .matcher import NameMatcher, find_matches, extract_comparable_name

__all__ = [
    "normalize",
    "NORMALIZATION_STEPS",
    "score",
    "score_keys",
    "CONTAINMENT_SCORE",
    "NameMatcher",
    "find_matches",
    "extract_comparable_name",
]
