"""Similarity scoring between place names."""

from rapidfuzz.distance import Levenshtein

from .normalize import normalize

CONTAINMENT_SCORE = 0.8


def score_keys(key_a: str, key_b: str) -> float:
    """
    Score two already-normalized keys.

    Identical keys score 1.0. When one non-empty key contains the other the
    score is a flat CONTAINMENT_SCORE, whatever the length difference.
    Otherwise the score is ``1 - d / max_len`` with ``d`` the unit-cost
    Levenshtein distance.
    """
    if key_a == key_b:
        return 1.0

    if not key_a or not key_b:
        return 0.0

    if key_a in key_b or key_b in key_a:
        return CONTAINMENT_SCORE

    distance = Levenshtein.distance(key_a, key_b)
    similarity = 1.0 - distance / max(len(key_a), len(key_b))
    return min(1.0, max(0.0, similarity))


def score(a, b) -> float:
    """
    Similarity of two raw names in [0, 1]. Symmetric.

    Args:
        a: First name or query
        b: Second name or query

    Returns:
        Similarity score
    """
    return score_keys(normalize(a), normalize(b))
