"""Match a free-text neighbourhood query against the ATM catalog."""

import logging
from typing import Iterable, List, Optional

from ..core.models import POI, ScoredCandidate
from .normalize import normalize
from .similarity import score_keys

DEFAULT_THRESHOLD = 0.3
DEFAULT_DELIMITER = "-"


def extract_comparable_name(full_name: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """
    Get the neighbourhood part of an ATM name.

    "Bank-Piasa" gives "Piasa"; names without the delimiter are used whole.
    """
    if delimiter and delimiter in full_name:
        return full_name.rsplit(delimiter, 1)[1].strip()
    return full_name.strip()


class NameMatcher:
    """Rank catalog ATMs by how well their neighbourhood name matches a query."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD,
                 delimiter: str = DEFAULT_DELIMITER,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize NameMatcher.

        Args:
            threshold: Candidates must score strictly above this value
            delimiter: Separator between bank prefix and neighbourhood name
            logger: Logger to use (defaults to the module logger)
        """
        self.threshold = threshold
        self.delimiter = delimiter
        self.logger = logger or logging.getLogger(__name__)

    def find_matches(self, query: str, catalog: Iterable[POI]) -> List[ScoredCandidate]:
        """
        Score every ATM against a query.

        Args:
            query: Free-text neighbourhood name
            catalog: ATMs to search

        Returns:
            Candidates scoring above the threshold, best first. Ties keep
            catalog order. Empty when nothing matches.
        """
        if not query or not query.strip():
            return []

        query_key = normalize(query)
        self.logger.info("Searching ATMs matching %r (key %r)", query, query_key)

        matches = []
        for poi in catalog:
            name_key = normalize(extract_comparable_name(poi.name, self.delimiter))
            similarity = score_keys(query_key, name_key)
            if similarity > self.threshold:
                matches.append(ScoredCandidate(poi=poi, score=similarity))

        matches.sort(key=lambda c: c.score, reverse=True)

        self.logger.info("Found %d matching ATMs", len(matches))
        for idx, match in enumerate(matches[:5], start=1):
            self.logger.debug("%d. %s (score: %.2f)", idx, match.name, match.score)

        return matches


def find_matches(query: str, catalog: Iterable[POI]) -> List[ScoredCandidate]:
    """Find matches with the default threshold and delimiter."""
    return NameMatcher().find_matches(query, catalog)
