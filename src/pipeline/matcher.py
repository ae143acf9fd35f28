"""Filter chain applied to the candidate pool before scoring.

Filter order:
  1. ExclusionFilter: drop candidates already in the position's pipeline
  2. DeduplicationFilter: keep the first occurrence of each candidate ID
"""

import logging
from collections.abc import Callable, Iterable

from src.core.schemas import CandidateProfile

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset, in order.
Filter = Callable[[list[CandidateProfile]], list[CandidateProfile]]


class ExclusionFilter:
    """Remove candidates whose ID is in the position's exclusion set."""

    def __init__(self, exclusion_set: Iterable[str]) -> None:
        self._excluded = frozenset(str(cid) for cid in exclusion_set)

    def __call__(self, candidates: list[CandidateProfile]) -> list[CandidateProfile]:
        if not self._excluded:
            return candidates
        result = [c for c in candidates if c.id not in self._excluded]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("ExclusionFilter: removed %d already-linked candidates", excluded)
        return result


class DeduplicationFilter:
    """Remove repeated candidate IDs, keeping the first occurrence."""

    def __call__(self, candidates: list[CandidateProfile]) -> list[CandidateProfile]:
        seen: set[str] = set()
        result: list[CandidateProfile] = []
        for c in candidates:
            if c.id not in seen:
                seen.add(c.id)
                result.append(c)
        deduped = len(candidates) - len(result)
        if deduped:
            logger.debug("DeduplicationFilter: removed %d duplicates", deduped)
        return result


def build_filters(exclusion_set: Iterable[str]) -> list[Filter]:
    """Build the pre-scoring filter chain for one position."""
    return [ExclusionFilter(exclusion_set), DeduplicationFilter()]


def run_filter_chain(
    candidates: list[CandidateProfile],
    filters: list[Filter],
) -> list[CandidateProfile]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result
