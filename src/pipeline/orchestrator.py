"""Orchestrator: wires the pool loader, ranker and pipeline link write.

Data flow:
  1. Loader -> (position, eligible candidates, exclusion set)
  2. Ranker -> ordered, bounded list of scored matches
  3. Link action -> pipeline write, then a fresh load + rank
"""

import json
import logging
import sqlite3

from src.core.config import Settings
from src.core.schemas import PositionProfile, ScoredMatch, Submission
from src.pipeline.linker import AlreadyLinkedError, link_candidate
from src.pipeline.loader import CandidatePoolLoader
from src.pipeline.scorer import rank

logger = logging.getLogger(__name__)

ALREADY_LINKED_NOTICE = "Candidate is already in this position's pipeline"


class MatchRun:
    """Summary of a single load + rank pass for one position."""

    def __init__(
        self,
        position: PositionProfile,
        pool_count: int,
        excluded_count: int,
        matches: list[ScoredMatch],
    ) -> None:
        self.position = position
        self.pool_count = pool_count
        self.excluded_count = excluded_count
        self.matches = matches

    def pairs(self) -> list[tuple[str, int]]:
        """Return the ranked (candidate_id, score) pairs."""
        return [(m.candidate_id, m.score) for m in self.matches]


class LinkOutcome:
    """Result of a one-click "add to pipeline" action."""

    def __init__(
        self,
        submission: Submission | None,
        notice: str | None,
        refreshed: MatchRun,
    ) -> None:
        self.submission = submission
        self.notice = notice
        self.refreshed = refreshed

    @property
    def linked(self) -> bool:
        return self.submission is not None


def suggest_matches(
    conn: sqlite3.Connection,
    position_id: str,
    settings: Settings,
) -> MatchRun:
    """Load the pool for a position and rank it.

    Loader errors (PoolLoadError) propagate to the caller unchanged.
    """
    loader = CandidatePoolLoader(conn, settings.matching.placed_status)
    inputs = loader.load(position_id)

    matches = rank(
        inputs.position,
        inputs.candidates,
        inputs.exclusion_set,
        scoring=settings.scoring,
        matching=settings.matching,
    )
    excluded_count = len({c.id for c in inputs.candidates} & inputs.exclusion_set)

    logger.info(
        "Position '%s': %d eligible, %d already linked, %d suggested",
        position_id, len(inputs.candidates), excluded_count, len(matches),
    )
    return MatchRun(
        position=inputs.position,
        pool_count=len(inputs.candidates),
        excluded_count=excluded_count,
        matches=matches,
    )


def add_to_pipeline(
    conn: sqlite3.Connection,
    position_id: str,
    candidate_id: str,
    settings: Settings,
    *,
    notes: str = "",
    submitted_by: str | None = None,
) -> LinkOutcome:
    """Link a suggested candidate, then re-run load + rank for the position.

    A candidate linked by someone else in the meantime is not an error here:
    the outcome carries a notice and the refreshed match list instead.
    """
    try:
        submission = link_candidate(
            conn, position_id, candidate_id, notes=notes, submitted_by=submitted_by,
        )
        notice = None
    except AlreadyLinkedError:
        submission = None
        notice = ALREADY_LINKED_NOTICE

    return LinkOutcome(
        submission=submission,
        notice=notice,
        refreshed=suggest_matches(conn, position_id, settings),
    )


def export_results_json(run: MatchRun) -> str:
    """Export a match run as a JSON string."""
    data = []
    for m in run.matches:
        c = m.candidate
        b = m.breakdown
        data.append({
            "candidate_id": c.id,
            "name": c.name,
            "role": c.role,
            "score": m.score,
            "title_score": b.title_score,
            "skill_score": b.skill_score,
            "location_score": b.location_score,
            "seniority_score": b.seniority_score,
            "matched_skills": b.matched_skills,
        })
    return json.dumps(data, indent=2)
