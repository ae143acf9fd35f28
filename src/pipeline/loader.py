"""Candidate pool loader: assembles the inputs of one ranking pass.

Every read goes to the store on every call; nothing is cached between passes.
Fetch failures raise PoolLoadError and are fatal for the request. The
exclusion set is never replaced by an empty set on error.
"""

import logging
import sqlite3

from pydantic import ValidationError

from src.core.db import fetch_active_candidates, fetch_pipeline_candidate_ids, fetch_position
from src.core.schemas import CandidateProfile, MatchInputs, PositionProfile

logger = logging.getLogger(__name__)


class PoolLoadError(RuntimeError):
    """The position, the candidate pool or the exclusion set could not be read."""


class PositionNotFoundError(PoolLoadError):
    """No position exists with the requested ID."""


class CandidatePoolLoader:
    """Reads the position profile, eligible pool and exclusion set from SQLite.

    Usage::

        loader = CandidatePoolLoader(conn)
        inputs = loader.load("pos-42")
        matches = rank(inputs.position, inputs.candidates, inputs.exclusion_set)
    """

    def __init__(self, conn: sqlite3.Connection, placed_status: str = "Placed") -> None:
        self._conn = conn
        self._placed_status = placed_status

    def load_position(self, position_id: str) -> PositionProfile:
        try:
            row = fetch_position(self._conn, position_id)
        except sqlite3.Error as e:
            msg = f"Failed to load position '{position_id}': {e}"
            raise PoolLoadError(msg) from e
        if row is None:
            msg = f"Position not found: {position_id}"
            raise PositionNotFoundError(msg)
        return PositionProfile.model_validate(dict(row))

    def load_eligible_candidates(self) -> list[CandidateProfile]:
        """Return every active candidate not in the placed status.

        Candidates missing optional fields are kept; the profile model fills
        them with empty values.
        """
        try:
            rows = fetch_active_candidates(self._conn, self._placed_status)
        except sqlite3.Error as e:
            msg = f"Failed to load candidate pool: {e}"
            raise PoolLoadError(msg) from e
        try:
            candidates = [CandidateProfile.model_validate(dict(row)) for row in rows]
        except ValidationError as e:
            msg = f"Failed to read candidate pool: {e}"
            raise PoolLoadError(msg) from e
        logger.debug("Loaded %d eligible candidates", len(candidates))
        return candidates

    def load_exclusion_set(self, position_id: str) -> frozenset[str]:
        """Return IDs of candidates already in the position's pipeline, any stage."""
        try:
            ids = fetch_pipeline_candidate_ids(self._conn, position_id)
        except sqlite3.Error as e:
            msg = f"Failed to load pipeline for position '{position_id}': {e}"
            raise PoolLoadError(msg) from e
        logger.debug("Position '%s' has %d linked candidates", position_id, len(ids))
        return frozenset(ids)

    def load(self, position_id: str) -> MatchInputs:
        """Load the (position, candidates, exclusion set) triple for one pass."""
        position = self.load_position(position_id)
        return MatchInputs(
            position=position,
            candidates=self.load_eligible_candidates(),
            exclusion_set=self.load_exclusion_set(position_id),
        )
