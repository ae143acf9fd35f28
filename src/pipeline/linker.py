"""Pipeline link write: adds a suggested candidate to a position's pipeline.

The (position_id, candidate_id) uniqueness constraint decides the outcome at
write time. A pair that is already linked is rejected with AlreadyLinkedError,
whatever the caller's match list showed.
"""

import logging
import sqlite3

from src.core.db import fetch_position, insert_activity, insert_submission
from src.core.schemas import Submission

logger = logging.getLogger(__name__)

SUBMITTED_ACTION = "Submitted to Client"


class AlreadyLinkedError(Exception):
    """The candidate is already in the position's pipeline."""

    def __init__(self, position_id: str, candidate_id: str) -> None:
        self.position_id = position_id
        self.candidate_id = candidate_id
        super().__init__(
            f"Candidate '{candidate_id}' is already in the pipeline for position '{position_id}'"
        )


def link_candidate(
    conn: sqlite3.Connection,
    position_id: str,
    candidate_id: str,
    *,
    notes: str = "",
    submitted_by: str | None = None,
) -> Submission:
    """Create a pipeline entry and log the submission on the candidate's activity.

    Raises:
        AlreadyLinkedError: A submission for this pair already exists.
        sqlite3.IntegrityError: The position or candidate does not exist.
    """
    submission = Submission(
        position_id=position_id,
        candidate_id=candidate_id,
        notes=notes,
        submitted_by=submitted_by,
    )
    # Submission and activity entry commit together or not at all.
    with conn:
        row_id = insert_submission(conn, submission, commit=False)
        if row_id is not None:
            position = fetch_position(conn, submission.position_id)
            title = position["title"] if position is not None else submission.position_id
            client = position["client"] if position is not None else ""
            description = (
                f"Submitted for {title} at {client}" if client else f"Submitted for {title}"
            )
            insert_activity(
                conn, submission.candidate_id, SUBMITTED_ACTION, description, submitted_by,
                commit=False,
            )
    if row_id is None:
        logger.info("Candidate '%s' already linked to '%s'", candidate_id, position_id)
        raise AlreadyLinkedError(submission.position_id, submission.candidate_id)

    logger.info("Linked candidate '%s' to position '%s'", candidate_id, position_id)
    return submission.model_copy(update={"id": row_id})
