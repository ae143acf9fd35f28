"""YAML dataset import: seeds positions, candidates and pipelines into SQLite."""

import logging
import sqlite3
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.core.db import insert_submission, upsert_candidate, upsert_position
from src.core.schemas import CandidateProfile, PositionProfile, Submission

logger = logging.getLogger(__name__)


class Dataset(BaseModel):
    """Raw records as written in the dataset file.

    Records are stored as given so alias fields (``requirements``,
    ``current_role``) reach the store unchanged; each one is still validated
    against its profile model on load.
    """

    positions: list[dict[str, Any]] = Field(default_factory=list)
    candidates: list[dict[str, Any]] = Field(default_factory=list)
    submissions: list[Submission] = Field(default_factory=list)

    @field_validator("positions")
    @classmethod
    def positions_valid(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for record in v:
            PositionProfile.model_validate(record)
        return v

    @field_validator("candidates")
    @classmethod
    def candidates_valid(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for record in v:
            CandidateProfile.model_validate(record)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Dataset":
        """Load a dataset from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Dataset file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


def import_dataset(conn: sqlite3.Connection, dataset: Dataset) -> dict[str, int]:
    """Write a dataset into the store. Returns per-table write counts.

    Positions and candidates are upserted by ID. Submissions for pairs that
    are already linked are skipped.
    """
    for record in dataset.positions:
        upsert_position(conn, record)
    for record in dataset.candidates:
        upsert_candidate(conn, record)

    linked = 0
    for submission in dataset.submissions:
        if insert_submission(conn, submission) is not None:
            linked += 1
    skipped = len(dataset.submissions) - linked
    if skipped:
        logger.info("Skipped %d submissions already in the pipeline", skipped)

    counts = {
        "positions": len(dataset.positions),
        "candidates": len(dataset.candidates),
        "submissions": linked,
    }
    logger.info(
        "Imported %d positions, %d candidates, %d submissions",
        counts["positions"], counts["candidates"], counts["submissions"],
    )
    return counts
