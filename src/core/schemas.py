"""Core data models for the placement match engine.

Records arrive from the store (or a YAML dataset) in whatever shape they were
written. The ``mode="before"`` validators fold field aliases into a single
canonical field so scoring only ever sees one shape:

  * positions: ``skills`` + ``requirements`` -> ``skills`` (lower-cased, unique)
  * candidates: ``role`` / ``current_role`` -> ``role``
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_TEXT_FIELDS = ("title", "location", "description", "client", "status",
                "name", "role", "summary", "email")


def _as_list(value: Any) -> list[str]:
    """Coerce a stored skill list (list, JSON text, CSV text or None) to strings."""
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                value = text.strip("[]").split(",")
        else:
            value = text.split(",")
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _as_years(value: Any) -> int | None:
    """Coerce stored years of experience to an int, or None when unreadable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _clean_text(data: dict[str, Any]) -> None:
    """Replace NULL text columns with empty strings, in place."""
    for key in _TEXT_FIELDS:
        if key in data and data[key] is None:
            data[key] = ""
    if "id" in data and data["id"] is not None:
        data["id"] = str(data["id"])


class PositionProfile(BaseModel):
    """An open role, read-only input to scoring."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    skills: list[str] = Field(default_factory=list)
    location: str = ""
    description: str = ""
    client: str = ""
    status: str = ""

    @model_validator(mode="before")
    @classmethod
    def merge_requirements(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        _clean_text(data)
        merged: list[str] = []
        for skill in _as_list(data.get("skills")) + _as_list(data.pop("requirements", None)):
            skill = skill.lower()
            if skill not in merged:
                merged.append(skill)
        data["skills"] = merged
        return data


class CandidateProfile(BaseModel):
    """A member of the talent pool."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    role: str = ""
    skills: list[str] = Field(default_factory=list)
    summary: str = ""
    location: str = ""
    experience_years: int | None = None
    status: str = ""
    email: str = ""
    is_deleted: bool = False

    @model_validator(mode="before")
    @classmethod
    def merge_current_role(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        current_role = data.pop("current_role", None)
        _clean_text(data)
        if not (data.get("role") or "").strip() and current_role:
            data["role"] = current_role
        data["skills"] = _as_list(data.get("skills"))
        data["experience_years"] = _as_years(data.get("experience_years"))
        if data.get("is_deleted") is None:
            data["is_deleted"] = False
        return data


class MatchInputs(BaseModel):
    """The triple assembled by the pool loader for one ranking pass."""

    model_config = ConfigDict(frozen=True)

    position: PositionProfile
    candidates: list[CandidateProfile] = Field(default_factory=list)
    exclusion_set: frozenset[str] = frozenset()


class MatchBreakdown(BaseModel):
    """Per-component points behind a match score."""

    model_config = ConfigDict(frozen=True)

    title_score: float = 0.0
    skill_score: float = 0.0
    location_score: float = 0.0
    seniority_score: float = 0.0
    matched_skills: list[str] = Field(default_factory=list)


class ScoredMatch(BaseModel):
    """Wrapper that pairs a frozen CandidateProfile with its relevance score.

    Ephemeral: recomputed per request, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    candidate: CandidateProfile
    score: int = Field(default=0, ge=0, le=100)
    breakdown: MatchBreakdown = Field(default_factory=MatchBreakdown)

    @property
    def candidate_id(self) -> str:
        return self.candidate.id


class Submission(BaseModel):
    """A pipeline entry linking a candidate to a position."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    position_id: str
    candidate_id: str
    status: str = "Submitted"
    stage: str = "Initial Review"
    notes: str = ""
    submitted_by: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="before")
    @classmethod
    def coerce_ids(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("position_id", "candidate_id"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        if data.get("notes") is None:
            data["notes"] = ""
        return data
