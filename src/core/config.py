"""Configuration models and YAML loader for the placement match engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/placements.db"


class MatchingConfig(BaseModel):
    """Pool eligibility and result shaping for a match run."""

    max_results: int = Field(default=20, ge=1)
    min_score: int = Field(default=5, ge=0, le=100)
    placed_status: str = "Placed"

    @field_validator("placed_status")
    @classmethod
    def placed_status_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "placed_status must not be empty"
            raise ValueError(msg)
        return v.strip()


class ScoringConfig(BaseModel):
    """Component weights for rule-based match scoring."""

    title_exact_points: float = Field(default=35.0, ge=0.0)
    title_overlap_points: float = Field(default=30.0, ge=0.0)
    skill_points: float = Field(default=40.0, ge=0.0)
    location_points: float = Field(default=20.0, ge=0.0)
    remote_points: float = Field(default=15.0, ge=0.0)
    seniority_points: float = Field(default=5.0, ge=0.0)
    seniority_min_years: int = Field(default=5, ge=0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
