"""Tests for profile models and alias normalization."""

import pytest
from pydantic import ValidationError

from src.core.schemas import (
    CandidateProfile,
    MatchBreakdown,
    MatchInputs,
    PositionProfile,
    ScoredMatch,
    Submission,
)


class TestPositionProfile:
    def test_skills_and_requirements_merged(self) -> None:
        p = PositionProfile.model_validate(
            {"id": "p1", "skills": ["Python", "SQL"], "requirements": ["Kubernetes", "python"]},
        )
        assert p.skills == ["python", "sql", "kubernetes"]

    def test_requirements_only(self) -> None:
        p = PositionProfile.model_validate({"id": "p1", "requirements": ["Figma"]})
        assert p.skills == ["figma"]

    def test_json_text_columns(self) -> None:
        p = PositionProfile.model_validate(
            {"id": "p1", "skills": '["Python", "Go"]', "requirements": None},
        )
        assert p.skills == ["python", "go"]

    def test_comma_separated_text(self) -> None:
        p = PositionProfile.model_validate({"id": "p1", "skills": "React, TypeScript , "})
        assert p.skills == ["react", "typescript"]

    def test_blank_skills_dropped(self) -> None:
        p = PositionProfile.model_validate({"id": "p1", "skills": ["", "  ", None, "Rust"]})
        assert p.skills == ["rust"]

    def test_null_text_fields_become_empty(self) -> None:
        p = PositionProfile.model_validate(
            {"id": "p1", "title": None, "location": None, "description": None},
        )
        assert p.title == ""
        assert p.location == ""
        assert p.description == ""

    def test_numeric_id_coerced(self) -> None:
        assert PositionProfile.model_validate({"id": 7}).id == "7"

    def test_id_required(self) -> None:
        with pytest.raises(ValidationError):
            PositionProfile.model_validate({"title": "Engineer"})

    def test_frozen(self) -> None:
        p = PositionProfile(id="p1")
        with pytest.raises(ValidationError):
            p.title = "changed"  # type: ignore[misc]


class TestCandidateProfile:
    def test_current_role_alias(self) -> None:
        c = CandidateProfile.model_validate({"id": "c1", "current_role": "DevOps Engineer"})
        assert c.role == "DevOps Engineer"

    def test_role_preferred_over_current_role(self) -> None:
        c = CandidateProfile.model_validate(
            {"id": "c1", "role": "Designer", "current_role": "Engineer"},
        )
        assert c.role == "Designer"

    def test_blank_role_falls_back(self) -> None:
        c = CandidateProfile.model_validate(
            {"id": "c1", "role": "  ", "current_role": "Engineer"},
        )
        assert c.role == "Engineer"

    def test_missing_optional_fields(self) -> None:
        c = CandidateProfile.model_validate(
            {"id": "c1", "role": None, "skills": None, "summary": None, "location": None,
             "experience_years": None, "is_deleted": None},
        )
        assert c.role == ""
        assert c.skills == []
        assert c.summary == ""
        assert c.location == ""
        assert c.experience_years is None
        assert c.is_deleted is False

    def test_skills_case_preserved(self) -> None:
        c = CandidateProfile.model_validate({"id": "c1", "skills": '["Python", "SQL"]'})
        assert c.skills == ["Python", "SQL"]

    def test_empty_experience_is_none(self) -> None:
        c = CandidateProfile.model_validate({"id": "c1", "experience_years": ""})
        assert c.experience_years is None

    def test_unreadable_experience_is_none(self) -> None:
        c = CandidateProfile.model_validate({"id": "c1", "experience_years": "7+"})
        assert c.experience_years is None

    def test_numeric_text_experience_coerced(self) -> None:
        c = CandidateProfile.model_validate({"id": "c1", "experience_years": "7"})
        assert c.experience_years == 7


class TestMatchModels:
    def test_inputs_exclusion_set_frozen(self) -> None:
        inputs = MatchInputs(position=PositionProfile(id="p1"), exclusion_set={"a", "b"})
        assert inputs.exclusion_set == frozenset({"a", "b"})
        assert inputs.candidates == []

    def test_score_bounds(self) -> None:
        c = CandidateProfile(id="c1")
        with pytest.raises(ValidationError):
            ScoredMatch(candidate=c, score=101)
        with pytest.raises(ValidationError):
            ScoredMatch(candidate=c, score=-1)

    def test_breakdown_defaults(self) -> None:
        b = MatchBreakdown()
        assert b.matched_skills == []
        assert b.title_score == 0.0


class TestSubmission:
    def test_defaults(self) -> None:
        s = Submission(position_id="p1", candidate_id="c1")
        assert s.status == "Submitted"
        assert s.stage == "Initial Review"
        assert s.notes == ""
        assert s.id is None

    def test_ids_coerced(self) -> None:
        s = Submission.model_validate({"position_id": 1, "candidate_id": 2, "notes": None})
        assert s.position_id == "1"
        assert s.candidate_id == "2"
        assert s.notes == ""
