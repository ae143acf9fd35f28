"""Integration test: load -> rank -> link -> refresh against a real SQLite store."""

import json
import sqlite3

import pytest

from src.core.config import MatchingConfig, Settings
from src.core.dataset import Dataset, import_dataset
from src.core.db import init_db
from src.core.schemas import CandidateProfile, MatchBreakdown, PositionProfile, ScoredMatch
from src.pipeline.linker import link_candidate
from src.pipeline.loader import CandidatePoolLoader, PoolLoadError, PositionNotFoundError
from src.pipeline.orchestrator import (
    ALREADY_LINKED_NOTICE,
    MatchRun,
    add_to_pipeline,
    export_results_json,
    suggest_matches,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_DATASET = {
    "positions": [
        {
            "id": "pos-1",
            "title": "Senior Backend Engineer",
            "client": "TechCorp",
            "location": "Remote",
            "skills": ["Python", "PostgreSQL"],
            "requirements": ["Kubernetes"],
        },
    ],
    "candidates": [
        {
            "id": "c-1",
            "name": "Sarah Chen",
            "role": "Senior Backend Engineer",
            "skills": ["Python", "PostgreSQL", "AWS"],
            "location": "Remote - US",
            "experience_years": 6,
            "status": "Interview",
        },
        {
            "id": "c-2",
            "name": "David Kim",
            "current_role": "DevOps Engineer",
            "skills": ["Kubernetes", "Docker", "Terraform"],
            "summary": "Ran kubernetes clusters and python tooling for 7 years.",
            "location": "Austin, TX",
            "experience_years": 7,
            "status": "Offer",
        },
        {
            "id": "c-3",
            "name": "Jessica Day",
            "role": "UX Designer",
            "skills": ["Figma"],
            "location": "Remote",
            "status": "Screening",
        },
        {
            "id": "c-4",
            "name": "Amanda Smith",
            "role": "Senior Backend Engineer",
            "skills": ["Python", "PostgreSQL", "Kubernetes"],
            "location": "Remote",
            "status": "Placed",
        },
        {
            "id": "c-5",
            "name": "Tom Hardy",
            "role": "Junior Dev",
            "skills": ["HTML", "CSS"],
            "location": "Berlin",
            "status": "Rejected",
        },
    ],
}


@pytest.fixture
def db(tmp_path: pytest.TempPathFactory) -> sqlite3.Connection:  # type: ignore[type-arg]
    conn = init_db(tmp_path / "test.db")
    import_dataset(conn, Dataset.model_validate(_DATASET))
    return conn


@pytest.fixture
def settings() -> Settings:
    return Settings()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestSuggestMatches:
    def test_ranked_pairs(self, db: sqlite3.Connection, settings: Settings) -> None:
        run = suggest_matches(db, "pos-1", settings)
        # c-1: 35 title + 26.7 skills + 20 location + 5 seniority
        # c-2: 10 title + 26.7 skills (kubernetes tag, python summary) + 5 seniority
        # c-3: 20 location only; c-4 placed; c-5 scores 0
        assert run.pairs() == [("c-1", 87), ("c-2", 42), ("c-3", 20)]
        assert run.pool_count == 4
        assert run.excluded_count == 0

    def test_breakdown_explains_score(self, db: sqlite3.Connection, settings: Settings) -> None:
        run = suggest_matches(db, "pos-1", settings)
        kim = run.matches[1]
        assert kim.candidate.role == "DevOps Engineer"
        assert kim.breakdown.matched_skills == ["python", "kubernetes"]

    def test_pipeline_members_excluded(self, db: sqlite3.Connection, settings: Settings) -> None:
        link_candidate(db, "pos-1", "c-1")
        run = suggest_matches(db, "pos-1", settings)
        assert "c-1" not in [cid for cid, _ in run.pairs()]
        assert run.excluded_count == 1

    def test_duplicate_pool_entry_excluded_once(
        self, db: sqlite3.Connection, settings: Settings, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        link_candidate(db, "pos-1", "c-1")
        pool = CandidatePoolLoader(db).load_eligible_candidates()
        monkeypatch.setattr(
            CandidatePoolLoader, "load_eligible_candidates", lambda self: pool + pool[:1],
        )
        run = suggest_matches(db, "pos-1", settings)
        assert run.excluded_count == 1
        assert run.pairs() == [("c-2", 42), ("c-3", 20)]

    def test_uses_matching_settings(self, db: sqlite3.Connection) -> None:
        settings = Settings(matching=MatchingConfig(max_results=1))
        run = suggest_matches(db, "pos-1", settings)
        assert run.pairs() == [("c-1", 87)]

    def test_unknown_position_propagates(self, db: sqlite3.Connection, settings: Settings) -> None:
        with pytest.raises(PositionNotFoundError):
            suggest_matches(db, "nope", settings)

    def test_fetch_failure_propagates(self, db: sqlite3.Connection, settings: Settings) -> None:
        db.execute("DROP TABLE client_submissions")
        with pytest.raises(PoolLoadError):
            suggest_matches(db, "pos-1", settings)


class TestAddToPipeline:
    def test_link_then_refresh(self, db: sqlite3.Connection, settings: Settings) -> None:
        outcome = add_to_pipeline(db, "pos-1", "c-1", settings, notes="Top match", submitted_by="u1")
        assert outcome.linked is True
        assert outcome.notice is None
        assert outcome.submission is not None
        assert outcome.submission.notes == "Top match"
        assert outcome.refreshed.pairs() == [("c-2", 42), ("c-3", 20)]

    def test_race_with_other_recruiter(self, db: sqlite3.Connection, settings: Settings) -> None:
        """Match list shown, someone else links the candidate, then the click lands."""
        shown = suggest_matches(db, "pos-1", settings)
        assert "c-2" in [cid for cid, _ in shown.pairs()]

        link_candidate(db, "pos-1", "c-2", submitted_by="other-recruiter")

        outcome = add_to_pipeline(db, "pos-1", "c-2", settings, submitted_by="u1")
        assert outcome.linked is False
        assert outcome.notice == ALREADY_LINKED_NOTICE
        assert outcome.refreshed.pairs() == [("c-1", 87), ("c-3", 20)]
        count = db.execute(
            "SELECT COUNT(*) FROM client_submissions WHERE candidate_id = 'c-2'"
        ).fetchone()[0]
        assert count == 1

    def test_repeated_runs_independent(self, db: sqlite3.Connection, settings: Settings) -> None:
        first = suggest_matches(db, "pos-1", settings)
        second = suggest_matches(db, "pos-1", settings)
        assert first.pairs() == second.pairs()


class TestExportJson:
    def test_export_format(self) -> None:
        match = ScoredMatch(
            candidate=CandidateProfile(id="c-1", name="Sarah Chen", role="Backend Engineer"),
            score=75,
            breakdown=MatchBreakdown(title_score=35.0, skill_score=40.0, matched_skills=["python"]),
        )
        run = MatchRun(
            position=PositionProfile(id="pos-1"),
            pool_count=1,
            excluded_count=0,
            matches=[match],
        )
        data = json.loads(export_results_json(run))
        assert data == [{
            "candidate_id": "c-1",
            "name": "Sarah Chen",
            "role": "Backend Engineer",
            "score": 75,
            "title_score": 35.0,
            "skill_score": 40.0,
            "location_score": 0.0,
            "seniority_score": 0.0,
            "matched_skills": ["python"],
        }]

    def test_export_empty(self) -> None:
        run = MatchRun(position=PositionProfile(id="pos-1"), pool_count=0, excluded_count=0, matches=[])
        assert json.loads(export_results_json(run)) == []
