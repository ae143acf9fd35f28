"""SQLite data layer for positions, candidates, pipelines and activity."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from src.core.schemas import Submission

_POSITIONS_TABLE = """
CREATE TABLE IF NOT EXISTS positions (
    id              TEXT    PRIMARY KEY,
    title           TEXT    NOT NULL DEFAULT '',
    client          TEXT    NOT NULL DEFAULT '',
    location        TEXT    NOT NULL DEFAULT '',
    description     TEXT    NOT NULL DEFAULT '',
    status          TEXT    NOT NULL DEFAULT 'Open',
    skills          TEXT,
    requirements    TEXT
);
"""

_CANDIDATES_TABLE = """
CREATE TABLE IF NOT EXISTS candidates (
    id               TEXT    PRIMARY KEY,
    name             TEXT    NOT NULL DEFAULT '',
    email            TEXT    NOT NULL DEFAULT '',
    role             TEXT,
    current_role     TEXT,
    skills           TEXT,
    summary          TEXT,
    location         TEXT,
    experience_years INTEGER,
    status           TEXT    NOT NULL DEFAULT 'New',
    is_deleted       INTEGER NOT NULL DEFAULT 0
);
"""

_SUBMISSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS client_submissions (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    position_id     TEXT    NOT NULL REFERENCES positions(id),
    candidate_id    TEXT    NOT NULL REFERENCES candidates(id),
    status          TEXT    NOT NULL DEFAULT 'Submitted',
    stage           TEXT    NOT NULL DEFAULT 'Initial Review',
    notes           TEXT    NOT NULL DEFAULT '',
    submitted_by    TEXT,
    created_at      TEXT    NOT NULL,
    UNIQUE(position_id, candidate_id)
);
"""

_ACTIVITY_TABLE = """
CREATE TABLE IF NOT EXISTS candidate_activity (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    candidate_id    TEXT    NOT NULL,
    action_type     TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    author_id       TEXT,
    created_at      TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(_POSITIONS_TABLE)
    conn.execute(_CANDIDATES_TABLE)
    conn.execute(_SUBMISSIONS_TABLE)
    conn.execute(_ACTIVITY_TABLE)
    conn.commit()
    return conn


def _json_list(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(list(value))


def upsert_position(conn: sqlite3.Connection, record: dict[str, Any]) -> None:
    """Insert or replace a position record as given (aliases kept as stored)."""
    conn.execute(
        """
        INSERT INTO positions
            (id, title, client, location, description, status, skills, requirements)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            title = excluded.title,
            client = excluded.client,
            location = excluded.location,
            description = excluded.description,
            status = excluded.status,
            skills = excluded.skills,
            requirements = excluded.requirements
        """,
        (
            str(record["id"]),
            record.get("title") or "",
            record.get("client") or "",
            record.get("location") or "",
            record.get("description") or "",
            record.get("status") or "Open",
            _json_list(record.get("skills")),
            _json_list(record.get("requirements")),
        ),
    )
    conn.commit()


def upsert_candidate(conn: sqlite3.Connection, record: dict[str, Any]) -> None:
    """Insert or replace a candidate record as given (aliases kept as stored)."""
    conn.execute(
        """
        INSERT INTO candidates
            (id, name, email, role, current_role, skills, summary, location,
             experience_years, status, is_deleted)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name = excluded.name,
            email = excluded.email,
            role = excluded.role,
            current_role = excluded.current_role,
            skills = excluded.skills,
            summary = excluded.summary,
            location = excluded.location,
            experience_years = excluded.experience_years,
            status = excluded.status,
            is_deleted = excluded.is_deleted
        """,
        (
            str(record["id"]),
            record.get("name") or "",
            record.get("email") or "",
            record.get("role"),
            record.get("current_role"),
            _json_list(record.get("skills")),
            record.get("summary"),
            record.get("location"),
            record.get("experience_years"),
            record.get("status") or "New",
            int(bool(record.get("is_deleted", False))),
        ),
    )
    conn.commit()


def fetch_position(conn: sqlite3.Connection, position_id: str) -> sqlite3.Row | None:
    """Return the stored position row, or None if no such position exists."""
    return conn.execute(
        "SELECT * FROM positions WHERE id = ?",
        (str(position_id),),
    ).fetchone()


def fetch_active_candidates(
    conn: sqlite3.Connection,
    placed_status: str = "Placed",
) -> list[sqlite3.Row]:
    """Return non-deleted candidates not in the placed status, in insertion order."""
    return conn.execute(
        """
        SELECT * FROM candidates
        WHERE is_deleted = 0
          AND (status IS NULL OR LOWER(status) != LOWER(?))
        ORDER BY rowid
        """,
        (placed_status,),
    ).fetchall()


def fetch_pipeline_candidate_ids(conn: sqlite3.Connection, position_id: str) -> set[str]:
    """Return IDs of every candidate with a submission for the position, any stage."""
    rows = conn.execute(
        "SELECT candidate_id FROM client_submissions WHERE position_id = ?",
        (str(position_id),),
    ).fetchall()
    return {row["candidate_id"] for row in rows}


def insert_submission(
    conn: sqlite3.Connection,
    submission: Submission,
    commit: bool = True,
) -> int | None:
    """Insert a pipeline entry unless (position_id, candidate_id) already exists.

    Returns the new row ID, or None if the pair was already linked. Pass
    commit=False to leave the write in the caller's transaction.
    """
    cursor = conn.execute(
        """
        INSERT INTO client_submissions
            (position_id, candidate_id, status, stage, notes, submitted_by, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(position_id, candidate_id) DO NOTHING
        """,
        (
            submission.position_id,
            submission.candidate_id,
            submission.status,
            submission.stage,
            submission.notes,
            submission.submitted_by,
            submission.created_at.isoformat(),
        ),
    )
    if commit:
        conn.commit()
    if cursor.rowcount == 0:
        return None
    return cursor.lastrowid


def fetch_submissions(conn: sqlite3.Connection, position_id: str) -> list[sqlite3.Row]:
    """Return the position's pipeline joined with candidate names, newest first."""
    return conn.execute(
        """
        SELECT s.*, c.name AS candidate_name,
               COALESCE(NULLIF(c.role, ''), c.current_role, '') AS candidate_role
        FROM client_submissions s
        LEFT JOIN candidates c ON c.id = s.candidate_id
        WHERE s.position_id = ?
        ORDER BY s.created_at DESC, s.id DESC
        """,
        (str(position_id),),
    ).fetchall()


def insert_activity(
    conn: sqlite3.Connection,
    candidate_id: str,
    action_type: str,
    description: str,
    author_id: str | None = None,
    created_at: datetime | None = None,
    commit: bool = True,
) -> int:
    """Record a candidate activity entry. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO candidate_activity
            (candidate_id, action_type, description, author_id, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            str(candidate_id),
            action_type,
            description,
            author_id,
            (created_at or datetime.now()).isoformat(),
        ),
    )
    if commit:
        conn.commit()
    return cursor.lastrowid or 0
