"""Rule-based relevance scoring of candidates against one position.

Score range: 0-100 (clamped, rounded half up). Component points from
ScoringConfig, applied in this order:

  title/role   35 exact match, else token overlap x 30
  skills       matched required skills / required skills x 40
  location     20 on containment, else 15 when both are remote
  seniority    5 for senior titles with a senior or experienced candidate

The exact/overlap title caps differ (35 vs 30); keep them that way.
"""

import logging
import math
import re
from collections.abc import Iterable

from src.core.config import MatchingConfig, ScoringConfig
from src.core.schemas import CandidateProfile, MatchBreakdown, PositionProfile, ScoredMatch
from src.pipeline.matcher import build_filters, run_filter_chain

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]|_")


def normalize_text(text: str) -> str:
    """Lower-case, strip punctuation and collapse whitespace."""
    return " ".join(_PUNCTUATION.sub("", (text or "").lower()).split())


def title_score(title: str, role: str, config: ScoringConfig) -> float:
    """Score a normalized candidate role against a normalized position title."""
    if role and role == title:
        return config.title_exact_points
    title_tokens = set(title.split())
    if not title_tokens:
        return 0.0
    overlap = title_tokens & set(role.split())
    return len(overlap) / len(title_tokens) * config.title_overlap_points


def skill_score(
    required: list[str],
    candidate_skills: Iterable[str],
    summary: str,
    config: ScoringConfig,
) -> tuple[float, list[str]]:
    """Score skill coverage, returning (points, matched required skills).

    A required skill matches when it and a candidate skill contain one another
    (either direction), or failing that when it appears in the summary. Each
    required skill counts once however many ways it matched.
    """
    if not required:
        return 0.0, []

    skills = [s.strip().lower() for s in candidate_skills if s and s.strip()]
    summary_lower = (summary or "").lower()

    matched: list[str] = []
    for req in required:
        if any(req in s or s in req for s in skills):
            matched.append(req)
        elif summary_lower and req in summary_lower:
            matched.append(req)

    return len(matched) / len(required) * config.skill_points, matched


def location_score(position_location: str, candidate_location: str, config: ScoringConfig) -> float:
    """Score location containment, falling back to a remote/remote bonus."""
    pos = (position_location or "").strip().lower()
    cand = (candidate_location or "").strip().lower()
    if pos and cand and (pos in cand or cand in pos):
        return config.location_points
    if "remote" in pos and "remote" in cand:
        return config.remote_points
    return 0.0


def seniority_score(
    title: str,
    role: str,
    experience_years: int | None,
    config: ScoringConfig,
) -> float:
    """Bonus for senior positions matched by a senior or experienced candidate."""
    if "senior" not in title:
        return 0.0
    experienced = experience_years is not None and experience_years > config.seniority_min_years
    if "senior" in role or experienced:
        return config.seniority_points
    return 0.0


def score_candidate(
    position: PositionProfile,
    candidate: CandidateProfile,
    config: ScoringConfig | None = None,
) -> ScoredMatch:
    """Score a single candidate against a position.

    Args:
        position: Canonical position profile (skills already merged).
        candidate: Canonical candidate profile (role already resolved).
        config: Component weights. None uses the defaults.

    Returns:
        ScoredMatch wrapping the candidate with an integer score 0-100.
    """
    config = config or ScoringConfig()
    title = normalize_text(position.title)
    role = normalize_text(candidate.role)

    t_score = title_score(title, role, config)
    s_score, matched = skill_score(position.skills, candidate.skills, candidate.summary, config)
    l_score = location_score(position.location, candidate.location, config)
    r_score = seniority_score(title, role, candidate.experience_years, config)

    total = max(0.0, min(100.0, t_score + s_score + l_score + r_score))

    return ScoredMatch(
        candidate=candidate,
        score=math.floor(total + 0.5),
        breakdown=MatchBreakdown(
            title_score=t_score,
            skill_score=s_score,
            location_score=l_score,
            seniority_score=r_score,
            matched_skills=matched,
        ),
    )


def rank(
    position: PositionProfile,
    candidates: list[CandidateProfile],
    exclusion_set: Iterable[str] = (),
    scoring: ScoringConfig | None = None,
    matching: MatchingConfig | None = None,
) -> list[ScoredMatch]:
    """Rank candidates for a position.

    Excluded candidates are removed before scoring. Survivors scoring above
    ``matching.min_score`` are sorted by score descending, ties keeping their
    input order, and truncated to ``matching.max_results``.
    """
    matching = matching or MatchingConfig()
    pool = run_filter_chain(candidates, build_filters(exclusion_set))

    scored = [score_candidate(position, c, scoring) for c in pool]
    kept = [s for s in scored if s.score > matching.min_score]
    kept.sort(key=lambda s: s.score, reverse=True)

    logger.debug(
        "Ranked position '%s': %d in pool, %d scored, %d above threshold",
        position.id, len(candidates), len(pool), len(kept),
    )
    return kept[:matching.max_results]
