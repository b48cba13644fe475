"""
Candidate Recommendation Filter

Ranks candidates by the ATS score already cached on their resumes.
Nothing is rescored here: a resume only shows up once one of the
scorers has stamped it with `atsScore` / `atsScoredAt`.

Ordering:
1. atsScore, highest first
2. atsScoredAt, most recent first (ties)
3. input order (the sort is stable)
"""

from datetime import datetime, timezone
from typing import Iterable, List

from careerhub.models.ats import Resume
from careerhub.services.ats_scoring import round_half_up

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def _scored_at(resume: Resume) -> datetime:
    if resume.ats_scored_at is None:
        return _NEVER
    if resume.ats_scored_at.tzinfo is None:
        return resume.ats_scored_at.replace(tzinfo=timezone.utc)
    return resume.ats_scored_at


def latest_scored_per_candidate(resumes: Iterable[Resume]) -> List[Resume]:
    """
    Keep each candidate's most recently scored resume.

    Resumes never stamped with atsScoredAt count as the oldest. Output
    keeps the position of each candidate's first resume in the input.
    """
    latest = {}
    for position, resume in enumerate(resumes):
        if resume.ats_score is None:
            continue
        key = resume.user or f"resume:{resume.id or position}"
        current = latest.get(key)
        if current is None:
            latest[key] = (position, resume)
        elif _scored_at(resume) > _scored_at(current[1]):
            latest[key] = (current[0], resume)

    return [resume for _, resume in sorted(latest.values(), key=lambda item: item[0])]


def rank_recommended(
    resumes: Iterable[Resume],
    threshold: int = 85,
    limit: int = 20
) -> List[Resume]:
    """
    Recommended candidates for an opportunity.

    Args:
        resumes: Scored resumes (any order, several per candidate allowed)
        threshold: Minimum cached atsScore to recommend
        limit: Maximum number of candidates returned

    Returns:
        One resume per candidate, best score first
    """
    candidates = [
        resume for resume in latest_scored_per_candidate(resumes)
        if resume.ats_score >= threshold
    ]
    candidates.sort(key=_scored_at, reverse=True)
    candidates.sort(key=lambda resume: resume.ats_score, reverse=True)
    return candidates[:limit]


def average_ats_score(resumes: List[Resume]) -> int:
    """Half-up rounded mean score; unscored resumes count as 0."""
    if not resumes:
        return 0
    return round_half_up(sum(resume.ats_score or 0 for resume in resumes) / len(resumes))
