"""
ATS Scoring Engine

PURPOSE:
Compute a 0-100 compatibility score between a candidate's resume and
either a recruiter rubric or an opportunity. Pure functions: no I/O,
callers persist the score.

HOW IT WORKS:
Every criterion adds its weight to `total` and, when the resume satisfies
it, to `matched`. The score is the half-up rounded percentage
matched/total. Three scorers share this accumulator:

1. score_against_rubric       - recruiter rubric only
2. score_against_opportunity  - opportunity requirements, plus either the
                                owner's active rubric (RubricStrategy) or a
                                fixed fallback (DefaultStrategy)
3. screen_applicant           - applicant list screening used by recruiters

The experience criteria differ: RubricStrategy counts
experience entries, DefaultStrategy and screening sum dated year spans.
"""

import math
import re
from datetime import datetime, timezone
from typing import List, Optional

from careerhub.models.ats import (
    ExperienceLevel,
    Number,
    Opportunity,
    OpportunityScoreResult,
    Resume,
    ScoreResult,
    ScoringRubric,
)

RECOMMENDED_SCORE = 85

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

# Opportunity-based weights
OPPORTUNITY_SKILL_WEIGHT = 10
RUBRIC_EXPERIENCE_WEIGHT = 8
RUBRIC_EDUCATION_WEIGHT = 6
RUBRIC_EDUCATION_PARTIAL = 3
RUBRIC_KEYWORD_DEFAULT_WEIGHT = 2
RUBRIC_CONTACT_WEIGHT = 3
RUBRIC_FORMAT_EDUCATION_WEIGHT = 3
DEFAULT_EXPERIENCE_WEIGHT = 5
DEFAULT_EXPERIENCE_PARTIAL = 3
DEFAULT_EXPERIENCE_MINIMUM = 1
DEFAULT_FULL_CREDIT_YEARS = 3
DEFAULT_PARTIAL_CREDIT_YEARS = 1
DEFAULT_EDUCATION_WEIGHT = 3
CONTACT_EMAIL_WEIGHT = 2
MAX_OPPORTUNITY_KEYWORDS = 10

# Screening weights
SCREENING_SKILLS_WEIGHT = 40
SCREENING_EXPERIENCE_WEIGHT = 25
SCREENING_EDUCATION_WEIGHT = 15
SCREENING_COMPLETENESS_WEIGHT = 20

EXPERIENCE_LEVEL_RANGES = {
    ExperienceLevel.entry.value: (0, 2),
    ExperienceLevel.intermediate.value: (2, 5),
    ExperienceLevel.advanced.value: (5, math.inf),
}

SCORE_FIELDS = {"ats_score", "ats_scored_at"}

_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)


# ============================================================
# HELPERS
# ============================================================

def round_half_up(value: float) -> int:
    """Round .5 upwards (2.5 -> 3), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def percentage(matched: Number, total: Number) -> int:
    return round_half_up(matched / total * 100)


def flatten_resume_text(resume: Resume) -> str:
    """
    Lower-cased JSON serialization of the whole resume document.

    Keyword criteria match as plain substrings of this text, so a keyword
    found in any field (title, descriptions, even field names) counts.
    The cached score fields are left out so rescoring is stable.
    """
    return resume.model_dump_json(
        by_alias=True,
        exclude_none=True,
        exclude=SCORE_FIELDS
    ).lower()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _span_years(start: datetime, end: datetime) -> float:
    seconds = (_as_utc(end) - _as_utc(start)).total_seconds()
    return max(0.0, seconds / SECONDS_PER_YEAR)


def total_experience_years(resume: Resume, now: Optional[datetime] = None) -> float:
    """
    Sum of dated experience spans in 365-day years.

    Current roles end at `now`. Entries without a start date, or past
    roles without an end date, contribute nothing.
    """
    now = now or datetime.now(timezone.utc)
    years = 0.0
    for entry in resume.experience:
        end = now if entry.current else entry.end_date
        if entry.start_date is None or end is None:
            continue
        years += _span_years(entry.start_date, end)
    return years


def screening_experience_years(resume: Resume, now: Optional[datetime] = None) -> float:
    """Like total_experience_years, but a missing end date means "until now"."""
    now = now or datetime.now(timezone.utc)
    years = 0.0
    for entry in resume.experience:
        if entry.start_date is None:
            continue
        end = now if entry.current else (entry.end_date or now)
        years += _span_years(entry.start_date, end)
    return years


def extract_opportunity_keywords(opportunity: Opportunity) -> List[str]:
    """
    Implicit keywords from the opportunity title and description.

    Lower-cased, punctuation stripped, words longer than 3 characters,
    de-duplicated in encounter order, first 10 kept. Stopwords are not
    filtered.
    """
    text = f"{opportunity.title or ''} {opportunity.description or ''}".lower()
    words = _PUNCTUATION.sub("", text).split()

    keywords = []
    seen = set()
    for word in words:
        if len(word) <= 3 or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
        if len(keywords) == MAX_OPPORTUNITY_KEYWORDS:
            break
    return keywords


class ScoreTally:
    """Running matched/total accumulator shared by all criteria."""

    def __init__(self):
        self.matched: Number = 0
        self.total: Number = 0

    def add(self, weight: Number, earned: Number = 0):
        self.total += weight
        self.matched += earned

    def check(self, weight: Number, satisfied: bool):
        self.add(weight, weight if satisfied else 0)


# ============================================================
# RUBRIC-BASED SCORING
# ============================================================

def score_against_rubric(resume: Resume, rubric: ScoringRubric) -> ScoreResult:
    """
    Score a resume against a recruiter rubric.

    Skills match exactly (case-sensitive); keywords match as
    case-insensitive substrings anywhere in the resume. Contact info and
    education each add 1 when the rubric's format requirements ask for
    them. A rubric with no criteria falls back to 5/10 (score 50).
    """
    tally = ScoreTally()
    resume_skills = set(resume.skills)

    for required in rubric.required_skills:
        tally.check(required.weight or 1, required.skill in resume_skills)

    if rubric.keywords:
        resume_text = flatten_resume_text(resume)
        for keyword in rubric.keywords:
            tally.check(keyword.weight or 1, keyword.keyword.lower() in resume_text)

    formats = rubric.format_requirements
    if formats:
        if formats.requires_contact_info:
            tally.check(1, resume.has_contact_info())
        if formats.requires_education:
            tally.check(1, bool(resume.education))

    if tally.total == 0:
        tally.total, tally.matched = 10, 5

    return ScoreResult(
        score=percentage(tally.matched, tally.total),
        matched=tally.matched,
        total=tally.total
    )


# ============================================================
# OPPORTUNITY-BASED SCORING STRATEGIES
# ============================================================

class RubricStrategy:
    """Criteria taken from the opportunity owner's active rubric."""

    uses_rubric = True

    def __init__(self, rubric: ScoringRubric):
        self.rubric = rubric

    def apply(self, resume: Resume, resume_text: str, tally: ScoreTally):
        rubric = self.rubric

        # Experience is the number of entries, not their duration
        required_years = rubric.required_experience
        if required_years:
            entries = len(resume.experience)
            if entries >= required_years:
                tally.add(RUBRIC_EXPERIENCE_WEIGHT, RUBRIC_EXPERIENCE_WEIGHT)
            else:
                partial = round_half_up(entries / required_years * RUBRIC_EXPERIENCE_WEIGHT)
                tally.add(RUBRIC_EXPERIENCE_WEIGHT, partial)

        if rubric.required_education:
            wanted = rubric.required_education.lower()
            if any(edu.degree and wanted in edu.degree.lower() for edu in resume.education):
                earned = RUBRIC_EDUCATION_WEIGHT
            elif resume.education:
                earned = RUBRIC_EDUCATION_PARTIAL
            else:
                earned = 0
            tally.add(RUBRIC_EDUCATION_WEIGHT, earned)

        for keyword in rubric.keywords:
            weight = keyword.weight or RUBRIC_KEYWORD_DEFAULT_WEIGHT
            tally.check(weight, keyword.keyword.lower() in resume_text)

        formats = rubric.format_requirements
        if formats:
            if formats.requires_contact_info:
                tally.check(RUBRIC_CONTACT_WEIGHT, resume.has_contact_info())
            if formats.requires_education:
                tally.check(RUBRIC_FORMAT_EDUCATION_WEIGHT, bool(resume.education))


class DefaultStrategy:
    """Fallback criteria when the opportunity owner has no active rubric."""

    uses_rubric = False

    def __init__(self, now: Optional[datetime] = None):
        self.now = now

    def apply(self, resume: Resume, resume_text: str, tally: ScoreTally):
        # Both criteria only count when the resume has entries to judge
        if resume.experience:
            years = total_experience_years(resume, self.now)
            if years >= DEFAULT_FULL_CREDIT_YEARS:
                earned = DEFAULT_EXPERIENCE_WEIGHT
            elif years >= DEFAULT_PARTIAL_CREDIT_YEARS:
                earned = DEFAULT_EXPERIENCE_PARTIAL
            else:
                earned = DEFAULT_EXPERIENCE_MINIMUM
            tally.add(DEFAULT_EXPERIENCE_WEIGHT, earned)

        if resume.education:
            tally.add(DEFAULT_EDUCATION_WEIGHT, DEFAULT_EDUCATION_WEIGHT)


def select_strategy(rubric: Optional[ScoringRubric], now: Optional[datetime] = None):
    if rubric is not None:
        return RubricStrategy(rubric)
    return DefaultStrategy(now)


def score_against_opportunity(
    resume: Resume,
    opportunity: Opportunity,
    rubric: Optional[ScoringRubric] = None,
    now: Optional[datetime] = None
) -> OpportunityScoreResult:
    """
    Score a resume against an opportunity.

    Args:
        resume: Candidate resume
        opportunity: Target opportunity
        rubric: Active rubric of the opportunity's owner, if any
        now: Reference time for current roles (defaults to UTC now)

    Returns:
        OpportunityScoreResult, score capped at 100
    """
    tally = ScoreTally()
    resume_skills = set(resume.skills)
    resume_text = flatten_resume_text(resume)

    for skill in opportunity.skills_required:
        tally.check(OPPORTUNITY_SKILL_WEIGHT, skill in resume_skills)

    strategy = select_strategy(rubric, now)
    strategy.apply(resume, resume_text, tally)

    for keyword in extract_opportunity_keywords(opportunity):
        tally.check(1, keyword in resume_text)

    tally.check(CONTACT_EMAIL_WEIGHT, bool(resume.personal_info.email))

    if tally.total == 0:
        tally.total, tally.matched = 10, 3

    score = min(100, percentage(tally.matched, tally.total))
    return OpportunityScoreResult(
        score=score,
        matched=tally.matched,
        total=tally.total,
        opportunity_title=opportunity.title or "",
        has_ats_parameters=strategy.uses_rubric,
        recommended_candidate=score >= RECOMMENDED_SCORE
    )


# ============================================================
# APPLICANT SCREENING
# ============================================================

def experience_level_match(level: str, years: float) -> float:
    """
    Fit (0-1) of a candidate's years against an experience level range.

    Below the range loses 0.2 per missing year, above it 0.1 per extra
    year. Unknown levels get 0.5.
    """
    bounds = EXPERIENCE_LEVEL_RANGES.get(level)
    if bounds is None:
        return 0.5

    low, high = bounds
    if low <= years <= high:
        return 1.0
    if years < low:
        return max(0.0, 1 - (low - years) * 0.2)
    return max(0.0, 1 - (years - high) * 0.1)


def screen_applicant(
    resume: Resume,
    opportunity: Opportunity,
    now: Optional[datetime] = None
) -> int:
    """Quick 0-100 screening score for an applicant list."""
    earned = 0.0
    available = 0.0

    required = {skill.lower() for skill in opportunity.skills_required}
    owned = {skill.lower() for skill in resume.skills}
    earned += len(required & owned) / max(len(required), 1) * SCREENING_SKILLS_WEIGHT
    available += SCREENING_SKILLS_WEIGHT

    if opportunity.experience_level:
        years = screening_experience_years(resume, now)
        earned += experience_level_match(opportunity.experience_level, years) * SCREENING_EXPERIENCE_WEIGHT
        available += SCREENING_EXPERIENCE_WEIGHT

    if resume.education:
        earned += SCREENING_EDUCATION_WEIGHT
        available += SCREENING_EDUCATION_WEIGHT

    completed = [resume.has_contact_info(), bool(resume.skills), bool(resume.experience)]
    earned += sum(completed) / len(completed) * SCREENING_COMPLETENESS_WEIGHT
    available += SCREENING_COMPLETENESS_WEIGHT

    return min(100, percentage(earned, available))
