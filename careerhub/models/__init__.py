"""
Models module - Pydantic models for the documents the ATS engine reads.

These models are used for:
- Validating MongoDB documents before scoring
- Internal data transfer between services and the scoring engine

API request/response contracts live in careerhub.schemas.
"""

from careerhub.models.ats import (
    EducationEntry,
    ExperienceEntry,
    ExperienceLevel,
    FormatRequirements,
    Opportunity,
    OpportunityScoreResult,
    PersonalInfo,
    Resume,
    ScoreResult,
    ScoringRubric,
    WeightedKeyword,
    WeightedSkill,
)

__all__ = [
    "EducationEntry",
    "ExperienceEntry",
    "ExperienceLevel",
    "FormatRequirements",
    "Opportunity",
    "OpportunityScoreResult",
    "PersonalInfo",
    "Resume",
    "ScoreResult",
    "ScoringRubric",
    "WeightedKeyword",
    "WeightedSkill",
]
