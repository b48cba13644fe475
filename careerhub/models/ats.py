"""
ATS Domain Models

Internal representations of the documents the scoring engine reads.
MongoDB stores fields in camelCase; every model accepts either the
stored alias or the Python attribute name.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class DocumentModel(BaseModel):
    """Base for models loaded from MongoDB documents."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow"
    )


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _strings_only(value):
    """Null list -> [], non-string entries (e.g. null) dropped."""
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return value


# ============================================================
# RESUME
# ============================================================

class PersonalInfo(DocumentModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    summary: Optional[str] = None


class ExperienceEntry(DocumentModel):
    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_dates(cls, value):
        return _blank_to_none(value)

    @field_validator("current", mode="before")
    @classmethod
    def _null_current(cls, value):
        return bool(value)


class EducationEntry(DocumentModel):
    institution: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    gpa: Optional[float] = None
    description: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_dates(cls, value):
        return _blank_to_none(value)


class Resume(DocumentModel):
    id: Optional[str] = Field(None, alias="_id")
    user: Optional[str] = None
    title: Optional[str] = None
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    skills: List[str] = []
    experience: List[ExperienceEntry] = []
    education: List[EducationEntry] = []
    last_updated: Optional[datetime] = None
    ats_score: Optional[int] = None
    ats_scored_at: Optional[datetime] = None

    @field_validator("personal_info", mode="before")
    @classmethod
    def _null_personal_info(cls, value):
        return {} if value is None else value

    @field_validator("skills", mode="before")
    @classmethod
    def _clean_skills(cls, value):
        return _strings_only(value)

    @field_validator("experience", "education", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    def has_contact_info(self) -> bool:
        """Both email and phone are present and non-empty."""
        return bool(self.personal_info.email and self.personal_info.phone)


# ============================================================
# SCORING RUBRIC ("ATS parameters")
# ============================================================

class WeightedSkill(DocumentModel):
    skill: str
    weight: Optional[Number] = None


class WeightedKeyword(DocumentModel):
    keyword: str
    weight: Optional[Number] = None


class FormatRequirements(DocumentModel):
    requires_contact_info: bool = False
    requires_education: bool = False


class ScoringRubric(DocumentModel):
    id: Optional[str] = Field(None, alias="_id")
    recruiter: Optional[str] = None
    name: Optional[str] = None
    required_skills: List[WeightedSkill] = []
    required_experience: Optional[Number] = None
    required_education: Optional[str] = None
    keywords: List[WeightedKeyword] = []
    format_requirements: Optional[FormatRequirements] = None
    active: bool = True


# ============================================================
# OPPORTUNITY
# ============================================================

class ExperienceLevel(str, Enum):
    entry = "Entry-Level"
    intermediate = "Intermediate"
    advanced = "Advanced"


class Opportunity(DocumentModel):
    id: Optional[str] = Field(None, alias="_id")
    organization: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    skills_required: List[str] = []
    # Kept as a plain string: unknown levels still score (at half credit)
    experience_level: Optional[str] = None

    @field_validator("skills_required", mode="before")
    @classmethod
    def _clean_skills(cls, value):
        return _strings_only(value)


# ============================================================
# SCORE RESULTS (transient, never stored as documents)
# ============================================================

class ScoreResult(BaseModel):
    score: int
    matched: Number
    total: Number


class OpportunityScoreResult(ScoreResult):
    opportunity_title: str
    has_ats_parameters: bool
    recommended_candidate: bool
