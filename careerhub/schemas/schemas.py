"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
The API speaks camelCase JSON (the platform's frontend convention);
Python code uses the snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any
from datetime import datetime

from careerhub.models.ats import Number


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ATS PARAMETER (RUBRIC) SCHEMAS
# ============================================================

class WeightedSkillIn(CamelModel):
    skill: str = Field(..., min_length=1)
    weight: Optional[Number] = Field(None, ge=0)


class WeightedKeywordIn(CamelModel):
    keyword: str = Field(..., min_length=1)
    weight: Optional[Number] = Field(None, ge=0)


class FormatRequirementsIn(CamelModel):
    requires_contact_info: bool = False
    requires_education: bool = False


class RubricCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    required_skills: List[WeightedSkillIn] = []
    required_experience: Optional[Number] = Field(None, ge=0)
    required_education: Optional[str] = None
    keywords: List[WeightedKeywordIn] = []
    format_requirements: Optional[FormatRequirementsIn] = None
    active: Optional[bool] = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class RubricUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    required_skills: Optional[List[WeightedSkillIn]] = None
    required_experience: Optional[Number] = Field(None, ge=0)
    required_education: Optional[str] = None
    keywords: Optional[List[WeightedKeywordIn]] = None
    format_requirements: Optional[FormatRequirementsIn] = None
    active: Optional[bool] = None

    def to_changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class RubricResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id")
    recruiter: str
    name: Optional[str] = None
    required_skills: List[WeightedSkillIn] = []
    required_experience: Optional[Number] = None
    required_education: Optional[str] = None
    keywords: List[WeightedKeywordIn] = []
    format_requirements: Optional[FormatRequirementsIn] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# SCORING SCHEMAS
# ============================================================

class RubricScoreRequest(CamelModel):
    resume_id: str
    parameter_id: str


class OpportunityScoreRequest(CamelModel):
    resume_id: str
    opportunity_id: str


class ScoreDetails(CamelModel):
    matched: Number
    total: Number


class OpportunityScoreDetails(ScoreDetails):
    opportunity_title: str
    # Explicit alias: to_camel would give "hasAtsParameters"
    has_ats_parameters: bool = Field(..., alias="hasATSParameters")
    recommended_candidate: bool


class ScoreResponse(CamelModel):
    score: int
    details: ScoreDetails


class OpportunityScoreResponse(CamelModel):
    score: int
    details: OpportunityScoreDetails


# ============================================================
# CANDIDATE SCHEMAS
# ============================================================

class CandidateProfile(CamelModel):
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    skills: List[Any] = []
    education: List[Any] = []
    experience: List[Any] = []


class OpportunityRef(CamelModel):
    id: str
    title: Optional[str] = None


class RecommendedResume(CamelModel):
    id: str
    title: Optional[str] = None
    ats_score: int


class RecommendedCandidate(CamelModel):
    candidate_id: Optional[str] = None
    candidate: CandidateProfile
    resume: RecommendedResume
    match_score: int


class RecommendedCandidatesResponse(CamelModel):
    opportunity: OpportunityRef
    recommended_candidates: List[RecommendedCandidate]
    total_recommended: int


class ApplicationView(CamelModel):
    id: str
    status: Optional[str] = None
    applied_date: Optional[datetime] = None
    cover_letter: Optional[str] = None


class ApplicantResume(CamelModel):
    id: str
    title: Optional[str] = None
    ats_score: int
    skills: List[Any] = []
    experience: List[Any] = []
    education: List[Any] = []


class ApplicantProfile(CandidateProfile):
    resume: Optional[ApplicantResume] = None


class Applicant(CamelModel):
    application: ApplicationView
    candidate: ApplicantProfile


class OpportunityDetail(OpportunityRef):
    description: Optional[str] = None
    skills_required: List[str] = []


class OpportunityApplicantsResponse(CamelModel):
    opportunity: OpportunityDetail
    applicants: List[Applicant]


class ResumeScoreSummary(CamelModel):
    id: str
    title: Optional[str] = None
    ats_score: int
    last_updated: Optional[datetime] = None


class CandidateAtsSummaryResponse(CamelModel):
    candidate: CandidateProfile
    resumes: List[ResumeScoreSummary]
    # Explicit alias: to_camel would give "averageAtsScore"
    average_ats_score: int = Field(..., alias="averageATSScore")


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ErrorResponse(BaseModel):
    detail: str
