"""
ATS Routes

GET  /ats/parameters - List own scoring rubrics (recruiter only)
POST /ats/parameters - Create scoring rubric (recruiter only)
PUT  /ats/parameters/{parameter_id} - Update own scoring rubric (recruiter only)
POST /ats/calculate-score - Score a resume against a rubric
POST /ats/calculate-opportunity-score - Score a resume against an opportunity
GET  /ats/recommended-candidates/{opportunity_id} - Candidates scoring 85+ (recruiter only)
"""

from fastapi import APIRouter, Depends
from typing import List

from careerhub.core.auth import get_current_user, get_current_recruiter
from careerhub.services.ats_service import AtsService, get_ats_service
from careerhub.schemas.schemas import (
    RubricCreate, RubricUpdate, RubricResponse,
    RubricScoreRequest, OpportunityScoreRequest, ScoreResponse, OpportunityScoreResponse,
    RecommendedCandidatesResponse, ErrorResponse
)

router = APIRouter(
    prefix="/ats",
    tags=["ATS"],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse}
    }
)


@router.get("/parameters", response_model=List[RubricResponse])
def list_parameters(
    recruiter: dict = Depends(get_current_recruiter),
    service: AtsService = Depends(get_ats_service)
):
    """Get the caller's ATS parameters (scoring rubrics)."""
    return service.list_rubrics(recruiter)


@router.post("/parameters", response_model=RubricResponse, status_code=201)
def create_parameters(
    data: RubricCreate,
    recruiter: dict = Depends(get_current_recruiter),
    service: AtsService = Depends(get_ats_service)
):
    """
    Create a scoring rubric.

    New rubrics are active unless `active: false` is sent. The most recently
    updated active rubric is the one used for opportunity scoring.
    """
    return service.create_rubric(recruiter, data.to_document())


@router.put("/parameters/{parameter_id}", response_model=RubricResponse)
def update_parameters(
    parameter_id: str,
    update: RubricUpdate,
    recruiter: dict = Depends(get_current_recruiter),
    service: AtsService = Depends(get_ats_service)
):
    """Update a rubric. Only provided fields change. Only the owner can update."""
    return service.update_rubric(recruiter, parameter_id, update.to_changes())


@router.post("/calculate-score", response_model=ScoreResponse)
def calculate_score(
    request: RubricScoreRequest,
    user: dict = Depends(get_current_user),
    service: AtsService = Depends(get_ats_service)
):
    """
    Score a resume against a rubric.

    Students can only score their own resumes. The score is saved
    on the resume, replacing any previous one.
    """
    return service.score_against_rubric(user, request.resume_id, request.parameter_id)


@router.post("/calculate-opportunity-score", response_model=OpportunityScoreResponse)
def calculate_opportunity_score(
    request: OpportunityScoreRequest,
    user: dict = Depends(get_current_user),
    service: AtsService = Depends(get_ats_service)
):
    """
    Score a resume against an opportunity.

    Uses the opportunity owner's active rubric when one exists, otherwise
    a default experience/education check. The score is saved on the resume.
    """
    return service.score_against_opportunity(user, request.resume_id, request.opportunity_id)


@router.get("/recommended-candidates/{opportunity_id}", response_model=RecommendedCandidatesResponse)
def recommended_candidates(
    opportunity_id: str,
    recruiter: dict = Depends(get_current_recruiter),
    service: AtsService = Depends(get_ats_service)
):
    """
    Candidates recommended for an opportunity (cached ATS score 85+).

    Reads scores already stored on resumes; nothing is rescored.
    Only the opportunity owner can view.
    """
    return service.recommended_candidates(recruiter, opportunity_id)
