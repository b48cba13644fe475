"""
Candidate Routes

GET /candidates/opportunity/{opportunity_id} - Applicants with screening scores (recruiter only)
GET /candidates/{user_id}/ats-summary - Candidate's resume scores (recruiter/admin)
"""

from fastapi import APIRouter, Depends

from careerhub.core.auth import get_current_recruiter, get_current_staff
from careerhub.services.ats_service import AtsService, get_ats_service
from careerhub.schemas.schemas import OpportunityApplicantsResponse, CandidateAtsSummaryResponse, ErrorResponse

router = APIRouter(
    prefix="/candidates",
    tags=["Candidates"],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)


@router.get("/opportunity/{opportunity_id}", response_model=OpportunityApplicantsResponse)
def opportunity_applicants(
    opportunity_id: str,
    recruiter: dict = Depends(get_current_recruiter),
    service: AtsService = Depends(get_ats_service)
):
    """
    Get applicants of an opportunity, newest first.

    Each applicant's latest resume is screened against the opportunity
    (skills, experience level, education, completeness) and the
    screening score is saved on the resume.
    """
    return service.opportunity_applicants(recruiter, opportunity_id)


@router.get("/{user_id}/ats-summary", response_model=CandidateAtsSummaryResponse)
def candidate_ats_summary(
    user_id: str,
    staff: dict = Depends(get_current_staff),
    service: AtsService = Depends(get_ats_service)
):
    """Get a candidate's resumes with their cached ATS scores and the average."""
    return service.candidate_ats_summary(user_id)
