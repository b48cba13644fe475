"""
ATS Service - fetch, authorize, score, persist.

Routes hand a caller identity ({"user_id", "role"}) and raw ids to this
service. It loads the documents, checks ownership, runs the pure scorers
from ats_scoring and writes the score back onto the resume.

Ownership rules:
- Students may only score their own resumes (recruiters/admins any)
- Recruiters may only read candidates for opportunities they own
- Recruiters may only edit their own rubrics
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from careerhub.core.config import get_settings
from careerhub.core.exceptions import ForbiddenError, NotFoundError, StoredDocumentError
from careerhub.core.logging import get_logger
from careerhub.models.ats import Opportunity, Resume, ScoringRubric
from careerhub.services.ats_scoring import (
    score_against_opportunity,
    score_against_rubric,
    screen_applicant,
)
from careerhub.services.mongo_service import (
    ApplicationService,
    OpportunityService,
    ResumeService,
    RubricService,
    UserService,
)
from careerhub.services.recommendation_service import average_ats_score, rank_recommended

logger = get_logger(__name__)

CANDIDATE_FIELDS = ("firstName", "lastName", "email", "avatar")
CANDIDATE_LIST_FIELDS = ("skills", "education", "experience")


def _load(model, doc: dict, label: str):
    """Validate a stored document; one that no longer fits its model is a server error."""
    try:
        return model.model_validate(doc)
    except ValidationError as e:
        logger.error(f"Stored {label} {doc.get('_id')} failed validation: {e.error_count()} invalid field(s)")
        raise StoredDocumentError()


def _load_valid(model, docs: List[dict], label: str) -> list:
    """Validate many stored documents, skipping (and logging) the ones that fail."""
    loaded = []
    for doc in docs:
        try:
            loaded.append(model.model_validate(doc))
        except ValidationError as e:
            logger.warning(f"Skipping stored {label} {doc.get('_id')}: {e.error_count()} invalid field(s)")
    return loaded


def candidate_summary(user: Optional[dict], user_id: Optional[str]) -> dict:
    """Public profile fields of a candidate."""
    user = user or {}
    summary = {"id": user.get("_id", user_id)}
    for field in CANDIDATE_FIELDS:
        summary[field] = user.get(field)
    for field in CANDIDATE_LIST_FIELDS:
        summary[field] = user.get(field) or []
    return summary


class AtsService:
    """
    Orchestrates ATS scoring against MongoDB.

    Collaborators default to the configured database; pass them in to
    run against another one.
    """

    def __init__(
        self,
        resume_service: ResumeService = None,
        rubric_service: RubricService = None,
        opportunity_service: OpportunityService = None,
        application_service: ApplicationService = None,
        user_service: UserService = None,
        settings=None
    ):
        self.resume_service = resume_service or ResumeService()
        self.rubric_service = rubric_service or RubricService()
        self.opportunity_service = opportunity_service or OpportunityService()
        self.application_service = application_service or ApplicationService()
        self.user_service = user_service or UserService()
        self.settings = settings or get_settings()

    # ------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------

    def _get_resume(self, resume_id: str, caller: dict) -> Resume:
        doc = self.resume_service.get_by_id(resume_id)
        if not doc:
            raise NotFoundError("Resume not found")

        resume = _load(Resume, doc, "resume")
        if caller["role"] == "student" and resume.user != caller["user_id"]:
            raise ForbiddenError()
        return resume

    def _get_rubric(self, rubric_id: str) -> ScoringRubric:
        doc = self.rubric_service.get_by_id(rubric_id)
        if not doc:
            raise NotFoundError("ATS parameter not found")
        return _load(ScoringRubric, doc, "ATS parameter")

    def _get_opportunity(self, opportunity_id: str) -> Opportunity:
        doc = self.opportunity_service.get_by_id(opportunity_id)
        if not doc:
            raise NotFoundError("Opportunity not found")
        return _load(Opportunity, doc, "opportunity")

    def _get_owned_opportunity(self, opportunity_id: str, caller: dict) -> Opportunity:
        opportunity = self._get_opportunity(opportunity_id)
        if opportunity.organization != caller["user_id"]:
            raise ForbiddenError()
        return opportunity

    # ------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------

    def score_against_rubric(self, caller: dict, resume_id: str, rubric_id: str) -> dict:
        """
        Score a resume against a rubric and cache the score on the resume.

        Returns:
            {"score", "details": {"matched", "total"}}
        """
        resume = self._get_resume(resume_id, caller)
        rubric = self._get_rubric(rubric_id)

        result = score_against_rubric(resume, rubric)
        self.resume_service.set_ats_score(resume_id, result.score)

        logger.info(f"Rubric score {result.score} for resume {resume_id} (parameter {rubric_id})")
        return {
            "score": result.score,
            "details": {"matched": result.matched, "total": result.total}
        }

    def score_against_opportunity(self, caller: dict, resume_id: str, opportunity_id: str) -> dict:
        """
        Score a resume against an opportunity and cache the score.

        The opportunity owner's active rubric, when there is one, adds
        its experience/education/keyword/format criteria.
        """
        resume = self._get_resume(resume_id, caller)
        opportunity = self._get_opportunity(opportunity_id)

        rubric = None
        if opportunity.organization:
            rubric_doc = self.rubric_service.get_active_for_recruiter(opportunity.organization)
            if rubric_doc:
                rubric = _load(ScoringRubric, rubric_doc, "ATS parameter")

        result = score_against_opportunity(resume, opportunity, rubric)
        self.resume_service.set_ats_score(resume_id, result.score)

        logger.info(
            f"Opportunity score {result.score} for resume {resume_id} "
            f"(opportunity {opportunity_id}, rubric={'yes' if rubric else 'no'})"
        )
        return {
            "score": result.score,
            "details": {
                "matched": result.matched,
                "total": result.total,
                "opportunityTitle": result.opportunity_title,
                "hasATSParameters": result.has_ats_parameters,
                "recommendedCandidate": result.recommended_candidate
            }
        }

    # ------------------------------------------------------------
    # Recruiter views
    # ------------------------------------------------------------

    def recommended_candidates(self, caller: dict, opportunity_id: str) -> dict:
        """Candidates whose latest cached score clears the recommendation threshold."""
        opportunity = self._get_owned_opportunity(opportunity_id, caller)

        threshold = self.settings.recommendation_threshold
        limit = self.settings.recommendation_limit
        docs = self.resume_service.list_recommended(threshold, limit)
        ranked = rank_recommended(
            _load_valid(Resume, docs, "resume"),
            threshold=threshold,
            limit=limit
        )
        users = self.user_service.get_many([resume.user for resume in ranked if resume.user])

        recommendations = [
            {
                "candidateId": resume.user,
                "candidate": candidate_summary(users.get(resume.user), resume.user),
                "resume": {"id": resume.id, "title": resume.title, "atsScore": resume.ats_score},
                "matchScore": resume.ats_score
            }
            for resume in ranked
        ]
        return {
            "opportunity": {"id": opportunity.id, "title": opportunity.title},
            "recommendedCandidates": recommendations,
            "totalRecommended": len(recommendations)
        }

    def opportunity_applicants(self, caller: dict, opportunity_id: str) -> dict:
        """
        Applicants of an opportunity with a fresh screening score.

        Each applicant's latest resume is screened and the score cached
        on it; applicants without a resume score 0.
        """
        opportunity = self._get_owned_opportunity(opportunity_id, caller)
        applications = self.application_service.list_for_opportunity(opportunity_id)
        students = self.user_service.get_many([a["student"] for a in applications if a.get("student")])

        applicants = []
        for application in applications:
            student_id = application.get("student")
            resume_doc = self.resume_service.latest_for_user(student_id) if student_id else None

            resume_view = None
            if resume_doc:
                resume = _load(Resume, resume_doc, "resume")
                score = screen_applicant(resume, opportunity)
                self.resume_service.set_ats_score(resume.id, score)
                resume_view = {
                    "id": resume.id,
                    "title": resume.title,
                    "atsScore": score,
                    "skills": resume_doc.get("skills") or [],
                    "experience": resume_doc.get("experience") or [],
                    "education": resume_doc.get("education") or []
                }

            candidate = candidate_summary(students.get(student_id), student_id)
            candidate["resume"] = resume_view
            applicants.append({
                "application": {
                    "id": application["_id"],
                    "status": application.get("status"),
                    "appliedDate": application.get("appliedDate"),
                    "coverLetter": application.get("coverLetter")
                },
                "candidate": candidate
            })

        logger.info(f"Screened {len(applicants)} applicants for opportunity {opportunity_id}")
        return {
            "opportunity": {
                "id": opportunity.id,
                "title": opportunity.title,
                "description": opportunity.description,
                "skillsRequired": opportunity.skills_required
            },
            "applicants": applicants
        }

    def candidate_ats_summary(self, user_id: str) -> dict:
        """A candidate's resumes with cached scores and their average."""
        user = self.user_service.get_by_id(user_id)
        if not user:
            raise NotFoundError("Candidate not found")

        docs = self.resume_service.list_for_user(user_id)
        resumes = [_load(Resume, doc, "resume") for doc in docs]
        return {
            "candidate": candidate_summary(user, user_id),
            "resumes": [
                {
                    "id": resume.id,
                    "title": resume.title,
                    "atsScore": resume.ats_score or 0,
                    "lastUpdated": resume.last_updated
                }
                for resume in resumes
            ],
            "averageATSScore": average_ats_score(resumes)
        }

    # ------------------------------------------------------------
    # Rubric management
    # ------------------------------------------------------------

    def list_rubrics(self, caller: dict) -> List[dict]:
        return self.rubric_service.list_for_recruiter(caller["user_id"])

    def create_rubric(self, caller: dict, data: Dict[str, Any]) -> dict:
        rubric = self.rubric_service.create(caller["user_id"], data)
        logger.info(f"Recruiter {caller['user_id']} created ATS parameter {rubric['_id']}")
        return rubric

    def update_rubric(self, caller: dict, rubric_id: str, changes: Dict[str, Any]) -> dict:
        existing = self.rubric_service.get_by_id(rubric_id)
        if not existing:
            raise NotFoundError("ATS parameter not found")
        if existing.get("recruiter") != caller["user_id"]:
            raise ForbiddenError()

        if not changes:
            return existing

        rubric = self.rubric_service.update(rubric_id, changes)
        logger.info(f"Recruiter {caller['user_id']} updated ATS parameter {rubric_id}: {sorted(changes)}")
        return rubric


def get_ats_service() -> AtsService:
    """Get ATS service instance (FastAPI dependency)."""
    return AtsService()
