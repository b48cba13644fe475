"""
CareerHub ATS Service
Applicant Tracking System scoring for a student / recruiter / admin
recruiting platform.

Architecture:
- MongoDB: Platform documents (resumes, rubrics, opportunities, applications)
- Pure scoring engine: careerhub.services.ats_scoring
- FastAPI: REST endpoints under /api
"""

__version__ = "1.0.0"
