"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerhub.api.routes.ats_routes import router as ats_router
from careerhub.api.routes.candidate_routes import router as candidate_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(ats_router)
api_router.include_router(candidate_router)
