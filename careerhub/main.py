"""
CareerHub ATS Service - Main Application

FastAPI backend with:
- MongoDB for all platform documents (resumes, rubrics, opportunities)
- Heuristic ATS scoring of resumes against rubrics and opportunities
- JWT identity (tokens issued by the accounts service)

Run: uvicorn careerhub.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from careerhub.api.routes import api_router
from careerhub.core.exceptions import CareerHubError
from careerhub.core.logging import get_logger
from careerhub.db.mongodb import init_mongo_indexes, test_mongo_connection

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning(f"MongoDB index initialization failed: {e}")
    yield


# Create FastAPI app
app = FastAPI(
    title="CareerHub ATS Service",
    description="""
    Applicant Tracking System scoring for the CareerHub recruiting platform.

    ## Features
    - **ATS parameters**: Recruiters define weighted scoring rubrics
    - **Scoring**: Resume vs. rubric, resume vs. opportunity
    - **Recommendations**: Candidates with cached scores of 85+
    - **Screening**: Applicant lists scored against the opportunity

    ## Roles
    - student: score own resumes
    - recruiter: manage rubrics, view candidates for own opportunities
    - admin: score any resume, view candidate summaries
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(CareerHubError)
async def careerhub_error_handler(request: Request, exc: CareerHubError):
    """Not found / forbidden / invalid input raised by services."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything else (e.g. database unavailable) is a generic server error."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
