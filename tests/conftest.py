"""
Pytest configuration and shared fixtures.

MongoDB is replaced by mongomock so the real pymongo-based services run
against an in-memory database.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from careerhub.core.auth import create_access_token
from careerhub.db.mongodb import COLLECTIONS
from careerhub.main import app
from careerhub.services.ats_service import AtsService, get_ats_service
from careerhub.services.mongo_service import (
    ApplicationService,
    OpportunityService,
    ResumeService,
    RubricService,
    UserService,
)


@pytest.fixture
def ids() -> SimpleNamespace:
    """Fresh user ids for each role."""
    return SimpleNamespace(
        student=str(ObjectId()),
        other_student=str(ObjectId()),
        recruiter=str(ObjectId()),
        other_recruiter=str(ObjectId()),
        admin=str(ObjectId()),
    )


@pytest.fixture
def mongo_db():
    """In-memory MongoDB database."""
    client = mongomock.MongoClient()
    yield client["careerhub_test"]
    client.close()


class Seeder:
    """Inserts platform documents the way the main app stores them."""

    def __init__(self, db):
        self.db = db

    def _insert(self, collection: str, doc: dict) -> str:
        return str(self.db[COLLECTIONS[collection]].insert_one(doc).inserted_id)

    def user(self, user_id: str, role: str = "student", **fields) -> str:
        doc = {
            "_id": ObjectId(user_id),
            "firstName": "Ana",
            "lastName": "Lopez",
            "email": f"{user_id}@example.com",
            "password": "$2a$10$hashed",
            "role": role,
            "skills": [],
            **fields
        }
        return self._insert("users", doc)

    def resume(self, user_id: str, **fields) -> str:
        doc = {
            "user": ObjectId(user_id),
            "title": "My Resume",
            "personalInfo": {"name": "Ana Lopez", "email": "ana@example.com"},
            "skills": [],
            "experience": [],
            "education": [],
            "lastUpdated": datetime(2024, 1, 1),
            **fields
        }
        return self._insert("resumes", doc)

    def opportunity(self, organization: str, **fields) -> str:
        doc = {
            "organization": ObjectId(organization),
            "title": "Backend Engineer",
            "description": "Build APIs",
            "skillsRequired": [],
            "experienceLevel": "Entry-Level",
            **fields
        }
        return self._insert("opportunities", doc)

    def rubric(self, recruiter: str, **fields) -> str:
        now = datetime.now(timezone.utc)
        doc = {
            "recruiter": ObjectId(recruiter),
            "name": "Default rubric",
            "requiredSkills": [],
            "keywords": [],
            "active": True,
            "createdAt": now,
            "updatedAt": now,
            **fields
        }
        return self._insert("rubrics", doc)

    def application(self, opportunity_id: str, student_id: str, **fields) -> str:
        doc = {
            "opportunity": ObjectId(opportunity_id),
            "student": ObjectId(student_id),
            "status": "Applied",
            "appliedDate": datetime(2024, 3, 1),
            "coverLetter": None,
            **fields
        }
        return self._insert("applications", doc)

    def get_resume(self, resume_id: str) -> dict:
        return self.db[COLLECTIONS["resumes"]].find_one({"_id": ObjectId(resume_id)})


@pytest.fixture
def seed(mongo_db) -> Seeder:
    return Seeder(mongo_db)


@pytest.fixture
def ats_service(mongo_db) -> AtsService:
    """AtsService wired to the in-memory database."""
    return AtsService(
        resume_service=ResumeService(mongo_db),
        rubric_service=RubricService(mongo_db),
        opportunity_service=OpportunityService(mongo_db),
        application_service=ApplicationService(mongo_db),
        user_service=UserService(mongo_db),
    )


@pytest.fixture
def client(ats_service):
    """API client whose routes use the in-memory database."""
    app.dependency_overrides[get_ats_service] = lambda: ats_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user id and role."""
    def _headers(user_id: str, role: str) -> dict:
        token = create_access_token({"sub": user_id, "role": role})
        return {"Authorization": f"Bearer {token}"}
    return _headers
