#!/usr/bin/env python3
"""
Demo Data Script

Seeds a recruiter, a student, an opportunity, a rubric and a resume,
scores the resume both ways and prints bearer tokens for trying the API.
Run: python scripts/seed_demo_data.py
"""
import sys
sys.path.insert(0, '.')

from datetime import datetime, timezone

from bson import ObjectId

from careerhub.core.auth import create_access_token
from careerhub.db.mongodb import test_mongo_connection, get_mongo_db, COLLECTIONS
from careerhub.services.ats_service import AtsService


def seed(db):
    """Insert demo documents and return their ids."""
    now = datetime.now(timezone.utc)
    recruiter_id = ObjectId()
    student_id = ObjectId()

    db[COLLECTIONS["users"]].insert_many([
        {"_id": recruiter_id, "firstName": "Rita", "lastName": "Recruiter",
         "email": "rita@example.com", "role": "recruiter"},
        {"_id": student_id, "firstName": "Sam", "lastName": "Student",
         "email": "sam@example.com", "role": "student", "skills": ["Python", "MongoDB"]},
    ])

    opportunity_id = db[COLLECTIONS["opportunities"]].insert_one({
        "organization": recruiter_id,
        "title": "Backend Engineer Intern",
        "description": "Build REST APIs with Python and MongoDB",
        "skillsRequired": ["Python", "MongoDB", "Docker"],
        "experienceLevel": "Entry-Level",
    }).inserted_id

    resume_id = db[COLLECTIONS["resumes"]].insert_one({
        "user": student_id,
        "title": "Backend Resume",
        "personalInfo": {"name": "Sam Student", "email": "sam@example.com", "phone": "+1-555-0100"},
        "skills": ["Python", "MongoDB", "FastAPI"],
        "experience": [{
            "company": "Campus IT",
            "position": "Developer",
            "startDate": datetime(2023, 6, 1),
            "current": True,
            "description": "Built REST APIs for the student portal",
        }],
        "education": [{"institution": "State University", "degree": "Bachelor of Science"}],
        "lastUpdated": now,
    }).inserted_id

    return {
        "recruiter": str(recruiter_id),
        "student": str(student_id),
        "opportunity": str(opportunity_id),
        "resume": str(resume_id),
    }


def main():
    print("=" * 50)
    print("CAREERHUB ATS - DEMO DATA")
    print("=" * 50)

    if not test_mongo_connection():
        print("❌ MongoDB not reachable")
        sys.exit(1)

    db = get_mongo_db()
    ids = seed(db)
    print("\n[1] Seeded documents")
    for key, value in ids.items():
        print(f"    {key}: {value}")

    service = AtsService()
    recruiter = {"user_id": ids["recruiter"], "role": "recruiter"}
    student = {"user_id": ids["student"], "role": "student"}

    print("\n[2] Creating rubric...")
    rubric = service.create_rubric(recruiter, {
        "name": "Backend intern",
        "requiredSkills": [{"skill": "Python", "weight": 3}, {"skill": "Docker", "weight": 2}],
        "requiredExperience": 1,
        "requiredEducation": "bachelor",
        "keywords": [{"keyword": "REST", "weight": 2}],
        "formatRequirements": {"requiresContactInfo": True, "requiresEducation": True},
    })
    print(f"    ✅ Rubric: {rubric['_id']}")

    print("\n[3] Scoring...")
    rubric_score = service.score_against_rubric(student, ids["resume"], rubric["_id"])
    print(f"    Rubric score: {rubric_score['score']} {rubric_score['details']}")
    opportunity_score = service.score_against_opportunity(student, ids["resume"], ids["opportunity"])
    print(f"    Opportunity score: {opportunity_score['score']} {opportunity_score['details']}")

    print("\n[4] Tokens (Authorization: Bearer <token>)")
    print(f"    recruiter: {create_access_token({'sub': ids['recruiter'], 'role': 'recruiter'})}")
    print(f"    student:   {create_access_token({'sub': ids['student'], 'role': 'student'})}")

    print("\n" + "=" * 50)
    print("Demo data ready!")
    print("=" * 50)


if __name__ == "__main__":
    main()
