"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. resumes        - Candidate resumes, carrying the cached ATS score
2. atsparameters  - Recruiter scoring rubrics
3. opportunities  - Job / internship postings (read-only here)
4. applications   - Candidate applications (read-only here)
5. users          - Account profiles (read-only here)

Every service takes an optional `db` so tests can bind it to an
in-memory database instead of the configured server.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from careerhub.core.exceptions import InvalidInputError
from careerhub.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS: ObjectId handling and JSON serialization
# ============================================================

def to_object_id(value: str, label: str = "id") -> ObjectId:
    """Parse an identifier, raising InvalidInputError when malformed."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidInputError(f"Invalid {label}: {value!r}")
    return ObjectId(value)


def as_ref(value: Any) -> Any:
    """Store references as ObjectId when they look like one."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert a MongoDB document to a JSON-serializable dict (ObjectIds become strings)."""
    if doc is None:
        return None
    return {key: _serialize_value(value) for key, value in doc.items()}


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# RESUMES COLLECTION
# ============================================================

class ResumeService:
    """
    Handles candidate resumes.
    The ATS score is cached on the resume; the latest write wins.
    """

    def __init__(self, db: Optional[Database] = None):
        self.collection: Collection = get_collection(COLLECTIONS["resumes"], db)

    def get_by_id(self, resume_id: str) -> Optional[dict]:
        """Fetch resume by MongoDB ObjectId."""
        doc = self.collection.find_one({"_id": to_object_id(resume_id, "resume id")})
        return serialize_doc(doc)

    def set_ats_score(self, resume_id: str, score: int) -> bool:
        """Overwrite the cached ATS score and stamp when it was computed."""
        result = self.collection.update_one(
            {"_id": to_object_id(resume_id, "resume id")},
            {"$set": {"atsScore": score, "atsScoredAt": _now()}}
        )
        return result.matched_count > 0

    def list_recommended(self, threshold: int, limit: int) -> List[dict]:
        """
        Each candidate's most recently scored resume, if it clears `threshold`.

        Filtering, ordering and the cap run in MongoDB:
        latest score per user, then atsScore desc, atsScoredAt desc, _id.
        """
        pipeline = [
            {"$match": {"atsScore": {"$ne": None}, "user": {"$ne": None}}},
            {"$sort": {"atsScoredAt": DESCENDING, "_id": ASCENDING}},
            {"$group": {"_id": "$user", "resume": {"$first": "$$ROOT"}}},
            {"$replaceRoot": {"newRoot": "$resume"}},
            {"$match": {"atsScore": {"$gte": threshold}}},
            {"$sort": {"atsScore": DESCENDING, "atsScoredAt": DESCENDING, "_id": ASCENDING}},
            {"$limit": limit},
            {"$project": {"file": 0}}
        ]
        return serialize_docs(self.collection.aggregate(pipeline))

    def latest_for_user(self, user_id: str) -> Optional[dict]:
        """Fetch the most recently updated resume of a candidate."""
        doc = self.collection.find_one(
            {"user": as_ref(user_id)},
            sort=[("lastUpdated", DESCENDING)],
            projection={"file": 0}
        )
        return serialize_doc(doc)

    def list_for_user(self, user_id: str) -> List[dict]:
        """All resumes of a candidate, newest first."""
        cursor = self.collection.find(
            {"user": as_ref(user_id)},
            projection={"file": 0}
        ).sort("lastUpdated", DESCENDING)
        return serialize_docs(cursor)


# ============================================================
# ATS PARAMETERS (SCORING RUBRICS) COLLECTION
# ============================================================

class RubricService:
    """
    Handles recruiter scoring rubrics.
    Several rubrics may be active for one recruiter; lookups take the
    most recently updated one.
    """

    def __init__(self, db: Optional[Database] = None):
        self.collection: Collection = get_collection(COLLECTIONS["rubrics"], db)

    def get_by_id(self, rubric_id: str) -> Optional[dict]:
        doc = self.collection.find_one({"_id": to_object_id(rubric_id, "ATS parameter id")})
        return serialize_doc(doc)

    def get_active_for_recruiter(self, recruiter_id: Any) -> Optional[dict]:
        """Active rubric for opportunity-based scoring, or None."""
        doc = self.collection.find_one(
            {"recruiter": as_ref(recruiter_id), "active": True},
            sort=[("updatedAt", DESCENDING)]
        )
        return serialize_doc(doc)

    def list_for_recruiter(self, recruiter_id: str) -> List[dict]:
        cursor = self.collection.find({"recruiter": as_ref(recruiter_id)}).sort("createdAt", DESCENDING)
        return serialize_docs(cursor)

    def create(self, recruiter_id: str, data: Dict[str, Any]) -> dict:
        """
        Insert a rubric.

        Args:
            recruiter_id: Owner (caller) id
            data: camelCase rubric fields (name, requiredSkills, keywords, ...)

        Returns:
            The stored document
        """
        now = _now()
        doc = {
            "active": True,
            **data,
            "recruiter": as_ref(recruiter_id),
            "createdAt": now,
            "updatedAt": now
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def update(self, rubric_id: str, changes: Dict[str, Any]) -> Optional[dict]:
        """Apply a partial update and return the updated document."""
        object_id = to_object_id(rubric_id, "ATS parameter id")
        self.collection.update_one(
            {"_id": object_id},
            {"$set": {**changes, "updatedAt": _now()}}
        )
        return serialize_doc(self.collection.find_one({"_id": object_id}))


# ============================================================
# OPPORTUNITIES COLLECTION
# ============================================================

class OpportunityService:
    """Read access to opportunities."""

    def __init__(self, db: Optional[Database] = None):
        self.collection: Collection = get_collection(COLLECTIONS["opportunities"], db)

    def get_by_id(self, opportunity_id: str) -> Optional[dict]:
        doc = self.collection.find_one({"_id": to_object_id(opportunity_id, "opportunity id")})
        return serialize_doc(doc)


# ============================================================
# APPLICATIONS COLLECTION
# ============================================================

class ApplicationService:
    """Read access to applications."""

    def __init__(self, db: Optional[Database] = None):
        self.collection: Collection = get_collection(COLLECTIONS["applications"], db)

    def list_for_opportunity(self, opportunity_id: str) -> List[dict]:
        """Applications to one opportunity, most recent first."""
        cursor = self.collection.find(
            {"opportunity": to_object_id(opportunity_id, "opportunity id")}
        ).sort("appliedDate", DESCENDING)
        return serialize_docs(cursor)


# ============================================================
# USERS COLLECTION
# ============================================================

class UserService:
    """Read access to user profiles. Password hashes never leave this class."""

    PUBLIC_PROJECTION = {"password": 0}

    def __init__(self, db: Optional[Database] = None):
        self.collection: Collection = get_collection(COLLECTIONS["users"], db)

    def get_by_id(self, user_id: str) -> Optional[dict]:
        doc = self.collection.find_one(
            {"_id": to_object_id(user_id, "user id")},
            projection=self.PUBLIC_PROJECTION
        )
        return serialize_doc(doc)

    def get_many(self, user_ids: List[str]) -> Dict[str, dict]:
        """Fetch several users at once, keyed by string id."""
        object_ids = [as_ref(user_id) for user_id in user_ids]
        cursor = self.collection.find(
            {"_id": {"$in": object_ids}},
            projection=self.PUBLIC_PROJECTION
        )
        return {doc["_id"]: doc for doc in serialize_docs(cursor)}
