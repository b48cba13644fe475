"""
MongoDB Connection Utility

MongoDB stores every platform document:
- Resumes (with the cached ATS score)
- Recruiter scoring rubrics ("ATS parameters")
- Opportunities, applications and user profiles (read-only here)
"""
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from careerhub.core.config import get_settings
from careerhub.core.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the platform database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str, db: Optional[Database] = None) -> Collection:
    """
    Get a specific collection.

    Pass `db` to bind to another database (tests use an in-memory one).
    """
    if db is None:
        db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "resumes": "resumes",
    "rubrics": "atsparameters",
    "opportunities": "opportunities",
    "applications": "applications",
    "users": "users"
}


def init_mongo_indexes(db: Optional[Database] = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    if db is None:
        db = get_mongo_db()

    # Latest resume per candidate, recommended candidates by score
    db[COLLECTIONS["resumes"]].create_index([("user", ASCENDING), ("lastUpdated", DESCENDING)])
    db[COLLECTIONS["resumes"]].create_index([("atsScore", DESCENDING)])
    db[COLLECTIONS["resumes"]].create_index([("user", ASCENDING), ("atsScoredAt", DESCENDING)])

    # Active rubric lookup per recruiter
    db[COLLECTIONS["rubrics"]].create_index([("recruiter", ASCENDING), ("active", ASCENDING)])

    # Applicants of an opportunity
    db[COLLECTIONS["applications"]].create_index([("opportunity", ASCENDING), ("appliedDate", DESCENDING)])

    logger.info("MongoDB indexes created successfully")
