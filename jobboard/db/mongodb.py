"""
MongoDB Connection Utility

MongoDB stores every record of the job board:
- Organizations (recruiter accounts) and job-seeker users
- Job postings and candidate applications
- Company profiles
- Notification templates
- Short-lived one-time passwords
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

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
    """Get the job board database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS constants for names."""
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
    except PyMongoError as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "organizations": "organizations",
    "users": "users",
    "jobs": "jobs",
    "candidates": "candidates",
    "profiles": "profiles",
    "templates": "templates",
    "otps": "otps"
}


def init_mongo_indexes():
    """
    Create indexes for the lookups the API performs.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Account lookups by email
    db[COLLECTIONS["organizations"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index("email", unique=True)

    # Jobs listed per organization, newest first
    db[COLLECTIONS["jobs"]].create_index([("organization_id", ASCENDING), ("created_at", DESCENDING)])

    # One application per (job, user)
    db[COLLECTIONS["candidates"]].create_index([
        ("job_id", ASCENDING),
        ("user_id", ASCENDING)
    ], unique=True)
    db[COLLECTIONS["candidates"]].create_index("user_id")

    db[COLLECTIONS["profiles"]].create_index("organization_id", unique=True)
    db[COLLECTIONS["templates"]].create_index("organization_id")

    # One pending code per (purpose, email); expired codes are purged by the TTL monitor
    db[COLLECTIONS["otps"]].create_index([("purpose", ASCENDING), ("email", ASCENDING)], unique=True)
    db[COLLECTIONS["otps"]].create_index("expires_at", expireAfterSeconds=0)

    logger.info("MongoDB indexes created successfully")
