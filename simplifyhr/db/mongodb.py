"""
MongoDB Connection Utility

MongoDB stores:
- AI interview sessions (chat transcripts, progress)
- JD generation records (streamed text + structured suggestions)
- Offer letter template files (GridFS bucket "offer_templates")

Transcripts grow turn by turn as an array on one document.
"""
import logging

import gridfs
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from simplifyhr.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

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
    """Get the documents database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def get_template_bucket() -> gridfs.GridFSBucket:
    """GridFS bucket holding uploaded offer letter templates."""
    return gridfs.GridFSBucket(get_mongo_db(), bucket_name=COLLECTIONS["offer_templates"])


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
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "ai_sessions": "ai_interview_sessions",
    "jd_generations": "jd_generations",
    "offer_templates": "offer_templates"
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Sessions are looked up by schedule, newest first
    db[COLLECTIONS["ai_sessions"]].create_index([
        ("interview_id", 1),
        ("started_at", -1)
    ])
    db[COLLECTIONS["jd_generations"]].create_index("created_by")

    logger.info("MongoDB indexes created")
