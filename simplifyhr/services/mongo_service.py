"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. ai_interview_sessions - AI interviewer chat sessions (transcript + progress)
2. jd_generations        - Streamed job descriptions and their structured suggestions

Offer template files live in the GridFS bucket (see db.mongodb.get_template_bucket).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

from simplifyhr.db.mongodb import COLLECTIONS, get_collection


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def _object_id(mongo_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(mongo_id)
    except (InvalidId, TypeError):
        return None


# ============================================================
# AI INTERVIEW SESSIONS COLLECTION
# One document per AI interview attempt, messages appended per turn
# ============================================================

class AIInterviewSessionService:
    """
    Handles AI interviewer session documents.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["ai_sessions"])

    def create(self, interview_id: int, total_questions: int, greeting: str) -> str:
        """
        Insert a new active session.

        Args:
            interview_id: PostgreSQL interview_schedules.schedule_id
            total_questions: Planned number of questions
            greeting: Opening assistant message

        Returns:
            MongoDB ObjectId as string (the session id)
        """
        now = datetime.utcnow()
        doc = {
            "interview_id": interview_id,
            "status": "active",
            "progress": 0,
            "questions_asked": 0,
            "total_questions": total_questions,
            "messages": [
                {"role": "assistant", "content": greeting, "timestamp": now, "question_number": 0}
            ],
            "started_at": now,
            "ended_at": None
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, session_id: str) -> Optional[dict]:
        """Fetch session by ObjectId string. Invalid ids are treated as missing."""
        oid = _object_id(session_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def list_all(self) -> List[dict]:
        return [serialize_doc(d) for d in self.collection.find({})]

    def append_messages(self, session_id: str, messages: List[Dict[str, Any]], updates: Optional[dict] = None) -> bool:
        """Push chat turns and optionally set progress fields in one update."""
        update: Dict[str, Any] = {"$push": {"messages": {"$each": messages}}}
        if updates:
            update["$set"] = updates
        result = self.collection.update_one({"_id": ObjectId(session_id)}, update)
        return result.modified_count > 0

    def complete(self, session_id: str, ended_at: datetime) -> bool:
        result = self.collection.update_one(
            {"_id": ObjectId(session_id)},
            {"$set": {"status": "completed", "progress": 100, "ended_at": ended_at}}
        )
        return result.modified_count > 0


# ============================================================
# JD GENERATIONS COLLECTION
# ============================================================

class JDGenerationService:
    """
    Keeps every AI job description generation for later review.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["jd_generations"])

    def insert(self, created_by: int, request: dict, structured_data: dict) -> str:
        doc = {
            "created_by": created_by,
            "request": request,
            "structured_data": structured_data,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_latest_by_user(self, created_by: int) -> Optional[dict]:
        doc = self.collection.find_one({"created_by": created_by}, sort=[("created_at", -1)])
        return serialize_doc(doc)
