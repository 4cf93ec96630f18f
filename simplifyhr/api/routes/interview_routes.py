"""
Interview Routes

POST /interviews/{interview_id}/meeting - Create a meeting link for a platform
POST /interviews/{interview_id}/feedback - Interviewer score and notes
POST /interviews/{interview_id}/ai-session - Start an AI interview session
POST /interviews/ai-sessions/{session_id}/message - One chat turn with the AI interviewer
POST /interviews/ai-sessions/{session_id}/end - Close the session
GET /interviews/ai-sessions/{session_id} - Session transcript
POST /interviews/{interview_id}/realtime-token - Ephemeral token for a voice interview
"""

import json
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from simplifyhr.core.auth import HIRING_ROLES, get_current_user, require_roles
from simplifyhr.core.config import get_settings
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    ChatMessageRequest, ChatMessageResponse, FeedbackRequest, FeedbackResponse, MeetingRequest,
    MeetingResponse, RealtimeTokenResponse, SessionEndResponse, SessionStartResponse, TranscriptResponse
)
from simplifyhr.services.interview_service import (
    INTERVIEWER_PROMPT, SessionClosedError, SessionNotFoundError, get_ai_interviewer
)
from simplifyhr.services.meetings import meeting_url
from simplifyhr.services.realtime_client import EphemeralTokenError, get_realtime_client
from simplifyhr.services.retry import RetryExhaustedError

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/interviews", tags=["Interviews"])

INTERVIEW_SELECT = """
    SELECT s.schedule_id, s.status, s.assigned_interviewers, j.title AS job_title,
           u.user_id AS candidate_user_id,
           TRIM(CONCAT(u.first_name, ' ', u.last_name)) AS candidate_name
    FROM interview_schedules s
    JOIN job_applications a ON s.application_id = a.application_id
    JOIN jobs j ON a.job_id = j.job_id
    JOIN candidates ca ON a.candidate_id = ca.candidate_id
    JOIN users u ON ca.user_id = u.user_id
    WHERE s.schedule_id = :id
"""


def _load_interview(interview_id: int, user: dict) -> dict:
    """Interview row the caller may see; 404 otherwise."""
    results = execute_raw_sql(INTERVIEW_SELECT, {"id": interview_id})
    if not results:
        raise HTTPException(status_code=404, detail="Interview not found")

    interview = results[0]
    role = user["role"]
    if role == "candidate" and interview["candidate_user_id"] == user["user_id"]:
        return interview
    if role == "interviewer" and user["user_id"] in (interview["assigned_interviewers"] or []):
        return interview
    if role in HIRING_ROLES:
        return interview
    raise HTTPException(status_code=404, detail="Interview not found")


# ============================================================
# MEETINGS AND FEEDBACK
# ============================================================

@router.post("/{interview_id}/meeting", response_model=MeetingResponse)
async def create_meeting(
    interview_id: int,
    request: MeetingRequest,
    user: dict = Depends(require_roles(*HIRING_ROLES, "interviewer"))
):
    """Generate a link for the platform and add it to the interview's meeting_urls."""
    _load_interview(interview_id, user)
    url = meeting_url(request.platform.value, settings.meeting_base_url)

    with get_db_session() as db:
        db.execute(
            text("""
                UPDATE interview_schedules
                SET meeting_urls = meeting_urls || CAST(:url AS JSONB), updated_at = CURRENT_TIMESTAMP
                WHERE schedule_id = :id
            """),
            {"url": json.dumps({request.platform.value: url}), "id": interview_id}
        )

    return MeetingResponse(interview_id=interview_id, platform=request.platform.value, meeting_url=url)


@router.post("/{interview_id}/feedback", response_model=FeedbackResponse)
async def submit_feedback(interview_id: int, feedback: FeedbackRequest, user: dict = Depends(get_current_user)):
    """
    Record one interviewer's score and notes.

    The interview is completed once every assigned interviewer has submitted.
    """
    with get_db_session() as db:
        row = db.execute(
            text("SELECT assigned_interviewers, interviewer_scores, interviewer_notes, status "
                 "FROM interview_schedules WHERE schedule_id = :id"),
            {"id": interview_id}
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Interview not found")

        assigned, scores, notes, status = row
        assigned = assigned or []
        if user["user_id"] not in assigned:
            raise HTTPException(status_code=403, detail="Only assigned interviewers can submit feedback")
        if status == "cancelled":
            raise HTTPException(status_code=409, detail="Interview was cancelled")

        # JSONB object keys are strings
        key = str(user["user_id"])
        scores = dict(scores or {})
        notes = dict(notes or {})
        scores[key] = feedback.interviewer_score
        notes[key] = {
            "recommendation": feedback.recommendation.value,
            "strengths": feedback.strengths,
            "weaknesses": feedback.weaknesses,
            "notes": feedback.notes,
            "submitted_at": datetime.utcnow().isoformat(),
        }

        pending = sum(1 for interviewer_id in assigned if str(interviewer_id) not in scores)
        new_status = "completed" if pending == 0 else status

        db.execute(
            text("""
                UPDATE interview_schedules
                SET interviewer_scores = CAST(:scores AS JSONB), interviewer_notes = CAST(:notes AS JSONB),
                    status = :status, updated_at = CURRENT_TIMESTAMP
                WHERE schedule_id = :id
            """),
            {"scores": json.dumps(scores), "notes": json.dumps(notes), "status": new_status, "id": interview_id}
        )

    logger.info("Feedback for interview %d from user %d (%d pending)", interview_id, user["user_id"], pending)
    return FeedbackResponse(message="Feedback submitted", status=new_status, pending_interviewers=pending)


# ============================================================
# AI INTERVIEWER
# ============================================================

@router.post("/{interview_id}/ai-session", response_model=SessionStartResponse, status_code=201)
async def start_ai_session(interview_id: int, user: dict = Depends(get_current_user)):
    interview = _load_interview(interview_id, user)
    if interview["status"] in ("completed", "cancelled"):
        raise HTTPException(status_code=409, detail=f"Interview is already {interview['status']}")

    started = get_ai_interviewer().start(interview_id, interview["candidate_name"], interview["job_title"])

    with get_db_session() as db:
        db.execute(
            text("UPDATE interview_schedules SET status = 'in_progress', updated_at = CURRENT_TIMESTAMP "
                 "WHERE schedule_id = :id AND status = 'scheduled'"),
            {"id": interview_id}
        )

    return SessionStartResponse(**started)


def _session_interview(interviewer, session_id: str, user: dict) -> dict:
    try:
        session = interviewer.transcript(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Interview session not found")
    return _load_interview(session["interview_id"], user)


@router.post("/ai-sessions/{session_id}/message", response_model=ChatMessageResponse)
def send_ai_message(session_id: str, request: ChatMessageRequest, user: dict = Depends(get_current_user)):
    """
    One turn. If the AI stays unavailable after retries, the reply is a fixed
    apology with is_fallback set and progress unchanged.
    """
    interviewer = get_ai_interviewer()
    interview = _session_interview(interviewer, session_id, user)

    try:
        reply = interviewer.send(session_id, request.message, job_title=interview["job_title"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Interview session not found")
    except SessionClosedError:
        raise HTTPException(status_code=409, detail="Interview session is already completed")

    return ChatMessageResponse(**reply)


@router.post("/ai-sessions/{session_id}/end", response_model=SessionEndResponse)
async def end_ai_session(session_id: str, user: dict = Depends(get_current_user)):
    interviewer = get_ai_interviewer()
    _session_interview(interviewer, session_id, user)
    return SessionEndResponse(**interviewer.end(session_id))


@router.get("/ai-sessions/{session_id}", response_model=TranscriptResponse)
async def get_ai_transcript(session_id: str, user: dict = Depends(get_current_user)):
    interviewer = get_ai_interviewer()
    _session_interview(interviewer, session_id, user)
    return TranscriptResponse(**interviewer.transcript(session_id))


# ============================================================
# VOICE INTERVIEW TOKEN
# ============================================================

@router.post("/{interview_id}/realtime-token", response_model=RealtimeTokenResponse)
def create_realtime_token(interview_id: int, user: dict = Depends(get_current_user)):
    """Short-lived client secret so the browser can talk to the realtime model directly."""
    interview = _load_interview(interview_id, user)
    instructions = INTERVIEWER_PROMPT.format(
        job_title=interview["job_title"],
        total_questions=settings.ai_interview_total_questions,
        question_number=1
    )

    try:
        token = get_realtime_client().issue_token(
            instructions,
            attempts=settings.ai_retry_attempts,
            base_delay=settings.ai_retry_base_delay
        )
    except (EphemeralTokenError, RetryExhaustedError) as e:
        logger.error("Realtime token for interview %d failed: %s", interview_id, e)
        raise HTTPException(status_code=502, detail="Failed to get ephemeral token")

    return RealtimeTokenResponse(**token)
