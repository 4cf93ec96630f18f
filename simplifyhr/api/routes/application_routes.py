"""
Application Routes

GET /applications - List applications (candidates: own only)
GET /applications/selected - Selected candidates with their offer workflow status
PUT /applications/{application_id}/status - Move an application through the pipeline
POST /applications/{application_id}/screen - AI screening score + notes
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from simplifyhr.core.auth import HIRING_ROLES, get_current_user, require_roles
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    ApplicationResponse, ApplicationStatus, ApplicationStatusUpdate, MessageResponse,
    ScreeningResponse, SelectedCandidateResponse
)
from simplifyhr.services.application_service import InvalidTransitionError, check_transition
from simplifyhr.services.offer_workflow import workflow_status_label
from simplifyhr.services.retry import RetryExhaustedError
from simplifyhr.services.screening_service import get_screening_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])

APPLICATION_SELECT = """
    SELECT a.application_id, a.job_id, j.title AS job_title, a.candidate_id,
           TRIM(CONCAT(u.first_name, ' ', u.last_name)) AS candidate_name, u.email AS candidate_email,
           a.status, a.cover_letter, a.screening_score, a.ai_screening_notes, a.applied_at, a.updated_at
    FROM job_applications a
    JOIN jobs j ON a.job_id = j.job_id
    JOIN candidates ca ON a.candidate_id = ca.candidate_id
    JOIN users u ON ca.user_id = u.user_id
"""


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    job_id: Optional[int] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Applications, newest first. Candidates only see their own."""
    sql = APPLICATION_SELECT + " WHERE 1=1"
    params = {}

    if user["role"] == "candidate":
        sql += " AND u.user_id = :uid"
        params["uid"] = user["user_id"]
    elif user["role"] not in HIRING_ROLES + ("interviewer",):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    if job_id:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id
    if status:
        sql += " AND a.status = :status"
        params["status"] = status.value

    sql += " ORDER BY a.applied_at DESC"
    return [ApplicationResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/selected", response_model=List[SelectedCandidateResponse])
async def list_selected(
    job_id: Optional[int] = Query(None),
    user: dict = Depends(require_roles(*HIRING_ROLES))
):
    """Selected applications and where their offer workflow stands."""
    sql = """
        SELECT a.application_id, a.job_id, j.title AS job_title, a.candidate_id,
               TRIM(CONCAT(u.first_name, ' ', u.last_name)) AS candidate_name, u.email AS candidate_email,
               a.screening_score, w.workflow_id, w.status AS workflow_status, w.current_step
        FROM job_applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN candidates ca ON a.candidate_id = ca.candidate_id
        JOIN users u ON ca.user_id = u.user_id
        LEFT JOIN offer_workflows w ON w.application_id = a.application_id
        WHERE a.status = 'selected'
    """
    params = {}
    if job_id:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id
    sql += " ORDER BY a.screening_score DESC NULLS LAST"

    selected = []
    for r in execute_raw_sql(sql, params):
        workflow = None
        if r["workflow_id"]:
            workflow = {"status": r["workflow_status"], "current_step": r["current_step"]}
        selected.append(SelectedCandidateResponse(
            application_id=r["application_id"], job_id=r["job_id"], job_title=r["job_title"],
            candidate_id=r["candidate_id"], candidate_name=r["candidate_name"],
            candidate_email=r["candidate_email"], screening_score=r["screening_score"],
            workflow_id=r["workflow_id"],
            workflow_status=r["workflow_status"] or "not_started",
            workflow_label=workflow_status_label(workflow)
        ))
    return selected


@router.put("/{application_id}/status", response_model=MessageResponse)
async def update_application_status(
    application_id: int,
    update: ApplicationStatusUpdate,
    user: dict = Depends(get_current_user)
):
    """
    Change application status.

    Hiring users move applications forward or reject them;
    candidates can only withdraw their own application.
    """
    if user["role"] not in HIRING_ROLES + ("candidate",):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT a.status, ca.user_id FROM job_applications a
                JOIN candidates ca ON a.candidate_id = ca.candidate_id
                WHERE a.application_id = :id
            """),
            {"id": application_id}
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Application not found")

        current, owner_user_id = row
        if user["role"] == "candidate" and owner_user_id != user["user_id"]:
            raise HTTPException(status_code=404, detail="Application not found")

        try:
            check_transition(current, update.status.value, user["role"])
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))

        db.execute(
            text("""
                UPDATE job_applications
                SET status = :status, notes = COALESCE(:notes, notes), updated_at = CURRENT_TIMESTAMP
                WHERE application_id = :id
            """),
            {"status": update.status.value, "notes": update.notes, "id": application_id}
        )

    logger.info("Application %d: %s -> %s", application_id, current, update.status.value)
    return MessageResponse(message=f"Application status updated to {update.status.value}")


@router.post("/{application_id}/screen", response_model=ScreeningResponse)
def screen_application(application_id: int, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """Score an application with AI. Moves 'applied' to 'screening'."""
    results = execute_raw_sql("""
        SELECT a.status, a.cover_letter, j.title, j.description, j.experience_level, j.skills_required,
               ca.experience_years, ca.skills, ca.current_location
        FROM job_applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN candidates ca ON a.candidate_id = ca.candidate_id
        WHERE a.application_id = :id
    """, {"id": application_id})
    if not results:
        raise HTTPException(status_code=404, detail="Application not found")

    r = results[0]
    if r["status"] in ("hired", "rejected", "withdrawn"):
        raise HTTPException(status_code=409, detail=f"Application is already {r['status']}")

    job = {k: r[k] for k in ("title", "description", "experience_level", "skills_required")}
    candidate = {k: r[k] for k in ("experience_years", "skills", "current_location")}

    try:
        result = get_screening_service().screen(job, candidate, r["cover_letter"])
    except RetryExhaustedError as e:
        logger.error("Screening failed for application %d: %s", application_id, e)
        raise HTTPException(status_code=503, detail="AI screening is unavailable, please try again later")

    status = "screening" if r["status"] == "applied" else r["status"]
    with get_db_session() as db:
        db.execute(
            text("""
                UPDATE job_applications
                SET screening_score = :score, ai_screening_notes = :notes, status = :status,
                    updated_at = CURRENT_TIMESTAMP
                WHERE application_id = :id
            """),
            {"score": result["score"], "notes": result["notes"], "status": status, "id": application_id}
        )

    return ScreeningResponse(
        application_id=application_id, score=result["score"], notes=result["notes"], status=status
    )
