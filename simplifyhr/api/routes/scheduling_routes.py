"""
Scheduling Routes

POST /scheduling/slots - Scored slots for the selected candidates and interviewers
POST /scheduling/interviews - Create interview schedules (application x slot)
GET /scheduling/interviews - List schedules visible to the caller
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from simplifyhr.core.auth import HIRING_ROLES, get_current_user, require_roles
from simplifyhr.core.config import get_settings
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    InterviewScheduleResponse, MergedSlotResponse, ScheduleRequest, ScheduleResponse,
    SlotListResponse, SlotRequest
)
from simplifyhr.services.application_service import SCHEDULABLE_STATUSES
from simplifyhr.services.meetings import meeting_url
from simplifyhr.services.slot_scorer import generate_merged_slots

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])

AI_ROUND_TYPES = ("ai", "ai_human")


@router.post("/slots", response_model=SlotListResponse)
async def list_slots(request: SlotRequest, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """
    Merged calendar for the selected applications and interviewers.

    Candidate free-time windows come back alongside the slots; they do not filter them.
    """
    candidate_ids = []
    free_slots = {}
    if request.application_ids:
        rows = execute_raw_sql("""
            SELECT a.candidate_id, ca.free_slots
            FROM job_applications a JOIN candidates ca ON a.candidate_id = ca.candidate_id
            WHERE a.application_id = ANY(:ids)
        """, {"ids": list(request.application_ids)})
        for r in rows:
            if r["candidate_id"] not in free_slots:
                candidate_ids.append(r["candidate_id"])
            free_slots[r["candidate_id"]] = r["free_slots"] or []

    slots = generate_merged_slots(candidate_ids, request.interviewer_ids, request.duration_minutes)
    return SlotListResponse(
        slots=[
            MergedSlotResponse(
                start=s.start, end=s.end, candidate_ids=s.candidate_ids,
                interviewer_ids=s.interviewer_ids, score=s.score
            )
            for s in slots
        ],
        total=len(slots),
        free_slots=free_slots
    )


@router.post("/interviews", response_model=ScheduleResponse, status_code=201)
async def schedule_interviews(request: ScheduleRequest, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """
    One schedule per application per slot, each with its own meeting link.

    All rows are written in a single transaction: any failure leaves nothing behind.
    """
    if (
        not request.job_id
        or not request.application_ids
        or not request.round_id
        or not (request.interviewer_ids or request.guest_emails)
        or not request.slots
    ):
        raise HTTPException(
            status_code=400,
            detail="Missing Information: select a job, candidates, a round, interviewers or guests, and time slots"
        )

    application_ids = list(dict.fromkeys(request.application_ids))
    schedule_ids = []

    with get_db_session() as db:
        round_row = db.execute(
            text("SELECT round_type, duration_minutes, round_number FROM interview_rounds "
                 "WHERE round_id = :rid AND job_id = :jid"),
            {"rid": request.round_id, "jid": request.job_id}
        ).fetchone()
        if not round_row:
            raise HTTPException(status_code=404, detail="Interview round not found for this job")
        round_type, duration, round_number = round_row

        rows = db.execute(
            text("SELECT application_id, status FROM job_applications "
                 "WHERE job_id = :jid AND application_id = ANY(:ids)"),
            {"jid": request.job_id, "ids": application_ids}
        ).fetchall()
        statuses = {r[0]: r[1] for r in rows}

        missing = [a for a in application_ids if a not in statuses]
        if missing:
            raise HTTPException(status_code=400, detail=f"Applications not found for this job: {missing}")
        blocked = [a for a in application_ids if statuses[a] not in SCHEDULABLE_STATUSES]
        if blocked:
            raise HTTPException(status_code=409, detail=f"Applications cannot be scheduled: {blocked}")

        title = request.title.strip() or f"Round {round_number} Interview"
        for application_id in application_ids:
            for slot in request.slots:
                result = db.execute(
                    text("""
                        INSERT INTO interview_schedules (round_id, application_id, assigned_interviewers,
                            external_interviewers, interview_type, interview_title, scheduled_at,
                            duration_minutes, status, meeting_urls, meeting_room, interview_notes,
                            ai_interview_enabled, created_by)
                        VALUES (:rid, :aid, CAST(:interviewers AS JSONB), CAST(:guests AS JSONB), :itype,
                            :title, :scheduled_at, :duration, 'scheduled', CAST(:urls AS JSONB), :room,
                            :notes, :ai_enabled, :uid)
                        RETURNING schedule_id
                    """),
                    {
                        "rid": request.round_id,
                        "aid": application_id,
                        "interviewers": json.dumps(request.interviewer_ids),
                        "guests": json.dumps([str(e) for e in request.guest_emails]),
                        "itype": round_type,
                        "title": title,
                        "scheduled_at": slot.start,
                        "duration": duration,
                        "urls": json.dumps({"simplifyhr": meeting_url("simplifyhr", settings.meeting_base_url)}),
                        "room": request.location,
                        "notes": "\n\n".join(p for p in (request.description, request.notes) if p) or None,
                        "ai_enabled": round_type in AI_ROUND_TYPES,
                        "uid": user["user_id"],
                    }
                )
                schedule_ids.append(result.fetchone()[0])

    logger.info(
        "Scheduled %d interview(s) for job %d (round %d)",
        len(schedule_ids), request.job_id, request.round_id
    )
    return ScheduleResponse(
        created=len(schedule_ids),
        schedule_ids=schedule_ids,
        message=f"Successfully scheduled {len(schedule_ids)} interview(s)"
    )


@router.get("/interviews", response_model=List[InterviewScheduleResponse])
async def list_interviews(
    job_id: Optional[int] = Query(None),
    assigned_to_me: bool = Query(False),
    user: dict = Depends(get_current_user)
):
    """
    Schedules, soonest first.

    - candidates: their own interviews
    - interviewers: interviews they are assigned to
    - hiring users: everything, or only their assignments with assigned_to_me
    """
    sql = """
        SELECT s.schedule_id, s.round_id, s.application_id, j.title AS job_title,
               TRIM(CONCAT(u.first_name, ' ', u.last_name)) AS candidate_name,
               s.interview_type, s.interview_title, s.scheduled_at, s.duration_minutes, s.status,
               s.meeting_urls, s.assigned_interviewers, s.external_interviewers
        FROM interview_schedules s
        JOIN job_applications a ON s.application_id = a.application_id
        JOIN jobs j ON a.job_id = j.job_id
        JOIN candidates ca ON a.candidate_id = ca.candidate_id
        JOIN users u ON ca.user_id = u.user_id
        WHERE 1=1
    """
    params = {}

    if user["role"] == "candidate":
        sql += " AND u.user_id = :uid"
        params["uid"] = user["user_id"]
    elif user["role"] == "interviewer" or (assigned_to_me and user["role"] in HIRING_ROLES):
        sql += " AND s.assigned_interviewers @> CAST(:me AS JSONB)"
        params["me"] = json.dumps([user["user_id"]])
    elif user["role"] not in HIRING_ROLES:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    if job_id:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id

    sql += " ORDER BY s.scheduled_at"
    return [InterviewScheduleResponse(**r) for r in execute_raw_sql(sql, params)]
