"""
Job Routes

POST /jobs/validate - Check wizard data, report errors and completion
POST /jobs/generate-description - Stream an AI job description (NDJSON)
POST /jobs - Create job from wizard data (client/admin)
GET /jobs - List published jobs with filters
GET /jobs/mine - Jobs visible to the hiring user (all statuses)
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update job (owner/admin)
DELETE /jobs/{job_id} - Delete job (owner/admin)
POST /jobs/{job_id}/publish - Publish a draft
GET /jobs/{job_id}/rounds - Interview rounds, in order
POST /jobs/{job_id}/rounds/defaults - Create the standard three rounds
POST /jobs/{job_id}/apply - Apply to job (candidate only)
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import text

from simplifyhr.core.auth import ADMIN_ROLES, HIRING_ROLES, get_current_candidate, require_roles
from simplifyhr.core.config import get_settings
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    ApplicationCreate, FormProgress, InterviewRoundResponse, JDGenerationRequest, JobCreateResponse,
    JobDraft, JobListResponse, JobResponse, JobUpdate, JobValidationResponse, MessageResponse
)
from simplifyhr.services import job_wizard
from simplifyhr.services.ai_client import get_ai_client
from simplifyhr.services.company_service import find_or_create_company
from simplifyhr.services.jd_generation import NDJSON_MEDIA_TYPE, generate_jd_events
from simplifyhr.services.mongo_service import JDGenerationService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_SELECT = """
    SELECT j.job_id, j.company_id, c.name AS company_name, j.created_by, j.title, j.description,
           j.ai_generated_description, j.requirements, j.skills_required, j.experience_level,
           j.employment_type, j.location, j.remote_allowed, j.salary_min, j.salary_max, j.currency,
           j.status, j.total_positions, j.interview_rounds, j.min_assessment_score, j.is_urgent,
           j.created_at
    FROM jobs j JOIN companies c ON j.company_id = c.company_id
"""

ROUND_NAMES = {
    "ai": "AI Interview",
    "human": "Human Interview",
    "ai_human": "AI + Human Interview",
}


def _job_response(r: dict) -> JobResponse:
    return JobResponse(
        **{k: v for k, v in r.items() if k not in ("salary_min", "salary_max")},
        salary_min=float(r["salary_min"]) if r["salary_min"] is not None else None,
        salary_max=float(r["salary_max"]) if r["salary_max"] is not None else None,
    )


def _round_response(r: dict) -> InterviewRoundResponse:
    return InterviewRoundResponse(
        name=f"Round {r['round_number']} - {ROUND_NAMES.get(r['round_type'], r['round_type'])}",
        **r
    )


def _publish_targets(draft: JobDraft) -> List[str]:
    targets = []
    if draft.publish_to_simplifyhr:
        targets.append("simplifyhr")
    if draft.publish_to_website:
        targets.append("website")
    if draft.publish_to_linkedin:
        targets.append("linkedin")
    if draft.publish_to_vendors:
        targets.append("vendors")
    return targets


def _insert_round(db, row: dict):
    db.execute(
        text("""
            INSERT INTO interview_rounds (job_id, round_type, round_number, scoring_criteria, duration_minutes,
                interviewers_required, interviewer_profiles, is_ai_assisted, is_mandatory)
            VALUES (:job_id, :round_type, :round_number, CAST(:scoring_criteria AS JSONB), :duration_minutes,
                :interviewers_required, CAST(:interviewer_profiles AS JSONB), :is_ai_assisted, :is_mandatory)
        """),
        {
            **row,
            "scoring_criteria": json.dumps(row["scoring_criteria"]),
            "interviewer_profiles": json.dumps(row["interviewer_profiles"]),
        }
    )


def _check_job_access(db, job_id: int, user: dict) -> str:
    """Return the job status; 404 if missing, 403 unless owner or admin."""
    row = db.execute(
        text("SELECT created_by, status FROM jobs WHERE job_id = :jid"),
        {"jid": job_id}
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Job not found")
    if row[0] != user["user_id"] and user["role"] not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Only the job owner can change this job")
    return row[1]


# ============================================================
# WIZARD
# ============================================================

@router.post("/validate", response_model=JobValidationResponse)
async def validate_job(draft: JobDraft):
    """Per-field errors plus per-tab completion for the job wizard."""
    errors = job_wizard.validate_job_draft(draft)
    overall, details = job_wizard.compute_progress(draft)
    return JobValidationResponse(
        valid=not errors,
        errors=errors,
        progress=FormProgress(overall=overall, details=details)
    )


@router.post("/generate-description")
def generate_description(request: JDGenerationRequest, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """
    Stream a job description as NDJSON events:
    jd_chunk (text pieces), then structured_data, or error.
    """
    if not request.job_title.strip():
        raise HTTPException(status_code=400, detail="Job title required")

    if not request.company_name:
        request.company_name = user.get("company_name")

    def record(data: dict):
        JDGenerationService().insert(user["user_id"], request.model_dump(mode="json"), data)

    events = generate_jd_events(
        request,
        get_ai_client(),
        timeout=settings.jd_generation_timeout,
        on_complete=record
    )
    return StreamingResponse(events, media_type=NDJSON_MEDIA_TYPE)


@router.post("", response_model=JobCreateResponse, status_code=201)
async def create_job(draft: JobDraft, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """
    Create a job from wizard data.

    Stages: validate -> resolve company -> insert job -> insert rounds.
    Only the first round of each type is stored; the rest are reported back.
    """
    try:
        job_wizard.ensure_valid(draft)
    except job_wizard.JobValidationError as e:
        raise HTTPException(status_code=422, detail={"message": "Please fix the highlighted fields", "errors": e.errors})

    status = "published" if draft.publish else "draft"

    with get_db_session() as db:
        company_id = find_or_create_company(db, draft.company_name)

        result = db.execute(
            text("""
                INSERT INTO jobs (company_id, created_by, title, description, ai_generated_description,
                    requirements, skills_required, experience_level, employment_type, location, remote_allowed,
                    salary_min, salary_max, currency, budget_range_min, budget_range_max, status, total_positions,
                    interview_rounds, scoring_criteria, min_assessment_score, publish_targets, assigned_vendors,
                    offer_template_id, is_urgent)
                VALUES (:company_id, :created_by, :title, :description, :ai_generated_description,
                    CAST(:requirements AS JSONB), CAST(:skills_required AS JSONB), :experience_level,
                    :employment_type, :location, :remote_allowed, :salary_min, :salary_max, :currency,
                    :budget_range_min, :budget_range_max, :status, :total_positions, :interview_rounds,
                    CAST(:scoring_criteria AS JSONB), :min_assessment_score, CAST(:publish_targets AS JSONB),
                    CAST(:assigned_vendors AS JSONB), :offer_template_id, FALSE)
                RETURNING job_id
            """),
            {
                "company_id": company_id,
                "created_by": user["user_id"],
                "title": draft.title.strip(),
                "description": draft.description,
                "ai_generated_description": draft.ai_generated_description,
                "requirements": json.dumps(draft.requirements),
                "skills_required": json.dumps(draft.skills_required),
                "experience_level": draft.experience_level.value if draft.experience_level else None,
                "employment_type": draft.employment_type.value if draft.employment_type else None,
                "location": draft.location,
                "remote_allowed": draft.remote_allowed,
                "salary_min": draft.salary_min,
                "salary_max": draft.salary_max,
                "currency": draft.currency,
                "budget_range_min": draft.budget_range_min,
                "budget_range_max": draft.budget_range_max,
                "status": status,
                "total_positions": draft.total_positions,
                "interview_rounds": len(draft.interview_rounds),
                "scoring_criteria": json.dumps({"global": draft.scoring_criteria}),
                "min_assessment_score": draft.min_assessment_score,
                "publish_targets": json.dumps(_publish_targets(draft)),
                "assigned_vendors": json.dumps(draft.assigned_vendors),
                "offer_template_id": draft.offer_template_id
            }
        )
        job_id = result.fetchone()[0]

        rows, skipped = job_wizard.build_round_rows(job_id, draft.interview_rounds)
        for row in rows:
            _insert_round(db, row)

    if skipped:
        logger.warning("Job %d: skipped rounds %s (one round per type)", job_id, skipped)

    message = "Job published successfully" if status == "published" else "Job saved as draft"
    if skipped:
        message += f". Only one round per interview type is kept; skipped round(s) {', '.join(map(str, skipped))}"

    return JobCreateResponse(
        job_id=job_id,
        company_id=company_id,
        status=status,
        rounds_created=len(rows),
        skipped_rounds=skipped,
        message=message
    )


# ============================================================
# LISTING / CRUD
# ============================================================

@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title and description"),
    location: Optional[str] = Query(None),
    employment_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    remote_only: bool = Query(False)
):
    """List published job postings with filters and pagination."""
    where = " WHERE j.status = 'published'"
    params = {}

    if search:
        where += " AND (j.title ILIKE :search OR j.description ILIKE :search)"
        params["search"] = f"%{search}%"
    if location:
        where += " AND j.location ILIKE :location"
        params["location"] = f"%{location}%"
    if employment_type:
        where += " AND j.employment_type = :employment_type"
        params["employment_type"] = employment_type
    if experience_level:
        where += " AND j.experience_level = :experience_level"
        params["experience_level"] = experience_level
    if remote_only:
        where += " AND j.remote_allowed = TRUE"

    count = execute_raw_sql(
        "SELECT COUNT(*) AS total FROM jobs j JOIN companies c ON j.company_id = c.company_id" + where,
        params
    )
    total = count[0]["total"] if count else 0

    offset = (page - 1) * page_size
    results = execute_raw_sql(
        JOB_SELECT + where + f" ORDER BY j.created_at DESC LIMIT {page_size} OFFSET {offset}",
        params
    )

    return JobListResponse(
        jobs=[_job_response(r) for r in results], total=total, page=page, page_size=page_size
    )


@router.get("/mine", response_model=List[JobResponse])
async def list_my_jobs(
    status: Optional[str] = Query(None),
    user: dict = Depends(require_roles(*HIRING_ROLES))
):
    """Jobs created by the current user (admins see all), any status."""
    sql = JOB_SELECT + " WHERE 1=1"
    params = {}
    if user["role"] not in ADMIN_ROLES:
        sql += " AND j.created_by = :uid"
        params["uid"] = user["user_id"]
    if status:
        sql += " AND j.status = :status"
        params["status"] = status
    sql += " ORDER BY j.created_at DESC"
    return [_job_response(r) for r in execute_raw_sql(sql, params)]


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int):
    """Get details of a specific job."""
    results = execute_raw_sql(JOB_SELECT + " WHERE j.job_id = :jid", {"jid": job_id})
    if not results:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(results[0])


@router.put("/{job_id}", response_model=MessageResponse)
async def update_job(job_id: int, update: JobUpdate, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """Update a job posting. Only the owner or an admin can update."""
    with get_db_session() as db:
        _check_job_access(db, job_id, user)

        updates = []
        params = {"jid": job_id}

        for field in ["title", "description", "location", "remote_allowed", "salary_min", "salary_max",
                      "currency", "total_positions", "min_assessment_score", "is_urgent"]:
            value = getattr(update, field)
            if value is not None:
                updates.append(f"{field} = :{field}")
                params[field] = value

        for field in ["employment_type", "experience_level", "status"]:
            value = getattr(update, field)
            if value is not None:
                updates.append(f"{field} = :{field}")
                params[field] = value.value

        if not updates:
            raise HTTPException(status_code=400, detail="No fields to update")

        db.execute(
            text(f"UPDATE jobs SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
            params
        )

    return MessageResponse(message="Job updated successfully")


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """Delete a job posting. Cascades to rounds and applications."""
    with get_db_session() as db:
        _check_job_access(db, job_id, user)
        db.execute(text("DELETE FROM jobs WHERE job_id = :jid"), {"jid": job_id})

    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/publish", response_model=MessageResponse)
async def publish_job(job_id: int, user: dict = Depends(require_roles(*HIRING_ROLES))):
    with get_db_session() as db:
        status = _check_job_access(db, job_id, user)
        if status == "published":
            raise HTTPException(status_code=400, detail="Job is already published")
        if status == "closed":
            raise HTTPException(status_code=400, detail="Closed jobs cannot be published")
        db.execute(
            text("UPDATE jobs SET status = 'published', updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
            {"jid": job_id}
        )

    return MessageResponse(message="Job published successfully")


# ============================================================
# INTERVIEW ROUNDS
# ============================================================

ROUND_SELECT = """
    SELECT round_id, job_id, round_type, round_number, duration_minutes, scoring_criteria,
           interviewer_profiles, is_ai_assisted
    FROM interview_rounds
"""


@router.get("/{job_id}/rounds", response_model=List[InterviewRoundResponse])
async def list_rounds(job_id: int, user: dict = Depends(require_roles(*HIRING_ROLES, "interviewer"))):
    results = execute_raw_sql(ROUND_SELECT + " WHERE job_id = :jid ORDER BY round_number", {"jid": job_id})
    return [_round_response(r) for r in results]


@router.post("/{job_id}/rounds/defaults", response_model=List[InterviewRoundResponse], status_code=201)
async def create_default_rounds(job_id: int, user: dict = Depends(require_roles(*HIRING_ROLES))):
    """AI screening (30 min) -> human interview (60 min) -> AI + human final (45 min)."""
    with get_db_session() as db:
        _check_job_access(db, job_id, user)

        existing = db.execute(
            text("SELECT COUNT(*) FROM interview_rounds WHERE job_id = :jid"),
            {"jid": job_id}
        ).fetchone()[0]
        if existing:
            raise HTTPException(status_code=409, detail="Job already has interview rounds")

        rows = job_wizard.default_round_rows(job_id)
        for row in rows:
            _insert_round(db, row)
        db.execute(
            text("UPDATE jobs SET interview_rounds = :n, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
            {"n": len(rows), "jid": job_id}
        )

    results = execute_raw_sql(ROUND_SELECT + " WHERE job_id = :jid ORDER BY round_number", {"jid": job_id})
    return [_round_response(r) for r in results]


# ============================================================
# APPLY
# ============================================================

@router.post("/{job_id}/apply", response_model=MessageResponse, status_code=201)
async def apply_to_job(job_id: int, application: ApplicationCreate, candidate: dict = Depends(get_current_candidate)):
    """Apply to a job. Candidates only. Cannot apply twice to same job."""
    with get_db_session() as db:
        # Check job exists and is published
        result = db.execute(text("SELECT status FROM jobs WHERE job_id = :jid"), {"jid": job_id})
        job = result.fetchone()
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        if job[0] != "published":
            raise HTTPException(status_code=400, detail="Job is not accepting applications")

        # Check not already applied
        result = db.execute(
            text("SELECT application_id FROM job_applications WHERE candidate_id = :cid AND job_id = :jid"),
            {"cid": candidate["candidate_id"], "jid": job_id}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Already applied to this job")

        db.execute(
            text("""
                INSERT INTO job_applications (job_id, candidate_id, vendor_id, cover_letter, status)
                VALUES (:jid, :cid, :vendor_id, :cover, 'applied')
            """),
            {
                "jid": job_id, "cid": candidate["candidate_id"],
                "vendor_id": application.vendor_id, "cover": application.cover_letter
            }
        )

    return MessageResponse(message="Application submitted successfully")
