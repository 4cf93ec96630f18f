"""
Offer Routes

POST /offers/templates - Upload an offer letter template (multipart)
GET /offers/templates - Own templates
POST /offers/workflows - Start the offer workflow for a selected application
GET /offers/workflows - List workflows
POST /offers/workflows/{workflow_id}/advance - Complete the current step
POST /offers/workflows/{workflow_id}/cancel - Cancel a workflow
"""

import json
import logging
import smtplib
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy import text

from simplifyhr.core.auth import HIRING_ROLES, require_roles
from simplifyhr.db.mongodb import get_template_bucket
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    MessageResponse, OfferTemplateResponse, WorkflowCreate, WorkflowResponse, WorkflowStatus, WorkflowStepData
)
from simplifyhr.services import offer_workflow
from simplifyhr.services.notifier import send_offer_email
from simplifyhr.utils.file_upload import read_template_file, template_storage_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/offers", tags=["Offers"])

JSONB_COLUMNS = {"background_check_result", "offer_details", "logs"}

WORKFLOW_SELECT = """
    SELECT w.*, j.title AS job_title, j.currency AS job_currency, u.first_name, u.email AS candidate_email,
           TRIM(CONCAT(u.first_name, ' ', u.last_name)) AS candidate_name
    FROM offer_workflows w
    JOIN job_applications a ON w.application_id = a.application_id
    JOIN jobs j ON a.job_id = j.job_id
    JOIN candidates ca ON a.candidate_id = ca.candidate_id
    JOIN users u ON ca.user_id = u.user_id
"""


def _workflow_response(r: dict) -> WorkflowResponse:
    fields = WorkflowResponse.model_fields
    return WorkflowResponse(
        **{k: v for k, v in r.items() if k in fields and k != "status_label"},
        status_label=offer_workflow.workflow_status_label(r)
    )


def _get_workflow_or_404(workflow_id: int) -> dict:
    results = execute_raw_sql(WORKFLOW_SELECT + " WHERE w.workflow_id = :id", {"id": workflow_id})
    if not results:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return results[0]


# ============================================================
# TEMPLATES
# ============================================================

@router.post("/templates", response_model=OfferTemplateResponse, status_code=201)
async def upload_template(
    file: UploadFile = File(...),
    template_name: Optional[str] = Query(None),
    user: dict = Depends(require_roles(*HIRING_ROLES))
):
    """Store the file in GridFS under {user_id}/{timestamp}_{filename} and register it."""
    content, filename = await read_template_file(file)
    path = template_storage_path(user["user_id"], filename)

    file_id = get_template_bucket().upload_from_stream(
        path, content, metadata={"content_type": file.content_type, "uploaded_by": user["user_id"]}
    )

    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO offer_templates (template_name, storage_path, file_id, content_type, size_bytes, created_by)
                VALUES (:name, :path, :file_id, :content_type, :size, :uid)
                RETURNING template_id, created_at
            """),
            {
                "name": (template_name or filename).strip(),
                "path": path,
                "file_id": str(file_id),
                "content_type": file.content_type,
                "size": len(content),
                "uid": user["user_id"],
            }
        )
        template_id, created_at = result.fetchone()

    logger.info("Offer template %d uploaded to %s (%d bytes)", template_id, path, len(content))
    return OfferTemplateResponse(
        template_id=template_id, template_name=(template_name or filename).strip(), storage_path=path,
        content_type=file.content_type, size_bytes=len(content), created_at=created_at
    )


@router.get("/templates", response_model=List[OfferTemplateResponse])
async def list_templates(user: dict = Depends(require_roles(*HIRING_ROLES))):
    results = execute_raw_sql("""
        SELECT template_id, template_name, storage_path, content_type, size_bytes, created_at
        FROM offer_templates WHERE created_by = :uid ORDER BY created_at DESC
    """, {"uid": user["user_id"]})
    return [OfferTemplateResponse(**r) for r in results]


# ============================================================
# WORKFLOWS
# ============================================================

@router.post("/workflows", response_model=WorkflowResponse, status_code=201)
async def create_workflow(data: WorkflowCreate, user: dict = Depends(require_roles(*HIRING_ROLES))):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT status FROM job_applications WHERE application_id = :id"),
            {"id": data.application_id}
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Application not found")
        if row[0] != "selected":
            raise HTTPException(status_code=400, detail="Offer workflows can only start for selected candidates")

        existing = db.execute(
            text("SELECT workflow_id FROM offer_workflows WHERE application_id = :id"),
            {"id": data.application_id}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="A workflow already exists for this application")

        result = db.execute(
            text("""
                INSERT INTO offer_workflows (application_id, current_step, status, created_by,
                    background_check_status, priority_level, notes)
                VALUES (:aid, :step, 'pending', :uid, 'pending', :priority, :notes)
                RETURNING workflow_id
            """),
            {
                "aid": data.application_id,
                "step": offer_workflow.STEPS[0],
                "uid": user["user_id"],
                "priority": data.priority_level,
                "notes": data.notes,
            }
        )
        workflow_id = result.fetchone()[0]

    logger.info("Offer workflow %d started for application %d", workflow_id, data.application_id)
    return _workflow_response(_get_workflow_or_404(workflow_id))


@router.get("/workflows", response_model=List[WorkflowResponse])
async def list_workflows(
    status: Optional[WorkflowStatus] = Query(None),
    job_id: Optional[int] = Query(None),
    user: dict = Depends(require_roles(*HIRING_ROLES))
):
    sql = WORKFLOW_SELECT + " WHERE 1=1"
    params = {}
    if status:
        sql += " AND w.status = :status"
        params["status"] = status.value
    if job_id:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id
    sql += " ORDER BY w.priority_level, w.created_at DESC"
    return [_workflow_response(r) for r in execute_raw_sql(sql, params)]


@router.post("/workflows/{workflow_id}/advance", response_model=WorkflowResponse)
async def advance_workflow(
    workflow_id: int,
    data: WorkflowStepData,
    user: dict = Depends(require_roles(*HIRING_ROLES))
):
    """
    Apply the step data to the current step and move the workflow on.

    send_offer emails the candidate first (when SMTP is enabled);
    an accepted offer marks the application hired.
    """
    workflow = _get_workflow_or_404(workflow_id)
    if workflow["status"] in offer_workflow.CLOSED_STATUSES:
        raise HTTPException(status_code=409, detail=f"Workflow is already {workflow['status']}")

    notified = False
    if workflow["current_step"] == "send_offer":
        try:
            notified = send_offer_email(
                workflow["candidate_email"], workflow["first_name"], workflow["job_title"],
                workflow["generated_offer_content"] or ""
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Offer email for workflow %d failed: %s", workflow_id, e)
            raise HTTPException(status_code=502, detail="Failed to send offer email")

    context = {
        "job_title": workflow["job_title"],
        "candidate_name": workflow["candidate_name"],
        "currency": workflow["job_currency"],
    }
    try:
        updates = offer_workflow.advance(
            workflow, data, context, datetime.utcnow(), user_id=user["user_id"], notified=notified
        )
    except offer_workflow.WorkflowError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    assignments = []
    params = {"id": workflow_id}
    for column, value in updates.items():
        if column in JSONB_COLUMNS:
            assignments.append(f"{column} = CAST(:{column} AS JSONB)")
            params[column] = json.dumps(value) if value is not None else None
        else:
            assignments.append(f"{column} = :{column}")
            params[column] = value

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE offer_workflows SET {', '.join(assignments)}, updated_at = CURRENT_TIMESTAMP "
                 "WHERE workflow_id = :id"),
            params
        )
        if updates.get("status") == "completed":
            db.execute(
                text("UPDATE job_applications SET status = 'hired', updated_at = CURRENT_TIMESTAMP "
                     "WHERE application_id = :aid"),
                {"aid": workflow["application_id"]}
            )

    logger.info(
        "Workflow %d: %s -> %s (%s)", workflow_id, workflow["current_step"],
        updates.get("current_step", workflow["current_step"]), updates["status"]
    )
    return _workflow_response(_get_workflow_or_404(workflow_id))


@router.post("/workflows/{workflow_id}/cancel", response_model=MessageResponse)
async def cancel_workflow(workflow_id: int, user: dict = Depends(require_roles(*HIRING_ROLES))):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT status FROM offer_workflows WHERE workflow_id = :id"),
            {"id": workflow_id}
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Workflow not found")
        if row[0] in offer_workflow.CLOSED_STATUSES:
            raise HTTPException(status_code=409, detail=f"Workflow is already {row[0]}")

        db.execute(
            text("""
                UPDATE offer_workflows
                SET status = 'cancelled', workflow_completed_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                WHERE workflow_id = :id
            """),
            {"id": workflow_id}
        )

    return MessageResponse(message="Workflow cancelled")
