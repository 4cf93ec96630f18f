"""
Offer Workflow

Five steps per selected candidate:
    1 background_check -> 2 generate_offer -> 3 hr_approval -> 4 send_offer -> 5 track_response

``advance`` turns the current workflow row plus the caller's step data into
the column updates for that row. Side effects (email, application status)
are left to the caller.
"""

import html
from datetime import datetime
from typing import Any, Dict, List, Optional

from simplifyhr.schemas.schemas import WorkflowStepData

STEPS = ["background_check", "generate_offer", "hr_approval", "send_offer", "track_response"]
CLOSED_STATUSES = {"completed", "rejected", "cancelled"}


class WorkflowError(Exception):
    """The workflow cannot move in the requested way."""


def step_index(step: Optional[str]) -> int:
    """1-based position of ``step``; unknown steps count as the first."""
    try:
        return STEPS.index(step) + 1
    except ValueError:
        return 1


def next_step(step: str) -> Optional[str]:
    index = step_index(step)
    return STEPS[index] if index < len(STEPS) else None


def workflow_status_label(workflow: Optional[dict]) -> str:
    if not workflow:
        return "Not Started"
    status = workflow.get("status") or "pending"
    if status in ("pending", "in_progress"):
        return f"Step {step_index(workflow.get('current_step'))}/{len(STEPS)}"
    if status == "completed":
        return "Offer Accepted"
    if status == "rejected":
        return "Offer Rejected"
    if status == "cancelled":
        return "Cancelled"
    return "In Progress"


def format_amount(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.0f}"


def render_offer_html(
    job_title: str,
    candidate_name: str,
    amount: float,
    currency: str,
    start_date=None
) -> str:
    """Offer letter body. Every interpolated value is HTML-escaped."""
    title = html.escape(job_title or "")
    name = html.escape(candidate_name or "")
    salary = html.escape(format_amount(amount, currency or ""))
    lines = [
        f"<h2>Job Offer - {title}</h2>",
        f"<p>Dear {name},</p>",
        f"<p>We are pleased to offer you the position of {title}.</p>",
        f"<p>Salary: {salary}</p>",
    ]
    if start_date:
        lines.append(f"<p>Start date: {html.escape(str(start_date))}</p>")
    lines.append("<p>Please review and respond within 5 business days.</p>")
    return "\n".join(lines)


def _log(logs: List[dict], step: str, result: str, now: datetime) -> List[dict]:
    return list(logs or []) + [{"step": step, "result": result, "at": now.isoformat()}]


def advance(
    workflow: dict,
    data: WorkflowStepData,
    context: Dict[str, Any],
    now: datetime,
    user_id: Optional[int] = None,
    notified: bool = False
) -> Dict[str, Any]:
    """
    Apply ``data`` to the workflow's current step.

    Args:
        workflow: offer_workflows row (current_step, status, logs, ...)
        data: Step fields supplied by the caller
        context: {"job_title", "candidate_name"} for offer generation
        now: Timestamp for every *_at column touched
        user_id: Acting user (recorded on HR approval)
        notified: Whether the candidate email went out (send_offer)

    Returns:
        Column -> value updates for the workflow row

    Raises:
        WorkflowError: workflow already closed
        ValueError: required step data is missing
    """
    status = workflow.get("status") or "pending"
    if status in CLOSED_STATUSES:
        raise WorkflowError(f"Workflow is already {status}")

    step = workflow.get("current_step") or STEPS[0]
    logs = workflow.get("logs") or []
    updates: Dict[str, Any] = {"status": "in_progress"}

    if step == "background_check":
        if data.background_check_status is None:
            raise ValueError("background_check_status is required to finish the background check")
        check = data.background_check_status.value
        updates.update({
            "background_check_status": check,
            "background_check_result": data.background_check_result,
            "background_check_provider": data.background_check_provider,
            "background_check_reference_id": data.background_check_reference_id,
            "background_check_completed_at": now,
        })
        if check == "failed":
            updates["status"] = "rejected"
            updates["workflow_completed_at"] = now
        else:
            updates["current_step"] = next_step(step)
        updates["logs"] = _log(logs, step, check, now)

    elif step == "generate_offer":
        if data.final_offer_amount is None:
            raise ValueError("final_offer_amount is required to generate an offer")
        currency = data.final_offer_currency or context.get("currency") or "IDR"
        updates.update({
            "offer_template_id": data.offer_template_id,
            "generated_offer_content": render_offer_html(
                context.get("job_title", ""),
                context.get("candidate_name", ""),
                data.final_offer_amount,
                currency,
                data.start_date
            ),
            "offer_details": {
                "position": context.get("job_title"),
                "salary": data.final_offer_amount,
                "currency": currency,
                "start_date": data.start_date.isoformat() if data.start_date else None,
            },
            "final_offer_amount": data.final_offer_amount,
            "final_offer_currency": currency,
            "offer_generated_at": now,
            "hr_approval_status": "pending",
            "current_step": next_step(step),
        })
        updates["logs"] = _log(logs, step, "generated", now)

    elif step == "hr_approval":
        decision = data.hr_approval_status.value if data.hr_approval_status else None
        if decision in (None, "pending"):
            raise ValueError("hr_approval_status must be approved, rejected or revision_required")
        updates.update({
            "hr_approval_status": decision,
            "hr_comments": data.hr_comments,
            "hr_approved_by": user_id,
            "hr_approved_at": now,
        })
        if decision == "rejected":
            updates["status"] = "rejected"
            updates["workflow_completed_at"] = now
        elif decision == "revision_required":
            updates["current_step"] = "generate_offer"
        else:
            updates["current_step"] = next_step(step)
        updates["logs"] = _log(logs, step, decision, now)

    elif step == "send_offer":
        updates.update({
            "sent_to_candidate_at": now,
            "candidate_notification_sent": notified,
            "offer_letter_url": data.offer_letter_url,
            "candidate_response": "pending",
            "current_step": next_step(step),
        })
        updates["logs"] = _log(logs, step, "sent" if notified else "recorded", now)

    elif step == "track_response":
        if data.candidate_response is None:
            raise ValueError("candidate_response is required")
        response = data.candidate_response.value
        updates.update({
            "candidate_response": response,
            "candidate_response_at": now,
            "candidate_comment": data.candidate_comment,
        })
        if response == "accepted":
            updates["status"] = "completed"
            updates["workflow_completed_at"] = now
        elif response == "rejected":
            updates["status"] = "rejected"
            updates["workflow_completed_at"] = now
        updates["logs"] = _log(logs, step, response, now)

    else:
        raise WorkflowError(f"Unknown workflow step '{step}'")

    return updates
