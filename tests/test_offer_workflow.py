"""
Tests for the five-step offer workflow.
"""

from datetime import date

import pytest

from simplifyhr.schemas.schemas import WorkflowStepData
from simplifyhr.services import offer_workflow

CONTEXT = {"job_title": "Backend <Engineer>", "candidate_name": "Ana & Co", "currency": "IDR"}


def workflow(step="background_check", status="pending", **extra):
    row = {"workflow_id": 1, "current_step": step, "status": status, "logs": []}
    row.update(extra)
    return row


def test_background_check_moves_to_generate_offer(now):
    updates = offer_workflow.advance(
        workflow(), WorkflowStepData(background_check_status="completed"), CONTEXT, now
    )

    assert updates["status"] == "in_progress"
    assert updates["current_step"] == "generate_offer"
    assert updates["background_check_status"] == "completed"
    assert updates["logs"] == [{"step": "background_check", "result": "completed", "at": now.isoformat()}]


def test_failed_background_check_rejects(now):
    updates = offer_workflow.advance(
        workflow(), WorkflowStepData(background_check_status="failed"), CONTEXT, now
    )
    assert updates["status"] == "rejected"
    assert updates["workflow_completed_at"] == now
    assert "current_step" not in updates


def test_generate_offer_renders_escaped_html(now):
    data = WorkflowStepData(final_offer_amount=15_000_000, start_date=date(2024, 4, 1))
    updates = offer_workflow.advance(workflow("generate_offer"), data, CONTEXT, now)

    html = updates["generated_offer_content"]
    assert "Backend &lt;Engineer&gt;" in html
    assert "Ana &amp; Co" in html
    assert "IDR 15,000,000" in html
    assert updates["offer_details"]["start_date"] == "2024-04-01"
    assert updates["hr_approval_status"] == "pending"
    assert updates["current_step"] == "hr_approval"


def test_generate_offer_requires_amount(now):
    with pytest.raises(ValueError):
        offer_workflow.advance(workflow("generate_offer"), WorkflowStepData(), CONTEXT, now)


@pytest.mark.parametrize("decision,status,step", [
    ("approved", "in_progress", "send_offer"),
    ("revision_required", "in_progress", "generate_offer"),
    ("rejected", "rejected", None),
])
def test_hr_approval_decisions(now, decision, status, step):
    updates = offer_workflow.advance(
        workflow("hr_approval"), WorkflowStepData(hr_approval_status=decision), CONTEXT, now, user_id=3
    )
    assert updates["status"] == status
    assert updates.get("current_step") == step
    assert updates["hr_approved_by"] == 3


@pytest.mark.parametrize("step,data", [
    ("background_check", WorkflowStepData()),
    ("hr_approval", WorkflowStepData()),
    ("hr_approval", WorkflowStepData(hr_approval_status="pending")),
])
def test_decision_steps_require_explicit_decision(now, step, data):
    with pytest.raises(ValueError):
        offer_workflow.advance(workflow(step), data, CONTEXT, now, user_id=3)


def test_send_offer_records_notification(now):
    updates = offer_workflow.advance(workflow("send_offer"), WorkflowStepData(), CONTEXT, now, notified=True)

    assert updates["sent_to_candidate_at"] == now
    assert updates["candidate_notification_sent"] is True
    assert updates["candidate_response"] == "pending"
    assert updates["current_step"] == "track_response"


@pytest.mark.parametrize("response,status", [
    ("accepted", "completed"),
    ("rejected", "rejected"),
    ("negotiating", "in_progress"),
])
def test_track_response(now, response, status):
    updates = offer_workflow.advance(
        workflow("track_response", "in_progress"), WorkflowStepData(candidate_response=response), CONTEXT, now
    )
    assert updates["status"] == status
    assert updates["candidate_response"] == response
    assert "current_step" not in updates


def test_track_response_requires_response(now):
    with pytest.raises(ValueError):
        offer_workflow.advance(workflow("track_response"), WorkflowStepData(), CONTEXT, now)


@pytest.mark.parametrize("status", ["completed", "rejected", "cancelled"])
def test_closed_workflow_cannot_advance(now, status):
    with pytest.raises(offer_workflow.WorkflowError):
        offer_workflow.advance(workflow("track_response", status), WorkflowStepData(), CONTEXT, now)


@pytest.mark.parametrize("row,label", [
    (None, "Not Started"),
    ({"status": "pending", "current_step": "background_check"}, "Step 1/5"),
    ({"status": "in_progress", "current_step": "send_offer"}, "Step 4/5"),
    ({"status": "completed", "current_step": "track_response"}, "Offer Accepted"),
    ({"status": "rejected", "current_step": "hr_approval"}, "Offer Rejected"),
    ({"status": "cancelled", "current_step": "hr_approval"}, "Cancelled"),
    ({"status": "on_hold", "current_step": "hr_approval"}, "In Progress"),
])
def test_workflow_status_label(row, label):
    assert offer_workflow.workflow_status_label(row) == label
