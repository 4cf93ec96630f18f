"""
Analytics Routes (admin/client)

GET /analytics/recruitment - Hiring funnel metrics and 30-day activity
GET /analytics/ai-performance - AI screening and interview quality
GET /analytics/cost-roi - Recruitment cost, ROI trend and vendor costs
"""

from fastapi import APIRouter, Depends

from simplifyhr.core.auth import HIRING_ROLES, require_roles
from simplifyhr.db.postgres import execute_raw_sql
from simplifyhr.schemas.schemas import AIPerformanceResponse, CostROIResponse, RecruitmentAnalyticsResponse
from simplifyhr.services.analytics_service import (
    compute_ai_performance, compute_cost_metrics, compute_recruitment_metrics
)
from simplifyhr.services.mongo_service import AIInterviewSessionService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def _scope(user: dict, alias: str) -> tuple:
    """Clients only see their own jobs; admins see everything."""
    if user["role"] == "client":
        return f" WHERE {alias}.created_by = :uid", {"uid": user["user_id"]}
    return "", {}


@router.get("/recruitment", response_model=RecruitmentAnalyticsResponse)
async def recruitment_analytics(user: dict = Depends(require_roles(*HIRING_ROLES))):
    where, params = _scope(user, "j")

    jobs = execute_raw_sql(f"SELECT j.job_id, j.status, j.created_at FROM jobs j{where}", params)
    applications = execute_raw_sql(f"""
        SELECT a.application_id, a.status, a.applied_at
        FROM job_applications a JOIN jobs j ON a.job_id = j.job_id{where}
    """, params)
    schedules = execute_raw_sql(f"""
        SELECT s.schedule_id, s.status, s.scheduled_at
        FROM interview_schedules s
        JOIN job_applications a ON s.application_id = a.application_id
        JOIN jobs j ON a.job_id = j.job_id{where}
    """, params)
    workflows = execute_raw_sql(f"""
        SELECT w.application_id, w.candidate_response, w.candidate_response_at, w.workflow_completed_at,
               w.updated_at, w.final_offer_amount
        FROM offer_workflows w
        JOIN job_applications a ON w.application_id = a.application_id
        JOIN jobs j ON a.job_id = j.job_id{where}
    """, params)

    return RecruitmentAnalyticsResponse(**compute_recruitment_metrics(jobs, applications, schedules, workflows))


@router.get("/ai-performance", response_model=AIPerformanceResponse)
async def ai_performance(user: dict = Depends(require_roles(*HIRING_ROLES))):
    where, params = _scope(user, "j")

    applications = execute_raw_sql(f"""
        SELECT a.application_id, a.screening_score
        FROM job_applications a JOIN jobs j ON a.job_id = j.job_id{where}
    """, params)
    schedules = execute_raw_sql(f"""
        SELECT s.schedule_id, s.ai_score, s.interviewer_scores
        FROM interview_schedules s
        JOIN job_applications a ON s.application_id = a.application_id
        JOIN jobs j ON a.job_id = j.job_id{where}
    """, params)

    sessions = AIInterviewSessionService().list_all()
    if user["role"] == "client":
        visible = {s["schedule_id"] for s in schedules}
        sessions = [s for s in sessions if s.get("interview_id") in visible]

    return AIPerformanceResponse(**compute_ai_performance(applications, schedules, sessions))


@router.get("/cost-roi", response_model=CostROIResponse)
async def cost_roi(user: dict = Depends(require_roles(*HIRING_ROLES))):
    """Hires are dated by the accepted offer when there is one."""
    where, params = _scope(user, "j")

    jobs = execute_raw_sql(f"SELECT j.job_id, j.status, j.salary_max FROM jobs j{where}", params)
    applications = execute_raw_sql(f"""
        SELECT a.application_id, a.job_id, a.vendor_id, a.status, a.applied_at,
               CASE WHEN a.status = 'hired' THEN COALESCE(w.candidate_response_at, a.updated_at) END AS hired_at
        FROM job_applications a
        JOIN jobs j ON a.job_id = j.job_id
        LEFT JOIN offer_workflows w ON w.application_id = a.application_id{where}
    """, params)
    vendors = execute_raw_sql("""
        SELECT vendor_id, vendor_name, commission_rate, success_rate
        FROM vendors WHERE is_active = TRUE ORDER BY vendor_name
    """)

    return CostROIResponse(**compute_cost_metrics(jobs, applications, vendors))
