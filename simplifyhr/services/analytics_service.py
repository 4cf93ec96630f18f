"""
Analytics Service

Aggregates plain rows (dicts from execute_raw_sql / Mongo) into dashboard
metrics. No database access here; the analytics routes fetch the rows.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

import numpy as np

TIME_SERIES_DAYS = 30
HIGH_PERFORMER_SCORE = 80

# Inclusive integer ranges 0-20, 21-40, ... ; numpy puts 100 in the last bin
SCORE_BIN_EDGES = [0, 21, 41, 61, 81, 100]
SCORE_BIN_LABELS = ["0-20", "21-40", "41-60", "61-80", "81-100"]


def _day(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def _as_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def _mean(values: List[float]) -> float:
    if not values:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def status_distribution(rows: Iterable[dict], with_percentage: bool = True) -> List[Dict]:
    """Count rows per status. Labels are capitalised, order is first-seen."""
    counts = Counter(row.get("status") for row in rows if row.get("status"))
    total = sum(counts.values())
    result = []
    for status, count in counts.items():
        entry = {"status": status.capitalize(), "count": count}
        if with_percentage:
            entry["percentage"] = round(count / total * 100) if total else 0
        result.append(entry)
    return result


def _hired_workflows(workflows: Iterable[dict]) -> List[dict]:
    return [w for w in workflows if w.get("candidate_response") == "accepted"]


def _hire_time(workflow: dict) -> Optional[datetime]:
    return _as_datetime(
        workflow.get("candidate_response_at")
        or workflow.get("workflow_completed_at")
        or workflow.get("updated_at")
    )


def compute_recruitment_metrics(
    jobs: List[dict],
    applications: List[dict],
    schedules: List[dict],
    workflows: List[dict],
    today: Optional[date] = None
) -> Dict:
    """
    Recruitment dashboard.

    Returns:
        {"metrics": {...}, "time_series": [...30 days...],
         "job_status": [...], "application_status": [...]}
    """
    today = today or date.today()
    hired = _hired_workflows(workflows)
    applied_at = {a["application_id"]: _as_datetime(a.get("applied_at")) for a in applications}

    days_to_hire = []
    for workflow in hired:
        start = applied_at.get(workflow.get("application_id"))
        end = _hire_time(workflow)
        if start and end:
            days_to_hire.append((end - start).total_seconds() / 86400)

    offer_amounts = [float(w.get("final_offer_amount") or 0) for w in hired]
    total_applications = len(applications)

    metrics = {
        "total_jobs": len(jobs),
        "active_jobs": sum(1 for j in jobs if j.get("status") == "published"),
        "total_applications": total_applications,
        "hired_candidates": len(hired),
        "average_time_to_hire": round(_mean(days_to_hire)),
        "average_cost_per_hire": round(_mean(offer_amounts), 2),
        "conversion_rate": round(len(hired) / total_applications * 100, 2) if total_applications else 0.0,
        "pending_interviews": sum(1 for s in schedules if s.get("status") == "scheduled"),
    }

    # Oldest first, ending today
    series = {}
    for offset in range(TIME_SERIES_DAYS - 1, -1, -1):
        series[today - timedelta(days=offset)] = {"applications": 0, "hires": 0, "interviews": 0}

    for application in applications:
        day = _day(application.get("applied_at"))
        if day in series:
            series[day]["applications"] += 1
    for workflow in hired:
        day = _day(_hire_time(workflow))
        if day in series:
            series[day]["hires"] += 1
    for schedule in schedules:
        day = _day(schedule.get("scheduled_at"))
        if day in series:
            series[day]["interviews"] += 1

    return {
        "metrics": metrics,
        "time_series": [{"date": day, **counts} for day, counts in series.items()],
        "job_status": status_distribution(jobs),
        "application_status": status_distribution(applications, with_percentage=False),
    }


def score_distribution(scores: List[float]) -> List[Dict]:
    """Five buckets of twenty points with counts and rounded percentages."""
    total = len(scores)
    if total:
        clipped = np.clip(np.asarray(scores, dtype=float), 0, 100)
        counts, _ = np.histogram(clipped, bins=SCORE_BIN_EDGES)
    else:
        counts = [0] * len(SCORE_BIN_LABELS)

    return [
        {
            "range": label,
            "count": int(count),
            "percentage": round(int(count) / total * 100) if total else 0,
        }
        for label, count in zip(SCORE_BIN_LABELS, counts)
    ]


def _human_score(schedule: dict) -> Optional[float]:
    scores = schedule.get("interviewer_scores") or {}
    values = list(scores.values()) if isinstance(scores, dict) else list(scores)
    values = [float(v) for v in values if v is not None]
    if not values:
        return None
    return _mean(values)


def compute_ai_performance(
    applications: List[dict],
    schedules: List[dict],
    sessions: List[dict]
) -> Dict:
    """
    AI screening and interview quality.

    ``assessment_accuracy`` is the mean agreement between the AI score and
    the average human score, 100 - |ai - human|, over interviews that have both.
    """
    scores = [float(a["screening_score"]) for a in applications if a.get("screening_score") is not None]

    agreements = []
    for schedule in schedules:
        ai_score = schedule.get("ai_score")
        human = _human_score(schedule)
        if ai_score is None or human is None:
            continue
        agreements.append(max(0.0, 100 - abs(float(ai_score) - human)))

    metrics = {
        "total_screenings": len(scores),
        "average_score": round(_mean(scores), 2),
        "high_performing_candidates": sum(1 for s in scores if s >= HIGH_PERFORMER_SCORE),
        "ai_interview_sessions": len(sessions),
        "assessment_accuracy": round(_mean(agreements), 2),
    }
    return {"metrics": metrics, "score_distribution": score_distribution(scores)}


# Cost model, amounts in IDR
DEFAULT_SALARY = 50_000_000
DEFAULT_COMMISSION_RATE = 15.0
PLATFORM_COST_PER_HIRE = 500_000
ADDITIONAL_SERVICES_PER_HIRE = 100_000
VALUE_PER_HIRE = 5_000_000
TRADITIONAL_COST_PER_HIRE = 3_000_000
ROI_TREND_MONTHS = 6
TOP_VENDORS = 5


def _roi(value: float, cost: float) -> float:
    return (value - cost) / cost * 100 if cost > 0 else 0.0


def _month_starts(today: date, count: int) -> List[date]:
    """First day of each of the last ``count`` months, oldest first, ending with this month."""
    year, month = today.year, today.month
    starts = []
    for _ in range(count):
        starts.append(date(year, month, 1))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    return starts[::-1]


def compute_cost_metrics(
    jobs: List[dict],
    applications: List[dict],
    vendors: List[dict],
    today: Optional[date] = None
) -> Dict:
    """
    Recruitment cost and ROI.

    A hire costs the average vendor commission on the job's ``salary_max``
    plus fixed platform and additional-service fees. ``applications`` rows
    need ``job_id``, ``status``, ``vendor_id`` and ``hired_at`` (or ``applied_at``).

    Returns:
        {"metrics": {...}, "cost_breakdown": [...], "roi_trend": [...6 months...],
         "vendor_costs": [...]}
    """
    today = today or date.today()
    salary_by_job = {j.get("job_id"): j.get("salary_max") for j in jobs}
    hired = [a for a in applications if a.get("status") == "hired"]
    hires = len(hired)

    total_salary = sum(float(salary_by_job.get(a.get("job_id")) or DEFAULT_SALARY) for a in hired)
    commission_rate = (
        _mean([float(v.get("commission_rate") or 0) for v in vendors]) if vendors else DEFAULT_COMMISSION_RATE
    )

    vendor_commissions = total_salary * commission_rate / 100
    platform_costs = hires * PLATFORM_COST_PER_HIRE
    additional_services = hires * ADDITIONAL_SERVICES_PER_HIRE
    total_cost = vendor_commissions + platform_costs + additional_services
    cost_per_hire = total_cost / hires if hires else 0.0

    total_budget = sum(max(float(j.get("salary_max") or 0), 0) for j in jobs)

    metrics = {
        "total_recruitment_cost": round(total_cost, 2),
        "average_cost_per_hire": round(cost_per_hire, 2),
        "cost_per_application": round(total_cost / len(applications), 2) if applications else 0.0,
        "vendor_commissions": round(vendor_commissions, 2),
        "roi": round(_roi(hires * VALUE_PER_HIRE, total_cost), 2),
        "cost_savings": round(hires * TRADITIONAL_COST_PER_HIRE - total_cost, 2),
        "budget_utilization": round(total_salary / total_budget * 100, 2) if total_budget else 0.0,
    }

    breakdown = []
    for category, amount in (
        ("Vendor Commissions", vendor_commissions),
        ("Platform Costs", platform_costs),
        ("Additional Services", additional_services),
    ):
        breakdown.append({
            "category": category,
            "amount": round(amount, 2),
            "percentage": round(amount / total_cost * 100, 2) if total_cost else 0.0,
        })

    hires_per_month = Counter()
    for application in hired:
        day = _day(application.get("hired_at") or application.get("applied_at"))
        if day:
            hires_per_month[(day.year, day.month)] += 1

    trend = []
    for start in _month_starts(today, ROI_TREND_MONTHS):
        count = hires_per_month[(start.year, start.month)]
        cost = count * cost_per_hire
        trend.append({
            "month": start.strftime("%b"),
            "cost": round(cost, 2),
            "hires": count,
            "roi": round(_roi(count * VALUE_PER_HIRE, cost), 2),
            "savings": round(count * TRADITIONAL_COST_PER_HIRE - cost, 2),
        })

    hires_by_vendor = Counter(a.get("vendor_id") for a in hired if a.get("vendor_id") is not None)
    vendor_costs = []
    for vendor in vendors[:TOP_VENDORS]:
        count = hires_by_vendor[vendor.get("vendor_id")]
        rate = float(vendor.get("commission_rate") or DEFAULT_COMMISSION_RATE)
        vendor_total = count * cost_per_hire * rate / DEFAULT_COMMISSION_RATE
        vendor_costs.append({
            "vendor": vendor.get("vendor_name"),
            "total_cost": round(vendor_total, 2),
            "hires": count,
            "cost_per_hire": round(vendor_total / count, 2) if count else 0.0,
            "performance": vendor.get("success_rate"),
        })

    return {"metrics": metrics, "cost_breakdown": breakdown, "roi_trend": trend, "vendor_costs": vendor_costs}
