"""
Tests for recruitment and AI performance analytics.
"""

from datetime import date, datetime

import pytest

from simplifyhr.services.analytics_service import (
    compute_ai_performance, compute_cost_metrics, compute_recruitment_metrics, score_distribution,
    status_distribution
)

TODAY = date(2024, 3, 30)


def test_recruitment_metrics():
    jobs = [{"status": "published"}, {"status": "published"}, {"status": "draft"}, {"status": "closed"}]
    applications = [
        {"application_id": 1, "status": "hired", "applied_at": datetime(2024, 3, 1, 9)},
        {"application_id": 2, "status": "applied", "applied_at": datetime(2024, 3, 29, 9)},
        {"application_id": 3, "status": "rejected", "applied_at": datetime(2024, 3, 29, 12)},
        {"application_id": 4, "status": "applied", "applied_at": datetime(2023, 12, 1)},
    ]
    schedules = [
        {"status": "scheduled", "scheduled_at": datetime(2024, 3, 30, 10)},
        {"status": "completed", "scheduled_at": datetime(2024, 3, 20, 10)},
    ]
    workflows = [
        {"application_id": 1, "candidate_response": "accepted", "candidate_response_at": datetime(2024, 3, 11, 9),
         "final_offer_amount": 1000},
        {"application_id": 3, "candidate_response": "rejected", "candidate_response_at": datetime(2024, 3, 29, 15),
         "final_offer_amount": 5000},
    ]

    result = compute_recruitment_metrics(jobs, applications, schedules, workflows, today=TODAY)
    metrics = result["metrics"]

    assert metrics["total_jobs"] == 4
    assert metrics["active_jobs"] == 2
    assert metrics["total_applications"] == 4
    assert metrics["hired_candidates"] == 1
    assert metrics["average_time_to_hire"] == 10
    assert metrics["average_cost_per_hire"] == 1000
    assert metrics["conversion_rate"] == 25.0
    assert metrics["pending_interviews"] == 1

    series = result["time_series"]
    assert len(series) == 30
    assert series[0]["date"] == date(2024, 3, 1)
    assert series[-1]["date"] == TODAY
    by_day = {point["date"]: point for point in series}
    assert by_day[date(2024, 3, 29)]["applications"] == 2
    assert by_day[date(2024, 3, 11)]["hires"] == 1
    assert by_day[TODAY]["interviews"] == 1

    assert result["job_status"][0] == {"status": "Published", "count": 2, "percentage": 50}


def test_status_distribution_without_percentage():
    rows = [{"status": "applied"}, {"status": "applied"}, {"status": None}]
    assert status_distribution(rows, with_percentage=False) == [{"status": "Applied", "count": 2}]


def test_score_distribution_buckets():
    buckets = score_distribution([0, 20, 21, 55, 80, 81, 100, 100])

    assert [b["range"] for b in buckets] == ["0-20", "21-40", "41-60", "61-80", "81-100"]
    assert [b["count"] for b in buckets] == [2, 1, 1, 1, 3]
    assert buckets[4]["percentage"] == 38


def test_score_distribution_empty():
    assert all(b["count"] == 0 and b["percentage"] == 0 for b in score_distribution([]))


def test_ai_performance():
    applications = [{"screening_score": 90}, {"screening_score": 70}, {"screening_score": None}]
    schedules = [
        {"ai_score": 80, "interviewer_scores": {"4": 70, "5": 90}},
        {"ai_score": 60, "interviewer_scores": {"4": 90}},
        {"ai_score": None, "interviewer_scores": {"4": 50}},
        {"ai_score": 50, "interviewer_scores": {}},
    ]
    sessions = [{"interview_id": 1}, {"interview_id": 2}]

    result = compute_ai_performance(applications, schedules, sessions)
    metrics = result["metrics"]

    assert metrics["total_screenings"] == 2
    assert metrics["average_score"] == 80.0
    assert metrics["high_performing_candidates"] == 1
    assert metrics["ai_interview_sessions"] == 2
    # agreement: 100 - |80 - 80| = 100 and 100 - |60 - 90| = 70
    assert metrics["assessment_accuracy"] == 85.0
    assert sum(b["count"] for b in result["score_distribution"]) == 2


def test_cost_metrics():
    jobs = [{"job_id": 1, "salary_max": 100_000_000}, {"job_id": 2, "salary_max": None}]
    applications = [
        {"job_id": 1, "status": "hired", "vendor_id": 10, "hired_at": datetime(2024, 3, 10)},
        {"job_id": 2, "status": "hired", "vendor_id": None, "hired_at": datetime(2024, 1, 15)},
        {"job_id": 1, "status": "applied", "vendor_id": 10},
        {"job_id": 1, "status": "rejected", "vendor_id": None},
    ]
    vendors = [
        {"vendor_id": 10, "vendor_name": "TalentHub", "commission_rate": 10, "success_rate": 80},
        {"vendor_id": 11, "vendor_name": "Kerja", "commission_rate": 20, "success_rate": None},
    ]

    result = compute_cost_metrics(jobs, applications, vendors, today=TODAY)
    metrics = result["metrics"]

    # salaries 100M + 50M default, commission mean 15%, fees 2 x (500k + 100k)
    assert metrics["vendor_commissions"] == pytest.approx(22_500_000)
    assert metrics["total_recruitment_cost"] == pytest.approx(23_700_000)
    assert metrics["average_cost_per_hire"] == pytest.approx(11_850_000)
    assert metrics["cost_per_application"] == pytest.approx(5_925_000)
    assert metrics["roi"] == pytest.approx(-57.81)
    assert metrics["cost_savings"] == pytest.approx(-17_700_000)
    assert metrics["budget_utilization"] == pytest.approx(150.0)

    assert [b["category"] for b in result["cost_breakdown"]] == [
        "Vendor Commissions", "Platform Costs", "Additional Services"
    ]
    assert sum(b["percentage"] for b in result["cost_breakdown"]) == pytest.approx(100, abs=0.05)

    trend = result["roi_trend"]
    assert [p["month"] for p in trend] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert [p["hires"] for p in trend] == [0, 0, 0, 1, 0, 1]
    assert trend[-1]["cost"] == pytest.approx(11_850_000)

    talenthub, kerja = result["vendor_costs"]
    assert talenthub == {
        "vendor": "TalentHub", "total_cost": pytest.approx(7_900_000), "hires": 1,
        "cost_per_hire": pytest.approx(7_900_000), "performance": 80,
    }
    assert kerja["hires"] == 0 and kerja["total_cost"] == 0


def test_cost_metrics_without_data():
    result = compute_cost_metrics([], [], [], today=TODAY)

    assert all(value == 0 for value in result["metrics"].values())
    assert len(result["roi_trend"]) == 6
    assert result["vendor_costs"] == []
