"""
Tests for job wizard validation, progress and defaults.
"""

import pytest

from simplifyhr.schemas.schemas import InterviewRoundInput, JobDraft
from simplifyhr.services import job_wizard


def complete_draft(**overrides) -> JobDraft:
    data = dict(
        title="Backend Engineer",
        company_name="Acme",
        description="Build APIs.",
        location="Jakarta",
        employment_type="full-time",
        experience_level="mid",
        salary_min=10_000_000,
        salary_max=20_000_000,
        skills_required=["Python"],
        requirements=["3+ years"],
        scoring_criteria=["Depth"],
        interview_rounds=[InterviewRoundInput(round=1, type="ai", duration=30)],
    )
    data.update(overrides)
    return JobDraft(**data)


def test_complete_draft_is_valid():
    assert job_wizard.validate_job_draft(complete_draft()) == {}


def test_missing_fields_reported_per_field():
    draft = JobDraft(
        title=" ",
        interview_rounds=[InterviewRoundInput(round=1, type="ai"), InterviewRoundInput(round=2, type="human")],
        salary_min=50,
        salary_max=10,
    )
    errors = job_wizard.validate_job_draft(draft)

    assert set(errors) == {"title", "company_name", "description", "round_1", "salary"}
    assert errors["round_1"] == "Please select an interviewer for Round 2"


def test_ensure_valid_raises_with_errors():
    with pytest.raises(job_wizard.JobValidationError) as exc:
        job_wizard.ensure_valid(complete_draft(total_positions=0))
    assert exc.value.errors == {"total_positions": "Must have at least 1 position"}


def test_progress_for_empty_draft():
    _, details = job_wizard.compute_progress(JobDraft())

    # one default human round without an interviewer
    assert details == {"basic": 0, "description": 0, "interviews": 50, "budget": 20, "publish": 100}


def test_progress_for_complete_draft():
    overall, details = job_wizard.compute_progress(complete_draft())

    assert overall == 100
    assert set(details.values()) == {100}


def test_round_criteria_uses_first_three_base_items():
    text = job_wizard.generate_round_criteria("ai", 1)
    assert text == "Algorithm problem-solving capability, Code quality and best practices, Technical knowledge depth"


def test_round_criteria_unknown_type_falls_back_to_human():
    assert job_wizard.generate_round_criteria("panel", 3).startswith("Communication and presentation skills")


@pytest.mark.parametrize("title,first_skill", [
    ("Frontend Developer", "JavaScript"),
    ("Data Analyst", "Python"),
    ("Product Designer", "Figma"),
    ("Office Manager", "Communication"),
])
def test_default_skills_by_title(title, first_skill):
    assert job_wizard.default_skills(title)[0] == first_skill


def test_default_requirements_by_level():
    assert job_wizard.default_requirements("lead")[-1] == "Strategic thinking abilities"
    assert job_wizard.default_requirements(None)[-1] == "2+ years of professional experience"


def test_build_round_rows_keeps_first_round_per_type():
    rounds = [
        InterviewRoundInput(round=1, type="ai", criteria="Logic, Coding", duration=30),
        InterviewRoundInput(round=2, type="human", interviewer_profile_id=9),
        InterviewRoundInput(round=3, type="ai", duration=45),
    ]
    rows, skipped = job_wizard.build_round_rows(42, rounds)

    assert skipped == [3]
    assert [r["round_type"] for r in rows] == ["ai", "human"]
    assert rows[0]["scoring_criteria"] == {"round_specific": ["Logic", "Coding"]}
    assert rows[0]["is_ai_assisted"] is True
    assert rows[1]["interviewer_profiles"] == [{"profile_id": 9}]
    assert rows[1]["interviewers_required"] == 1


def test_default_round_rows():
    rows = job_wizard.default_round_rows(7)

    assert [(r["round_type"], r["duration_minutes"]) for r in rows] == [
        ("ai", 30), ("human", 60), ("ai_human", 45)
    ]
    assert [r["round_number"] for r in rows] == [1, 2, 3]


def test_template_description_mentions_salary_range():
    text = job_wizard.template_description(
        "QA Engineer", company_name="Acme", salary_min=1_000_000, salary_max=2_000_000, currency="IDR"
    )
    assert "## About Acme" in text
    assert "1,000,000 - 2,000,000 IDR" in text
