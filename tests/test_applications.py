"""
Tests for application status transitions and AI screening validation.
"""

import pytest

from simplifyhr.services.application_service import InvalidTransitionError, can_transition, check_transition
from simplifyhr.services.retry import RetryExhaustedError
from simplifyhr.services.screening_service import ScreeningService, validate_screening


@pytest.mark.parametrize("current,target,allowed", [
    ("applied", "screening", True),
    ("screening", "interview", True),
    ("interview", "selected", True),
    ("selected", "hired", True),
    ("applied", "hired", False),
    ("selected", "withdrawn", False),
    ("hired", "rejected", False),
    ("withdrawn", "applied", False),
])
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_candidate_can_only_withdraw():
    check_transition("interview", "withdrawn", "candidate")
    with pytest.raises(InvalidTransitionError):
        check_transition("applied", "screening", "candidate")


@pytest.mark.parametrize("role", ["super_admin", "admin", "client"])
def test_only_candidates_withdraw(role):
    with pytest.raises(InvalidTransitionError):
        check_transition("screening", "withdrawn", role)
    check_transition("screening", "rejected", role)


def test_invalid_transition_message():
    with pytest.raises(InvalidTransitionError, match="from 'rejected' to 'interview'"):
        check_transition("rejected", "interview", "admin")


@pytest.mark.parametrize("data,expected", [
    ({"score": 87.456, "notes": " Strong fit. "}, {"score": 87.46, "notes": "Strong fit."}),
    ({"score": 150}, {"score": 100.0, "notes": "No screening notes provided."}),
    ({"score": "n/a", "notes": "x"}, {"score": 0.0, "notes": "x"}),
    ({"score": -5, "notes": ""}, {"score": 0.0, "notes": "No screening notes provided."}),
])
def test_validate_screening(data, expected):
    assert validate_screening(data) == expected


class FailingAI:
    def __init__(self):
        self.calls = 0

    def complete_json(self, system_prompt, user_content, max_tokens=1000):
        self.calls += 1
        raise RuntimeError("rate limited")


def test_screening_retries_then_gives_up():
    ai = FailingAI()
    service = ScreeningService(ai, attempts=3, base_delay=0.5, sleep=lambda s: None)

    with pytest.raises(RetryExhaustedError):
        service.screen({"title": "Engineer"}, {"skills": ["Python"]}, None)
    assert ai.calls == 3
