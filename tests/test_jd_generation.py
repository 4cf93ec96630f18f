"""
Tests for the streamed job description generation.
"""

import json
import threading
import time

import pytest

from simplifyhr.schemas.schemas import JDGenerationRequest
from simplifyhr.services.jd_generation import (
    JDGenerationError, TIMEOUT_MESSAGE, build_structured_data, collect_jd_stream, generate_jd_events
)


class FakeAI:
    is_configured = True

    def __init__(self, chunks=("## About", " Acme"), suggestions=None, stream_error=None, json_error=None):
        self.chunks = chunks
        self.suggestions = suggestions
        self.stream_error = stream_error
        self.json_error = json_error

    def stream(self, system_prompt, user_content):
        for chunk in self.chunks:
            yield chunk
        if self.stream_error:
            raise self.stream_error

    def complete_json(self, system_prompt, user_content):
        if self.json_error:
            raise self.json_error
        return self.suggestions


class StepClock:
    """Each call advances by ``step`` seconds."""

    def __init__(self, step: float):
        self.step = step
        self.now = 0.0

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


def events(lines):
    return [json.loads(line) for line in lines]


def test_stream_chunks_then_structured_data():
    request = JDGenerationRequest(job_title="Data Analyst", experience_level="mid")
    ai = FakeAI(suggestions={"suggestedSkills": ["SQL", "Excel"]})

    result = events(generate_jd_events(request, ai))

    assert [e["type"] for e in result] == ["jd_chunk", "jd_chunk", "structured_data"]
    data = result[-1]["data"]
    assert data["jobDescription"] == "## About Acme"
    assert data["suggestedSkills"] == ["SQL", "Excel"]
    assert data["suggestedRequirements"][-1] == "Proven track record of successful projects"
    assert "budgetRecommendation" not in data


def test_suggestion_failure_falls_back_to_defaults():
    request = JDGenerationRequest(job_title="Data Analyst")
    ai = FakeAI(json_error=RuntimeError("bad json"))

    data = events(generate_jd_events(request, ai))[-1]["data"]

    assert data["suggestedSkills"][0] == "Python"
    assert len(data["suggestedScoringCriteria"]) == 5


def test_timeout_ends_stream_with_error():
    request = JDGenerationRequest(job_title="Engineer")
    ai = FakeAI(chunks=["a", "b", "c"])

    result = events(generate_jd_events(request, ai, timeout=1.5, clock=StepClock(1.0)))

    assert result[-1] == {"type": "error", "message": TIMEOUT_MESSAGE}
    assert all(e["type"] != "structured_data" for e in result)


def test_stream_failure_reported_as_error_event():
    request = JDGenerationRequest(job_title="Engineer")
    ai = FakeAI(chunks=["partial"], stream_error=ConnectionError("reset"))

    result = events(generate_jd_events(request, ai))

    assert result[0]["type"] == "jd_chunk"
    assert result[-1] == {"type": "error", "message": "AI generation failed: reset"}


def test_on_complete_receives_structured_data_and_errors_are_contained():
    request = JDGenerationRequest(job_title="Engineer")
    received = []

    def record(data):
        received.append(data)
        raise RuntimeError("mongo down")

    result = events(generate_jd_events(request, FakeAI(), on_complete=record))

    assert result[-1]["type"] == "structured_data"
    assert received == [result[-1]["data"]]


def test_budget_from_request_when_ai_gives_none():
    request = JDGenerationRequest(job_title="Engineer", budget_min=100, budget_max=200, currency="USD")
    data = build_structured_data(request, "text", {"budgetRecommendation": None})

    assert data["budgetRecommendation"] == {"min": 100, "max": 200, "currency": "USD"}


def test_collect_stream_joins_chunks_and_skips_noise():
    lines = [
        b'{"type": "jd_chunk", "content": "Hello "}\n',
        "not json\n\n",
        '{"type": "jd_chunk", "content": "world"}\n{"type": "structured_data", "data": {"x": 1}}\n',
    ]
    assert collect_jd_stream(lines) == {"description": "Hello world", "structured_data": {"x": 1}}


def test_collect_stream_raises_on_error_event():
    with pytest.raises(JDGenerationError, match="AI Generation Timed Out"):
        collect_jd_stream(['{"type": "error", "message": "AI Generation Timed Out"}\n'])


class StalledAI(FakeAI):
    """Blocks in the stream or in the suggestions call until released."""

    def __init__(self, stall_stream=False, stall_suggestions=False):
        super().__init__(suggestions={"suggestedSkills": ["Go"]})
        self.stall_stream = stall_stream
        self.stall_suggestions = stall_suggestions
        self.release = threading.Event()

    def stream(self, system_prompt, user_content):
        if self.stall_stream:
            self.release.wait(5)
        yield from super().stream(system_prompt, user_content)

    def complete_json(self, system_prompt, user_content):
        if self.stall_suggestions:
            self.release.wait(5)
        return super().complete_json(system_prompt, user_content)


def test_timeout_fires_while_stream_is_stalled():
    request = JDGenerationRequest(job_title="Engineer")
    ai = StalledAI(stall_stream=True)

    started = time.monotonic()
    try:
        result = events(generate_jd_events(request, ai, timeout=0.2))
    finally:
        ai.release.set()

    assert time.monotonic() - started < 2
    assert result == [{"type": "error", "message": TIMEOUT_MESSAGE}]


def test_timeout_covers_suggestions_call():
    request = JDGenerationRequest(job_title="Engineer")
    ai = StalledAI(stall_suggestions=True)
    received = []

    started = time.monotonic()
    try:
        result = events(generate_jd_events(request, ai, timeout=0.2, on_complete=received.append))
    finally:
        ai.release.set()

    assert time.monotonic() - started < 2
    assert [e["type"] for e in result] == ["jd_chunk", "jd_chunk", "error"]
    assert result[-1]["message"] == TIMEOUT_MESSAGE
    assert received == []


def test_template_description_when_ai_not_configured():
    request = JDGenerationRequest(job_title="Engineer", company_name="Acme", budget_min=100, budget_max=200)
    ai = FakeAI(stream_error=AssertionError("stream must not be called"))
    ai.is_configured = False

    result = events(generate_jd_events(request, ai))

    assert [e["type"] for e in result] == ["jd_chunk", "structured_data"]
    assert result[0]["content"].startswith("## About Acme")
    assert "100 - 200 IDR" in result[0]["content"]
    data = result[-1]["data"]
    assert data["jobDescription"] == result[0]["content"]
    assert data["budgetRecommendation"] == {"min": 100, "max": 200, "currency": "IDR"}


def test_suggested_skills_merge_into_selected_skills():
    request = JDGenerationRequest(job_title="Engineer", skills=["Kubernetes", "SQL"])
    data = build_structured_data(request, "text", {"suggestedSkills": ["SQL", "Excel"]})

    assert data["suggestedSkills"] == ["Kubernetes", "SQL", "Excel"]
