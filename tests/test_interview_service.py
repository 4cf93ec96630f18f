"""
Tests for the AI interviewer session workflow (in-memory session store).
"""

from datetime import datetime, timedelta

import pytest

from simplifyhr.services.interview_service import (
    FALLBACK_REPLY, AIInterviewer, SessionClosedError, SessionNotFoundError, compute_progress
)


class MemoryStore:
    """Same surface as AIInterviewSessionService."""

    def __init__(self, clock):
        self.sessions = {}
        self.clock = clock

    def create(self, interview_id, total_questions, greeting):
        session_id = f"s{len(self.sessions) + 1}"
        started = self.clock()
        self.sessions[session_id] = {
            "_id": session_id,
            "interview_id": interview_id,
            "status": "active",
            "progress": 0,
            "questions_asked": 0,
            "total_questions": total_questions,
            "messages": [{"role": "assistant", "content": greeting, "timestamp": started, "question_number": 0}],
            "started_at": started,
            "ended_at": None,
        }
        return session_id

    def get_by_id(self, session_id):
        return self.sessions.get(session_id)

    def append_messages(self, session_id, messages, updates=None):
        self.sessions[session_id]["messages"].extend(messages)
        if updates:
            self.sessions[session_id].update(updates)
        return True

    def complete(self, session_id, ended_at):
        self.sessions[session_id].update({"status": "completed", "progress": 100, "ended_at": ended_at})
        return True


class FakeChat:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def chat(self, messages):
        self.requests.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class Clock:
    def __init__(self):
        self.now = datetime(2024, 3, 4, 9, 0)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


def make_interviewer(clock, replies, total_questions=12):
    store = MemoryStore(clock)
    return AIInterviewer(
        store, FakeChat(replies), total_questions=total_questions,
        retry_attempts=3, retry_base_delay=1.0, sleep=lambda s: None, now=clock
    ), store


@pytest.mark.parametrize("asked,total,expected", [(0, 12, 0), (1, 12, 8), (6, 12, 50), (13, 12, 100), (1, 0, 100)])
def test_compute_progress(asked, total, expected):
    assert compute_progress(asked, total) == expected


def test_start_creates_active_session_with_greeting(clock):
    interviewer, store = make_interviewer(clock, [])
    started = interviewer.start(5, "Ana", "Backend Engineer")

    assert started["status"] == "active"
    assert started["total_questions"] == 12
    assert "Backend Engineer" in started["ai_greeting"]
    session = store.sessions[started["session_id"]]
    assert session["messages"][0]["role"] == "assistant"


def test_send_appends_turn_and_advances_progress(clock):
    interviewer, store = make_interviewer(clock, ["Tell me about a hard bug."])
    session_id = interviewer.start(5, "Ana", "Engineer")["session_id"]

    reply = interviewer.send(session_id, "Hi, I'm Ana.", job_title="Engineer")

    assert reply == {
        "session_id": session_id,
        "ai_response": "Tell me about a hard bug.",
        "question_number": 1,
        "progress": 8,
        "is_fallback": False,
    }
    session = store.sessions[session_id]
    assert [m["role"] for m in session["messages"]] == ["assistant", "user", "assistant"]
    assert session["questions_asked"] == 1


def test_send_falls_back_after_three_failures(clock):
    chat_errors = [RuntimeError("down")] * 3
    interviewer, store = make_interviewer(clock, chat_errors)
    session_id = interviewer.start(5, "Ana", "Engineer")["session_id"]

    reply = interviewer.send(session_id, "Hello?")

    assert reply["ai_response"] == FALLBACK_REPLY
    assert reply["is_fallback"] is True
    assert reply["progress"] == 0
    assert len(interviewer.ai_client.requests) == 3
    session = store.sessions[session_id]
    assert session["messages"][-1] == {"role": "user", "content": "Hello?", "timestamp": clock.now}
    assert session["questions_asked"] == 0


def test_send_rejects_empty_and_closed(clock):
    interviewer, _ = make_interviewer(clock, [])
    session_id = interviewer.start(5, "Ana", "Engineer")["session_id"]

    with pytest.raises(ValueError):
        interviewer.send(session_id, "   ")

    interviewer.end(session_id)
    with pytest.raises(SessionClosedError):
        interviewer.send(session_id, "Still there?")


def test_unknown_session(clock):
    interviewer, _ = make_interviewer(clock, [])
    with pytest.raises(SessionNotFoundError):
        interviewer.transcript("missing")


def test_end_reports_duration_and_questions(clock):
    interviewer, store = make_interviewer(clock, ["Q1", "Q2"])
    session_id = interviewer.start(5, "Ana", "Engineer")["session_id"]
    interviewer.send(session_id, "a")
    interviewer.send(session_id, "b")

    clock.now += timedelta(minutes=25)
    ended = interviewer.end(session_id)

    assert ended["status"] == "completed"
    assert ended["progress"] == 100
    assert ended["duration_minutes"] == 25
    assert ended["questions_asked"] == 2
    assert store.sessions[session_id]["status"] == "completed"
