"""
AI Interviewer Service

Drives a text interview between a candidate and the AI:
- start: new session document with an AI greeting
- send: one chat turn (fixed-count retry, linear backoff)
- end: close the session at 100%
- transcript

If every attempt of a turn fails, the candidate's message is still kept and
a fixed apology is returned instead of an AI answer; progress does not move.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List

from simplifyhr.core.config import get_settings
from simplifyhr.services.ai_client import get_ai_client
from simplifyhr.services.mongo_service import AIInterviewSessionService
from simplifyhr.services.retry import RetryExhaustedError, call_with_retries

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I apologize, but I'm experiencing technical difficulties. Please try sending your "
    "message again, or we can continue the interview in a moment."
)

INTERVIEWER_PROMPT = """You are a professional AI interviewer for the role of {job_title}.
Ask one clear question at a time, mixing technical and behavioural topics.
Keep replies under 120 words. Acknowledge the candidate's previous answer briefly before the next question.
You will ask {total_questions} questions in total. This is question {question_number}."""


class SessionNotFoundError(Exception):
    pass


class SessionClosedError(Exception):
    pass


def compute_progress(questions_asked: int, total_questions: int) -> int:
    """Rounded percentage of questions asked, capped at 100."""
    if total_questions <= 0:
        return 100
    return min(100, round(questions_asked / total_questions * 100))


def default_greeting(candidate_name: str, job_title: str) -> str:
    name = candidate_name.strip() or "there"
    return (
        f"Hello {name}, welcome to your interview for the {job_title} position. "
        "I'll be asking you a series of questions about your experience and skills. "
        "To start, could you briefly introduce yourself?"
    )


class AIInterviewer:
    """
    Session workflow on top of a session store (AIInterviewSessionService)
    and a chat client (AIClient).
    """

    def __init__(
        self,
        store,
        ai_client,
        total_questions: int = 12,
        retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.utcnow
    ):
        self.store = store
        self.ai_client = ai_client
        self.total_questions = total_questions
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self.sleep = sleep
        self.now = now

    def _load(self, session_id: str) -> dict:
        session = self.store.get_by_id(session_id)
        if not session:
            raise SessionNotFoundError(session_id)
        return session

    def start(self, interview_id: int, candidate_name: str, job_title: str) -> Dict:
        greeting = default_greeting(candidate_name, job_title)
        session_id = self.store.create(interview_id, self.total_questions, greeting)
        logger.info("AI interview session %s started for interview %d", session_id, interview_id)
        return {
            "session_id": session_id,
            "status": "active",
            "progress": 0,
            "questions_asked": 0,
            "total_questions": self.total_questions,
            "ai_greeting": greeting,
        }

    def _build_messages(self, session: dict, job_title: str, user_message: str) -> List[Dict[str, str]]:
        prompt = INTERVIEWER_PROMPT.format(
            job_title=job_title,
            total_questions=session.get("total_questions", self.total_questions),
            question_number=session.get("questions_asked", 0) + 1
        )
        messages = [{"role": "system", "content": prompt}]
        for turn in session.get("messages", []):
            messages.append({"role": turn["role"], "content": turn["content"]})
        messages.append({"role": "user", "content": user_message})
        return messages

    def send(self, session_id: str, message: str, job_title: str = "this") -> Dict:
        """
        One chat turn.

        Raises:
            ValueError: empty message
            SessionNotFoundError / SessionClosedError
        """
        if not message or not message.strip():
            raise ValueError("Message cannot be empty")

        session = self._load(session_id)
        if session.get("status") != "active":
            raise SessionClosedError(session_id)

        user_turn = {"role": "user", "content": message, "timestamp": self.now()}
        chat = self._build_messages(session, job_title, message)

        try:
            reply = call_with_retries(
                lambda: self.ai_client.chat(chat),
                attempts=self.retry_attempts,
                base_delay=self.retry_base_delay,
                sleep=self.sleep,
                label=f"interview turn ({session_id})"
            )
        except RetryExhaustedError as e:
            logger.error("AI interview turn failed for session %s: %s", session_id, e.last_error)
            self.store.append_messages(session_id, [user_turn])
            return {
                "session_id": session_id,
                "ai_response": FALLBACK_REPLY,
                "question_number": session.get("questions_asked", 0),
                "progress": session.get("progress", 0),
                "is_fallback": True,
            }

        question_number = session.get("questions_asked", 0) + 1
        progress = compute_progress(question_number, session.get("total_questions", self.total_questions))
        assistant_turn = {
            "role": "assistant",
            "content": reply,
            "timestamp": self.now(),
            "question_number": question_number
        }
        self.store.append_messages(
            session_id,
            [user_turn, assistant_turn],
            {"questions_asked": question_number, "progress": progress}
        )
        return {
            "session_id": session_id,
            "ai_response": reply,
            "question_number": question_number,
            "progress": progress,
            "is_fallback": False,
        }

    def end(self, session_id: str) -> Dict:
        session = self._load(session_id)
        ended_at = self.now()
        if session.get("status") == "active":
            self.store.complete(session_id, ended_at)
        else:
            ended_at = session.get("ended_at") or ended_at

        started_at = session.get("started_at") or ended_at
        duration = max(0, round((ended_at - started_at).total_seconds() / 60))
        logger.info("AI interview session %s ended after %d minutes", session_id, duration)
        return {
            "session_id": session_id,
            "status": "completed",
            "progress": 100,
            "duration_minutes": duration,
            "questions_asked": session.get("questions_asked", 0),
        }

    def transcript(self, session_id: str) -> Dict:
        session = self._load(session_id)
        return {
            "session_id": session_id,
            "interview_id": session["interview_id"],
            "status": session.get("status", "active"),
            "progress": session.get("progress", 0),
            "questions_asked": session.get("questions_asked", 0),
            "total_questions": session.get("total_questions", self.total_questions),
            "messages": session.get("messages", []),
        }


def get_ai_interviewer() -> AIInterviewer:
    """Interviewer wired to MongoDB, the AI client and settings."""
    settings = get_settings()
    return AIInterviewer(
        store=AIInterviewSessionService(),
        ai_client=get_ai_client(),
        total_questions=settings.ai_interview_total_questions,
        retry_attempts=settings.ai_retry_attempts,
        retry_base_delay=settings.ai_retry_base_delay
    )
