"""
AI Screening Service - first-pass scoring of an application.

AI OUTPUT -> VALIDATED -> STORED ON THE APPLICATION ROW
The score is advisory; humans still move applications through the pipeline.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from simplifyhr.core.config import get_settings
from simplifyhr.services.ai_client import get_ai_client
from simplifyhr.services.retry import call_with_retries

logger = logging.getLogger(__name__)

SCREENING_PROMPT = """You screen job applications. Compare the candidate to the job and return ONLY valid JSON:
{"score": 0-100, "notes": "2-4 sentences: strengths, gaps, recommendation"}"""


def validate_screening(data: dict) -> Dict:
    """
    Validate and sanitize an AI screening result.
    Score is clamped to 0-100; missing notes get a placeholder.
    """
    try:
        score = float(data.get("score", 0))
    except (ValueError, TypeError):
        score = 0.0
    score = max(0.0, min(100.0, score))

    notes = str(data.get("notes") or "").strip() or "No screening notes provided."
    return {"score": round(score, 2), "notes": notes}


def describe_application(job: dict, candidate: dict, cover_letter: Optional[str]) -> str:
    skills: List[str] = candidate.get("skills") or []
    required: List[str] = job.get("skills_required") or []
    parts = [
        f"Job title: {job.get('title', '')}",
        f"Experience level: {job.get('experience_level') or 'unspecified'}",
        f"Required skills: {', '.join(required) or 'none listed'}",
        f"Job description: {(job.get('description') or '')[:3000]}",
        "",
        f"Candidate experience (years): {candidate.get('experience_years') or 'unknown'}",
        f"Candidate skills: {', '.join(skills) or 'none listed'}",
        f"Candidate location: {candidate.get('current_location') or 'unknown'}",
    ]
    if cover_letter:
        parts.append(f"Cover letter: {cover_letter[:2000]}")
    return "\n".join(parts)


class ScreeningService:
    """
    Scores an application with the AI client, retrying transient failures.
    """

    def __init__(self, ai_client, attempts: int = 3, base_delay: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        self.ai_client = ai_client
        self.attempts = attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def screen(self, job: dict, candidate: dict, cover_letter: Optional[str] = None) -> Dict:
        """
        Returns:
            {"score": float 0-100, "notes": str}

        Raises:
            RetryExhaustedError when every attempt failed
        """
        content = describe_application(job, candidate, cover_letter)
        data = call_with_retries(
            lambda: self.ai_client.complete_json(SCREENING_PROMPT, content, max_tokens=400),
            attempts=self.attempts,
            base_delay=self.base_delay,
            sleep=self.sleep,
            label="application screening"
        )
        if not isinstance(data, dict):
            data = {}
        result = validate_screening(data)
        logger.info("Screened application for '%s': %.0f", job.get("title"), result["score"])
        return result


def get_screening_service() -> ScreeningService:
    settings = get_settings()
    return ScreeningService(
        get_ai_client(),
        attempts=settings.ai_retry_attempts,
        base_delay=settings.ai_retry_base_delay
    )
