"""
Job Description Generation - streamed NDJSON.

Wire format (one JSON object per line, application/x-ndjson):
    {"type": "jd_chunk", "content": "..."}           zero or more
    {"type": "structured_data", "data": {...}}        once, at the end
    {"type": "error", "message": "..."}               instead of structured_data on failure

The whole generation shares one timer (jd_generation_timeout). The AI calls
run on a worker thread and the stream waits on it with the time remaining,
so a stalled upstream still ends with an error event when the timer fires.
Without an API key the template description is streamed instead.
"""

import json
import logging
import queue
import threading
import time
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from simplifyhr.schemas.schemas import JDGenerationRequest
from simplifyhr.services import job_wizard

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"

JD_SYSTEM_PROMPT = """You are an expert technical recruiter. Write a complete, well-structured job description in Markdown.
Sections: About the company, Position Overview, Key Responsibilities, Required Qualifications, Preferred Qualifications, What We Offer, Application Process.
Return ONLY the job description text."""

SUGGESTIONS_SYSTEM_PROMPT = """You are a hiring assistant. Return ONLY valid JSON, no markdown:
{"suggestedSkills":["string"],"suggestedRequirements":["string"],"suggestedScoringCriteria":["string"],"budgetRecommendation":{"min":0,"max":0,"currency":"IDR"}}
Use at most 8 items per list. budgetRecommendation may be null if unknown."""


class JDGenerationError(Exception):
    """The stream reported an error event."""


TIMEOUT_MESSAGE = "AI Generation Timed Out"


def _event(payload: dict) -> str:
    return json.dumps(payload) + "\n"


def describe_request(request: JDGenerationRequest) -> str:
    """Prompt body listing the role details that were provided."""
    lines = [f"Job title: {request.job_title}"]
    if request.company_name:
        lines.append(f"Company: {request.company_name}")
    lines.append(f"Industry: {request.industry}")
    if request.experience_level:
        lines.append(f"Experience level: {request.experience_level.value}")
    if request.employment_type:
        lines.append(f"Employment type: {request.employment_type.value}")
    if request.location:
        lines.append(f"Location: {request.location}")
    if request.skills:
        lines.append(f"Skills: {', '.join(request.skills)}")
    if request.budget_min and request.budget_max:
        lines.append(f"Budget: {request.budget_min:.0f} - {request.budget_max:.0f} {request.currency}")
    return "\n".join(lines)


def _as_str_list(value) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    items = [str(v).strip() for v in value if v is not None and str(v).strip()]
    return items or None


def build_structured_data(
    request: JDGenerationRequest,
    job_description: str,
    suggestions: Optional[dict]
) -> dict:
    """
    Final payload of the stream.

    AI suggestions win where they are well-formed; everything else falls
    back to the wizard defaults. Skills the caller already picked stay first. The budget is only included when the caller
    gave a salary range or the AI proposed one.
    """
    suggestions = suggestions or {}

    data = {
        "jobDescription": job_description,
        "suggestedSkills": job_wizard.merge_unique(
            request.skills,
            _as_str_list(suggestions.get("suggestedSkills")) or job_wizard.default_skills(request.job_title)
        ),
        "suggestedRequirements": _as_str_list(suggestions.get("suggestedRequirements"))
            or job_wizard.default_requirements(request.experience_level),
        "suggestedScoringCriteria": _as_str_list(suggestions.get("suggestedScoringCriteria"))
            or job_wizard.default_scoring_criteria(),
    }

    budget = suggestions.get("budgetRecommendation")
    if isinstance(budget, dict) and budget.get("min") and budget.get("max"):
        data["budgetRecommendation"] = {
            "min": float(budget["min"]),
            "max": float(budget["max"]),
            "currency": budget.get("currency") or request.currency,
        }
    elif request.budget_min and request.budget_max:
        data["budgetRecommendation"] = {
            "min": request.budget_min,
            "max": request.budget_max,
            "currency": request.currency,
        }

    return data


def template_for(request: JDGenerationRequest) -> str:
    return job_wizard.template_description(
        request.job_title,
        company_name=request.company_name,
        industry=request.industry,
        experience_level=request.experience_level,
        employment_type=request.employment_type,
        location=request.location,
        salary_min=request.budget_min,
        salary_max=request.budget_max,
        currency=request.currency
    )


def _produce(ai_client, user_content: str, items: queue.Queue, stop: threading.Event):
    """
    Worker body. Puts ("chunk", text) for each delta, then ("suggestions", dict or None),
    or ("error", exception) if the stream fails.
    """
    try:
        for chunk in ai_client.stream(JD_SYSTEM_PROMPT, user_content):
            if stop.is_set():
                return
            items.put(("chunk", chunk))
    except Exception as e:
        items.put(("error", e))
        return

    if stop.is_set():
        return

    suggestions = None
    try:
        suggestions = ai_client.complete_json(SUGGESTIONS_SYSTEM_PROMPT, user_content)
    except Exception as e:
        logger.warning("JD suggestions failed, using defaults: %s", e)
    items.put(("suggestions", suggestions if isinstance(suggestions, dict) else None))


def _next_item(items: queue.Queue, remaining: float):
    if remaining <= 0:
        return None
    try:
        return items.get(timeout=remaining)
    except queue.Empty:
        return None


def _finish(request: JDGenerationRequest, job_description: str, suggestions, on_complete) -> str:
    data = build_structured_data(request, job_description, suggestions)
    if on_complete is not None:
        try:
            on_complete(data)
        except Exception as e:
            logger.error("Failed to record JD generation: %s", e)
    return _event({"type": "structured_data", "data": data})


def generate_jd_events(
    request: JDGenerationRequest,
    ai_client,
    timeout: float = 120.0,
    clock: Callable[[], float] = time.monotonic,
    on_complete: Optional[Callable[[dict], None]] = None
) -> Iterator[str]:
    """
    Yield NDJSON lines for one generation.

    Args:
        request: Role details from the wizard
        ai_client: Object with ``is_configured``, ``stream`` and ``complete_json`` (AIClient)
        timeout: Seconds for the whole generation, suggestions included
        clock: Injected for tests
        on_complete: Called with the structured data after a successful run
    """
    if not ai_client.is_configured:
        logger.warning("AI is not configured, using the template description for '%s'", request.job_title)
        job_description = template_for(request)
        yield _event({"type": "jd_chunk", "content": job_description})
        yield _finish(request, job_description, None, on_complete)
        return

    deadline = clock() + timeout
    items = queue.Queue()
    stop = threading.Event()
    worker = threading.Thread(
        target=_produce,
        args=(ai_client, describe_request(request), items, stop),
        name="jd-generation",
        daemon=True
    )
    worker.start()

    accumulated = []
    try:
        while True:
            item = _next_item(items, deadline - clock())
            if item is None:
                logger.warning("JD generation for '%s' timed out after %.0fs", request.job_title, timeout)
                yield _event({"type": "error", "message": TIMEOUT_MESSAGE})
                return

            kind, value = item
            if kind == "chunk":
                accumulated.append(value)
                yield _event({"type": "jd_chunk", "content": value})
            elif kind == "error":
                logger.error("JD generation failed for '%s': %s", request.job_title, value)
                yield _event({"type": "error", "message": f"AI generation failed: {value}"})
                return
            else:
                suggestions = value
                break
    finally:
        stop.set()

    yield _finish(request, "".join(accumulated), suggestions, on_complete)


def collect_jd_stream(lines: Iterable[str]) -> Dict:
    """
    Consume an NDJSON generation stream.

    Returns:
        {"description": accumulated jd_chunk text, "structured_data": dict or None}

    Raises:
        JDGenerationError when an error event is received
    """
    description = []
    structured = None

    for raw in lines:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        for line in raw.split("\n"):
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping non-JSON stream line: %r", line)
                continue
            if not isinstance(event, dict):
                continue

            event_type = event.get("type")
            if event_type == "jd_chunk":
                description.append(event.get("content") or "")
            elif event_type == "structured_data":
                structured = event.get("data")
            elif event_type == "error":
                raise JDGenerationError(event.get("message") or "An error occurred on the server.")

    return {"description": "".join(description), "structured_data": structured}
