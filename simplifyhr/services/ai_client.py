"""
AI API Client

The AI provider exposes an OpenAI-compatible API, so we use the openai library.

AI is used for:
- Job description generation (streamed)
- Structured hiring suggestions (skills, requirements, scoring criteria, budget)
- Application screening (score + notes)
- AI interview chat turns
"""
import json
import logging
from typing import Dict, Iterator, List

from openai import OpenAI

from simplifyhr.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class AIClient:
    """
    Wrapper for the chat completions API.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.ai_api_key or "not-configured",
            base_url=settings.ai_base_url,
            max_retries=0  # Retries are done by call_with_retries where needed
        )
        self.model = settings.ai_chat_model
        self.is_configured = bool(settings.ai_api_key)

    def chat(self, messages: List[Dict[str, str]], max_tokens: int = 800, temperature: float = 0.7) -> str:
        """
        Send a full conversation and return the assistant text.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content or ""

    def complete(self, system_prompt: str, user_content: str, max_tokens: int = 1000, temperature: float = 0.1) -> str:
        """Single system + user turn. Low temperature by default for structured output."""
        return self.chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=temperature
        )

    def stream(self, system_prompt: str, user_content: str, max_tokens: int = 2000) -> Iterator[str]:
        """
        Stream assistant text as it is generated.
        Yields non-empty text deltas.
        """
        stream = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=0.7,
            stream=True
        )
        for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    def complete_json(self, system_prompt: str, user_content: str, max_tokens: int = 1000):
        """Call the API and parse the JSON body of the reply."""
        return extract_json(self.complete(system_prompt, user_content, max_tokens=max_tokens))

    def test_connection(self) -> bool:
        """Test if the AI API is reachable"""
        try:
            response = self.complete(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.error("AI connection failed: %s", e)
            return False


def extract_json(text: str):
    """
    Extract JSON from an API response.
    Handles cases where the model wraps JSON in markdown code blocks.
    """
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    return json.loads(text.strip())


# Singleton instance
_ai_client: AIClient = None


def get_ai_client() -> AIClient:
    """Get or create AI client (singleton pattern)"""
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client
