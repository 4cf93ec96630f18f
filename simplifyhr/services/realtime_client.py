"""
Realtime session tokens for voice/video AI interviews.

The browser connects to the realtime API directly with a short-lived
client secret; this module asks the provider for one.
"""

import logging
import time
from typing import Any, Callable, Dict

import requests

from simplifyhr.core.config import get_settings
from simplifyhr.services.retry import call_with_retries

logger = logging.getLogger(__name__)


class EphemeralTokenError(Exception):
    """Provider answered, but without a usable client secret."""


class RealtimeClient:
    """
    Minimal client for POST {base_url}/realtime/sessions.
    """

    def __init__(self, api_key: str, base_url: str, model: str, voice: str, timeout_s: int = 30):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.voice = voice
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def create_session(self, instructions: str) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "voice": self.voice,
            "instructions": instructions,
        }
        resp = self.session.post(f"{self.base_url}/realtime/sessions", json=payload, timeout=self.timeout_s)
        resp.raise_for_status()
        return resp.json()

    def issue_token(
        self,
        instructions: str,
        attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep
    ) -> Dict[str, Any]:
        """
        Ephemeral client secret, retried on transport/HTTP errors.

        Returns:
            {"client_secret": str, "expires_at": int or None, "model": str, "voice": str}

        Raises:
            RetryExhaustedError: every attempt failed
            EphemeralTokenError: the response had no client_secret.value
        """
        data = call_with_retries(
            lambda: self.create_session(instructions),
            attempts=attempts,
            base_delay=base_delay,
            retry_on=(requests.RequestException,),
            sleep=sleep,
            label="realtime token"
        )

        secret = (data or {}).get("client_secret") or {}
        value = secret.get("value") if isinstance(secret, dict) else None
        if not value:
            logger.error("Realtime session response had no client secret")
            raise EphemeralTokenError("Failed to get ephemeral token")

        return {
            "client_secret": value,
            "expires_at": secret.get("expires_at"),
            "model": data.get("model") or self.model,
            "voice": data.get("voice") or self.voice,
        }


def get_realtime_client() -> RealtimeClient:
    settings = get_settings()
    return RealtimeClient(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        model=settings.ai_realtime_model,
        voice=settings.ai_realtime_voice
    )
