"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "simplifyhr"
    postgres_password: str = "password"
    postgres_db: str = "simplifyhr"

    # MongoDB (interview transcripts, JD generations, offer template files)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "simplifyhr_docs"

    # AI (OpenAI-compatible)
    ai_api_key: str = ""
    ai_base_url: str = "https://api.openai.com/v1"
    ai_chat_model: str = "gpt-4o-mini"
    ai_realtime_model: str = "gpt-4o-realtime-preview"
    ai_realtime_voice: str = "alloy"

    # Fixed-count retry with linear backoff for AI calls
    ai_retry_attempts: int = 3
    ai_retry_base_delay: float = 1.0

    # Whole-request timer for streamed job description generation (seconds)
    jd_generation_timeout: float = 120.0

    # Interviews
    meeting_base_url: str = "https://meet.simplifyhr.com/interview"
    ai_interview_total_questions: int = 12

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Outgoing mail (offer letters)
    smtp_enabled: bool = False
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_sender: str = "no-reply@simplifyhr.com"

    # App
    debug: bool = False
    log_level: str = "INFO"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
