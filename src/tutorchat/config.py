"""Tutor configuration via environment variables (TUTORCHAT_ prefix) or defaults."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class TutorConfig(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8080
    gateway_url: str = "https://ai.gateway.lovable.dev"
    gateway_api_key: str = ""
    model: str = "google/gemini-3-flash-preview"
    request_timeout: float = 120.0
    max_stream_bytes: int = 10_000_000  # 10 MB
    db_path: str = "data/tutorchat.sqlite"
    log_dir: str = "logs"
    log_level: str = "INFO"
    recent_lessons_limit: int = 20
    default_grade_level: int = 8
    backend_url: str = "http://127.0.0.1:8080"

    model_config = {"env_prefix": "TUTORCHAT_"}

    @property
    def ask_doubt_url(self) -> str:
        """Absolute URL of the doubt-chat endpoint on the backend."""
        return self.backend_url.rstrip("/") + "/functions/v1/ask-doubt"
