"""Configuration management for the RAG router."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets."""
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


def _split_terms(value: str) -> list[str]:
    return [term.strip() for term in value.split(",") if term.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation backend
    google_api_key: str = ""
    llm_model: str = "gemini-2.0-flash"

    @field_validator("google_api_key", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Retrieval and routing
    top_k: int = 10
    similarity_threshold: float = 0.15
    routing_threshold: float = 0.25
    default_mode: str = "hybrid"
    embedding_dimension: int = 384

    @field_validator("similarity_threshold", "routing_threshold")
    @classmethod
    def check_threshold(cls, value: float) -> float:
        """Cosine thresholds only make sense in [0, 1]."""
        if not 0.0 <= value <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        return value

    @field_validator("default_mode")
    @classmethod
    def check_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"auto", "rag", "hybrid", "llm"}:
            raise ValueError(f"unknown query mode: {value}")
        return value

    # Guardrails
    guardrails_enabled: bool = True
    blocked_terms: str = ""
    sensitive_topics: str = ""
    max_query_length: int = 2000
    max_response_length: int = 10000
    rate_limit_enabled: bool = False
    rate_limit_requests: int = 100
    rate_limit_window_ms: int = 60000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Path | None = None

    @property
    def blocked_term_list(self) -> list[str]:
        """Configured blocked terms; empty means the guardrail defaults."""
        return _split_terms(self.blocked_terms)

    @property
    def sensitive_topic_list(self) -> list[str]:
        """Configured sensitive topics; empty means the guardrail defaults."""
        return _split_terms(self.sensitive_topics)


# Global settings instance
settings = Settings()
