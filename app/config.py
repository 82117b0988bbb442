"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./studio.db"
    DB_READY_TIMEOUT_SECONDS: int = 60

    # OpenRouter
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    SITE_URL: str = ""
    SITE_NAME: str = "Scenario-Studio"
    LLM_TIMEOUT_SECONDS: float = 120.0

    # Models per task
    OPENROUTER_MODEL_CHAT: str = "google/gemini-2.5-flash"
    OPENROUTER_MODEL_VIDEO: str = "google/gemini-2.5-flash"
    OPENROUTER_MODEL_SCENARIO: str = "google/gemini-2.5-flash"

    # Job processing
    JOB_TIMEOUT_SECONDS: float = 300.0  # 5 minutes
    MAX_JOB_RETRIES: int = 3
    RETRY_BASE_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 30000
    RESUME_PENDING_ON_STARTUP: bool = False

    # Client
    CLIENT_POLL_INTERVAL_MS: int = 2000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
