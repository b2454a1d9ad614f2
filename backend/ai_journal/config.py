"""
AI Journal Configuration
========================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad timeout or a typo'd flag fails on boot,
not on the first journal submission.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Supabase ---
    supabase_url: str = "http://localhost:54321"
    supabase_service_key: str = ""  # service_role key for backend operations

    # --- Anthropic / Claude API ---
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    # Analysis JSON is small: mood, score, two-sentence summary, a few tags
    anthropic_max_tokens: int = 300

    # --- Mood analysis ---
    analysis_timeout_seconds: float = 10.0
    # Extra attempts after a transport error (connect failure, timeout).
    # HTTP error statuses are never retried.
    analysis_max_retries: int = 1
    # Kill switch: if False, every entry goes through the keyword fallback.
    enable_ai_analysis: bool = True
    # Optional JSON file overriding the built-in fallback lexicon
    mood_lexicon_path: str = ""

    # --- Timeline ---
    entries_page_size: int = 50

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
