"""
Settings module for Workforce Risk.

Environment-based configuration with sensible defaults.
All settings can be overridden via environment variables.
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workforce_risk.constants.llm_models import CLAUDE_SONNET_MODEL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The three credentials (LIVEDATA_ORG_ID, LIVEDATA_API_KEY,
    ANTHROPIC_API_KEY) are optional: without them the workforce calls
    return empty results and the narrative falls back to templates.
    """

    # Environment
    environment: str = Field(
        default="development",
        validation_alias="ENV",
        description="Environment name (development, qa, production)"
    )
    service_name: str = Field(
        default="workforce-risk",
        description="Service name used in logs"
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Bind address for the uvicorn server"
    )
    port: int = Field(
        default=7071,
        description="Port for the uvicorn server"
    )

    # Workforce data service (Live Data Technologies People API)
    livedata_base_url: str = Field(
        default="https://gotlivedata.io/api/people/v1",
        description="Base URL of the workforce data service"
    )
    livedata_org_id: Optional[str] = Field(
        default=None,
        description="Workforce data organisation identifier"
    )
    livedata_api_key: Optional[str] = Field(
        default=None,
        description="Workforce data bearer token"
    )
    workforce_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for a single workforce data call"
    )

    # LLM Configuration
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key"
    )
    narrative_model: str = Field(
        default=CLAUDE_SONNET_MODEL,
        description="Model used for the assessment narrative"
    )
    chat_model: str = Field(
        default=CLAUDE_SONNET_MODEL,
        description="Model used for follow-up chat"
    )
    narrative_max_tokens: int = Field(
        default=3000,
        description="Token budget for the narrative JSON response"
    )
    chat_max_tokens: int = Field(
        default=2000,
        description="Token budget for each chat iteration"
    )
    llm_timeout_seconds: float = Field(
        default=45.0,
        description="Timeout for a single narrative LLM call"
    )

    # Timeouts (in seconds)
    assessment_timeout_seconds: float = Field(
        default=60.0,
        description="Wall-clock budget for one assessment"
    )
    chat_timeout_seconds: float = Field(
        default=30.0,
        description="Wall-clock budget for one chat answer"
    )
    chat_max_iterations: int = Field(
        default=4,
        description="Maximum LLM round trips in the chat tool loop"
    )

    # Data windows
    demographics_window_months: int = Field(
        default=24,
        description="Lookback for company headcount demographics"
    )
    flows_window_months: int = Field(
        default=12,
        description="Lookback for arrivals/departures"
    )

    # Feature Flags
    enable_hiring_signals: bool = Field(
        default=True,
        description="Collect regional/employer/school hiring signals during assessment"
    )
    hiring_signals_min_budget_seconds: float = Field(
        default=25.0,
        description="Skip hiring signals when less than this much budget remains"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )
    datadog_api_key: Optional[str] = Field(
        default=None,
        description="Datadog API key (log shipping disabled when unset)"
    )
    datadog_log_url: str = Field(
        default="https://http-intake.logs.datadoghq.com/v1/input",
        description="Datadog HTTP log intake URL"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment in ("prod", "production")

    @property
    def workforce_configured(self) -> bool:
        """Both workforce credentials are present."""
        return bool(self.livedata_org_id and self.livedata_api_key)

    @property
    def workforce_url(self) -> str:
        """Organisation-scoped base URL for the workforce data service."""
        return f"{self.livedata_base_url.rstrip('/')}/{self.livedata_org_id}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are cached for performance. To reload, use:
        get_settings.cache_clear()

    Returns:
        Settings instance
    """
    return Settings()


# Convenience function to load settings from env file
def load_settings_from_env(env_file: str = ".env") -> Settings:
    """Load settings from a specific env file."""
    if os.path.exists(env_file):
        from dotenv import load_dotenv
        load_dotenv(env_file)
    get_settings.cache_clear()
    return get_settings()
