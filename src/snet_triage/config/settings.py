"""
S-Net Application Settings

Configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="SNET_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="snet_db", description="Database name")
    user: str = Field(default="snet_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class GeminiSettings(BaseSettings):
    """Google Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="SNET_GEMINI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Gemini API key")
    model: str = Field(default="gemini-1.5-flash", description="Model identifier")


class OpenAISettings(BaseSettings):
    """OpenAI API configuration (alternate backend)."""

    model_config = SettingsConfigDict(env_prefix="SNET_OPENAI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    model: str = Field(default="gpt-4o-mini", description="Model identifier")


class TriageSettings(BaseSettings):
    """Automated triage pacing and classification configuration."""

    model_config = SettingsConfigDict(env_prefix="SNET_TRIAGE_")

    first_question_delay_seconds: float = Field(default=1.5, ge=0.0, le=30.0)
    next_question_delay_seconds: float = Field(default=1.0, ge=0.0, le=30.0)
    escalation_delay_seconds: float = Field(default=1.5, ge=0.0, le=30.0)
    classification_timeout_seconds: float = Field(default=20.0, gt=0.0, le=120.0)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1024, ge=100, le=8192)
    appointment_notify_min_level: int = Field(
        default=0,
        ge=0,
        le=3,
        description="Lowest urgency level for which staff are notified of a new appointment",
    )


class SentrySettings(BaseSettings):
    """Sentry error tracking configuration."""

    model_config = SettingsConfigDict(env_prefix="SNET_SENTRY_")

    dsn: str = Field(default="", description="Sentry DSN (empty disables Sentry)")
    traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with SNET_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        delay = settings.triage.first_question_delay_seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="SNET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # Backend selection
    llm_primary_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Text-generation backend used for risk classification"
    )
    storage_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Message/conversation store implementation"
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    triage: TriageSettings = Field(default_factory=TriageSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and pass it in.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
