"""Application configuration via pydantic-settings.

All values come from environment variables (or a local ``.env``).  Import the
module-level ``settings`` singleton rather than building ``Settings`` again.
"""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Table store (Supabase / PostgREST)
    SUPABASE_URL: str
    SUPABASE_KEY: str
    CANDIDATES_TABLE: str = Field(
        default="candidates",
        validation_alias=AliasChoices("CANDIDATES_TABLE", "TABLE_NAME"),
    )
    STORE_SCHEMA: str = "public"
    STORE_TIMEOUT_SECONDS: int = Field(default=10, gt=0)

    # Reported by /health and in every response envelope
    SERVICE_NAME: str = "candidate-tracking-api"
    API_VERSION: str = "1.0.0"

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def cors_origins(self) -> list[str]:
        """``ALLOWED_ORIGINS`` split on commas; ``*`` allows any origin."""
        raw = self.ALLOWED_ORIGINS.strip()
        if raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


settings = Settings()  # type: ignore[call-arg]
